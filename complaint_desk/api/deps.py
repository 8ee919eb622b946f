"""
FastAPI dependencies: collection client, current actor, services.

Example usage in a router:
    @router.get("/complaints")
    async def list_complaints(actor: ActorContext = Depends(deps.get_actor)):
        ...
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, WebSocket, status

from complaint_desk.backend import BackendError, CollectionClient
from complaint_desk.config.logging import get_logger
from complaint_desk.core.context import ActorContext
from complaint_desk.services import (
    CategoryService,
    ChatService,
    CommentThreadService,
    ComplaintService,
    UserRoleService,
)

logger = get_logger(__name__)

USER_HEADER = "X-User-Id"


# --- Backend -------------------------------------------------------------------

def get_client(request: Request) -> CollectionClient:
    return request.app.state.client


def get_ws_client(websocket: WebSocket) -> CollectionClient:
    return websocket.app.state.client


# --- Current actor -------------------------------------------------------------

async def resolve_actor(client: CollectionClient, user_id: Optional[str]) -> ActorContext:
    """
    Look the actor's role up; authentication happens upstream.

    Raises:
        HTTPException: 401 without a user id, 502 when the lookup fails
    """
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {USER_HEADER} header",
        )
    try:
        return await UserRoleService(client).resolve_actor(user_id)
    except BackendError as e:
        logger.error(f"Role lookup for {user_id} failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not resolve the current user",
        ) from e


async def get_actor(
    x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER),
    client: CollectionClient = Depends(get_client),
) -> ActorContext:
    return await resolve_actor(client, x_user_id)


# --- Services ------------------------------------------------------------------

def get_complaint_service(client: CollectionClient = Depends(get_client)) -> ComplaintService:
    return ComplaintService(client)


def get_comment_service(client: CollectionClient = Depends(get_client)) -> CommentThreadService:
    return CommentThreadService(client)


def get_chat_service(client: CollectionClient = Depends(get_client)) -> ChatService:
    return ChatService(client)


def get_category_service(client: CollectionClient = Depends(get_client)) -> CategoryService:
    return CategoryService(client)


def get_user_role_service(client: CollectionClient = Depends(get_client)) -> UserRoleService:
    return UserRoleService(client)


__all__ = [
    "USER_HEADER",
    "get_client",
    "get_ws_client",
    "resolve_actor",
    "get_actor",
    "get_complaint_service",
    "get_comment_service",
    "get_chat_service",
    "get_category_service",
    "get_user_role_service",
]
