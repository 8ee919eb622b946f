"""
Complaint endpoints: submission, listing, detail, triage, comments and
chat history.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError as PydanticValidationError

from complaint_desk.api import deps
from complaint_desk.api.responses import unwrap_or_raise
from complaint_desk.core.context import ActorContext
from complaint_desk.core.exceptions import validation_error_from_pydantic
from complaint_desk.schemas.communication import ChatMessageResponse
from complaint_desk.schemas.complaint import (
    CategoryResponse,
    CommentListResponse,
    CommentResponse,
    ComplaintAssign,
    ComplaintFilterParams,
    ComplaintListResponse,
    ComplaintResolve,
    ComplaintResponse,
    ComplaintStatusUpdate,
)
from complaint_desk.services import (
    CategoryService,
    ChatService,
    CommentThreadService,
    ComplaintService,
)

router = APIRouter(tags=["Complaints"])


def get_filter_params(
    search: Optional[str] = Query(default=None, description="Title substring"),
    status_: Optional[str] = Query(default=None, alias="status", description="Status or 'all'"),
    priority: Optional[str] = Query(default=None, description="Priority or 'all'"),
) -> ComplaintFilterParams:
    try:
        return ComplaintFilterParams(search=search, status=status_, priority=priority)
    except PydanticValidationError as e:
        error = validation_error_from_pydantic(e)
        raise HTTPException(
            status_code=422,
            detail={"code": "VALIDATION_ERROR", "message": error.message, "field": error.field},
        ) from None


# --- Categories ----------------------------------------------------------------

@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(
    service: CategoryService = Depends(deps.get_category_service),
):
    return unwrap_or_raise(await service.list_active())


# --- Complaints ----------------------------------------------------------------

@router.get("/complaints", response_model=ComplaintListResponse)
async def list_complaints(
    filters: ComplaintFilterParams = Depends(get_filter_params),
    actor: ActorContext = Depends(deps.get_actor),
    service: ComplaintService = Depends(deps.get_complaint_service),
):
    """Students get their own complaints; administrators get all of them."""
    if actor.is_admin:
        result = await service.list_all(actor, filters)
    else:
        result = await service.list_for_student(actor, filters)
    items = unwrap_or_raise(result)
    return {"items": items, "stats": result.metadata["stats"]}


@router.post("/complaints", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    payload: Dict[str, Any],
    actor: ActorContext = Depends(deps.get_actor),
    service: ComplaintService = Depends(deps.get_complaint_service),
):
    return unwrap_or_raise(await service.create(actor, payload))


@router.get("/complaints/{complaint_id}", response_model=ComplaintResponse)
async def get_complaint(
    complaint_id: str,
    actor: ActorContext = Depends(deps.get_actor),
    service: ComplaintService = Depends(deps.get_complaint_service),
):
    result = await service.get_detail(actor, complaint_id)
    record = unwrap_or_raise(result)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "NOT_FOUND", "message": result.message, "field": None},
        )
    return record


@router.patch("/complaints/{complaint_id}/status", response_model=ComplaintResponse)
async def update_complaint_status(
    complaint_id: str,
    payload: ComplaintStatusUpdate,
    actor: ActorContext = Depends(deps.get_actor),
    service: ComplaintService = Depends(deps.get_complaint_service),
):
    return unwrap_or_raise(await service.update_status(actor, complaint_id, payload.status))


@router.patch("/complaints/{complaint_id}/assignment", response_model=ComplaintResponse)
async def assign_complaint(
    complaint_id: str,
    payload: ComplaintAssign,
    actor: ActorContext = Depends(deps.get_actor),
    service: ComplaintService = Depends(deps.get_complaint_service),
):
    return unwrap_or_raise(await service.assign(actor, complaint_id, payload.assigned_to))


@router.post("/complaints/{complaint_id}/resolve", response_model=ComplaintResponse)
async def resolve_complaint(
    complaint_id: str,
    payload: Dict[str, Any],
    actor: ActorContext = Depends(deps.get_actor),
    service: ComplaintService = Depends(deps.get_complaint_service),
):
    return unwrap_or_raise(
        await service.resolve(actor, complaint_id, payload.get("resolution_summary"))
    )


# --- Comments ------------------------------------------------------------------

@router.get("/complaints/{complaint_id}/comments", response_model=CommentListResponse)
async def list_comments(
    complaint_id: str,
    actor: ActorContext = Depends(deps.get_actor),
    service: CommentThreadService = Depends(deps.get_comment_service),
):
    result = await service.list_comments(actor, complaint_id)
    items = unwrap_or_raise(result)
    return {"items": items, "can_comment": result.metadata.get("can_comment", True)}


@router.post(
    "/complaints/{complaint_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    complaint_id: str,
    payload: Dict[str, Any],
    actor: ActorContext = Depends(deps.get_actor),
    service: CommentThreadService = Depends(deps.get_comment_service),
):
    return unwrap_or_raise(await service.post_comment(actor, complaint_id, payload))


# --- Chat history --------------------------------------------------------------

@router.get("/complaints/{complaint_id}/messages", response_model=List[ChatMessageResponse])
async def list_messages(
    complaint_id: str,
    actor: ActorContext = Depends(deps.get_actor),
    service: ChatService = Depends(deps.get_chat_service),
):
    return unwrap_or_raise(await service.history(actor, complaint_id))


@router.post(
    "/complaints/{complaint_id}/messages",
    response_model=ChatMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_message(
    complaint_id: str,
    payload: Dict[str, Any],
    actor: ActorContext = Depends(deps.get_actor),
    service: ChatService = Depends(deps.get_chat_service),
):
    return unwrap_or_raise(await service.post_message(actor, complaint_id, payload))
