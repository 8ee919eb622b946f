"""
Super-admin user management endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends

from complaint_desk.api import deps
from complaint_desk.api.responses import unwrap_or_raise
from complaint_desk.core.context import ActorContext
from complaint_desk.schemas.user import RoleUpdate, UserWithRole
from complaint_desk.services import UserRoleService

router = APIRouter(prefix="/admin", tags=["User Management"])


@router.get("/users", response_model=List[UserWithRole])
async def list_users(
    actor: ActorContext = Depends(deps.get_actor),
    service: UserRoleService = Depends(deps.get_user_role_service),
):
    return unwrap_or_raise(await service.list_users(actor))


@router.patch("/users/{user_id}/role")
async def update_user_role(
    user_id: str,
    payload: RoleUpdate,
    actor: ActorContext = Depends(deps.get_actor),
    service: UserRoleService = Depends(deps.get_user_role_service),
):
    record = unwrap_or_raise(await service.update_role(actor, user_id, payload.role))
    return {"user_id": record["user_id"], "role": record["role"]}


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    actor: ActorContext = Depends(deps.get_actor),
    service: UserRoleService = Depends(deps.get_user_role_service),
):
    removed = unwrap_or_raise(await service.delete_user(actor, user_id))
    return {"deleted": removed}
