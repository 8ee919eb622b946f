"""
User and role administration.

Roles live in their own collection and a user may hold several rows;
the effective role is the highest-privilege one. Users without a role
row are students.
"""

from typing import Any, Dict, Iterable, List

from pydantic import ValidationError as PydanticValidationError

from complaint_desk.backend import PROFILES, USER_ROLES, In, Record
from complaint_desk.core.context import ActorContext
from complaint_desk.core.exceptions import (
    BusinessRuleViolation,
    NotFoundError,
    validation_error_from_pydantic,
)
from complaint_desk.schemas.common.enums import ROLE_RANK, AppRole
from complaint_desk.schemas.user import RoleUpdate
from complaint_desk.services.base import BaseService, ServiceResult


class UserRoleService(BaseService):
    """
    Super-admin user management and actor resolution.
    """

    def effective_role(self, user_id: str, roles: Iterable[Any]) -> AppRole:
        """Highest-privilege role among `roles`; student when there are none."""
        parsed = [AppRole(role) for role in roles]
        if not parsed:
            return AppRole.STUDENT
        if len(set(parsed)) > 1:
            self._logger.warning(
                f"User {user_id} holds several roles {sorted(r.value for r in parsed)}, "
                f"using the highest",
                extra={"user_id": user_id},
            )
        return max(parsed, key=lambda role: ROLE_RANK[role])

    async def resolve_actor(self, user_id: str) -> ActorContext:
        """
        Build the actor context for a user id.

        Raises:
            BackendError: If the role or profile lookup fails
        """
        rows = await self.client.query(USER_ROLES, {"user_id": user_id})
        role = self.effective_role(user_id, (row["role"] for row in rows))
        profile = await self.client.get(PROFILES, user_id)
        return ActorContext(
            user_id=user_id,
            role=role,
            display_name=profile.get("full_name") if profile else None,
        )

    async def list_users(self, actor: ActorContext) -> ServiceResult[List[Record]]:
        """Profiles newest first with their effective role."""
        try:
            self._require_super_admin(actor, "list users")
            profiles = await self.client.query(PROFILES, order_by="created_at", descending=True)

            roles: Dict[str, List[str]] = {}
            if profiles:
                rows = await self.client.query(
                    USER_ROLES, {"user_id": In(p["id"] for p in profiles)}
                )
                for row in rows:
                    roles.setdefault(row["user_id"], []).append(row["role"])

            users = []
            for profile in profiles:
                user = dict(profile)
                user["role"] = self.effective_role(profile["id"], roles.get(profile["id"], ())).value
                users.append(user)
            return ServiceResult.success(users, metadata={"count": len(users)})

        except Exception as e:
            return self._handle_exception(e, "list users", actor.user_id)

    async def update_role(
        self,
        actor: ActorContext,
        user_id: str,
        role: Any,
    ) -> ServiceResult[Record]:
        try:
            self._require_super_admin(actor, "change user roles")
            try:
                data = RoleUpdate.model_validate({"role": role})
            except PydanticValidationError as e:
                raise validation_error_from_pydantic(e) from None

            if await self.client.get(PROFILES, user_id) is None:
                raise NotFoundError("User", user_id)

            rows = await self.client.update(USER_ROLES, {"user_id": user_id}, {"role": data.role.value})
            if rows:
                record = rows[0]
            else:
                record = await self.client.insert(USER_ROLES, {"user_id": user_id, "role": data.role.value})

            self._logger.info(
                f"Role of {user_id} set to {data.role.value} by {actor.user_id}",
                extra={"user_id": user_id},
            )
            return ServiceResult.success(record, message="User role updated successfully")

        except Exception as e:
            return self._handle_exception(e, "update user role", user_id)

    async def delete_user(
        self,
        actor: ActorContext,
        user_id: str,
    ) -> ServiceResult[int]:
        """Delete a profile; roles, comments, messages and complaints go with it."""
        try:
            self._require_super_admin(actor, "delete users")
            if actor.owns(user_id):
                raise BusinessRuleViolation("self_delete", "You cannot delete your own account")

            removed = await self.client.delete(PROFILES, {"id": user_id})
            if not removed:
                raise NotFoundError("User", user_id)

            self._logger.info(
                f"User {user_id} deleted by {actor.user_id}",
                extra={"user_id": user_id},
            )
            return ServiceResult.success(removed, message="User deleted successfully")

        except Exception as e:
            return self._handle_exception(e, "delete user", user_id)
