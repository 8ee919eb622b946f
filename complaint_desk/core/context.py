"""
Current-actor context.

Resolved once at the edge (HTTP request, websocket connection) and passed
explicitly to services and appenders; nothing looks the actor up
globally.
"""
from dataclasses import dataclass
from typing import Optional

from complaint_desk.schemas.common.enums import ADMIN_ROLES, AppRole


@dataclass(frozen=True)
class ActorContext:
    """Identity and role of the user performing an action."""

    user_id: str
    role: AppRole = AppRole.STUDENT
    display_name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        """Admins and super-admins share triage rights."""
        return self.role in ADMIN_ROLES

    @property
    def is_super_admin(self) -> bool:
        return self.role == AppRole.SUPER_ADMIN

    @property
    def is_student(self) -> bool:
        return self.role == AppRole.STUDENT

    def owns(self, user_id: Optional[str]) -> bool:
        return user_id is not None and user_id == self.user_id
