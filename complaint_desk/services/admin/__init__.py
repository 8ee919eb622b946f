from complaint_desk.services.admin.user_role_service import UserRoleService

__all__ = ["UserRoleService"]
