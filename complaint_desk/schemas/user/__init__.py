from complaint_desk.schemas.user.profile import ProfileResponse, RoleUpdate, UserWithRole

__all__ = ["ProfileResponse", "RoleUpdate", "UserWithRole"]
