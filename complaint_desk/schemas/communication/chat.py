"""
Live chat message schemas.
"""

from typing import Any, Optional

from pydantic import Field, field_validator

from complaint_desk.config.settings import settings
from complaint_desk.schemas.common.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    PendingMixin,
)

__all__ = ["ChatMessageCreate", "ChatMessageResponse"]


class ChatMessageCreate(BaseCreateSchema):
    """Message typed into the chat box; surrounding whitespace is trimmed."""

    message: str = Field(..., description="Message text")

    @field_validator("message", mode="before")
    @classmethod
    def missing_message_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        if not v:
            raise ValueError("Message cannot be empty")
        if len(v) > settings.CHAT_MESSAGE_MAX_LENGTH:
            raise ValueError(
                f"Message must be less than {settings.CHAT_MESSAGE_MAX_LENGTH} characters"
            )
        return v


class ChatMessageResponse(BaseResponseSchema, PendingMixin):
    """Chat message with its author's display name."""

    complaint_id: str
    user_id: str
    message: str
    author_name: Optional[str] = None
