"""
Schema base classes.

Records reach the schemas as plain dicts from the collection client, so
responses validate from mappings; from_attributes also lets ORM rows
through when the database adapter is used directly.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "BaseSchema",
    "CreatedAtMixin",
    "UUIDMixin",
    "PendingMixin",
    "BaseCreateSchema",
    "BaseResponseSchema",
    "BaseFilterSchema",
]


class BaseSchema(BaseModel):
    """Shared configuration: trimmed strings, enums kept as enums."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class CreatedAtMixin(BaseModel):
    created_at: datetime = Field(..., description="When the backend stored the record")


class UUIDMixin(BaseModel):
    id: str = Field(..., description="Record identifier; local-<uuid> while pending")


class PendingMixin(BaseModel):
    """Fields carried by optimistic records until the backend confirms them."""

    pending: bool = Field(
        default=False,
        description="True while the record is a local, unconfirmed append",
    )
    client_id: Optional[str] = Field(
        default=None,
        description="Local identifier of an unconfirmed record",
    )


class BaseCreateSchema(BaseSchema):
    """User-typed payloads; validated locally before anything is sent."""


class BaseResponseSchema(BaseSchema, UUIDMixin, CreatedAtMixin):
    """Stored records as returned by the API."""


class BaseFilterSchema(BaseSchema):
    """Query-string filters."""
