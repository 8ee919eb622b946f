"""
Complaint list filter parameters.
"""
from typing import Any, Union

from pydantic import Field, field_validator

from complaint_desk.schemas.common.base import BaseFilterSchema
from complaint_desk.schemas.common.enums import ComplaintStatus, Priority

__all__ = ["ComplaintFilterParams", "ALL"]

# Sentinel accepted from list controls meaning "no constraint"
ALL = "all"


class ComplaintFilterParams(BaseFilterSchema):
    """
    Filter over an already-loaded complaint list.

    Every field left as None (or sent as "all") leaves that dimension
    unconstrained.
    """

    search: Union[str, None] = Field(
        default=None,
        max_length=255,
        description="Case-insensitive substring of the title",
    )
    status: Union[ComplaintStatus, None] = Field(
        default=None,
        description="Exact status",
    )
    priority: Union[Priority, None] = Field(
        default=None,
        description="Exact priority",
    )

    @field_validator("search", mode="before")
    @classmethod
    def normalize_search(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("status", "priority", mode="before")
    @classmethod
    def normalize_all(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and v.strip().lower() in ("", ALL)):
            return None
        return v

    @property
    def is_empty(self) -> bool:
        return self.search is None and self.status is None and self.priority is None
