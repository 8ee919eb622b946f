"""
Complaint dashboard statistics.
"""

from pydantic import Field, model_validator

from complaint_desk.schemas.common.base import BaseSchema

__all__ = ["ComplaintStats"]


class ComplaintStats(BaseSchema):
    """
    Bucket counts for a complaint list.

    pending covers submitted and in_review; resolved covers resolved and
    closed. The three buckets always add up to total.
    """

    total: int = Field(default=0, ge=0)
    pending: int = Field(default=0, ge=0)
    in_progress: int = Field(default=0, ge=0)
    resolved: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_buckets(self) -> "ComplaintStats":
        if self.pending + self.in_progress + self.resolved != self.total:
            raise ValueError("Status buckets must add up to total")
        return self
