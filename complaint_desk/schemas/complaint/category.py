"""
Complaint category schemas.
"""
from typing import Optional

from complaint_desk.schemas.common.base import BaseResponseSchema

__all__ = ["CategoryResponse"]


class CategoryResponse(BaseResponseSchema):
    name: str
    description: Optional[str] = None
    is_active: bool = True
