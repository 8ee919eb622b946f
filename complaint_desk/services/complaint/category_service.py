"""
Complaint category lookup.
"""

from typing import List

from complaint_desk.backend import COMPLAINT_CATEGORIES, Record
from complaint_desk.services.base import BaseService, ServiceResult


class CategoryService(BaseService):
    """Categories offered on the complaint form."""

    async def list_active(self) -> ServiceResult[List[Record]]:
        """Active categories ordered by name."""
        try:
            rows = await self.client.query(
                COMPLAINT_CATEGORIES,
                {"is_active": True},
                order_by="name",
            )
            return ServiceResult.success(rows, metadata={"count": len(rows)})

        except Exception as e:
            return self._handle_exception(e, "list categories")
