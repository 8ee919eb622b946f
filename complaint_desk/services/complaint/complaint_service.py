"""
Complaint lifecycle service.

Students submit complaints and see their own; administrators see every
complaint, change status, assign and resolve. resolved_at follows the
status: stamped on resolution, kept when a resolved complaint is closed,
cleared when a complaint is reopened.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from complaint_desk.backend import COMPLAINTS, CollectionClient, Record
from complaint_desk.core.context import ActorContext
from complaint_desk.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    validation_error_from_pydantic,
)
from complaint_desk.schemas.common.enums import OPEN_STATUSES, ComplaintStatus
from complaint_desk.schemas.complaint import (
    ComplaintAssign,
    ComplaintCreate,
    ComplaintFilterParams,
    ComplaintResolve,
    ComplaintStatusUpdate,
)
from complaint_desk.services.base import BaseService, ServiceResult
from complaint_desk.sync.aggregation import summarize
from complaint_desk.sync.joiner import CategoryJoiner, student_name_joiner
from complaint_desk.sync.list_filter import filter_complaints


def resolution_timestamp(
    current: Record,
    new_status: ComplaintStatus,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """
    resolved_at after moving `current` to `new_status`.

    Set iff the complaint has reached resolved: stamped on entering
    resolved, kept on resolved -> closed, cleared on reopening.
    """
    if new_status in OPEN_STATUSES:
        return None
    existing = current.get("resolved_at")
    if new_status == ComplaintStatus.RESOLVED:
        return existing or now or datetime.now(timezone.utc)
    # closed keeps whatever resolution happened before
    return existing


class ComplaintService(BaseService):
    """
    Complaint submission, listing and triage.
    """

    def __init__(self, client: CollectionClient):
        super().__init__(client)
        self.categories = CategoryJoiner(client)
        self.students = student_name_joiner(client)

    # -------------------------------------------------------------------------
    # Student operations
    # -------------------------------------------------------------------------

    async def create(
        self,
        actor: ActorContext,
        payload: Dict[str, Any],
    ) -> ServiceResult[Record]:
        """
        Submit a new complaint for the acting student.

        Validation happens locally; nothing is sent when it fails.
        """
        try:
            self._require_student(actor, "submit complaints")
            try:
                data = ComplaintCreate.model_validate(payload)
            except PydanticValidationError as e:
                raise validation_error_from_pydantic(e) from None

            values = data.model_dump(mode="json")
            values["student_id"] = actor.user_id
            values["status"] = ComplaintStatus.SUBMITTED.value

            record = await self.client.insert(COMPLAINTS, values)
            record = await self.categories.join_one(record)

            self._logger.info(
                f"Complaint {record['id']} submitted by {actor.user_id}",
                extra={"complaint_id": record["id"], "user_id": actor.user_id},
            )
            return ServiceResult.success(record, message="Complaint submitted successfully")

        except Exception as e:
            return self._handle_exception(e, "submit complaint", actor.user_id)

    async def list_for_student(
        self,
        actor: ActorContext,
        filters: Optional[ComplaintFilterParams] = None,
    ) -> ServiceResult[List[Record]]:
        """The actor's own complaints, newest first, with dashboard stats."""
        try:
            rows = await self.client.query(
                COMPLAINTS,
                {"student_id": actor.user_id},
                order_by="created_at",
                descending=True,
            )
            rows = await self.categories.join(rows)
            stats = summarize(rows)
            return ServiceResult.success(
                filter_complaints(rows, filters),
                metadata={"stats": stats.model_dump(), "unfiltered_count": len(rows)},
            )

        except Exception as e:
            return self._handle_exception(e, "list complaints", actor.user_id)

    # -------------------------------------------------------------------------
    # Shared
    # -------------------------------------------------------------------------

    async def get_detail(
        self,
        actor: ActorContext,
        complaint_id: str,
    ) -> ServiceResult[Optional[Record]]:
        """
        Complaint with category and student names.

        A missing complaint is a successful lookup with no data.
        """
        try:
            record = await self.client.get(COMPLAINTS, complaint_id)
            if record is None:
                return ServiceResult.success(None, message="Complaint not found")

            if not actor.is_admin and not actor.owns(record.get("student_id")):
                raise AuthorizationError(
                    "Students may only view their own complaints", required_role="admin"
                )

            record = await self.categories.join_one(record)
            record = await self.students.join_one(record)
            return ServiceResult.success(record)

        except Exception as e:
            return self._handle_exception(e, "view complaint", complaint_id)

    # -------------------------------------------------------------------------
    # Admin operations
    # -------------------------------------------------------------------------

    async def list_all(
        self,
        actor: ActorContext,
        filters: Optional[ComplaintFilterParams] = None,
    ) -> ServiceResult[List[Record]]:
        """
        Every complaint, newest first, with names joined.

        Stats always describe the unfiltered list; data is filtered.
        """
        try:
            self._require_admin(actor, "view all complaints")
            rows = await self.client.query(COMPLAINTS, order_by="created_at", descending=True)
            rows = await self.categories.join(rows)
            rows = await self.students.join(rows)

            stats = summarize(rows)
            visible = filter_complaints(rows, filters)
            return ServiceResult.success(
                visible,
                metadata={"stats": stats.model_dump(), "unfiltered_count": len(rows)},
            )

        except Exception as e:
            return self._handle_exception(e, "list all complaints", actor.user_id)

    async def update_status(
        self,
        actor: ActorContext,
        complaint_id: str,
        status: Any,
    ) -> ServiceResult[Record]:
        try:
            self._require_admin(actor, "change complaint status")
            try:
                data = ComplaintStatusUpdate.model_validate({"status": status})
            except PydanticValidationError as e:
                raise validation_error_from_pydantic(e) from None

            current = await self._require_complaint(complaint_id)
            values = {
                "status": data.status.value,
                "resolved_at": resolution_timestamp(current, data.status),
            }
            record = await self._update(complaint_id, values)

            self._logger.info(
                f"Complaint {complaint_id} status {current.get('status')} -> {data.status.value}",
                extra={"complaint_id": complaint_id, "user_id": actor.user_id},
            )
            return ServiceResult.success(record, message="Status updated successfully")

        except Exception as e:
            return self._handle_exception(e, "update complaint status", complaint_id)

    async def assign(
        self,
        actor: ActorContext,
        complaint_id: str,
        assigned_to: Optional[str],
    ) -> ServiceResult[Record]:
        try:
            self._require_admin(actor, "assign complaints")
            data = ComplaintAssign(assigned_to=assigned_to)
            await self._require_complaint(complaint_id)
            record = await self._update(complaint_id, {"assigned_to": data.assigned_to})

            self._logger.info(
                f"Complaint {complaint_id} assigned to {data.assigned_to}",
                extra={"complaint_id": complaint_id, "user_id": actor.user_id},
            )
            return ServiceResult.success(record, message="Complaint assigned successfully")

        except Exception as e:
            return self._handle_exception(e, "assign complaint", complaint_id)

    async def resolve(
        self,
        actor: ActorContext,
        complaint_id: str,
        resolution_summary: str,
    ) -> ServiceResult[Record]:
        try:
            self._require_admin(actor, "resolve complaints")
            try:
                data = ComplaintResolve.model_validate({"resolution_summary": resolution_summary})
            except PydanticValidationError as e:
                raise validation_error_from_pydantic(e) from None

            current = await self._require_complaint(complaint_id)
            values = {
                "status": ComplaintStatus.RESOLVED.value,
                "resolution_summary": data.resolution_summary,
                "resolved_at": resolution_timestamp(current, ComplaintStatus.RESOLVED),
            }
            record = await self._update(complaint_id, values)

            self._logger.info(
                f"Complaint {complaint_id} resolved by {actor.user_id}",
                extra={"complaint_id": complaint_id, "user_id": actor.user_id},
            )
            return ServiceResult.success(record, message="Complaint resolved successfully")

        except Exception as e:
            return self._handle_exception(e, "resolve complaint", complaint_id)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _require_complaint(self, complaint_id: str) -> Record:
        record = await self.client.get(COMPLAINTS, complaint_id)
        if record is None:
            raise NotFoundError("Complaint", complaint_id)
        return record

    async def _update(self, complaint_id: str, values: Dict[str, Any]) -> Record:
        rows = await self.client.update(COMPLAINTS, {"id": complaint_id}, values)
        if not rows:
            raise NotFoundError("Complaint", complaint_id)
        record = await self.categories.join_one(rows[0])
        return await self.students.join_one(record)
