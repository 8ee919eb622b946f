"""
Complaint comment thread service.

A thread is a SyncedList of comments bound to one complaint plus an
optimistic appender for the current actor. Comments are accepted only
while the complaint is open; internal notes are written and read by
administrators only.
"""

from typing import Any, Dict, List, Mapping, Optional

from complaint_desk.backend import COMPLAINT_COMMENTS, COMPLAINTS, CollectionClient, Record
from complaint_desk.core.context import ActorContext
from complaint_desk.core.exceptions import AuthorizationError, BusinessRuleViolation, NotFoundError
from complaint_desk.schemas.common.enums import RESOLVED_STATUSES, ComplaintStatus
from complaint_desk.schemas.complaint import CommentCreate
from complaint_desk.services.base import BaseService, ServiceResult
from complaint_desk.sync.joiner import ProfileJoiner
from complaint_desk.sync.optimistic import OptimisticAppender
from complaint_desk.sync.synced_list import SyncedList


def accepts_comments(status: Any) -> bool:
    return ComplaintStatus(status) not in RESOLVED_STATUSES


class CommentThread:
    """Live comment list of one complaint, as seen by one actor."""

    def __init__(self, client: CollectionClient, actor: ActorContext):
        self.client = client
        self.actor = actor
        self.synced = SyncedList(client, COMPLAINT_COMMENTS, "complaint_id", ProfileJoiner(client))
        self.appender = OptimisticAppender(self.synced, CommentCreate, actor)

    @property
    def complaint_id(self) -> Optional[str]:
        return self.synced.parent_id

    async def open(self, complaint_id: str) -> "CommentThread":
        await self.synced.bind(complaint_id)
        return self

    def comments(self) -> List[Record]:
        """Comments in creation order; internal notes only for admins."""
        return [
            comment
            for comment in self.synced.snapshot()
            if self.actor.is_admin or not comment.get("is_internal")
        ]

    async def add_comment(self, payload: Mapping[str, Any]) -> Record:
        """
        Raises:
            ValidationError: Empty or over-long comment
            AuthorizationError: Internal note from a non-admin
            BusinessRuleViolation: Complaint resolved or closed
            NotFoundError: Complaint no longer exists
            BackendError: Insert rejected
        """
        data = self.appender.validate(payload)
        if data.is_internal and not self.actor.is_admin:
            raise AuthorizationError(
                "Only administrators may add internal notes", required_role="admin"
            )

        complaint = await self.client.get(COMPLAINTS, self.complaint_id)
        if complaint is None:
            raise NotFoundError("Complaint", str(self.complaint_id))
        if not accepts_comments(complaint["status"]):
            raise BusinessRuleViolation(
                "comments_closed",
                "Comments cannot be added to a resolved or closed complaint",
            )

        return await self.appender.submit(data)

    async def refresh(self) -> None:
        await self.synced.refresh()

    async def close(self) -> None:
        await self.synced.close()


class CommentThreadService(BaseService):
    """
    Opens comment threads and adds comments on behalf of an actor.
    """

    async def open(
        self,
        actor: ActorContext,
        complaint_id: str,
    ) -> ServiceResult[CommentThread]:
        """Bind a new thread to a complaint the actor may see."""
        try:
            complaint = await self.client.get(COMPLAINTS, complaint_id)
            if complaint is None:
                raise NotFoundError("Complaint", complaint_id)
            if not actor.is_admin and not actor.owns(complaint.get("student_id")):
                raise AuthorizationError(
                    "Students may only comment on their own complaints", required_role="admin"
                )

            thread = await CommentThread(self.client, actor).open(complaint_id)
            return ServiceResult.success(
                thread,
                metadata={"can_comment": accepts_comments(complaint["status"])},
            )

        except Exception as e:
            return self._handle_exception(e, "open comment thread", complaint_id)

    async def list_comments(
        self,
        actor: ActorContext,
        complaint_id: str,
    ) -> ServiceResult[List[Record]]:
        result = await self.open(actor, complaint_id)
        if not result:
            return result
        thread = result.unwrap()
        try:
            return ServiceResult.success(thread.comments(), metadata=result.metadata)
        finally:
            await thread.close()

    async def add_comment(
        self,
        thread: CommentThread,
        payload: Dict[str, Any],
    ) -> ServiceResult[Record]:
        try:
            record = await thread.add_comment(payload)
            self._logger.info(
                f"Comment {record['id']} added to complaint {thread.complaint_id}",
                extra={"complaint_id": thread.complaint_id, "user_id": thread.actor.user_id},
            )
            return ServiceResult.success(record, message="Comment added successfully")

        except Exception as e:
            return self._handle_exception(e, "add comment", thread.complaint_id)

    async def post_comment(
        self,
        actor: ActorContext,
        complaint_id: str,
        payload: Dict[str, Any],
    ) -> ServiceResult[Record]:
        """One-shot variant for request/response callers."""
        result = await self.open(actor, complaint_id)
        if not result:
            return result
        thread = result.unwrap()
        try:
            return await self.add_comment(thread, payload)
        finally:
            await thread.close()
