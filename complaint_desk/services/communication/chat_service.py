"""
Per-complaint live chat.

A ChatSession keeps a SyncedList of chat messages bound to the selected
complaint and fed by the realtime insert feed. Switching complaints
rebinds the same session; messages posted to the previous complaint
never reach the new view.
"""

from typing import Any, Dict, List, Optional

from complaint_desk.backend import CHAT_MESSAGES, COMPLAINTS, CollectionClient, Record
from complaint_desk.core.context import ActorContext
from complaint_desk.core.exceptions import AuthorizationError, NotFoundError
from complaint_desk.schemas.communication import ChatMessageCreate
from complaint_desk.services.base import BaseService, ServiceResult
from complaint_desk.sync.joiner import ProfileJoiner
from complaint_desk.sync.optimistic import OptimisticAppender
from complaint_desk.sync.synced_list import Listener, SyncedList


class ChatSession:
    """One actor's chat view."""

    def __init__(self, client: CollectionClient, actor: ActorContext):
        self.actor = actor
        self.synced = SyncedList(client, CHAT_MESSAGES, "complaint_id", ProfileJoiner(client))
        self.appender = OptimisticAppender(self.synced, ChatMessageCreate, actor)

    @property
    def complaint_id(self) -> Optional[str]:
        return self.synced.parent_id

    async def open(self, complaint_id: str) -> "ChatSession":
        await self.synced.bind(complaint_id)
        return self

    async def switch(self, complaint_id: str) -> "ChatSession":
        if complaint_id != self.complaint_id or not self.synced.subscribed:
            await self.synced.bind(complaint_id)
        return self

    def messages(self) -> List[Record]:
        return list(self.synced.snapshot())

    async def send(self, text: Any) -> Record:
        """
        Raises:
            ValidationError: Empty or over-long message; nothing is sent
            BackendError: Insert rejected; the view is unchanged
        """
        return await self.appender.submit({"message": text})

    def add_listener(self, listener: Listener) -> None:
        self.synced.add_listener(listener)

    async def settle(self) -> None:
        await self.synced.settle()

    async def close(self) -> None:
        await self.synced.close()


class ChatService(BaseService):
    """
    Chat sessions for complaint participants.
    """

    async def _check_access(self, actor: ActorContext, complaint_id: str) -> Record:
        complaint = await self.client.get(COMPLAINTS, complaint_id)
        if complaint is None:
            raise NotFoundError("Complaint", complaint_id)
        if not actor.is_admin and not actor.owns(complaint.get("student_id")):
            raise AuthorizationError(
                "Students may only chat on their own complaints", required_role="admin"
            )
        return complaint

    async def open(
        self,
        actor: ActorContext,
        complaint_id: str,
    ) -> ServiceResult[ChatSession]:
        try:
            await self._check_access(actor, complaint_id)
            session = await ChatSession(self.client, actor).open(complaint_id)
            self._logger.debug(
                f"Chat opened on complaint {complaint_id} by {actor.user_id}",
                extra={"complaint_id": complaint_id, "user_id": actor.user_id},
            )
            return ServiceResult.success(session)

        except Exception as e:
            return self._handle_exception(e, "open chat", complaint_id)

    async def switch(
        self,
        session: ChatSession,
        complaint_id: str,
    ) -> ServiceResult[ChatSession]:
        try:
            await self._check_access(session.actor, complaint_id)
            await session.switch(complaint_id)
            return ServiceResult.success(session)

        except Exception as e:
            return self._handle_exception(e, "switch chat", complaint_id)

    async def send(self, session: ChatSession, text: Any) -> ServiceResult[Record]:
        try:
            record = await session.send(text)
            return ServiceResult.success(record)

        except Exception as e:
            return self._handle_exception(e, "send message", session.complaint_id)

    async def close(self, session: ChatSession) -> None:
        await session.close()

    async def history(
        self,
        actor: ActorContext,
        complaint_id: str,
    ) -> ServiceResult[List[Record]]:
        """Messages of a complaint, oldest first."""
        result = await self.open(actor, complaint_id)
        if not result:
            return result
        session = result.unwrap()
        try:
            return ServiceResult.success(session.messages())
        finally:
            await session.close()

    async def post_message(
        self,
        actor: ActorContext,
        complaint_id: str,
        payload: Dict[str, Any],
    ) -> ServiceResult[Record]:
        """One-shot send for request/response callers."""
        result = await self.open(actor, complaint_id)
        if not result:
            return result
        session = result.unwrap()
        try:
            return await self.send(session, payload.get("message"))
        finally:
            await session.close()
