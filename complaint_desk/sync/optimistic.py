"""
Optimistic appends to a SyncedList.

The record shows up in the view immediately, flagged pending, and is
swapped for the authoritative record once the backend accepts it. A
rejected insert removes the pending record again, leaving the view as it
was before the submission.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Type, Union
from uuid import uuid4

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from complaint_desk.backend import Record
from complaint_desk.core.context import ActorContext
from complaint_desk.core.exceptions import BusinessRuleViolation, validation_error_from_pydantic
from complaint_desk.sync.synced_list import SyncedList

logger = logging.getLogger(__name__)

LOCAL_ID_PREFIX = "local-"


def new_client_id() -> str:
    return f"{LOCAL_ID_PREFIX}{uuid4()}"


class OptimisticAppender:
    """
    Validates, appends pending, inserts, then reconciles by id.

    Args:
        synced: The bound view the records belong to
        schema: Pydantic schema validating the user payload
        actor: Author of every submission
        extra_values: Constant columns added to every insert
    """

    def __init__(
        self,
        synced: SyncedList,
        schema: Type[BaseModel],
        actor: ActorContext,
        extra_values: Optional[Mapping[str, Any]] = None,
    ):
        self.synced = synced
        self.client = synced.client
        self.schema = schema
        self.actor = actor
        self.extra_values: Dict[str, Any] = dict(extra_values or {})
        self.synced.joiner.remember(actor.user_id, actor.display_name)

    def validate(self, payload: Union[BaseModel, Mapping[str, Any]]) -> BaseModel:
        """
        Raises:
            ValidationError: With the first failing field's message
        """
        try:
            if isinstance(payload, BaseModel):
                payload = payload.model_dump()
            return self.schema.model_validate(payload)
        except PydanticValidationError as e:
            raise validation_error_from_pydantic(e) from None

    async def submit(self, payload: Union[BaseModel, Mapping[str, Any]]) -> Record:
        """
        Submit one record.

        Returns:
            The authoritative, joined record

        Raises:
            ValidationError: Local validation failed; nothing was sent
            BusinessRuleViolation: The view is not bound to a parent
            BackendError: The insert was rejected; the view is unchanged
        """
        data = self.validate(payload)

        parent_id = self.synced.parent_id
        if parent_id is None:
            raise BusinessRuleViolation("bound_scope", "No complaint is selected")

        values: Dict[str, Any] = data.model_dump(mode="json")
        values.update(self.extra_values)
        values[self.synced.parent_field] = parent_id
        values["user_id"] = self.actor.user_id

        joiner = self.synced.joiner
        client_id = new_client_id()
        pending: Record = dict(values)
        pending.update(
            {
                "id": client_id,
                "client_id": client_id,
                "pending": True,
                "created_at": datetime.now(timezone.utc),
                joiner.target_field: joiner.cached(self.actor.user_id) or joiner.fallback,
            }
        )
        self.synced.add_pending(pending)

        try:
            record = await self.client.insert(self.synced.collection, values)
            joined = await joiner.join_one(record)
        except BaseException:
            self.synced.discard_pending(client_id)
            logger.warning(
                f"Insert into {self.synced.collection} failed, pending record {client_id} removed",
                extra={"collection": self.synced.collection, "complaint_id": parent_id},
            )
            raise

        self.synced.confirm_pending(client_id, joined)
        logger.debug(f"Confirmed {self.synced.collection} record {joined['id']}")
        return joined
