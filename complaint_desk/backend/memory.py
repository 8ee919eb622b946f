"""
In-process collection client.

Keeps every collection in memory, assigns identifiers and timestamps the
way the hosted backend does, cascades profile/complaint deletion and
echoes inserts through the realtime hub. Used for development and tests.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4

from complaint_desk.backend.client import (
    CASCADES,
    CHAT_MESSAGES,
    COLLECTIONS,
    COMPLAINT_CATEGORIES,
    COMPLAINT_COMMENTS,
    COMPLAINTS,
    PROFILES,
    UPDATED_AT,
    USER_ROLES,
    CollectionClient,
    Filters,
    InsertHandler,
    Record,
    Subscription,
    matches,
)
from complaint_desk.backend.errors import BackendConstraintError, UnknownCollectionError
from complaint_desk.backend.realtime import RealtimeHub

logger = logging.getLogger(__name__)

# Column defaults applied on insert
DEFAULTS: Dict[str, Dict[str, Any]] = {
    COMPLAINTS: {
        "status": "submitted",
        "priority": "medium",
        "category_id": None,
        "assigned_to": None,
        "resolution_summary": None,
        "resolved_at": None,
    },
    COMPLAINT_COMMENTS: {"is_internal": False},
    CHAT_MESSAGES: {},
    PROFILES: {"batch": None, "phone": None},
    USER_ROLES: {"role": "student"},
    COMPLAINT_CATEGORIES: {"description": None, "is_active": True},
}

REQUIRED: Dict[str, tuple] = {
    COMPLAINTS: ("student_id", "title", "description"),
    COMPLAINT_COMMENTS: ("complaint_id", "user_id", "comment"),
    CHAT_MESSAGES: ("complaint_id", "user_id", "message"),
    PROFILES: ("id", "email", "full_name"),
    USER_ROLES: ("user_id",),
    COMPLAINT_CATEGORIES: ("name",),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _sort_key(value: Any):
    # None sorts first ascending, like NULLS FIRST
    return (value is not None, value)


class MemoryCollectionClient(CollectionClient):
    """Dict-backed CollectionClient with realtime insert echo."""

    def __init__(self, hub: Optional[RealtimeHub] = None):
        self.hub = hub or RealtimeHub()
        self._tables: Dict[str, List[Record]] = {name: [] for name in COLLECTIONS}
        self._last_stamp: Optional[datetime] = None

    def _stamp(self) -> datetime:
        # strictly increasing, so created_at ordering matches insertion order
        now = _now()
        if self._last_stamp is not None and now <= self._last_stamp:
            now = self._last_stamp + timedelta(microseconds=1)
        self._last_stamp = now
        return now

    def _table(self, collection: str) -> List[Record]:
        try:
            return self._tables[collection]
        except KeyError:
            raise UnknownCollectionError(collection) from None

    async def query(
        self,
        collection: str,
        filters: Optional[Filters] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Record]:
        table = self._table(collection)
        await asyncio.sleep(0)

        rows = [dict(row) for row in table if matches(row, filters)]
        if order_by:
            rows.sort(key=lambda row: _sort_key(row.get(order_by)), reverse=descending)
        if offset:
            rows = rows[offset:]
        if limit is not None:
            rows = rows[:limit]
        return rows

    async def insert(self, collection: str, values: Mapping[str, Any]) -> Record:
        table = self._table(collection)
        await asyncio.sleep(0)

        missing = [column for column in REQUIRED[collection] if values.get(column) is None]
        if missing:
            raise BackendConstraintError(
                f"Missing required columns for {collection}: {', '.join(missing)}",
                details={"collection": collection, "missing": missing},
            )

        now = self._stamp()
        record: Record = dict(DEFAULTS[collection])
        record.update(values)
        record.setdefault("id", str(uuid4()))
        if record.get("created_at") is None:
            record["created_at"] = now
        if collection in UPDATED_AT and record.get("updated_at") is None:
            record["updated_at"] = now

        if any(row["id"] == record["id"] for row in table):
            raise BackendConstraintError(
                f"Duplicate id '{record['id']}' in {collection}",
                details={"collection": collection, "id": record["id"]},
            )

        table.append(record)
        logger.debug(f"Inserted {collection} record {record['id']}")
        self.hub.publish(collection, record)
        return dict(record)

    async def update(
        self,
        collection: str,
        filters: Filters,
        values: Mapping[str, Any],
    ) -> List[Record]:
        table = self._table(collection)
        await asyncio.sleep(0)

        updated = []
        for row in table:
            if not matches(row, filters):
                continue
            row.update(values)
            if collection in UPDATED_AT:
                row["updated_at"] = _now()
            updated.append(dict(row))
        logger.debug(f"Updated {len(updated)} {collection} record(s)")
        return updated

    async def delete(self, collection: str, filters: Filters) -> int:
        table = self._table(collection)
        await asyncio.sleep(0)

        doomed = [row for row in table if matches(row, filters)]
        for row in doomed:
            for child, column in CASCADES.get(collection, []):
                await self.delete(child, {column: row["id"]})
            table.remove(row)
        logger.debug(f"Deleted {len(doomed)} {collection} record(s)")
        return len(doomed)

    async def subscribe(
        self,
        collection: str,
        filters: Optional[Filters],
        handler: InsertHandler,
    ) -> Subscription:
        self._table(collection)
        await asyncio.sleep(0)
        return self.hub.register(collection, filters, handler)

    async def close(self) -> None:
        self.hub.clear()


__all__ = ["MemoryCollectionClient"]
