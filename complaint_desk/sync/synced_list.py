"""
Live, ordered view of the children of one parent record.

A SyncedList is bound to a parent key (a complaint id). Binding
subscribes to the insert feed first, buffers pushed records, fetches the
existing children ordered by creation time, replaces the view in one
step and only then drains the buffer. Records are de-duplicated by id on
every path, so a record delivered both by the fetch and by the feed, or
both by the feed and by an optimistic confirmation, appears once.

Re-binding bumps a generation counter; fetch results and buffered events
that belong to an older generation are dropped.
"""

import asyncio
import logging
from typing import Any, Callable, List, Mapping, Optional, Set, Tuple

from complaint_desk.backend import CollectionClient, InsertEvent, Record, Subscription
from complaint_desk.sync.joiner import BatchJoiner

logger = logging.getLogger(__name__)

Snapshot = Tuple[Record, ...]
Listener = Callable[[Snapshot], None]


class SyncedList:
    """
    Ordered, de-duplicated view over `collection` rows whose
    `parent_field` equals the bound parent id.

    The view is never pruned; it only grows until the next bind.
    """

    def __init__(
        self,
        client: CollectionClient,
        collection: str,
        parent_field: str,
        joiner: BatchJoiner,
        order_by: str = "created_at",
    ):
        self.client = client
        self.collection = collection
        self.parent_field = parent_field
        self.joiner = joiner
        self.order_by = order_by

        self._records: List[Record] = []
        self._parent_id: Optional[str] = None
        self._generation = 0
        self._subscription: Optional[Subscription] = None
        self._queue: Optional[asyncio.Queue] = None
        self._drain_task: Optional[asyncio.Task] = None
        self._listeners: List[Listener] = []

    # -------------------------------------------------------------------------
    # View
    # -------------------------------------------------------------------------

    @property
    def parent_id(self) -> Optional[str]:
        return self._parent_id

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def snapshot(self) -> Snapshot:
        """Immutable copy of the current view."""
        return tuple(dict(record) for record in self._records)

    def contains(self, record_id: Optional[str]) -> bool:
        return record_id is not None and any(r.get("id") == record_id for r in self._records)

    def __len__(self) -> int:
        return len(self._records)

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"SyncedList listener failed: {e}", exc_info=True)

    # -------------------------------------------------------------------------
    # Scope
    # -------------------------------------------------------------------------

    async def bind(self, parent_id: str) -> None:
        """
        Bind the view to a parent and load its children.

        Raises:
            BackendError: If subscribing or the initial fetch fails; the
                list is left unbound.
        """
        self._generation += 1
        generation = self._generation
        await self._release()
        if generation != self._generation:
            return
        self._parent_id = parent_id
        self._records = []
        self._notify()

        queue: asyncio.Queue = asyncio.Queue()
        self._queue = queue

        def enqueue(event: InsertEvent) -> None:
            queue.put_nowait((generation, event.record))

        try:
            subscription = await self.client.subscribe(
                self.collection, {self.parent_field: parent_id}, enqueue
            )
            if generation != self._generation:
                # superseded while subscribing; the newer scope owns the feed
                await subscription.unsubscribe()
                return
            self._subscription = subscription
            await self._load(generation)
        except BaseException:
            if generation == self._generation:
                await self._release()
            raise

        if generation != self._generation:
            return
        self._drain_task = asyncio.create_task(self._drain(generation, queue))
        logger.debug(
            f"Bound {self.collection} view to {parent_id} with {len(self._records)} record(s)",
            extra={"collection": self.collection, "complaint_id": parent_id},
        )

    async def refresh(self) -> None:
        """Re-fetch the current scope, keeping unconfirmed records."""
        if self._parent_id is None:
            return
        if not self.subscribed:
            await self.bind(self._parent_id)
            return
        await self._load(self._generation)

    async def close(self) -> None:
        """Stop the live feed; the last view stays readable."""
        self._generation += 1
        await self._release()

    async def settle(self) -> None:
        """Wait until every buffered push event has been processed."""
        if self._queue is None or self._drain_task is None or self._drain_task.done():
            return
        await self._queue.join()

    async def _release(self) -> None:
        task, self._drain_task = self._drain_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            await subscription.unsubscribe()
        self._queue = None

    # -------------------------------------------------------------------------
    # Fetch & push paths
    # -------------------------------------------------------------------------

    async def _load(self, generation: int) -> bool:
        rows = await self.client.query(
            self.collection,
            {self.parent_field: self._parent_id},
            order_by=self.order_by,
        )

        fetched: List[Record] = []
        fetched_ids: Set[str] = set()
        for row in rows:
            if row["id"] not in fetched_ids:
                fetched_ids.add(row["id"])
                fetched.append(row)
        joined = await self.joiner.join(fetched)

        if generation != self._generation:
            logger.debug(f"Discarding stale {self.collection} fetch (generation {generation})")
            return False

        # Everything already in the view belongs to this generation: keep
        # what the fetch did not return (pending and raced records)
        joined.extend(r for r in self._records if r.get("id") not in fetched_ids)
        self._records = joined
        self._notify()
        return True

    async def _drain(self, generation: int, queue: asyncio.Queue) -> None:
        while True:
            event_generation, record = await queue.get()
            try:
                if event_generation == generation == self._generation:
                    await self._push(generation, record)
            except Exception as e:
                logger.error(
                    f"Failed to apply pushed {self.collection} record {record.get('id')}: {e}",
                    exc_info=True,
                )
            finally:
                queue.task_done()

    async def _push(self, generation: int, record: Mapping[str, Any]) -> None:
        record_id = record.get("id")
        if self.contains(record_id):
            return
        joined = await self.joiner.join_one(record)
        if generation != self._generation or self.contains(record_id):
            return
        self._records.append(joined)
        self._notify()

    # -------------------------------------------------------------------------
    # Optimistic records
    # -------------------------------------------------------------------------

    def add_pending(self, record: Mapping[str, Any]) -> None:
        """Append an unconfirmed local record; its id is its client_id."""
        self._records.append(dict(record))
        self._notify()

    def confirm_pending(self, client_id: str, record: Mapping[str, Any]) -> None:
        """
        Replace a pending record with its authoritative version in place,
        or drop it when the feed already delivered that id.
        """
        index = self._index_of(client_id)
        record_id = record.get("id")

        if self.contains(record_id):
            if index is not None:
                del self._records[index]
        elif index is not None:
            self._records[index] = dict(record)
        elif record.get(self.parent_field) == self._parent_id:
            self._records.append(dict(record))
        else:
            return
        self._notify()

    def discard_pending(self, client_id: str) -> None:
        index = self._index_of(client_id)
        if index is not None:
            del self._records[index]
            self._notify()

    def _index_of(self, client_id: str) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.get("pending") and record.get("client_id") == client_id:
                return index
        return None

    async def __aenter__(self) -> "SyncedList":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
