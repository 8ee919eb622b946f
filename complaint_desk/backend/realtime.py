"""
Realtime insert feed shared by the collection clients.

Backends publish every committed insert here; subscribers registered for
the collection receive an InsertEvent when the record matches their
filters. Handlers are expected to enqueue and return immediately.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from complaint_desk.backend.client import (
    Filters,
    InsertEvent,
    InsertHandler,
    Subscription,
    matches,
)

logger = logging.getLogger(__name__)


class HubSubscription(Subscription):
    """Registration of one handler on the hub."""

    def __init__(
        self,
        hub: "RealtimeHub",
        collection: str,
        filters: Optional[Filters],
        handler: InsertHandler,
    ):
        self.hub = hub
        self.collection = collection
        self.filters: Dict[str, Any] = dict(filters or {})
        self.handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    async def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self.hub.unregister(self)

    def __repr__(self) -> str:
        return f"<HubSubscription {self.collection} {self.filters} active={self._active}>"


class RealtimeHub:
    """
    Registry of insert subscriptions keyed by collection.
    """

    def __init__(self):
        self._subscriptions: Dict[str, List[HubSubscription]] = {}

    def register(
        self,
        collection: str,
        filters: Optional[Filters],
        handler: InsertHandler,
    ) -> HubSubscription:
        """Register a handler for inserts into a collection."""
        subscription = HubSubscription(self, collection, filters, handler)
        self._subscriptions.setdefault(collection, []).append(subscription)
        logger.debug(f"Registered realtime subscription: {subscription!r}")
        return subscription

    def unregister(self, subscription: HubSubscription) -> None:
        """Remove a subscription; unknown subscriptions are ignored."""
        handlers = self._subscriptions.get(subscription.collection, [])
        if subscription in handlers:
            handlers.remove(subscription)
            logger.debug(f"Unregistered realtime subscription: {subscription!r}")

    def publish(self, collection: str, record: Mapping[str, Any]) -> int:
        """
        Deliver an insert to every matching subscriber.

        Args:
            collection: Collection the record was inserted into
            record: Stored record

        Returns:
            Number of handlers the event was delivered to
        """
        delivered = 0
        for subscription in list(self._subscriptions.get(collection, [])):
            if not matches(record, subscription.filters):
                continue
            event = InsertEvent(collection=collection, record=dict(record))
            try:
                subscription.handler(event)
                delivered += 1
            except Exception as e:
                logger.error(
                    f"Error delivering insert on {collection} to {subscription!r}: {e}",
                    exc_info=True,
                )
        return delivered

    def subscriber_count(self, collection: Optional[str] = None) -> int:
        """Count live subscriptions, optionally for one collection."""
        if collection is not None:
            return len(self._subscriptions.get(collection, []))
        return sum(len(handlers) for handlers in self._subscriptions.values())

    def clear(self) -> None:
        """Drop every subscription."""
        for handlers in self._subscriptions.values():
            for subscription in handlers:
                subscription._active = False
        self._subscriptions.clear()
