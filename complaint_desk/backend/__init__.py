"""
Remote data-access layer.

Every read, write and live feed the application performs goes through a
CollectionClient. Two adapters ship with the project:

- MemoryCollectionClient: in-process store (development, tests)
- DatabaseCollectionClient: async SQLAlchemy engine
"""

from complaint_desk.backend.client import (
    CHAT_MESSAGES,
    COLLECTIONS,
    COMPLAINT_CATEGORIES,
    COMPLAINT_COMMENTS,
    COMPLAINTS,
    PROFILES,
    USER_ROLES,
    CollectionClient,
    In,
    InsertEvent,
    Record,
    Subscription,
)
from complaint_desk.backend.errors import (
    BackendAuthorizationError,
    BackendConstraintError,
    BackendError,
    BackendUnavailableError,
    UnknownCollectionError,
)
from complaint_desk.backend.memory import MemoryCollectionClient
from complaint_desk.backend.realtime import RealtimeHub
from complaint_desk.config.settings import Settings


async def create_client(config: Settings) -> CollectionClient:
    """Build the collection client selected by BACKEND."""
    if config.BACKEND == "database":
        from complaint_desk.backend.database import DatabaseCollectionClient

        client = DatabaseCollectionClient.from_url(
            config.get_database_url(), echo=config.DATABASE_ECHO
        )
        if not config.is_production():
            await client.create_schema()
        return client
    return MemoryCollectionClient()


__all__ = [
    "CHAT_MESSAGES",
    "COLLECTIONS",
    "COMPLAINT_CATEGORIES",
    "COMPLAINT_COMMENTS",
    "COMPLAINTS",
    "PROFILES",
    "USER_ROLES",
    "CollectionClient",
    "In",
    "InsertEvent",
    "Record",
    "Subscription",
    "BackendAuthorizationError",
    "BackendConstraintError",
    "BackendError",
    "BackendUnavailableError",
    "UnknownCollectionError",
    "MemoryCollectionClient",
    "RealtimeHub",
    "create_client",
]
