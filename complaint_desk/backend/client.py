"""
Collection client capability.

The application never talks to storage directly: every read, write and
live feed goes through a CollectionClient. Records travel as plain dicts
keyed by column name, the same shape the backend stores.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

Record = Dict[str, Any]
Filters = Mapping[str, Any]

# Collection names served by every backend
COMPLAINTS = "complaints"
COMPLAINT_COMMENTS = "complaint_comments"
CHAT_MESSAGES = "chat_messages"
PROFILES = "profiles"
USER_ROLES = "user_roles"
COMPLAINT_CATEGORIES = "complaint_categories"

COLLECTIONS = (
    COMPLAINTS,
    COMPLAINT_COMMENTS,
    CHAT_MESSAGES,
    PROFILES,
    USER_ROLES,
    COMPLAINT_CATEGORIES,
)

# Collections carrying an updated_at column
UPDATED_AT = frozenset({COMPLAINTS, PROFILES, COMPLAINT_CATEGORIES})

# parent collection -> [(child collection, foreign key column)], deleted child-first
CASCADES: Dict[str, Tuple[Tuple[str, str], ...]] = {
    PROFILES: (
        (USER_ROLES, "user_id"),
        (COMPLAINT_COMMENTS, "user_id"),
        (CHAT_MESSAGES, "user_id"),
        (COMPLAINTS, "student_id"),
    ),
    COMPLAINTS: (
        (COMPLAINT_COMMENTS, "complaint_id"),
        (CHAT_MESSAGES, "complaint_id"),
    ),
}


class In:
    """Set-membership filter value: column IN (values)."""

    __slots__ = ("values",)

    def __init__(self, values: Iterable[Any]):
        self.values: Tuple[Any, ...] = tuple(values)

    def __repr__(self) -> str:
        return f"In({list(self.values)!r})"


def matches(record: Mapping[str, Any], filters: Optional[Filters]) -> bool:
    """Check a record against equality / membership filters."""
    for column, expected in (filters or {}).items():
        value = record.get(column)
        if isinstance(expected, In):
            if value not in expected.values:
                return False
        elif value != expected:
            return False
    return True


@dataclass(frozen=True)
class InsertEvent:
    """A record newly inserted into a collection."""

    collection: str
    record: Record = field(default_factory=dict)


InsertHandler = Callable[[InsertEvent], None]


class Subscription(ABC):
    """Handle for a live insert feed; unsubscribing is idempotent."""

    @property
    @abstractmethod
    def active(self) -> bool:
        ...

    @abstractmethod
    async def unsubscribe(self) -> None:
        ...


class CollectionClient(ABC):
    """
    Remote data-access capability.

    Implementations:
    - MemoryCollectionClient: in-process store for development and tests
    - DatabaseCollectionClient: SQLAlchemy async engine
    """

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Optional[Filters] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Record]:
        """
        Fetch records matching filters.

        Args:
            collection: Collection name
            filters: Column -> value (equality) or In(...) (membership)
            order_by: Single column to order by
            descending: Order direction
            limit: Maximum number of records
            offset: Number of records to skip

        Returns:
            Ordered list of record dicts
        """

    @abstractmethod
    async def insert(self, collection: str, values: Mapping[str, Any]) -> Record:
        """Insert a record; returns the stored record with id and timestamps."""

    @abstractmethod
    async def update(
        self,
        collection: str,
        filters: Filters,
        values: Mapping[str, Any],
    ) -> List[Record]:
        """Update matching records; returns the updated records."""

    @abstractmethod
    async def delete(self, collection: str, filters: Filters) -> int:
        """Delete matching records (cascading); returns the number removed."""

    @abstractmethod
    async def subscribe(
        self,
        collection: str,
        filters: Optional[Filters],
        handler: InsertHandler,
    ) -> Subscription:
        """Open a live feed of inserts matching filters."""

    async def get(self, collection: str, record_id: str) -> Optional[Record]:
        """Point lookup by id; None when absent."""
        rows = await self.query(collection, {"id": record_id}, limit=1)
        return rows[0] if rows else None

    async def close(self) -> None:
        """Release backend resources."""

