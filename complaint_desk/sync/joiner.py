"""
Batched reference joins.

Attaches a display value (author name, category name) to records that
only carry a foreign identifier. A join over N records issues at most one
membership query for the identifiers not already cached, never one per
record.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from complaint_desk.backend import (
    COMPLAINT_CATEGORIES,
    PROFILES,
    BackendError,
    CollectionClient,
    In,
    Record,
)
from complaint_desk.config.settings import settings

logger = logging.getLogger(__name__)


class BatchJoiner:
    """
    Resolves `source_field` identifiers against a lookup collection and
    writes the looked-up `value_field` into `target_field`.

    Hits are cached for the joiner's lifetime; misses and failed lookups
    fall back to `fallback` and are retried on the next join.
    """

    def __init__(
        self,
        client: CollectionClient,
        collection: str,
        source_field: str,
        target_field: str,
        value_field: str,
        fallback: str,
        key_field: str = "id",
    ):
        self.client = client
        self.collection = collection
        self.source_field = source_field
        self.target_field = target_field
        self.value_field = value_field
        self.key_field = key_field
        self.fallback = fallback
        self._cache: Dict[str, str] = {}

    def remember(self, key: Optional[str], value: Optional[str]) -> None:
        """Seed the cache with a known value."""
        if key and value:
            self._cache[key] = value

    def cached(self, key: Optional[str]) -> Optional[str]:
        return self._cache.get(key) if key else None

    async def resolve(self, keys: Iterable[Optional[str]]) -> Dict[str, str]:
        """
        Resolve identifiers to display values.

        Only identifiers missing from the cache are looked up, in a single
        batched query. Identifiers that cannot be resolved are absent from
        the returned mapping.
        """
        wanted: List[str] = []
        for key in keys:
            if key and key not in wanted:
                wanted.append(key)

        missing = [key for key in wanted if key not in self._cache]
        if missing:
            try:
                rows = await self.client.query(
                    self.collection, {self.key_field: In(missing)}
                )
            except BackendError as e:
                logger.warning(
                    f"Lookup of {len(missing)} {self.collection} record(s) failed, "
                    f"using '{self.fallback}': {e}",
                    extra={"collection": self.collection, "operation": "join"},
                )
                rows = []

            for row in rows:
                value = row.get(self.value_field)
                if value:
                    self._cache[row[self.key_field]] = value

        return {key: self._cache[key] for key in wanted if key in self._cache}

    def attach(self, record: Mapping[str, Any], names: Mapping[str, str]) -> Record:
        joined = dict(record)
        joined[self.target_field] = names.get(record.get(self.source_field), self.fallback)
        return joined

    async def join(self, records: Iterable[Mapping[str, Any]]) -> List[Record]:
        """Return copies of records, in order, with the display value attached."""
        records = list(records)
        if not records:
            return []
        names = await self.resolve(record.get(self.source_field) for record in records)
        return [self.attach(record, names) for record in records]

    async def join_one(self, record: Mapping[str, Any]) -> Record:
        names = await self.resolve([record.get(self.source_field)])
        return self.attach(record, names)


class ProfileJoiner(BatchJoiner):
    """Attaches the author's full name from profiles."""

    def __init__(
        self,
        client: CollectionClient,
        source_field: str = "user_id",
        target_field: str = "author_name",
    ):
        super().__init__(
            client,
            PROFILES,
            source_field=source_field,
            target_field=target_field,
            value_field="full_name",
            fallback=settings.UNKNOWN_DISPLAY_NAME,
        )


class CategoryJoiner(BatchJoiner):
    """Attaches the category name to complaints."""

    def __init__(self, client: CollectionClient):
        super().__init__(
            client,
            COMPLAINT_CATEGORIES,
            source_field="category_id",
            target_field="category_name",
            value_field="name",
            fallback="Uncategorized",
        )


def student_name_joiner(client: CollectionClient) -> ProfileJoiner:
    """Joiner for the owner of a complaint."""
    return ProfileJoiner(client, source_field="student_id", target_field="student_name")
