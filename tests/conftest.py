"""
Shared fixtures: in-memory backend, instrumented clients, seed helpers
and actors.
"""

from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

import pytest

from complaint_desk.backend import (
    COMPLAINT_CATEGORIES,
    COMPLAINTS,
    PROFILES,
    USER_ROLES,
    BackendUnavailableError,
    MemoryCollectionClient,
    Record,
)
from complaint_desk.core.context import ActorContext
from complaint_desk.schemas.common.enums import AppRole


class CountingClient(MemoryCollectionClient):
    """Memory client that records every query and insert."""

    def __init__(self):
        super().__init__()
        self.queries: List[Tuple[str, Dict[str, Any]]] = []
        self.inserts: List[Tuple[str, Dict[str, Any]]] = []

    async def query(self, collection, filters=None, **kwargs):
        self.queries.append((collection, dict(filters or {})))
        return await super().query(collection, filters, **kwargs)

    async def insert(self, collection, values):
        self.inserts.append((collection, dict(values)))
        return await super().insert(collection, values)

    def queries_on(self, collection: str) -> List[Dict[str, Any]]:
        return [filters for name, filters in self.queries if name == collection]

    def reset(self) -> None:
        self.queries.clear()
        self.inserts.clear()


class FailingClient(CountingClient):
    """Counting client whose selected operations raise BackendUnavailableError."""

    def __init__(self):
        super().__init__()
        self.fail: Set[Tuple[str, str]] = set()

    def fail_on(self, operation: str, collection: str) -> None:
        self.fail.add((operation, collection))

    def _check(self, operation: str, collection: str) -> None:
        if (operation, collection) in self.fail:
            raise BackendUnavailableError(f"{operation} on {collection} failed")

    async def query(self, collection, filters=None, **kwargs):
        self._check("query", collection)
        return await super().query(collection, filters, **kwargs)

    async def insert(self, collection, values):
        self._check("insert", collection)
        return await super().insert(collection, values)

    async def update(self, collection, filters, values):
        self._check("update", collection)
        return await super().update(collection, filters, values)


@pytest.fixture
def client() -> CountingClient:
    return CountingClient()


@pytest.fixture
def failing_client() -> FailingClient:
    return FailingClient()


# --- Seed helpers ---------------------------------------------------------------

async def make_profile(
    client: MemoryCollectionClient,
    full_name: str,
    role: Optional[AppRole] = AppRole.STUDENT,
    **extra: Any,
) -> Record:
    values = {
        "id": extra.pop("id", None) or f"user-{full_name.lower().replace(' ', '-')}",
        "full_name": full_name,
        "email": f"{full_name.lower().replace(' ', '.')}@campus.edu",
    }
    values.update(extra)
    profile = await client.insert(PROFILES, values)
    if role is not None:
        await client.insert(USER_ROLES, {"user_id": profile["id"], "role": role.value})
    return profile


async def make_category(client: MemoryCollectionClient, name: str, is_active: bool = True) -> Record:
    return await client.insert(COMPLAINT_CATEGORIES, {"name": name, "is_active": is_active})


async def make_complaint(
    client: MemoryCollectionClient,
    student_id: str,
    title: str = "Broken heater in room 12",
    status: str = "submitted",
    priority: str = "medium",
    **extra: Any,
) -> Record:
    values = {
        "student_id": student_id,
        "title": title,
        "description": "The heater has not worked for a week now.",
        "status": status,
        "priority": priority,
    }
    values.update(extra)
    return await client.insert(COMPLAINTS, values)


def actor_for(profile: Mapping[str, Any], role: AppRole = AppRole.STUDENT) -> ActorContext:
    return ActorContext(user_id=profile["id"], role=role, display_name=profile["full_name"])


@pytest.fixture
async def student(client) -> Record:
    return await make_profile(client, "Asha Verma")


@pytest.fixture
async def admin(client) -> Record:
    return await make_profile(client, "Ravi Kumar", AppRole.ADMIN)


@pytest.fixture
async def super_admin(client) -> Record:
    return await make_profile(client, "Meera Iyer", AppRole.SUPER_ADMIN)


@pytest.fixture
def student_actor(student) -> ActorContext:
    return actor_for(student)


@pytest.fixture
def admin_actor(admin) -> ActorContext:
    return actor_for(admin, AppRole.ADMIN)


@pytest.fixture
def super_admin_actor(super_admin) -> ActorContext:
    return actor_for(super_admin, AppRole.SUPER_ADMIN)


@pytest.fixture
async def complaint(client, student) -> Record:
    return await make_complaint(client, student["id"])
