import pytest

from complaint_desk.backend import (
    CHAT_MESSAGES,
    COMPLAINT_COMMENTS,
    COMPLAINTS,
    PROFILES,
    USER_ROLES,
    BackendConstraintError,
    In,
    UnknownCollectionError,
)
from complaint_desk.backend.database import DatabaseCollectionClient
from complaint_desk.sync.joiner import ProfileJoiner
from complaint_desk.sync.synced_list import SyncedList


@pytest.fixture
async def database(tmp_path):
    client = DatabaseCollectionClient.from_url(f"sqlite+aiosqlite:///{tmp_path / 'desk.sqlite3'}")
    await client.create_schema()
    yield client
    await client.close()


async def seed(database):
    await database.insert(PROFILES, {"id": "u1", "full_name": "Asha Verma", "email": "asha@x.edu"})
    await database.insert(USER_ROLES, {"user_id": "u1", "role": "student"})
    return await database.insert(
        COMPLAINTS,
        {"student_id": "u1", "title": "Heater broken", "description": "The heater has not worked for a week."},
    )


async def test_insert_and_query(database):
    complaint = await seed(database)

    assert complaint["status"] == "submitted"
    assert complaint["created_at"].tzinfo is not None
    rows = await database.query(PROFILES, {"id": In(["u1", "u2"])})
    assert [r["full_name"] for r in rows] == ["Asha Verma"]
    assert await database.get(COMPLAINTS, "missing") is None


async def test_update_returns_updated_rows(database):
    complaint = await seed(database)

    rows = await database.update(COMPLAINTS, {"id": complaint["id"]}, {"status": "resolved", "resolved_at": None})

    assert [r["status"] for r in rows] == ["resolved"]


async def test_unique_email_is_a_constraint_error(database):
    await seed(database)
    with pytest.raises(BackendConstraintError):
        await database.insert(PROFILES, {"id": "u2", "full_name": "Copy", "email": "asha@x.edu"})


async def test_unknown_collection_and_column(database):
    with pytest.raises(UnknownCollectionError):
        await database.query("invoices")
    with pytest.raises(BackendConstraintError):
        await database.query(PROFILES, {"nickname": "x"})


async def test_delete_profile_cascades(database):
    complaint = await seed(database)
    await database.insert(COMPLAINT_COMMENTS, {"complaint_id": complaint["id"], "user_id": "u1", "comment": "hi"})
    await database.insert(CHAT_MESSAGES, {"complaint_id": complaint["id"], "user_id": "u1", "message": "hi"})

    assert await database.delete(PROFILES, {"id": "u1"}) == 1

    for collection in (USER_ROLES, COMPLAINTS, COMPLAINT_COMMENTS, CHAT_MESSAGES):
        assert await database.query(collection) == []


async def test_synced_list_over_database(database):
    complaint = await seed(database)
    await database.insert(CHAT_MESSAGES, {"complaint_id": complaint["id"], "user_id": "u1", "message": "first"})
    synced = SyncedList(database, CHAT_MESSAGES, "complaint_id", ProfileJoiner(database))

    await synced.bind(complaint["id"])
    await database.insert(CHAT_MESSAGES, {"complaint_id": complaint["id"], "user_id": "u1", "message": "second"})
    await synced.settle()

    assert [r["message"] for r in synced.snapshot()] == ["first", "second"]
    assert synced.snapshot()[0]["author_name"] == "Asha Verma"
    await synced.close()
