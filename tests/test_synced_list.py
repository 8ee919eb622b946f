import asyncio

import pytest

from complaint_desk.backend import CHAT_MESSAGES, PROFILES, BackendUnavailableError, MemoryCollectionClient
from complaint_desk.sync.joiner import ProfileJoiner
from complaint_desk.sync.synced_list import SyncedList
from tests.conftest import CountingClient, make_complaint, make_profile


def chat_list(client) -> SyncedList:
    return SyncedList(client, CHAT_MESSAGES, "complaint_id", ProfileJoiner(client))


async def post(client, complaint_id, user_id, text):
    return await client.insert(
        CHAT_MESSAGES, {"complaint_id": complaint_id, "user_id": user_id, "message": text}
    )


class GatedClient(CountingClient):
    """Holds queries for chosen parent ids until released."""

    def __init__(self):
        super().__init__()
        self.gates = {}

    async def query(self, collection, filters=None, **kwargs):
        gate = self.gates.get((filters or {}).get("complaint_id"))
        if collection == CHAT_MESSAGES and gate is not None:
            await gate.wait()
        return await super().query(collection, filters, **kwargs)


class LateInsertClient(CountingClient):
    """Inserts a message right after computing the first chat fetch."""

    def __init__(self):
        super().__init__()
        self.late = None

    async def query(self, collection, filters=None, **kwargs):
        rows = await super().query(collection, filters, **kwargs)
        if collection == CHAT_MESSAGES and self.late is not None:
            values, self.late = self.late, None
            await MemoryCollectionClient.insert(self, CHAT_MESSAGES, values)
        return rows


async def test_bind_loads_children_in_creation_order(client, student, complaint):
    for text in ("first", "second", "third"):
        await post(client, complaint["id"], student["id"], text)
    client.reset()

    synced = chat_list(client)
    await synced.bind(complaint["id"])

    assert [r["message"] for r in synced.snapshot()] == ["first", "second", "third"]
    assert all(r["author_name"] == "Asha Verma" for r in synced.snapshot())
    assert len(client.queries_on(PROFILES)) == 1
    await synced.close()


async def test_scope_switch_isolates_parents(client, student):
    a = await make_complaint(client, student["id"], title="Complaint A")
    b = await make_complaint(client, student["id"], title="Complaint B")
    for i in range(3):
        await post(client, a["id"], student["id"], f"a{i}")

    synced = chat_list(client)
    await synced.bind(a["id"])
    assert len(synced) == 3

    await synced.bind(b["id"])
    assert len(synced) == 0

    await post(client, a["id"], student["id"], "late for A")
    await synced.settle()
    assert len(synced) == 0

    await post(client, b["id"], student["id"], "hello B")
    await synced.settle()
    assert [r["message"] for r in synced.snapshot()] == ["hello B"]
    assert client.hub.subscriber_count(CHAT_MESSAGES) == 1
    await synced.close()


async def test_pushed_records_are_appended_once(client, student, complaint):
    synced = chat_list(client)
    await synced.bind(complaint["id"])

    record = await post(client, complaint["id"], student["id"], "live")
    client.hub.publish(CHAT_MESSAGES, record)
    await synced.settle()

    assert [r["id"] for r in synced.snapshot()] == [record["id"]]
    await synced.close()


async def test_record_in_fetch_and_buffer_appears_once(client, student, complaint):
    synced = chat_list(client)
    await synced.bind(complaint["id"])
    record = await post(client, complaint["id"], student["id"], "raced")
    await synced.refresh()
    await synced.settle()

    assert [r["id"] for r in synced.snapshot()] == [record["id"]]
    await synced.close()


async def test_insert_during_load_is_delivered_after_fetch(student):
    client = LateInsertClient()
    await client.insert(PROFILES, dict(student))
    complaint = await make_complaint(client, student["id"])
    await post(client, complaint["id"], student["id"], "existing")
    client.late = {"complaint_id": complaint["id"], "user_id": student["id"], "message": "during load"}

    synced = chat_list(client)
    await synced.bind(complaint["id"])
    await synced.settle()

    assert [r["message"] for r in synced.snapshot()] == ["existing", "during load"]
    await synced.close()


async def test_stale_fetch_is_discarded(student):
    client = GatedClient()
    await client.insert(PROFILES, dict(student))
    a = await make_complaint(client, student["id"], title="Complaint A")
    b = await make_complaint(client, student["id"], title="Complaint B")
    await post(client, a["id"], student["id"], "from A")
    await post(client, b["id"], student["id"], "from B")
    client.gates[a["id"]] = asyncio.Event()

    synced = chat_list(client)
    slow = asyncio.create_task(synced.bind(a["id"]))
    await asyncio.sleep(0.01)
    await synced.bind(b["id"])
    client.gates[a["id"]].set()
    await slow

    assert synced.parent_id == b["id"]
    assert [r["message"] for r in synced.snapshot()] == ["from B"]
    assert client.hub.subscriber_count(CHAT_MESSAGES) == 1
    await synced.close()


async def test_close_releases_subscription(client, student, complaint):
    synced = chat_list(client)
    await synced.bind(complaint["id"])
    await synced.close()

    assert client.hub.subscriber_count(CHAT_MESSAGES) == 0
    await post(client, complaint["id"], student["id"], "after close")
    await synced.settle()
    assert len(synced) == 0


async def test_overlapping_binds_keep_one_subscription(client, student):
    a = await make_complaint(client, student["id"], title="Complaint A")
    b = await make_complaint(client, student["id"], title="Complaint B")
    await post(client, b["id"], student["id"], "from B")
    synced = chat_list(client)

    await asyncio.gather(synced.bind(a["id"]), synced.bind(b["id"]))

    assert synced.parent_id == b["id"]
    assert [r["message"] for r in synced.snapshot()] == ["from B"]
    assert client.hub.subscriber_count(CHAT_MESSAGES) == 1

    await synced.close()
    assert client.hub.subscriber_count(CHAT_MESSAGES) == 0


async def test_close_while_subscribing_leaves_no_subscription(client, complaint):
    synced = chat_list(client)
    binding = asyncio.create_task(synced.bind(complaint["id"]))
    await asyncio.sleep(0)

    await synced.close()
    await binding

    assert client.hub.subscriber_count(CHAT_MESSAGES) == 0
    assert not synced.subscribed


async def test_failed_load_leaves_no_subscription(failing_client, student):
    complaint = await make_complaint(failing_client, student["id"])
    failing_client.fail_on("query", CHAT_MESSAGES)
    synced = chat_list(failing_client)

    with pytest.raises(BackendUnavailableError):
        await synced.bind(complaint["id"])

    assert failing_client.hub.subscriber_count(CHAT_MESSAGES) == 0
    assert not synced.subscribed


async def test_refresh_keeps_pending_records(client, student, complaint):
    synced = chat_list(client)
    await synced.bind(complaint["id"])
    synced.add_pending(
        {"id": "local-1", "client_id": "local-1", "pending": True, "complaint_id": complaint["id"]}
    )

    await synced.refresh()

    assert synced.contains("local-1")
    await synced.close()


async def test_listeners_receive_snapshots(client, student, complaint):
    seen = []
    synced = chat_list(client)
    synced.add_listener(seen.append)
    await synced.bind(complaint["id"])

    await post(client, complaint["id"], student["id"], "ping")
    await synced.settle()

    assert isinstance(seen[-1], tuple)
    assert [r["message"] for r in seen[-1]] == ["ping"]
    await synced.close()
