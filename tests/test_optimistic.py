import asyncio

import pytest

from complaint_desk.backend import CHAT_MESSAGES, BackendUnavailableError
from complaint_desk.core.context import ActorContext
from complaint_desk.core.exceptions import BusinessRuleViolation, ValidationError
from complaint_desk.schemas.communication import ChatMessageCreate
from complaint_desk.sync.joiner import ProfileJoiner
from complaint_desk.sync.optimistic import OptimisticAppender
from complaint_desk.sync.synced_list import SyncedList
from tests.conftest import make_complaint


async def bound_appender(client, complaint_id, actor):
    synced = SyncedList(client, CHAT_MESSAGES, "complaint_id", ProfileJoiner(client))
    await synced.bind(complaint_id)
    return synced, OptimisticAppender(synced, ChatMessageCreate, actor)


async def test_hello_is_confirmed_in_place(client, student_actor, complaint):
    synced, appender = await bound_appender(client, complaint["id"], student_actor)

    record = await appender.submit({"message": "  Hello  "})
    await synced.settle()

    snapshot = synced.snapshot()
    assert len(snapshot) == 1
    assert snapshot[0]["id"] == record["id"]
    assert snapshot[0]["message"] == "Hello"
    assert snapshot[0]["author_name"] == "Asha Verma"
    assert not snapshot[0].get("pending")
    await synced.close()


async def test_pending_record_is_visible_before_insert_returns(client, student_actor, complaint):
    synced, appender = await bound_appender(client, complaint["id"], student_actor)
    seen = []
    synced.add_listener(seen.append)

    await appender.submit({"message": "Hello"})

    pending = seen[0]
    assert len(pending) == 1
    assert pending[0]["pending"] is True
    assert pending[0]["id"].startswith("local-")
    assert pending[0]["author_name"] == "Asha Verma"
    await synced.close()


async def test_n_submissions_leave_n_records(client, student_actor, complaint):
    synced, appender = await bound_appender(client, complaint["id"], student_actor)

    await asyncio.gather(*(appender.submit({"message": f"m{i}"}) for i in range(10)))
    await synced.settle()

    assert len(synced) == 10
    assert len({r["id"] for r in synced.snapshot()}) == 10
    assert not any(r.get("pending") for r in synced.snapshot())
    await synced.close()


async def test_echo_before_confirmation_is_not_duplicated(client, student_actor, complaint):
    synced, appender = await bound_appender(client, complaint["id"], student_actor)

    record = await appender.submit({"message": "first"})
    # the feed delivers the same record again
    client.hub.publish(CHAT_MESSAGES, record)
    await synced.settle()

    assert [r["id"] for r in synced.snapshot()] == [record["id"]]
    await synced.close()


@pytest.mark.parametrize(
    "text, message",
    [
        ("", "Message cannot be empty"),
        ("    ", "Message cannot be empty"),
        ("x" * 1001, "Message must be less than 1000 characters"),
    ],
)
async def test_invalid_message_is_rejected_without_remote_call(client, student_actor, complaint, text, message):
    synced, appender = await bound_appender(client, complaint["id"], student_actor)
    client.reset()

    with pytest.raises(ValidationError) as exc:
        await appender.submit({"message": text})

    assert exc.value.message == message
    assert exc.value.field == "message"
    assert client.inserts == []
    assert len(synced) == 0
    await synced.close()


async def test_thousand_characters_are_accepted(client, student_actor, complaint):
    synced, appender = await bound_appender(client, complaint["id"], student_actor)

    record = await appender.submit({"message": "x" * 1000})

    assert len(record["message"]) == 1000
    await synced.close()


async def test_failed_insert_restores_the_view(failing_client, complaint):
    actor = ActorContext(user_id="u1", display_name="Someone")
    await failing_client.insert(CHAT_MESSAGES, {"complaint_id": complaint["id"], "user_id": "u1", "message": "old"})
    synced, appender = await bound_appender(failing_client, complaint["id"], actor)
    before = synced.snapshot()
    failing_client.fail_on("insert", CHAT_MESSAGES)

    with pytest.raises(BackendUnavailableError):
        await appender.submit({"message": "lost"})

    assert synced.snapshot() == before
    await synced.close()


async def test_unbound_view_rejects_submission(client, student_actor):
    synced = SyncedList(client, CHAT_MESSAGES, "complaint_id", ProfileJoiner(client))
    appender = OptimisticAppender(synced, ChatMessageCreate, student_actor)

    with pytest.raises(BusinessRuleViolation):
        await appender.submit({"message": "Hello"})
    assert client.inserts == []


async def test_confirmation_after_scope_switch_stays_out_of_new_view(client, student, student_actor):
    a = await make_complaint(client, student["id"], title="Complaint A")
    b = await make_complaint(client, student["id"], title="Complaint B")
    synced, appender = await bound_appender(client, a["id"], student_actor)

    submitting = asyncio.create_task(appender.submit({"message": "for A"}))
    await asyncio.sleep(0)
    await synced.bind(b["id"])
    await submitting
    await synced.settle()

    assert len(synced) == 0
    await synced.close()
