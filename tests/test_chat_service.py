from complaint_desk.backend import CHAT_MESSAGES
from complaint_desk.services import ChatService, ErrorCode
from tests.conftest import make_complaint


async def test_switching_complaints_rebinds_the_session(client, student, student_actor):
    a = await make_complaint(client, student["id"], title="Complaint A")
    b = await make_complaint(client, student["id"], title="Complaint B")
    for i in range(3):
        await client.insert(CHAT_MESSAGES, {"complaint_id": a["id"], "user_id": student["id"], "message": f"a{i}"})
    service = ChatService(client)

    session = (await service.open(student_actor, a["id"])).data
    assert len(session.messages()) == 3

    switched = await service.switch(session, b["id"])
    assert switched.is_success
    assert session.messages() == []

    await client.insert(CHAT_MESSAGES, {"complaint_id": a["id"], "user_id": student["id"], "message": "to A"})
    await session.settle()
    assert session.messages() == []
    await service.close(session)


async def test_other_participants_messages_arrive_live(client, student, student_actor, admin_actor, complaint):
    service = ChatService(client)
    student_session = (await service.open(student_actor, complaint["id"])).data
    admin_session = (await service.open(admin_actor, complaint["id"])).data

    await service.send(admin_session, "We will fix it today")
    await student_session.settle()

    messages = student_session.messages()
    assert [m["message"] for m in messages] == ["We will fix it today"]
    assert messages[0]["author_name"] == "Ravi Kumar"
    await service.close(student_session)
    await service.close(admin_session)


async def test_send_validates_locally(client, student_actor, complaint):
    service = ChatService(client)
    session = (await service.open(student_actor, complaint["id"])).data
    client.reset()

    empty = await service.send(session, "")
    missing = await service.send(session, None)
    too_long = await service.send(session, "x" * 1001)

    assert empty.message == "Message cannot be empty"
    assert missing.message == "Message cannot be empty"
    assert missing.error.field == "message"
    assert too_long.message == "Message must be less than 1000 characters"
    assert empty.error.code == too_long.error.code == ErrorCode.VALIDATION_ERROR
    assert client.inserts == []
    await service.close(session)


async def test_failed_send_is_external_service_error(failing_client, complaint, student_actor, student):
    await failing_client.insert("profiles", dict(student))
    await failing_client.insert("complaints", dict(complaint))
    service = ChatService(failing_client)
    session = (await service.open(student_actor, complaint["id"])).data
    failing_client.fail_on("insert", CHAT_MESSAGES)

    result = await service.send(session, "Hello")

    assert result.error.code == ErrorCode.EXTERNAL_SERVICE_ERROR
    assert session.messages() == []
    await service.close(session)


async def test_history_closes_its_session(client, student_actor, complaint):
    service = ChatService(client)
    await service.post_message(student_actor, complaint["id"], {"message": "Hello"})

    history = await service.history(student_actor, complaint["id"])

    assert [m["message"] for m in history.data] == ["Hello"]
    assert client.hub.subscriber_count(CHAT_MESSAGES) == 0
