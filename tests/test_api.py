"""
HTTP and websocket surface, against the in-memory backend.

The TestClient is used without a context manager so startup hooks
(logging setup, backend creation) do not run; the client is injected.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from complaint_desk.api.v1.chat import queue_snapshots
from complaint_desk.backend import CHAT_MESSAGES, COMPLAINTS, MemoryCollectionClient
from complaint_desk.main import create_app
from complaint_desk.schemas.common.enums import AppRole
from complaint_desk.services import ChatService
from tests.conftest import make_category, make_complaint, make_profile

API = "/api/v1"


@pytest.fixture
def backend():
    return MemoryCollectionClient()


@pytest.fixture
def seeded(backend):
    async def seed():
        student = await make_profile(backend, "Asha Verma")
        other = await make_profile(backend, "Kabir Shah")
        admin = await make_profile(backend, "Ravi Kumar", AppRole.ADMIN)
        root = await make_profile(backend, "Meera Iyer", AppRole.SUPER_ADMIN)
        category = await make_category(backend, "Maintenance")
        complaint = await make_complaint(backend, student["id"], category_id=category["id"])
        second = await make_complaint(backend, student["id"], title="Wifi drops at night")
        await backend.insert(
            CHAT_MESSAGES,
            {"complaint_id": complaint["id"], "user_id": admin["id"], "message": "Looking into it"},
        )
        return {
            "student": student,
            "other": other,
            "admin": admin,
            "root": root,
            "category": category,
            "complaint": complaint,
            "second": second,
        }

    return asyncio.run(seed())


@pytest.fixture
def http(backend):
    return TestClient(create_app(client=backend))


def as_user(profile):
    return {"X-User-Id": profile["id"]}


def test_health(http):
    response = http.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_missing_user_header_is_401(http, seeded):
    response = http.get(f"{API}/complaints")
    assert response.status_code == 401


def test_categories(http, seeded):
    response = http.get(f"{API}/categories")
    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["Maintenance"]


def test_create_complaint(http, seeded):
    payload = {
        "title": "Leaking tap",
        "description": "The tap in the second floor washroom leaks all night.",
        "category_id": seeded["category"]["id"],
        "priority": "high",
    }
    response = http.post(f"{API}/complaints", json=payload, headers=as_user(seeded["student"]))

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "submitted"
    assert body["category_name"] == "Maintenance"
    assert body["student_id"] == seeded["student"]["id"]


def test_create_complaint_validation_error(http, backend, seeded):
    before = len(asyncio.run(backend.query(COMPLAINTS)))
    payload = {"title": "Tap", "description": "x" * 30, "category_id": seeded["category"]["id"]}

    response = http.post(f"{API}/complaints", json=payload, headers=as_user(seeded["student"]))

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["message"] == "Title must be at least 5 characters"
    assert detail["field"] == "title"
    assert len(asyncio.run(backend.query(COMPLAINTS))) == before


def test_student_list_with_filters_and_stats(http, seeded):
    response = http.get(
        f"{API}/complaints",
        params={"search": "wifi", "status": "all"},
        headers=as_user(seeded["student"]),
    )

    assert response.status_code == 200
    body = response.json()
    assert [c["title"] for c in body["items"]] == ["Wifi drops at night"]
    assert body["stats"]["total"] == 2
    assert body["stats"]["pending"] == 2


def test_admin_list_includes_student_names(http, seeded):
    response = http.get(f"{API}/complaints", headers=as_user(seeded["admin"]))

    assert response.status_code == 200
    names = {c["student_name"] for c in response.json()["items"]}
    assert names == {"Asha Verma"}


def test_unknown_status_filter_is_422(http, seeded):
    response = http.get(
        f"{API}/complaints", params={"status": "lost"}, headers=as_user(seeded["admin"])
    )
    assert response.status_code == 422


def test_detail_missing_is_404(http, seeded):
    response = http.get(f"{API}/complaints/nope", headers=as_user(seeded["admin"]))
    assert response.status_code == 404


def test_detail_of_someone_else_is_403(http, seeded):
    response = http.get(
        f"{API}/complaints/{seeded['complaint']['id']}", headers=as_user(seeded["other"])
    )
    assert response.status_code == 403


def test_status_update_requires_admin(http, seeded):
    url = f"{API}/complaints/{seeded['complaint']['id']}/status"

    denied = http.patch(url, json={"status": "in_review"}, headers=as_user(seeded["student"]))
    allowed = http.patch(url, json={"status": "resolved"}, headers=as_user(seeded["admin"]))

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json()["status"] == "resolved"
    assert allowed.json()["resolved_at"] is not None


def test_resolve_and_comments_close(http, seeded):
    complaint_id = seeded["complaint"]["id"]
    comments = f"{API}/complaints/{complaint_id}/comments"

    created = http.post(comments, json={"comment": "Any update?"}, headers=as_user(seeded["student"]))
    assert created.status_code == 201
    assert created.json()["author_name"] == "Asha Verma"

    resolved = http.post(
        f"{API}/complaints/{complaint_id}/resolve",
        json={"resolution_summary": "Heater replaced"},
        headers=as_user(seeded["admin"]),
    )
    assert resolved.status_code == 200
    assert resolved.json()["resolution_summary"] == "Heater replaced"

    rejected = http.post(comments, json={"comment": "Thanks!"}, headers=as_user(seeded["student"]))
    assert rejected.status_code == 409

    listing = http.get(comments, headers=as_user(seeded["student"]))
    assert listing.status_code == 200
    assert listing.json()["can_comment"] is False
    assert [c["comment"] for c in listing.json()["items"]] == ["Any update?"]


def test_internal_comment_hidden_from_student(http, seeded):
    comments = f"{API}/complaints/{seeded['complaint']['id']}/comments"

    forbidden = http.post(
        comments, json={"comment": "Note", "is_internal": True}, headers=as_user(seeded["student"])
    )
    internal = http.post(
        comments, json={"comment": "Vendor booked", "is_internal": True}, headers=as_user(seeded["admin"])
    )

    assert forbidden.status_code == 403
    assert internal.status_code == 201
    assert http.get(comments, headers=as_user(seeded["student"])).json()["items"] == []
    assert len(http.get(comments, headers=as_user(seeded["admin"])).json()["items"]) == 1


def test_message_history_and_post(http, seeded):
    messages = f"{API}/complaints/{seeded['complaint']['id']}/messages"

    posted = http.post(messages, json={"message": "Thank you"}, headers=as_user(seeded["student"]))
    empty = http.post(messages, json={"message": "   "}, headers=as_user(seeded["student"]))
    history = http.get(messages, headers=as_user(seeded["student"]))

    assert posted.status_code == 201
    assert empty.status_code == 422
    assert empty.json()["detail"]["message"] == "Message cannot be empty"
    assert [m["message"] for m in history.json()] == ["Looking into it", "Thank you"]
    assert [m["author_name"] for m in history.json()] == ["Ravi Kumar", "Asha Verma"]


def test_admin_users_endpoints(http, seeded):
    denied = http.get(f"{API}/admin/users", headers=as_user(seeded["admin"]))
    assert denied.status_code == 403

    users = http.get(f"{API}/admin/users", headers=as_user(seeded["root"]))
    assert users.status_code == 200
    roles = {u["full_name"]: u["role"] for u in users.json()}
    assert roles["Ravi Kumar"] == "admin"
    assert roles["Asha Verma"] == "student"

    promoted = http.patch(
        f"{API}/admin/users/{seeded['other']['id']}/role",
        json={"role": "admin"},
        headers=as_user(seeded["root"]),
    )
    assert promoted.status_code == 200
    assert promoted.json() == {"user_id": seeded["other"]["id"], "role": "admin"}

    self_delete = http.delete(
        f"{API}/admin/users/{seeded['root']['id']}", headers=as_user(seeded["root"])
    )
    assert self_delete.status_code == 409

    deleted = http.delete(
        f"{API}/admin/users/{seeded['student']['id']}", headers=as_user(seeded["root"])
    )
    assert deleted.status_code == 200
    assert http.get(
        f"{API}/complaints/{seeded['complaint']['id']}", headers=as_user(seeded["admin"])
    ).status_code == 404


# --- Chat websocket -------------------------------------------------------------

def receive_until(websocket, predicate, limit=10):
    for _ in range(limit):
        frame = websocket.receive_json()
        if predicate(frame):
            return frame
    raise AssertionError("expected frame never arrived")


def test_chat_socket_requires_user(http, seeded):
    with pytest.raises(WebSocketDisconnect):
        with http.websocket_connect(f"{API}/complaints/{seeded['complaint']['id']}/chat") as ws:
            ws.receive_json()


def test_chat_socket_snapshot_send_and_switch(http, seeded):
    complaint_id = seeded["complaint"]["id"]
    second_id = seeded["second"]["id"]
    url = f"{API}/complaints/{complaint_id}/chat?user_id={seeded['student']['id']}"

    with http.websocket_connect(url) as ws:
        first = ws.receive_json()
        assert first["type"] == "snapshot"
        assert [m["message"] for m in first["messages"]] == ["Looking into it"]

        ws.send_json({"type": "send", "message": "Still cold"})
        confirmed = receive_until(
            ws,
            lambda f: f["type"] == "snapshot"
            and len(f["messages"]) == 2
            and not f["messages"][-1].get("pending"),
        )
        assert confirmed["messages"][-1]["message"] == "Still cold"
        assert confirmed["messages"][-1]["author_name"] == "Asha Verma"

        ws.send_json({"type": "send", "message": ""})
        error = receive_until(ws, lambda f: f["type"] == "error")
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == "Message cannot be empty"

        ws.send_json({"type": "send"})
        missing = receive_until(ws, lambda f: f["type"] == "error")
        assert missing["message"] == "Message cannot be empty"

        ws.send_json({"type": "switch", "complaint_id": second_id})
        switched = receive_until(
            ws, lambda f: f["type"] == "snapshot" and f["complaint_id"] == second_id
        )
        assert switched["messages"] == []

        ws.send_json({"type": "shout"})
        unknown = receive_until(ws, lambda f: f["type"] == "error")
        assert unknown["field"] == "type"


def test_chat_socket_forbidden_complaint(http, seeded):
    url = f"{API}/complaints/{seeded['complaint']['id']}/chat?user_id={seeded['other']['id']}"

    with http.websocket_connect(url) as ws:
        frame = ws.receive_json()
        assert frame["type"] == "error"
        assert frame["code"] == "INSUFFICIENT_PERMISSIONS"


async def test_queued_snapshots_keep_the_complaint_they_showed(client, student, student_actor, complaint):
    other = await make_complaint(client, student["id"], title="Wifi drops at night")
    service = ChatService(client)
    session = (await service.open(student_actor, complaint["id"])).data
    outbox = asyncio.Queue()
    queue_snapshots(session, outbox)

    await client.insert(
        CHAT_MESSAGES, {"complaint_id": complaint["id"], "user_id": student["id"], "message": "Still cold"}
    )
    await session.settle()
    await service.switch(session, other["id"])

    frames = []
    while not outbox.empty():
        frames.append(outbox.get_nowait())

    assert frames[0]["complaint_id"] == complaint["id"]
    assert [m["message"] for m in frames[0]["messages"]] == ["Still cold"]
    assert frames[-1] == {"type": "snapshot", "complaint_id": other["id"], "messages": []}
    for frame in frames:
        assert all(m["complaint_id"] == frame["complaint_id"] for m in frame["messages"])
    await service.close(session)
