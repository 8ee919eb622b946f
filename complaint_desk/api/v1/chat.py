"""
Live chat websocket.

Protocol (JSON frames):
    server -> client  {"type": "snapshot", "complaint_id": ..., "messages": [...]}
    server -> client  {"type": "error", "code": ..., "message": ...}
    client -> server  {"type": "send", "message": "..."}
    client -> server  {"type": "switch", "complaint_id": "..."}

A snapshot frame is sent after every change of the view: the initial
load, pending appends, confirmations, pushed messages and switches.
"""

import asyncio
from typing import Any, Dict, Iterable, Optional

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from fastapi.encoders import jsonable_encoder

from complaint_desk.api import deps
from complaint_desk.api.responses import error_detail
from complaint_desk.backend import CollectionClient, Record
from complaint_desk.config.logging import get_logger
from complaint_desk.services import ChatService, ChatSession, ServiceResult

logger = get_logger(__name__)

router = APIRouter(tags=["Chat"])


async def _send_error(websocket: WebSocket, result: ServiceResult) -> None:
    await websocket.send_json({"type": "error", **error_detail(result)})


def snapshot_frame(complaint_id: Optional[str], snapshot: Iterable[Record]) -> Dict[str, Any]:
    return jsonable_encoder(
        {"type": "snapshot", "complaint_id": complaint_id, "messages": list(snapshot)}
    )


def queue_snapshots(session: ChatSession, outbox: asyncio.Queue) -> None:
    """
    Queue a frame for every view change, labelled with the complaint the
    view showed at that moment. Frames may be sent after a later switch.
    """
    session.add_listener(
        lambda snapshot: outbox.put_nowait(snapshot_frame(session.complaint_id, snapshot))
    )


async def _forward(websocket: WebSocket, outbox: asyncio.Queue) -> None:
    while True:
        await websocket.send_json(await outbox.get())


async def _handle(service: ChatService, session: ChatSession, websocket: WebSocket, frame: Dict[str, Any]) -> None:
    kind = frame.get("type")
    if kind == "send":
        result = await service.send(session, frame.get("message"))
    elif kind == "switch":
        result = await service.switch(session, str(frame.get("complaint_id") or ""))
    else:
        await websocket.send_json(
            {"type": "error", "code": "VALIDATION_ERROR", "message": f"Unknown frame type {kind!r}", "field": "type"}
        )
        return
    if not result:
        await _send_error(websocket, result)


@router.websocket("/complaints/{complaint_id}/chat")
async def chat_socket(
    websocket: WebSocket,
    complaint_id: str,
    client: CollectionClient = Depends(deps.get_ws_client),
):
    user_id = websocket.headers.get(deps.USER_HEADER) or websocket.query_params.get("user_id")
    try:
        actor = await deps.resolve_actor(client, user_id)
    except HTTPException as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(e.detail))
        return

    await websocket.accept()
    service = ChatService(client)
    result = await service.open(actor, complaint_id)
    if not result:
        await _send_error(websocket, result)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    session = result.unwrap()
    outbox: asyncio.Queue = asyncio.Queue()
    outbox.put_nowait(snapshot_frame(session.complaint_id, session.messages()))
    queue_snapshots(session, outbox)
    forwarder = asyncio.create_task(_forward(websocket, outbox))

    try:
        while True:
            frame = await websocket.receive_json()
            await _handle(service, session, websocket, frame)
    except WebSocketDisconnect:
        logger.debug(
            f"Chat socket closed by {actor.user_id}",
            extra={"complaint_id": session.complaint_id, "user_id": actor.user_id},
        )
    finally:
        forwarder.cancel()
        try:
            await forwarder
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.debug(f"Chat forwarder stopped: {e}")
        await service.close(session)
