"""
Realtime messaging over a websocket.

Frames are JSON envelopes, sent as text or UTF-8 binary:
{"event": "<name>", "data": <payload>}.

Client -> server:
- set_username   data: "alice"
- send_message   data: {"to": "bob", ...anything}

Server -> client:
- registered       data: {"username": "alice"}
- receive_message  data: the sender's send_message payload, unchanged
- error            data: "<reason>"
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from core import errors
from users import service as users_service

from . import presence

MAX_MESSAGE_BYTES = 15 * 1024 * 1024  # 15 MB

logger = logging.getLogger(__name__)

router = APIRouter()


def _envelope(event: str, data: Any) -> dict[str, Any]:
    return {"event": event, "data": data}


async def _set_username(websocket: WebSocket, data: Any) -> None:
    username = data.strip() if isinstance(data, str) else ""
    if not username:
        await websocket.send_json(_envelope("error", "set_username expects a non-empty username."))
        return
    await presence.registry.register(username, websocket)
    logger.info("presence_registered username=%s", username)
    await websocket.send_json(_envelope("registered", {"username": username}))


async def _send_message(websocket: WebSocket, data: Any) -> None:
    to_username = data.get("to") if isinstance(data, dict) else None
    if not isinstance(to_username, str) or not to_username.strip():
        await websocket.send_json(_envelope("error", "send_message expects data.to."))
        return

    try:
        delivered = await presence.registry.relay(to_username.strip(), _envelope("receive_message", data))
    except (WebSocketDisconnect, RuntimeError):
        # The peer went away between lookup and send; its own handler cleans up.
        logger.warning("relay_failed to=%s", to_username)
        return
    if not delivered:
        logger.debug("relay_dropped to=%s reason=offline", to_username)


_HANDLERS = {
    "set_username": _set_username,
    "send_message": _send_message,
}


async def dispatch(websocket: WebSocket, raw: str) -> None:
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        await websocket.send_json(_envelope("error", "Malformed message."))
        return

    event = message.get("event") if isinstance(message, dict) else None
    handler = _HANDLERS.get(event) if isinstance(event, str) else None
    if handler is None:
        await websocket.send_json(_envelope("error", f"Unknown event: {event}"))
        return
    await handler(websocket, message.get("data"))


async def on_disconnect(connection: presence.Connection) -> str | None:
    """
    Forget the connection and stamp the user's last_seen.
    """
    username = await presence.registry.remove(connection)
    if username is None:
        return None
    try:
        await users_service.touch_last_seen(username)
    except errors.AppError:
        logger.exception("last_seen_update_failed username=%s", username)
    logger.info("presence_closed username=%s", username)
    return username


async def _receive_frame(websocket: WebSocket) -> bytes:
    """
    Next frame's payload as bytes, text or binary alike.
    """
    message = await websocket.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(message.get("code", status.WS_1000_NORMAL_CLOSURE), message.get("reason"))
    if message.get("text") is not None:
        return message["text"].encode("utf-8")
    return message.get("bytes") or b""


@router.websocket("/ws")
async def realtime(websocket: WebSocket) -> None:
    await websocket.accept()
    try:
        while True:
            frame = await _receive_frame(websocket)
            if len(frame) > MAX_MESSAGE_BYTES:
                await websocket.close(code=status.WS_1009_MESSAGE_TOO_BIG)
                break
            try:
                raw = frame.decode("utf-8")
            except UnicodeDecodeError:
                await websocket.send_json(_envelope("error", "Malformed message."))
                continue
            await dispatch(websocket, raw)
    except WebSocketDisconnect:
        logger.debug("websocket_disconnected")
    finally:
        await on_disconnect(websocket)
