"""
Gahoi Sathi — Realtime WebSocket

``/api/ws?token=<session token>`` delivers ``notification`` and
``new-message`` hints.  Clients may send::

    {"event": "join-conversation",  "conversation_id": "..."}
    {"event": "leave-conversation", "conversation_id": "..."}
    {"event": "typing", "conversation_id": "...", "is_typing": true}

Connections without a valid token are closed with code 4401.
"""

from __future__ import annotations

import json

import structlog
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from app.api.deps import get_auth_service
from app.database import async_session_factory
from app.errors import AuthenticationError
from app.services.realtime_service import EVENT_TYPING, get_realtime_hub

logger = structlog.get_logger("sathi.api.realtime")

router = APIRouter()

WS_CLOSE_UNAUTHENTICATED = 4401


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket, token: str = Query("")) -> None:
    async with async_session_factory() as db:
        try:
            user = await get_auth_service().authenticate(token, db)
            await db.commit()
        except AuthenticationError:
            user = None

    await websocket.accept()
    if user is None:
        await websocket.close(code=WS_CLOSE_UNAUTHENTICATED)
        return

    user_id = str(user.id)
    hub = get_realtime_hub()
    hub.connect(websocket, user_id)
    log = logger.bind(user_id=user_id)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                log.info("socket_bad_frame")
                continue
            if not isinstance(message, dict):
                continue

            event = message.get("event")
            conv_id = message.get("conversation_id")
            # Only participants may join a conversation room.
            if not conv_id or user_id not in str(conv_id).split("_"):
                continue

            if event == "join-conversation":
                hub.join(websocket, conv_id)
            elif event == "leave-conversation":
                hub.leave(websocket, conv_id)
            elif event == EVENT_TYPING:
                await hub.emit_to_conversation(
                    conv_id,
                    EVENT_TYPING,
                    {
                        "conversation_id": conv_id,
                        "user_id": user_id,
                        "is_typing": bool(message.get("is_typing", True)),
                    },
                    exclude_user=user_id,
                )
    except WebSocketDisconnect:
        pass
    finally:
        hub.disconnect(websocket)
