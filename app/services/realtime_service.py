"""
Gahoi Sathi — Realtime Hint Hub

Keeps the WebSocket connections of this worker in two registries:
per-user sockets (``user:<id>``) and per-conversation rooms
(``conversation:<id>``).  Events are JSON envelopes
``{"event": str, "data": dict}``.

When Redis is attached, every emit is published on ``REALTIME_CHANNEL``
and a relay task delivers what it receives to the local sockets, so all
workers reach their own clients.  Without Redis delivery is in-process.
Hints can be lost or duplicated; clients keep polling regardless.
"""

from __future__ import annotations

import asyncio
import json
from collections import defaultdict
from typing import Any

import structlog
from starlette.websockets import WebSocket

from app.config import get_settings

logger = structlog.get_logger("sathi.realtime")

EVENT_NEW_MESSAGE = "new-message"
EVENT_NOTIFICATION = "notification"
EVENT_TYPING = "typing"


class RealtimeHub:
    """Registry of live sockets plus an optional Redis fan-out relay."""

    def __init__(self, channel: str = "sathi:realtime") -> None:
        self.channel = channel
        self._user_sockets: dict[str, set[WebSocket]] = defaultdict(set)
        self._rooms: dict[str, set[WebSocket]] = defaultdict(set)
        self._socket_users: dict[WebSocket, str] = {}
        self._redis = None
        self._relay_task: asyncio.Task | None = None

    # ── Connection registry ───────────────────────────────────────────────

    def connect(self, websocket: WebSocket, user_id: str) -> None:
        self._user_sockets[user_id].add(websocket)
        self._socket_users[websocket] = user_id
        logger.info("socket_connected", user_id=user_id)

    def disconnect(self, websocket: WebSocket) -> None:
        user_id = self._socket_users.pop(websocket, None)
        if user_id is not None:
            sockets = self._user_sockets.get(user_id)
            if sockets is not None:
                sockets.discard(websocket)
                if not sockets:
                    del self._user_sockets[user_id]
        for conv_id in [c for c, members in self._rooms.items() if websocket in members]:
            self.leave(websocket, conv_id)
        logger.info("socket_disconnected", user_id=user_id)

    def join(self, websocket: WebSocket, conversation_id: str) -> None:
        self._rooms[conversation_id].add(websocket)

    def leave(self, websocket: WebSocket, conversation_id: str) -> None:
        members = self._rooms.get(conversation_id)
        if members is None:
            return
        members.discard(websocket)
        if not members:
            del self._rooms[conversation_id]

    def connection_count(self) -> int:
        return len(self._socket_users)

    # ── Emit ──────────────────────────────────────────────────────────────

    async def emit_to_user(self, user_id: Any, event: str, data: dict) -> None:
        await self._publish({"target": "user", "id": str(user_id), "event": event, "data": data})

    async def emit_to_conversation(
        self,
        conversation_id: str,
        event: str,
        data: dict,
        exclude_user: Any = None,
    ) -> None:
        await self._publish(
            {
                "target": "conversation",
                "id": conversation_id,
                "event": event,
                "data": data,
                "exclude_user": str(exclude_user) if exclude_user else None,
            }
        )

    async def _publish(self, envelope: dict) -> None:
        if self._redis is not None:
            try:
                await self._redis.publish(self.channel, json.dumps(envelope, default=str))
                return
            except Exception as exc:
                logger.warning("realtime_publish_failed", error=str(exc))
        await self._deliver(envelope)

    async def _deliver(self, envelope: dict) -> None:
        if envelope["target"] == "user":
            sockets = set(self._user_sockets.get(envelope["id"], ()))
        else:
            exclude = envelope.get("exclude_user")
            sockets = {
                ws
                for ws in self._rooms.get(envelope["id"], ())
                if self._socket_users.get(ws) != exclude
            }

        message = {"event": envelope["event"], "data": envelope["data"]}
        for ws in sockets:
            try:
                await ws.send_text(json.dumps(message, default=str))
            except Exception as exc:
                logger.info("socket_send_failed", error=str(exc))
                self.disconnect(ws)

    # ── Redis relay ───────────────────────────────────────────────────────

    async def start_relay(self, redis_client) -> None:
        """Subscribe to the shared channel and deliver to local sockets."""
        self._redis = redis_client
        pubsub = redis_client.pubsub()
        await pubsub.subscribe(self.channel)
        self._relay_task = asyncio.create_task(self._relay_loop(pubsub))
        self._relay_task.add_done_callback(self._relay_done)
        logger.info("realtime_relay_started", channel=self.channel)

    async def _relay_loop(self, pubsub) -> None:
        try:
            async for item in pubsub.listen():
                if item.get("type") != "message":
                    continue
                try:
                    envelope = json.loads(item["data"])
                except (TypeError, ValueError):
                    logger.warning("realtime_relay_bad_payload")
                    continue
                await self._deliver(envelope)
        finally:
            await pubsub.aclose()

    def _relay_done(self, task: asyncio.Task) -> None:
        """Fall back to local delivery when the relay stops on its own."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("realtime_relay_failed", error=str(exc), exc_info=exc)
        else:
            logger.warning("realtime_relay_ended")
        if self._relay_task is task:
            self._relay_task = None
            self._redis = None

    async def stop_relay(self) -> None:
        if self._relay_task is not None:
            self._relay_task.cancel()
            try:
                await self._relay_task
            except asyncio.CancelledError:
                pass
            self._relay_task = None
            logger.info("realtime_relay_stopped")
        self._redis = None


_hub: RealtimeHub | None = None


def get_realtime_hub() -> RealtimeHub:
    """Process-wide hub shared by the socket endpoint and the services."""
    global _hub
    if _hub is None:
        _hub = RealtimeHub(get_settings().REALTIME_CHANNEL)
    return _hub
