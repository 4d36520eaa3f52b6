"""
Gahoi Sathi — Async API client

Thin ``httpx`` wrapper used by the client-side views.  Every non-2xx
response becomes an ``ApiError`` carrying the status code and the
server's ``detail`` message; transport failures (DNS, refused
connection, timeout) become ``NetworkError``.  Nothing is retried.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import httpx
import structlog

logger = structlog.get_logger("sathi.client.api")

DEFAULT_TIMEOUT_SECONDS = 15.0


class ClientError(Exception):
    """Base class for failures surfaced to client views."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ApiError(ClientError):
    def __init__(self, status_code: int, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload

    def __repr__(self) -> str:
        return f"ApiError(status_code={self.status_code}, message={self.message!r})"


class NetworkError(ClientError):
    """The server could not be reached."""


def _detail_message(payload: Any, fallback: str) -> str:
    if isinstance(payload, dict):
        detail = payload.get("detail")
        if isinstance(detail, str):
            return detail
        # FastAPI request validation: list of {loc, msg, type}
        if isinstance(detail, list) and detail and isinstance(detail[0], dict):
            return str(detail[0].get("msg", fallback))
    return fallback


class SathiClient:
    """Async client for the ``/api`` surface.

    Usable as an async context manager::

        async with SathiClient("http://localhost:5050", token=token) as api:
            inbox = await api.list_conversations()
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token = token
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/api",
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "SathiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    # ── Transport ─────────────────────────────────────────────────────────

    async def request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.TransportError as exc:
            logger.warning("client_network_error", method=method, path=path, error=str(exc))
            raise NetworkError(str(exc) or exc.__class__.__name__) from exc

        if response.status_code == 204:
            return None
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            message = _detail_message(payload, response.reason_phrase or "Request failed")
            logger.info(
                "client_api_error",
                method=method,
                path=path,
                status=response.status_code,
                error=message,
            )
            raise ApiError(response.status_code, message, payload)
        return payload

    # ── Auth ──────────────────────────────────────────────────────────────

    async def login(self, identifier: str, password: str) -> dict:
        data = await self.request(
            "POST", "/auth/login", json={"identifier": identifier, "password": password}
        )
        self.token = data["token"]
        return data

    async def logout(self) -> None:
        await self.request("POST", "/auth/logout")
        self.token = None

    async def me(self) -> dict:
        return await self.request("GET", "/users/me")

    # ── Messages ──────────────────────────────────────────────────────────

    async def send_message(self, receiver_id: uuid.UUID | str, content: str) -> dict:
        return await self.request(
            "POST", "/messages/send", json={"receiver_id": str(receiver_id), "content": content}
        )

    async def get_conversation(
        self,
        user_id: uuid.UUID | str,
        limit: int = 50,
        before: datetime | str | None = None,
        before_id: uuid.UUID | str | None = None,
    ) -> dict:
        params: dict[str, Any] = {"limit": limit}
        if before is not None:
            params["before"] = before.isoformat() if isinstance(before, datetime) else before
        if before_id is not None:
            params["before_id"] = str(before_id)
        return await self.request("GET", f"/messages/conversation/{user_id}", params=params)

    async def mark_conversation_read(self, user_id: uuid.UUID | str) -> int:
        data = await self.request("POST", f"/messages/conversation/{user_id}/read")
        return data["updated"]

    async def list_conversations(self, limit: int = 20, skip: int = 0) -> list[dict]:
        data = await self.request(
            "GET", "/messages/conversations", params={"limit": limit, "skip": skip}
        )
        return data["conversations"]

    async def unread_message_count(self) -> int:
        return (await self.request("GET", "/messages/unread-count"))["count"]

    # ── Interests ─────────────────────────────────────────────────────────

    async def send_interest(self, to_user_id: uuid.UUID | str) -> dict:
        return await self.request("POST", "/interests/send", json={"to_user_id": str(to_user_id)})

    async def respond_to_interest(self, from_user_id: uuid.UUID | str, decision: str) -> dict:
        return await self.request(
            "POST",
            "/interests/respond",
            json={"from_user_id": str(from_user_id), "decision": decision},
        )

    # ── Notifications ─────────────────────────────────────────────────────

    async def list_notifications(self, unread_only: bool = False, limit: int = 20) -> dict:
        return await self.request(
            "GET", "/notifications/", params={"unread_only": unread_only, "limit": limit}
        )

    async def unread_notification_count(self) -> int:
        return (await self.request("GET", "/notifications/unread-count"))["count"]

    async def mark_all_notifications_read(self) -> int:
        return (await self.request("PUT", "/notifications/read-all"))["updated"]
