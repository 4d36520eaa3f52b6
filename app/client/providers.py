"""
Gahoi Sathi — Client providers

Explicit, owned replacements for app-wide client state:

* ``LanguageProvider`` holds the selected language and translates errors.
* ``NotificationProvider`` keeps the unread badges fresh on a 30 s poller
  and owns a toast queue with auto-dismissal.

Both have ``start()`` / ``close()`` lifecycles and nothing is global.
"""

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass
from typing import Callable, Literal

import structlog

from app.client.api import SathiClient
from app.client.errors import SUPPORTED_LANGUAGES, get_error_message
from app.client.polling import INBOX_POLL_SECONDS, Poller

logger = structlog.get_logger("sathi.client.providers")

ToastType = Literal["success", "error", "info", "warning"]

DEFAULT_TOAST_SECONDS = 5.0


class LanguageProvider:
    def __init__(self, language: str = "en") -> None:
        self._listeners: list[Callable[[str], None]] = []
        self.language = language if language in SUPPORTED_LANGUAGES else "en"

    def set_language(self, language: str) -> None:
        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language: {language}")
        if language == self.language:
            return
        self.language = language
        for listener in list(self._listeners):
            listener(language)

    def subscribe(self, listener: Callable[[str], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def error_message(self, error: Exception) -> str:
        return get_error_message(error, self.language)

    def close(self) -> None:
        self._listeners.clear()


@dataclass
class Toast:
    id: int
    type: ToastType
    message: str
    duration: float


class NotificationProvider:
    """Unread badges plus a toast queue.

    Toasts with a positive ``duration`` are removed after that many
    seconds; ``duration=0`` keeps them until dismissed.
    """

    def __init__(
        self,
        client: SathiClient,
        language: LanguageProvider | None = None,
        interval: float = INBOX_POLL_SECONDS,
    ) -> None:
        self.client = client
        self.language = language or LanguageProvider()
        self.unread_notifications = 0
        self.unread_messages = 0
        self.toasts: list[Toast] = []
        self._ids = itertools.count(1)
        self._timers: dict[int, asyncio.TimerHandle] = {}
        self._poller = Poller(self.refresh_counts, interval, name="unread-badges")

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def start(self) -> None:
        self._poller.start()

    async def close(self) -> None:
        await self._poller.stop()
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
        self.toasts.clear()

    async def __aenter__(self) -> "NotificationProvider":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ── Badges ────────────────────────────────────────────────────────────

    async def refresh_counts(self) -> None:
        self.unread_notifications = await self.client.unread_notification_count()
        self.unread_messages = await self.client.unread_message_count()

    # ── Toasts ────────────────────────────────────────────────────────────

    def show(
        self,
        message: str,
        type: ToastType = "info",
        duration: float = DEFAULT_TOAST_SECONDS,
    ) -> Toast:
        toast = Toast(id=next(self._ids), type=type, message=message, duration=duration)
        self.toasts.append(toast)
        if duration > 0:
            loop = asyncio.get_running_loop()
            self._timers[toast.id] = loop.call_later(duration, self.dismiss, toast.id)
        return toast

    def show_error(self, error: Exception, duration: float = DEFAULT_TOAST_SECONDS) -> Toast:
        return self.show(self.language.error_message(error), "error", duration)

    def dismiss(self, toast_id: int) -> None:
        handle = self._timers.pop(toast_id, None)
        if handle is not None:
            handle.cancel()
        self.toasts = [t for t in self.toasts if t.id != toast_id]
