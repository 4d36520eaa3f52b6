"""
Gahoi Sathi — Conversation timeline

The API returns a conversation newest-first.  ``build_timeline`` turns a
page into what a chat view renders: oldest-first messages grouped by
calendar day, each flagged ``is_mine`` and ``show_time``.  A timestamp is
hidden when the next message comes from the same sender within five
minutes.

``ConversationView`` keeps one open conversation fresh with a 5 s poller
and marks incoming messages read.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any

import structlog

from app.client.api import SathiClient
from app.client.polling import CONVERSATION_POLL_SECONDS, Poller

logger = structlog.get_logger("sathi.client.conversation")

TIMESTAMP_COLLAPSE = timedelta(minutes=5)


@dataclass
class TimelineEntry:
    message: dict
    sent_at: datetime
    is_mine: bool
    show_time: bool


@dataclass
class DayGroup:
    day: date
    label: str
    entries: list[TimelineEntry] = field(default_factory=list)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def day_label(day: date, today: date) -> str:
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return day.strftime("%d %b %Y")


def build_timeline(
    messages: list[dict],
    current_user_id: uuid.UUID | str,
    now: datetime | None = None,
) -> list[DayGroup]:
    """Group a newest-first message page into day buckets.

    Parameters
    ----------
    messages:
        Message dicts as returned by ``GET /messages/conversation/{id}``.
    current_user_id:
        The viewer; decides ``is_mine``.
    now:
        Reference time for the "Today" / "Yesterday" labels.
    """
    now = now or datetime.now(timezone.utc)
    me = str(current_user_id)
    ordered = list(reversed(messages))
    stamps = [_parse_timestamp(m["created_at"]) for m in ordered]

    groups: list[DayGroup] = []
    for i, message in enumerate(ordered):
        sent_at = stamps[i]
        show_time = True
        if i + 1 < len(ordered):
            nxt = ordered[i + 1]
            same_sender = str(nxt["sender_id"]) == str(message["sender_id"])
            show_time = not (same_sender and stamps[i + 1] - sent_at <= TIMESTAMP_COLLAPSE)

        day = sent_at.astimezone(now.tzinfo).date()
        if not groups or groups[-1].day != day:
            groups.append(DayGroup(day=day, label=day_label(day, now.date())))
        groups[-1].entries.append(
            TimelineEntry(
                message=message,
                sent_at=sent_at,
                is_mine=str(message["sender_id"]) == me,
                show_time=show_time,
            )
        )
    return groups


class ConversationView:
    """One open conversation, refreshed on a timer.

    ``open()`` loads immediately and starts polling; ``close()`` must be
    called on teardown to cancel the poller.
    """

    def __init__(
        self,
        client: SathiClient,
        current_user_id: uuid.UUID | str,
        other_user_id: uuid.UUID | str,
        interval: float = CONVERSATION_POLL_SECONDS,
    ) -> None:
        self.client = client
        self.current_user_id = str(current_user_id)
        self.other_user_id = str(other_user_id)
        self.messages: list[dict] = []
        self.has_more = False
        self.timeline: list[DayGroup] = []
        self._poller = Poller(self.refresh, interval, name=f"conversation:{self.other_user_id}")

    @property
    def polling(self) -> bool:
        return self._poller.running

    async def refresh(self) -> list[DayGroup]:
        page = await self.client.get_conversation(self.other_user_id)
        self.messages = page["messages"]
        self.has_more = page["has_more"]
        self.timeline = build_timeline(self.messages, self.current_user_id)

        if any(
            not m["is_read"] and str(m["receiver_id"]) == self.current_user_id
            for m in self.messages
        ):
            await self.client.mark_conversation_read(self.other_user_id)
        return self.timeline

    async def send(self, content: str) -> dict:
        message = await self.client.send_message(self.other_user_id, content)
        await self.refresh()
        return message

    async def open(self) -> None:
        await self.refresh()
        self._poller.immediate = False
        self._poller.start()

    async def close(self) -> None:
        await self._poller.stop()
        logger.debug("conversation_closed", other_user_id=self.other_user_id)

    async def __aenter__(self) -> "ConversationView":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
