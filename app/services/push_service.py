"""
Gahoi Sathi — Browser Push Delivery

Stores Web Push subscriptions and delivers VAPID-signed payloads through
``pywebpush``.  Delivery is best effort: a subscription that the push
service reports as gone (HTTP 404/410) is deleted, any other failure is
counted and returned to the caller.
"""

from __future__ import annotations

import asyncio
import json
import time
import uuid
from typing import Any

import structlog
from pywebpush import WebPushException, webpush
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.errors import AuthorizationError
from app.models.notification import (
    TYPE_ADMIN,
    TYPE_INTEREST_ACCEPTED,
    TYPE_INTEREST_RECEIVED,
    TYPE_MESSAGE_RECEIVED,
    TYPE_PROFILE_VIEW,
    TYPE_SHORTLIST,
)
from app.models.push_subscription import PushSubscription

logger = structlog.get_logger("sathi.push_service")

# ──────────────────────────────────────────────────────────────────────────────
# Constants
# ──────────────────────────────────────────────────────────────────────────────

_DEFAULT_ICON = "/icon-192x192.png"
_GONE_STATUSES = (404, 410)


def notification_url(notification_type: str, related_user_id: uuid.UUID | str | None) -> str:
    """Deep link opened when the user clicks a push notification."""
    related = str(related_user_id) if related_user_id else None
    if notification_type == TYPE_MESSAGE_RECEIVED:
        return f"/messages/{related}" if related else "/messages"
    if notification_type in (TYPE_INTEREST_RECEIVED, TYPE_INTEREST_ACCEPTED, TYPE_SHORTLIST):
        return f"/profiles/{related}" if related else "/profiles"
    if notification_type == TYPE_PROFILE_VIEW:
        return "/profile-views"
    if notification_type == TYPE_ADMIN:
        return "/notifications"
    return "/notifications"


def build_payload(
    title: str,
    body: str,
    *,
    url: str | None = None,
    tag: str | None = None,
    icon: str = _DEFAULT_ICON,
    data: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return {
        "title": title,
        "body": body,
        "icon": icon,
        "badge": _DEFAULT_ICON,
        "tag": tag,
        "data": {
            **(data or {}),
            "url": url or "/notifications",
            "timestamp": int(time.time() * 1000),
        },
    }


class PushService:
    """Web Push subscription store and sender."""

    def __init__(self) -> None:
        settings = get_settings()
        self.public_key = settings.VAPID_PUBLIC_KEY
        self.private_key = settings.VAPID_PRIVATE_KEY
        self.vapid_email = settings.VAPID_EMAIL
        self.enabled = settings.push_enabled
        logger.info("push_service_initialised", enabled=self.enabled)

    def get_vapid_public_key(self) -> str | None:
        return self.public_key if self.enabled else None

    # ── Subscriptions ─────────────────────────────────────────────────────

    async def subscribe(
        self,
        user_id: uuid.UUID,
        endpoint: str,
        p256dh: str,
        auth: str,
        db: AsyncSession,
        user_agent: str | None = None,
        device: str | None = None,
    ) -> PushSubscription:
        """Upsert a subscription by endpoint, re-binding it to ``user_id``."""
        result = await db.execute(
            select(PushSubscription).where(PushSubscription.endpoint == endpoint)
        )
        sub = result.scalar_one_or_none()
        if sub is None:
            sub = PushSubscription(endpoint=endpoint)
            db.add(sub)
        sub.user_id = user_id
        sub.p256dh = p256dh
        sub.auth = auth
        sub.user_agent = user_agent
        sub.device = device
        sub.is_active = True
        await db.flush()
        logger.info("push_subscribed", user_id=str(user_id), subscription_id=str(sub.id))
        return sub

    async def unsubscribe(self, user_id: uuid.UUID, endpoint: str, db: AsyncSession) -> bool:
        result = await db.execute(
            select(PushSubscription).where(PushSubscription.endpoint == endpoint)
        )
        sub = result.scalar_one_or_none()
        if sub is None:
            return False
        if sub.user_id != user_id:
            raise AuthorizationError("Not authorized to remove this subscription")
        await db.delete(sub)
        await db.flush()
        logger.info("push_unsubscribed", user_id=str(user_id))
        return True

    async def list_subscriptions(self, user_id: uuid.UUID, db: AsyncSession) -> list[PushSubscription]:
        result = await db.execute(
            select(PushSubscription)
            .where(PushSubscription.user_id == user_id, PushSubscription.is_active.is_(True))
            .order_by(PushSubscription.created_at.desc())
        )
        return list(result.scalars().all())

    async def deactivate_user_subscriptions(self, user_id: uuid.UUID, db: AsyncSession) -> int:
        result = await db.execute(
            update(PushSubscription)
            .where(PushSubscription.user_id == user_id, PushSubscription.is_active.is_(True))
            .values(is_active=False)
        )
        return result.rowcount or 0

    # ── Delivery ──────────────────────────────────────────────────────────

    def _send_one(self, subscription_info: dict, payload: dict) -> None:
        webpush(
            subscription_info=subscription_info,
            data=json.dumps(payload),
            vapid_private_key=self.private_key,
            vapid_claims={"sub": self.vapid_email},
        )

    async def send_to_user(self, user_id: uuid.UUID, payload: dict, db: AsyncSession) -> dict:
        """Send ``payload`` to every active subscription of ``user_id``.

        Returns
        -------
        dict
            ``{"sent": int, "failed": int, "errors": list[str]}``.
        """
        outcome: dict[str, Any] = {"sent": 0, "failed": 0, "errors": []}
        if not self.enabled:
            return outcome

        subscriptions = await self.list_subscriptions(user_id, db)
        for sub in subscriptions:
            try:
                await asyncio.to_thread(self._send_one, sub.as_webpush_info(), payload)
                outcome["sent"] += 1
            except WebPushException as exc:
                outcome["failed"] += 1
                status_code = getattr(exc.response, "status_code", None)
                if status_code in _GONE_STATUSES:
                    await db.execute(
                        delete(PushSubscription).where(PushSubscription.endpoint == sub.endpoint)
                    )
                    outcome["errors"].append("Subscription expired")
                    logger.info("push_subscription_expired", user_id=str(user_id))
                else:
                    outcome["errors"].append(str(exc))
                    logger.warning("push_send_failed", user_id=str(user_id), status=status_code)

        logger.info(
            "push_sent_to_user",
            user_id=str(user_id),
            sent=outcome["sent"],
            failed=outcome["failed"],
        )
        return outcome

    async def send_notification_push(self, notification, db: AsyncSession) -> dict:
        """Build the push payload for a stored notification and send it."""
        related = notification.related_user_id
        payload = build_payload(
            notification.title,
            notification.message,
            url=notification_url(notification.type, related),
            tag=notification.type,
            data={
                "notificationId": str(notification.id),
                "type": notification.type,
                "relatedUserId": str(related) if related else None,
            },
        )
        return await self.send_to_user(notification.user_id, payload, db)
