"""Tests for Web Push subscriptions and delivery."""
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from pywebpush import WebPushException
from sqlalchemy import select

from app.errors import AuthorizationError
from app.models.push_subscription import PushSubscription
from app.services.push_service import PushService, build_payload, notification_url


@pytest.fixture
def push():
    service = PushService()
    service.enabled = True
    service.private_key = "test-private-key"
    return service


async def _subscribe(push, db, user, endpoint="https://push.example.com/abc"):
    return await push.subscribe(user.id, endpoint, "p256dh-key", "auth-key", db, device="android")


class TestPayload:
    def test_deep_links(self):
        assert notification_url("message_received", "u1") == "/messages/u1"
        assert notification_url("interest_received", "u1") == "/profiles/u1"
        assert notification_url("shortlist", "u1") == "/profiles/u1"
        assert notification_url("profile_view", "u1") == "/profile-views"
        assert notification_url("admin", None) == "/notifications"

    def test_payload_shape(self):
        payload = build_payload("Hi", "Body", url="/messages/u1", tag="message_received")
        assert payload["title"] == "Hi"
        assert payload["data"]["url"] == "/messages/u1"
        assert isinstance(payload["data"]["timestamp"], int)


class TestSubscriptions:
    @pytest.mark.asyncio
    async def test_subscribe_upserts_by_endpoint(self, db, push, alice, bob):
        await _subscribe(push, db, alice)
        await _subscribe(push, db, bob)

        subs = (await db.execute(select(PushSubscription))).scalars().all()
        assert len(subs) == 1
        assert subs[0].user_id == bob.id

    @pytest.mark.asyncio
    async def test_cannot_unsubscribe_someone_else(self, db, push, alice, bob):
        await _subscribe(push, db, alice)
        with pytest.raises(AuthorizationError):
            await push.unsubscribe(bob.id, "https://push.example.com/abc", db)
        assert await push.unsubscribe(alice.id, "https://push.example.com/abc", db) is True
        assert await push.unsubscribe(alice.id, "https://push.example.com/abc", db) is False

    @pytest.mark.asyncio
    async def test_deactivate_hides_subscriptions(self, db, push, alice):
        await _subscribe(push, db, alice)
        assert await push.deactivate_user_subscriptions(alice.id, db) == 1
        assert await push.list_subscriptions(alice.id, db) == []


class TestDelivery:
    @pytest.mark.asyncio
    async def test_disabled_service_sends_nothing(self, db, alice):
        service = PushService()
        service.enabled = False
        with patch("app.services.push_service.webpush") as webpush:
            outcome = await service.send_to_user(alice.id, {"title": "x"}, db)
        webpush.assert_not_called()
        assert outcome == {"sent": 0, "failed": 0, "errors": []}

    @pytest.mark.asyncio
    async def test_sends_to_each_active_subscription(self, db, push, alice):
        await _subscribe(push, db, alice, "https://push.example.com/1")
        await _subscribe(push, db, alice, "https://push.example.com/2")
        with patch("app.services.push_service.webpush") as webpush:
            outcome = await push.send_to_user(alice.id, {"title": "x"}, db)
        assert webpush.call_count == 2
        assert outcome["sent"] == 2

    @pytest.mark.asyncio
    async def test_gone_subscription_is_deleted(self, db, push, alice):
        await _subscribe(push, db, alice)
        gone = WebPushException("Push failed: 410 Gone", response=SimpleNamespace(status_code=410))
        with patch("app.services.push_service.webpush", side_effect=gone):
            outcome = await push.send_to_user(alice.id, {"title": "x"}, db)

        assert outcome["failed"] == 1
        assert outcome["errors"] == ["Subscription expired"]
        assert (await db.execute(select(PushSubscription))).first() is None

    @pytest.mark.asyncio
    async def test_other_failures_keep_subscription(self, db, push, alice):
        await _subscribe(push, db, alice)
        error = WebPushException("Push failed: 500", response=SimpleNamespace(status_code=500))
        with patch("app.services.push_service.webpush", side_effect=error):
            outcome = await push.send_to_user(alice.id, {"title": "x"}, db)

        assert outcome["failed"] == 1
        assert len(await push.list_subscriptions(alice.id, db)) == 1
