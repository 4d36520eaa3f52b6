"""Tests for the interest lifecycle."""
import uuid

import pytest
from sqlalchemy import select

from app.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.models.interest import Interest
from app.models.notification import Notification


async def _notifications(db, user_id):
    result = await db.execute(select(Notification).where(Notification.user_id == user_id))
    return list(result.scalars().all())


class TestSendInterest:
    @pytest.mark.asyncio
    async def test_creates_pending_interest_and_notifies(self, db, interest_service, alice, bob, hub, commit):
        interest = await interest_service.send_interest(alice.id, bob.id, db)

        assert interest.status == "pending"
        assert interest.from_user_id == alice.id
        notes = await _notifications(db, bob.id)
        assert len(notes) == 1
        assert notes[0].type == "interest_received"
        assert notes[0].title == "Interest Received"
        assert notes[0].message == "Alice sent you an interest"
        assert notes[0].related_id == interest.id
        assert hub.events == []
        await commit()
        assert hub.events[0][:2] == (str(bob.id), "notification")

    @pytest.mark.asyncio
    async def test_self_interest_rejected(self, db, interest_service, alice):
        with pytest.raises(ValidationError):
            await interest_service.send_interest(alice.id, alice.id, db)

    @pytest.mark.asyncio
    async def test_duplicate_is_conflict(self, db, interest_service, alice, bob):
        await interest_service.send_interest(alice.id, bob.id, db)
        with pytest.raises(ConflictError):
            await interest_service.send_interest(alice.id, bob.id, db)

    @pytest.mark.asyncio
    async def test_reverse_direction_is_separate(self, db, interest_service, alice, bob):
        await interest_service.send_interest(alice.id, bob.id, db)
        reverse = await interest_service.send_interest(bob.id, alice.id, db)
        assert reverse.from_user_id == bob.id

    @pytest.mark.asyncio
    async def test_missing_recipient(self, db, interest_service, alice):
        with pytest.raises(NotFoundError):
            await interest_service.send_interest(alice.id, uuid.uuid4(), db)

    @pytest.mark.asyncio
    async def test_recipient_not_accepting(self, db, interest_service, alice, make_user):
        private = await make_user(accepts_interests=False)
        with pytest.raises(ConflictError):
            await interest_service.send_interest(alice.id, private.id, db)


class TestRespond:
    @pytest.mark.asyncio
    async def test_accept_notifies_sender(self, db, interest_service, alice, bob):
        await interest_service.send_interest(alice.id, bob.id, db)
        interest = await interest_service.respond_to_interest(bob.id, alice.id, "accept", db)

        assert interest.status == "accepted"
        assert interest.responded_at is not None
        notes = await _notifications(db, alice.id)
        assert [n.type for n in notes] == ["interest_accepted"]
        assert notes[0].message == "Bob accepted your interest"

    @pytest.mark.asyncio
    async def test_reject_does_not_notify(self, db, interest_service, alice, bob):
        await interest_service.send_interest(alice.id, bob.id, db)
        interest = await interest_service.respond_to_interest(bob.id, alice.id, "reject", db)

        assert interest.status == "rejected"
        assert await _notifications(db, alice.id) == []

    @pytest.mark.asyncio
    async def test_decided_interest_is_terminal(self, db, interest_service, alice, bob):
        await interest_service.send_interest(alice.id, bob.id, db)
        await interest_service.respond_to_interest(bob.id, alice.id, "reject", db)
        with pytest.raises(NotFoundError, match="No pending interest"):
            await interest_service.respond_to_interest(bob.id, alice.id, "accept", db)

        stored = (await db.execute(select(Interest))).scalar_one()
        assert stored.status == "rejected"

    @pytest.mark.asyncio
    async def test_only_recipient_may_respond(self, db, interest_service, alice, bob):
        interest = await interest_service.send_interest(alice.id, bob.id, db)
        with pytest.raises(AuthorizationError):
            await interest_service.respond_by_id(interest.id, alice.id, "accept", db)

    @pytest.mark.asyncio
    async def test_unknown_decision(self, db, interest_service, alice, bob):
        await interest_service.send_interest(alice.id, bob.id, db)
        with pytest.raises(ValidationError):
            await interest_service.respond_to_interest(bob.id, alice.id, "maybe", db)

    @pytest.mark.asyncio
    async def test_respond_without_interest(self, db, interest_service, alice, bob):
        with pytest.raises(NotFoundError):
            await interest_service.respond_to_interest(bob.id, alice.id, "accept", db)


class TestListing:
    @pytest.mark.asyncio
    async def test_incoming_only_lists_pending(self, db, interest_service, alice, bob, make_user):
        carol = await make_user(name="Carol")
        await interest_service.send_interest(alice.id, bob.id, db)
        await interest_service.send_interest(carol.id, bob.id, db)
        await interest_service.respond_to_interest(bob.id, carol.id, "accept", db)

        incoming = await interest_service.list_incoming(bob.id, db)
        assert [i.from_user_id for i in incoming] == [alice.id]

        accepted = await interest_service.list_accepted(carol.id, db)
        assert len(accepted) == 1
        assert len(await interest_service.list_outgoing(alice.id, db)) == 1

    @pytest.mark.asyncio
    async def test_status_reports_both_directions(self, db, interest_service, alice, bob):
        sent = await interest_service.send_interest(alice.id, bob.id, db)
        status = await interest_service.get_status(alice.id, bob.id, db)
        assert status["sent"].id == sent.id
        assert status["received"] is None
