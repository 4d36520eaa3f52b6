"""Tests for profile reports and their admin review."""
import uuid

import pytest

from app.errors import ConflictError, NotFoundError, ValidationError
from app.services.report_service import ReportService


@pytest.fixture
def reports():
    return ReportService()


class TestCreateReport:
    @pytest.mark.asyncio
    async def test_report_starts_pending(self, db, reports, alice, bob):
        report = await reports.create_report(
            alice.id, bob.id, "fake-profile", db, description="Photos are of a film star"
        )

        assert report.status == "pending"
        assert report.reported_by == alice.id
        assert report.reported_user_id == bob.id
        assert report.reviewed_at is None

    @pytest.mark.asyncio
    async def test_second_report_of_same_profile_is_conflict(self, db, reports, alice, bob):
        await reports.create_report(alice.id, bob.id, "spam", db)
        with pytest.raises(ConflictError):
            await reports.create_report(alice.id, bob.id, "harassment", db)

    @pytest.mark.asyncio
    async def test_self_report_rejected(self, db, reports, alice):
        with pytest.raises(ValidationError, match="your own profile"):
            await reports.create_report(alice.id, alice.id, "spam", db)

    @pytest.mark.asyncio
    async def test_unknown_reported_user(self, db, reports, alice):
        with pytest.raises(NotFoundError):
            await reports.create_report(alice.id, uuid.uuid4(), "spam", db)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "reason, description",
        [("rude", None), ("other", "x" * 501)],
    )
    async def test_invalid_input(self, db, reports, alice, bob, reason, description):
        with pytest.raises(ValidationError):
            await reports.create_report(alice.id, bob.id, reason, db, description=description)


class TestReview:
    @pytest.mark.asyncio
    async def test_update_status_stamps_reviewer(self, db, reports, alice, bob, make_user):
        admin = await make_user(name="Admin", is_admin=True)
        report = await reports.create_report(alice.id, bob.id, "spam", db)

        updated = await reports.update_status(
            report.id, "resolved", admin, db, admin_notes="Profile removed"
        )

        assert updated.status == "resolved"
        assert updated.reviewed_by == admin.id
        assert updated.reviewed_at is not None
        assert updated.admin_notes == "Profile removed"

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, db, reports, alice, bob):
        report = await reports.create_report(alice.id, bob.id, "spam", db)
        with pytest.raises(ValidationError):
            await reports.update_status(report.id, "escalated", alice, db)

    @pytest.mark.asyncio
    async def test_missing_report(self, db, reports, alice):
        with pytest.raises(NotFoundError):
            await reports.get_report(uuid.uuid4(), db)

    @pytest.mark.asyncio
    async def test_list_paginates_and_filters(self, db, reports, alice, bob, make_user):
        carol = await make_user(name="Carol")
        first = await reports.create_report(alice.id, bob.id, "spam", db)
        await reports.create_report(carol.id, bob.id, "fake-profile", db)
        await reports.create_report(bob.id, carol.id, "other", db)
        await reports.update_status(first.id, "dismissed", carol, db)

        page = await reports.list_reports(db, page=1, limit=2)
        assert len(page["reports"]) == 2
        assert page["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

        pending = await reports.list_reports(db, status="pending")
        assert pending["pagination"]["total"] == 2

        against_bob = await reports.reports_for_user(bob.id, db)
        assert {r.reported_by for r in against_bob} == {alice.id, carol.id}
