"""Shortlists and profile reports.

Revision ID: 002_shortlists_reports
Revises: 001_initial
Create Date: 2026-02-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "002_shortlists_reports"
down_revision: Union[str, None] = "001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _user_fk(name: str, ondelete: str = "CASCADE", nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        "shortlists",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _user_fk("user_id"),
        _user_fk("shortlisted_user_id"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.UniqueConstraint("user_id", "shortlisted_user_id", name="uq_shortlist_pair"),
    )
    op.create_index("ix_shortlists_user_id", "shortlists", ["user_id"])
    op.create_index("ix_shortlists_shortlisted_user_id", "shortlists", ["shortlisted_user_id"])

    op.create_table(
        "profile_reports",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _user_fk("reported_user_id"),
        _user_fk("reported_by"),
        sa.Column("reason", sa.String, nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("status", sa.String, server_default="pending", nullable=False),
        sa.Column("admin_notes", sa.String(1000), nullable=True),
        _user_fk("reviewed_by", ondelete="SET NULL", nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.UniqueConstraint("reported_user_id", "reported_by", name="uq_profile_report_pair"),
    )
    op.create_index("ix_profile_reports_reported_user_id", "profile_reports", ["reported_user_id"])
    op.create_index("ix_profile_reports_reported_by", "profile_reports", ["reported_by"])
    op.create_index(
        "ix_profile_reports_status_created", "profile_reports", ["status", "created_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_profile_reports_status_created", table_name="profile_reports")
    op.drop_table("profile_reports")
    op.drop_table("shortlists")
