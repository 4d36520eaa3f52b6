"""Initial schema: all 10 Gahoi Sathi tables.

Revision ID: 001_initial
Revises:
Create Date: 2026-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=False,
    )


def _user_fk(name: str, ondelete: str = "CASCADE", nullable: bool = False) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    # ── 1. users ────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String, unique=True, index=True, nullable=True),
        sa.Column("phone", sa.String, unique=True, index=True, nullable=True),
        sa.Column("password_hash", sa.String, nullable=True),
        sa.Column("name", sa.String, nullable=False),
        sa.Column("gender", sa.String, nullable=False),
        sa.Column("date_of_birth", sa.Date, nullable=True),
        sa.Column("age", sa.Integer, nullable=True, index=True),
        sa.Column(
            "marital_status", sa.String, server_default="unmarried", nullable=False
        ),
        sa.Column("height_cm", sa.Integer, nullable=True),
        sa.Column("city", sa.String, nullable=True, index=True),
        sa.Column("state", sa.String, nullable=True),
        sa.Column("country", sa.String, server_default="India", nullable=False),
        sa.Column("religion", sa.String, nullable=True),
        sa.Column("caste", sa.String, nullable=True),
        sa.Column("mother_tongue", sa.String, nullable=True),
        sa.Column("education", sa.String, nullable=True),
        sa.Column("occupation", sa.String, nullable=True),
        sa.Column("annual_income", sa.Integer, nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column(
            "photos",
            postgresql.JSONB,
            nullable=True,
            comment="Array of {url, is_primary, order}",
        ),
        sa.Column("preferences", postgresql.JSONB, nullable=True),
        sa.Column("horoscope_details", postgresql.JSONB, nullable=True),
        sa.Column("accepts_interests", sa.Boolean, server_default="true", nullable=False),
        sa.Column("accepts_messages", sa.Boolean, server_default="true", nullable=False),
        sa.Column(
            "is_profile_complete", sa.Boolean, server_default="false", nullable=False
        ),
        sa.Column("is_active", sa.Boolean, server_default="true", nullable=False),
        sa.Column("is_admin", sa.Boolean, server_default="false", nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    # ── 2. sessions ─────────────────────────────────────────────────
    op.create_table(
        "sessions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _user_fk("user_id"),
        sa.Column("token_hash", sa.String, unique=True, nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean, server_default="true", nullable=False),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_sessions_user_id", "sessions", ["user_id"])

    # ── 3. interests ────────────────────────────────────────────────
    op.create_table(
        "interests",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _user_fk("from_user_id"),
        _user_fk("to_user_id"),
        sa.Column("status", sa.String, server_default="pending", nullable=False),
        _created_at(),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("from_user_id", "to_user_id", name="uq_interest_pair"),
    )
    op.create_index("ix_interests_from_user_id", "interests", ["from_user_id"])
    op.create_index("ix_interests_to_user_id", "interests", ["to_user_id"])
    op.create_index("ix_interests_to_user_status", "interests", ["to_user_id", "status"])

    # ── 4. messages ─────────────────────────────────────────────────
    op.create_table(
        "messages",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _user_fk("sender_id"),
        _user_fk("receiver_id"),
        sa.Column("conversation_id", sa.String, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("is_read", sa.Boolean, server_default="false", nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("ix_messages_sender_id", "messages", ["sender_id"])
    op.create_index("ix_messages_receiver_id", "messages", ["receiver_id"])
    op.create_index(
        "ix_messages_conversation_created", "messages", ["conversation_id", "created_at"]
    )
    op.create_index("ix_messages_receiver_unread", "messages", ["receiver_id", "is_read"])

    # ── 5. notifications ────────────────────────────────────────────
    op.create_table(
        "notifications",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _user_fk("user_id"),
        sa.Column("type", sa.String, nullable=False, index=True),
        sa.Column("title", sa.String, nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        _user_fk("related_user_id", ondelete="SET NULL", nullable=True),
        sa.Column("related_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("is_read", sa.Boolean, server_default="false", nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "is_admin_notification", sa.Boolean, server_default="false", nullable=False
        ),
        sa.Column("metadata", postgresql.JSONB, nullable=True),
        _created_at(),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index(
        "ix_notifications_user_read_created",
        "notifications",
        ["user_id", "is_read", "created_at"],
    )

    # ── 6. profile_views ────────────────────────────────────────────
    op.create_table(
        "profile_views",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _user_fk("viewer_id"),
        _user_fk("viewed_user_id"),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("has_messaged", sa.Boolean, server_default="false", nullable=False),
    )
    op.create_index(
        "ix_profile_views_pair_viewed_at",
        "profile_views",
        ["viewer_id", "viewed_user_id", "viewed_at"],
    )
    op.create_index(
        "ix_profile_views_viewed_user", "profile_views", ["viewed_user_id", "viewed_at"]
    )

    # ── 7. push_subscriptions ───────────────────────────────────────
    op.create_table(
        "push_subscriptions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _user_fk("user_id"),
        sa.Column("endpoint", sa.Text, unique=True, nullable=False),
        sa.Column("p256dh", sa.String, nullable=False),
        sa.Column("auth", sa.String, nullable=False),
        sa.Column("user_agent", sa.String, nullable=True),
        sa.Column("device", sa.String, nullable=True),
        sa.Column("is_active", sa.Boolean, server_default="true", nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_push_subscriptions_user_id", "push_subscriptions", ["user_id"])

    # ── 8. questions / answers (community Q&A) ──────────────────────
    op.create_table(
        "questions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        _user_fk("author_id"),
        sa.Column("category", sa.String, server_default="general", nullable=False),
        sa.Column("tags", postgresql.JSONB, nullable=True),
        sa.Column("upvotes", sa.Integer, server_default="0", nullable=False),
        sa.Column("downvotes", sa.Integer, server_default="0", nullable=False),
        sa.Column("views", sa.Integer, server_default="0", nullable=False),
        sa.Column("answers_count", sa.Integer, server_default="0", nullable=False),
        sa.Column("is_solved", sa.Boolean, server_default="false", nullable=False),
        sa.Column("solved_answer_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("is_active", sa.Boolean, server_default="true", nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_questions_author_id", "questions", ["author_id"])
    op.create_index("ix_questions_category", "questions", ["category"])

    op.create_table(
        "answers",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "question_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("questions.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _user_fk("author_id"),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("upvotes", sa.Integer, server_default="0", nullable=False),
        sa.Column("downvotes", sa.Integer, server_default="0", nullable=False),
        sa.Column("is_accepted", sa.Boolean, server_default="false", nullable=False),
        sa.Column("is_active", sa.Boolean, server_default="true", nullable=False),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_answers_question_id", "answers", ["question_id"])
    op.create_index("ix_answers_author_id", "answers", ["author_id"])

    # ── 9. votes ────────────────────────────────────────────────────
    op.create_table(
        "votes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        _user_fk("user_id"),
        sa.Column("target_type", sa.String, nullable=False),
        sa.Column("target_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("vote_type", sa.String, nullable=False),
        _created_at(),
        sa.UniqueConstraint("user_id", "target_type", "target_id", name="uq_vote_target"),
    )
    op.create_index("ix_votes_user_id", "votes", ["user_id"])


def downgrade() -> None:
    # Drop in reverse order (children / dependents first).
    op.drop_table("votes")
    op.drop_table("answers")
    op.drop_table("questions")
    op.drop_table("push_subscriptions")

    op.drop_index("ix_profile_views_viewed_user", table_name="profile_views")
    op.drop_index("ix_profile_views_pair_viewed_at", table_name="profile_views")
    op.drop_table("profile_views")

    op.drop_index("ix_notifications_user_read_created", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_messages_receiver_unread", table_name="messages")
    op.drop_index("ix_messages_conversation_created", table_name="messages")
    op.drop_table("messages")

    op.drop_index("ix_interests_to_user_status", table_name="interests")
    op.drop_table("interests")
    op.drop_table("sessions")
    op.drop_table("users")
