"""initial_schema

Revision ID: 3f9c1a7e2b04
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f9c1a7e2b04"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


approval_status_enum = sa.Enum(
    "draft",
    "pending_approval",
    "approved",
    "rejected",
    "archived",
    name="approval_status_enum",
)
enrollment_status_enum = sa.Enum(
    "active", "completed", "paused", name="enrollment_status_enum"
)
payment_source_enum = sa.Enum(
    "direct", "influencer", "coin", name="payment_source_enum"
)
credit_transaction_type_enum = sa.Enum(
    "milestone_reward", "sprint_purchase", name="credit_transaction_type_enum"
)
credit_transaction_direction_enum = sa.Enum(
    "credit", "debit", name="credit_transaction_direction_enum"
)
notification_type_enum = sa.Enum(
    "payment_success",
    "sprint_submitted",
    "sprint_approved",
    "sprint_changes_requested",
    "sprint_completed",
    "sprint_nudge",
    "coach_feedback",
    "milestone_claimed",
    name="notification_type_enum",
)
payment_status_enum = sa.Enum(
    "initiated", "processing", "success", "failed", name="payment_status_enum"
)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema - Create sprint registry, enrollment, wallet and payment tables."""

    op.create_table(
        "participants",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("enrolled_sprint_ids", sa.JSON(), nullable=False),
        sa.Column("claimed_milestone_ids", sa.JSON(), nullable=False),
        sa.Column("wallet_balance", sa.Integer(), nullable=False),
        sa.Column("people_helped", sa.Integer(), nullable=False),
        sa.Column("streak", sa.Integer(), nullable=False),
        sa.Column("current_stage", sa.String(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "wallet_balance >= 0", name="ck_participant_wallet_balance_non_negative"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_participants_email", "participants", ["email"])

    op.create_table(
        "sprints",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("coach_id", sa.String(), nullable=False),
        sa.Column("approval_status", approval_status_enum, nullable=False),
        sa.Column("published", sa.Boolean(), nullable=False),
        sa.Column("deleted", sa.Boolean(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("transformation", sa.Text(), nullable=True),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("difficulty", sa.String(), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("pricing_type", sa.String(), nullable=False),
        sa.Column("point_cost", sa.Integer(), nullable=False),
        sa.Column("cover_image_url", sa.String(), nullable=True),
        sa.Column("outcomes", sa.JSON(), nullable=False),
        sa.Column("for_who", sa.JSON(), nullable=False),
        sa.Column("not_for_who", sa.JSON(), nullable=False),
        sa.Column("method_snapshot", sa.JSON(), nullable=False),
        sa.Column("protocol", sa.String(), nullable=True),
        sa.Column("outcome_tag", sa.String(), nullable=True),
        sa.Column("outcome_statement", sa.Text(), nullable=True),
        sa.Column("sprint_type", sa.String(), nullable=True),
        sa.Column("daily_content", sa.JSON(), nullable=False),
        sa.Column("pending_changes", sa.JSON(), nullable=True),
        sa.Column("review_feedback", sa.JSON(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sprints_coach_id", "sprints", ["coach_id"])
    op.create_index("ix_sprints_approval_status", "sprints", ["approval_status"])
    op.create_index("ix_sprints_category", "sprints", ["category"])

    op.create_table(
        "orchestration_mappings",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("assignments", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("updated_by", sa.String(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "orchestrator_logs",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("trigger", sa.String(), nullable=False),
        sa.Column("input_focus", sa.String(), nullable=True),
        sa.Column("resolved_sprint_id", sa.String(), nullable=True),
        sa.Column("slot_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_orchestrator_logs_user_id", "orchestrator_logs", ["user_id"])

    op.create_table(
        "enrollments",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("sprint_id", sa.String(), nullable=False),
        sa.Column("participant_id", sa.String(), nullable=False),
        sa.Column("coach_id", sa.String(), nullable=False),
        sa.Column("status", enrollment_status_enum, nullable=False),
        sa.Column("price_paid", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(), nullable=False),
        sa.Column("payment_source", payment_source_enum, nullable=False),
        sa.Column("referral_source", sa.String(), nullable=True),
        sa.Column("progress", sa.JSON(), nullable=False),
        sa.Column("sent_nudges", sa.JSON(), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_activity_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_enrollments_sprint_id", "enrollments", ["sprint_id"])
    op.create_index("ix_enrollments_participant_id", "enrollments", ["participant_id"])
    op.create_index("ix_enrollments_coach_id", "enrollments", ["coach_id"])

    op.create_table(
        "credit_transactions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("participant_id", sa.String(), nullable=False),
        sa.Column("idempotency_key", sa.String(), nullable=False),
        sa.Column("transaction_type", credit_transaction_type_enum, nullable=False),
        sa.Column("direction", credit_transaction_direction_enum, nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("balance_before", sa.Integer(), nullable=False),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("reference_type", sa.String(), nullable=True),
        sa.Column("reference_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount > 0", name="ck_credit_transaction_amount_positive"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_credit_transactions_participant_id",
        "credit_transactions",
        ["participant_id"],
    )
    op.create_index(
        "ix_credit_transactions_idempotency_key",
        "credit_transactions",
        ["idempotency_key"],
        unique=True,
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("type", notification_type_enum, nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("action_url", sa.String(), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])

    op.create_table(
        "payments",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("sprint_id", sa.String(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(length=8), nullable=False),
        sa.Column("status", payment_status_enum, nullable=False),
        sa.Column("failure_reason", sa.Text(), nullable=True),
        sa.Column("referral_source", sa.String(), nullable=True),
        sa.Column("provider", sa.String(length=32), nullable=True),
        sa.Column("provider_transaction_id", sa.String(length=128), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payments_user_id", "payments", ["user_id"])
    op.create_index("ix_payments_sprint_id", "payments", ["sprint_id"])
    op.create_index(
        "ix_payments_provider_transaction_id", "payments", ["provider_transaction_id"]
    )


def downgrade() -> None:
    """Downgrade schema - Drop all tables and enum types."""
    for table in (
        "payments",
        "notifications",
        "credit_transactions",
        "enrollments",
        "orchestrator_logs",
        "orchestration_mappings",
        "sprints",
        "participants",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum_type in (
        payment_status_enum,
        notification_type_enum,
        credit_transaction_direction_enum,
        credit_transaction_type_enum,
        payment_source_enum,
        enrollment_status_enum,
        approval_status_enum,
    ):
        enum_type.drop(bind, checkfirst=True)
