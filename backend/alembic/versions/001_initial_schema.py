"""Initial schema — users, content progress, portfolio, goals, notes, logs.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(),
    )


def _updated_at() -> sa.Column:
    return sa.Column(
        "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(),
    )


def _user_fk(nullable: bool = False, ondelete: str = "CASCADE") -> sa.Column:
    return sa.Column(
        "user_id", UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete=ondelete), nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(254), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(100), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        _created_at(),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("two_factor_enabled", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("two_factor_secret", sa.String(64), nullable=True),
        sa.Column("two_factor_backup_codes", sa.JSON, nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "invitation_codes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        _created_at(),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "used_by", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
        ),
    )
    op.create_index("ix_invitation_codes_code", "invitation_codes", ["code"])

    op.create_table(
        "user_profiles",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True,
        ),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("knowledge_level", sa.String(50), nullable=True),
        sa.Column("main_goal", sa.String(100), nullable=True),
        sa.Column("risk_tolerance", sa.String(50), nullable=True),
        sa.Column("has_debt", sa.Boolean, nullable=True),
        sa.Column("has_emergency_fund", sa.Boolean, nullable=True),
        sa.Column("has_investments", sa.Boolean, nullable=True),
        sa.Column("income_range", sa.String(50), nullable=True),
        sa.Column("expense_range", sa.String(50), nullable=True),
        sa.Column("investment_horizon", sa.String(50), nullable=True),
        sa.Column("questionnaire_completed", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("questionnaire_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("preferred_currency", sa.String(3), nullable=False, server_default="ARS"),
        _updated_at(),
    )

    op.create_table(
        "lesson_progress",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _user_fk(),
        sa.Column("course_slug", sa.String(200), nullable=False),
        sa.Column("lesson_slug", sa.String(200), nullable=False),
        sa.Column("completed", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("time_spent_seconds", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_accessed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("view_count", sa.Integer, nullable=False, server_default="1"),
        sa.Column("progress_percentage", sa.Integer, nullable=False, server_default="0"),
        sa.UniqueConstraint(
            "user_id", "course_slug", "lesson_slug", name="uq_lesson_progress_user_lesson",
        ),
    )
    op.create_index("ix_lesson_progress_user_id", "lesson_progress", ["user_id"])

    op.create_table(
        "tip_views",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _user_fk(),
        sa.Column("tip_id", sa.String(50), nullable=False),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("saved", sa.Boolean, nullable=False, server_default="false"),
        sa.UniqueConstraint("user_id", "tip_id", name="uq_tip_views_user_tip"),
    )
    op.create_index("ix_tip_views_user_id", "tip_views", ["user_id"])

    op.create_table(
        "portfolio_assets",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _user_fk(),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("ticker", sa.String(20), nullable=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Float, nullable=False),
        sa.Column("purchase_price", sa.Float, nullable=False),
        sa.Column("purchase_date", sa.Date, nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("current_price", sa.Float, nullable=True),
        sa.Column("current_price_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("price_source", sa.String(30), nullable=False, server_default="manual"),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("dividend_yield", sa.Float, nullable=True),
        sa.Column("dividend_frequency", sa.String(20), nullable=True),
        sa.Column("next_dividend_date", sa.Date, nullable=True),
        sa.Column("last_dividend_amount", sa.Float, nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_portfolio_assets_user_id", "portfolio_assets", ["user_id"])

    op.create_table(
        "dividend_payments",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "asset_id", UUID(as_uuid=True),
            sa.ForeignKey("portfolio_assets.id", ondelete="CASCADE"), nullable=False,
        ),
        _user_fk(),
        sa.Column("payment_date", sa.Date, nullable=False),
        sa.Column("amount_per_share", sa.Float, nullable=False),
        sa.Column("total_amount", sa.Float, nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("payment_type", sa.String(10), nullable=False, server_default="cash"),
        sa.Column("shares_received", sa.Float, nullable=True),
        sa.Column("reinvested", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("withholding_tax", sa.Float, nullable=False, server_default="0"),
        sa.Column("notes", sa.Text, nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_dividend_payments_asset_id", "dividend_payments", ["asset_id"])
    op.create_index("ix_dividend_payments_user_id", "dividend_payments", ["user_id"])

    op.create_table(
        "portfolio_performance_snapshots",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _user_fk(),
        sa.Column("snapshot_date", sa.Date, nullable=False),
        sa.Column("total_value", sa.Float, nullable=False, server_default="0"),
        sa.Column("total_cost", sa.Float, nullable=False, server_default="0"),
        sa.Column("total_gain_loss", sa.Float, nullable=False, server_default="0"),
        sa.Column("gain_loss_percentage", sa.Float, nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="ARS"),
        sa.Column("asset_breakdown", sa.JSON, nullable=False),
        _created_at(),
        sa.UniqueConstraint("user_id", "snapshot_date", name="uq_snapshot_user_date"),
    )
    op.create_index(
        "ix_portfolio_performance_snapshots_user_id",
        "portfolio_performance_snapshots", ["user_id"],
    )

    op.create_table(
        "savings_goals",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _user_fk(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("target_amount", sa.Float, nullable=False),
        sa.Column("current_amount", sa.Float, nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="ARS"),
        sa.Column("target_date", sa.Date, nullable=True),
        _created_at(),
        _updated_at(),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_savings_goals_user_id", "savings_goals", ["user_id"])

    op.create_table(
        "savings_contributions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "goal_id", UUID(as_uuid=True),
            sa.ForeignKey("savings_goals.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("amount", sa.Float, nullable=False),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        _created_at(),
    )
    op.create_index("ix_savings_contributions_goal_id", "savings_contributions", ["goal_id"])

    op.create_table(
        "notes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _user_fk(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text, nullable=False, server_default=""),
        sa.Column("tags", sa.JSON, nullable=False),
        sa.Column("linked_ticker", sa.String(20), nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index("ix_notes_user_id", "notes", ["user_id"])

    op.create_table(
        "error_logs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("level", sa.String(20), nullable=False),
        sa.Column("source", sa.String(20), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("stack_trace", sa.Text, nullable=True),
        sa.Column("error_code", sa.String(100), nullable=True),
        _user_fk(nullable=True, ondelete="SET NULL"),
        sa.Column("url", sa.Text, nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("metadata", sa.JSON, nullable=False),
        sa.Column("resolved", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "resolved_by", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
        ),
        _created_at(),
    )
    op.create_index("ix_error_logs_created_at", "error_logs", ["created_at"])

    op.create_table(
        "audit_logs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        _user_fk(nullable=True, ondelete="SET NULL"),
        sa.Column("action", sa.String(100), nullable=False),
        sa.Column("category", sa.String(30), nullable=False),
        sa.Column("resource_type", sa.String(50), nullable=True),
        sa.Column("resource_id", sa.String(100), nullable=True),
        sa.Column("metadata", sa.JSON, nullable=False),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column("status", sa.String(10), nullable=False, server_default="success"),
        _created_at(),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_category", "audit_logs", ["category"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])


def downgrade() -> None:
    for table in (
        "audit_logs", "error_logs", "notes", "savings_contributions", "savings_goals",
        "portfolio_performance_snapshots", "dividend_payments", "portfolio_assets",
        "tip_views", "lesson_progress", "user_profiles", "invitation_codes", "users",
    ):
        op.drop_table(table)
