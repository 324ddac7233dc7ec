"""initial schema: users, lawsuits, claims, sources, notifications, audit, runs

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

JSON = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), "postgresql")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("demographics", JSON, nullable=True),
        sa.Column("preferences", JSON, nullable=True),
        sa.Column("privacy_settings", JSON, nullable=True),
        sa.Column("account_tier", sa.String(length=20), nullable=False),
        sa.Column("action_history", JSON, nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "lawsuits",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("case_number", sa.String(length=100), nullable=False),
        sa.Column("court", sa.String(length=200), nullable=False),
        sa.Column("judge", sa.String(length=200), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("settlement_info", JSON, nullable=True),
        sa.Column("eligibility_criteria", JSON, nullable=True),
        sa.Column("required_evidence", JSON, nullable=True),
        sa.Column("important_dates", JSON, nullable=True),
        sa.Column("opt_out_deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("success_metrics", JSON, nullable=True),
        sa.Column("source_info", JSON, nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_lawsuits_case_number_court", "lawsuits", ["case_number", "court"], unique=True)
    op.create_index("ix_lawsuits_category", "lawsuits", ["category"])
    op.create_index("ix_lawsuits_opt_out_deadline", "lawsuits", ["opt_out_deadline"])

    op.create_table(
        "defendants",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("lawsuit_id", sa.Uuid(), nullable=False),
        sa.Column("company_name", sa.String(length=300), nullable=False),
        sa.Column("company_info", JSON, nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["lawsuit_id"], ["lawsuits.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_defendants_lawsuit_id", "defendants", ["lawsuit_id"])

    op.create_table(
        "saved_searches",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("search_query", JSON, nullable=False),
        sa.Column("notification_enabled", sa.Boolean(), nullable=False),
        sa.Column("notification_frequency", sa.String(length=20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_saved_searches_user_id", "saved_searches", ["user_id"])

    op.create_table(
        "claims",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("lawsuit_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("status_history", JSON, nullable=True),
        sa.Column("documents", JSON, nullable=True),
        sa.Column("eligibility_answers", JSON, nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["lawsuit_id"], ["lawsuits.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_claims_user_id", "claims", ["user_id"])
    op.create_index("ix_claims_lawsuit_id", "claims", ["lawsuit_id"])

    op.create_table(
        "data_sources",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("url", sa.String(), nullable=False),
        sa.Column("reliability_metrics", JSON, nullable=False),
        sa.Column("scraping_config", JSON, nullable=True),
        sa.Column("data_mapping", JSON, nullable=True),
        sa.Column("success_history", JSON, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "user_notifications",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("content", sa.String(), nullable=False),
        sa.Column("data", JSON, nullable=True),
        sa.Column("read", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_notifications_user_id", "user_notifications", ["user_id"])
    op.create_index("ix_user_notifications_read", "user_notifications", ["read"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("operation", sa.String(length=100), nullable=False),
        sa.Column("details", JSON, nullable=True),
        sa.Column("ip_address", sa.String(length=64), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_user_id", "audit_logs", ["user_id"])

    op.create_table(
        "acquisition_runs",
        sa.Column("run_id", sa.Uuid(), nullable=False),
        sa.Column("source_id", sa.Uuid(), nullable=True),
        sa.Column("source_name", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("records_processed", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.String(), nullable=True),
        sa.Column("metadata", JSON, nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("run_id"),
    )
    op.create_index("ix_acquisition_runs_source_id", "acquisition_runs", ["source_id"])


def downgrade() -> None:
    op.drop_index("ix_acquisition_runs_source_id", table_name="acquisition_runs")
    op.drop_table("acquisition_runs")
    op.drop_index("ix_audit_logs_user_id", table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index("ix_user_notifications_read", table_name="user_notifications")
    op.drop_index("ix_user_notifications_user_id", table_name="user_notifications")
    op.drop_table("user_notifications")
    op.drop_table("data_sources")
    op.drop_index("ix_claims_lawsuit_id", table_name="claims")
    op.drop_index("ix_claims_user_id", table_name="claims")
    op.drop_table("claims")
    op.drop_index("ix_saved_searches_user_id", table_name="saved_searches")
    op.drop_table("saved_searches")
    op.drop_index("ix_defendants_lawsuit_id", table_name="defendants")
    op.drop_table("defendants")
    op.drop_index("ix_lawsuits_opt_out_deadline", table_name="lawsuits")
    op.drop_index("ix_lawsuits_category", table_name="lawsuits")
    op.drop_index("ix_lawsuits_case_number_court", table_name="lawsuits")
    op.drop_table("lawsuits")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
