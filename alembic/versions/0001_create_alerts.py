"""create alerts, alert_sync_logs and the alerts_summary view

Revision ID: 0001_create_alerts
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_create_alerts"
down_revision = None
branch_labels = None
depends_on = None


ALERTS_SUMMARY_VIEW = """
CREATE VIEW alerts_summary AS
SELECT
    source,
    COUNT(*) AS total_alerts,
    COUNT(*) FILTER (WHERE date_published >= now() - interval '7 days') AS recent_alerts
FROM alerts
GROUP BY source
UNION ALL
SELECT
    'ALL' AS source,
    COUNT(*) AS total_alerts,
    COUNT(*) FILTER (WHERE date_published >= now() - interval '7 days') AS recent_alerts
FROM alerts
"""


def upgrade() -> None:
    op.create_table(
        "alerts",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("source", sa.String(length=50), nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("summary", sa.Text(), nullable=False, server_default=""),
        sa.Column("link_url", sa.Text(), nullable=True),
        sa.Column("date_published", sa.DateTime(timezone=True), nullable=False),
        sa.Column("date_updated", sa.DateTime(timezone=True), nullable=True),
        sa.Column("jurisdiction", sa.String(length=100), nullable=False, server_default="US"),
        sa.Column("locations", postgresql.ARRAY(sa.Text()), nullable=False, server_default="{}"),
        sa.Column("product_types", postgresql.ARRAY(sa.Text()), nullable=False, server_default="{}"),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("severity", sa.String(length=20), nullable=False),
        sa.Column("raw", postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default="{}"),
        sa.Column("hash", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source", "external_id", name="uq_alerts_source_external_id"),
    )
    op.create_index("ix_alerts_source", "alerts", ["source"])
    op.create_index("ix_alerts_category", "alerts", ["category"])
    op.create_index("ix_alerts_severity", "alerts", ["severity"])
    op.create_index("ix_alerts_hash", "alerts", ["hash"])
    op.create_index("ix_alerts_date_published", "alerts", ["date_published"])

    op.create_table(
        "alert_sync_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("source", sa.String(length=50), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("alerts_fetched", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("alerts_inserted", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("alerts_updated", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("alerts_skipped", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("errors", postgresql.ARRAY(sa.Text()), nullable=False, server_default="{}"),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("run_started", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("run_finished", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('running', 'completed', 'partial', 'failed')",
            name="ck_alert_sync_logs_status",
        ),
    )
    op.create_index("ix_alert_sync_logs_source", "alert_sync_logs", ["source"])
    op.create_index("ix_alert_sync_logs_run_started", "alert_sync_logs", ["run_started"])

    op.execute(ALERTS_SUMMARY_VIEW)


def downgrade() -> None:
    op.execute("DROP VIEW IF EXISTS alerts_summary")
    op.drop_index("ix_alert_sync_logs_run_started", table_name="alert_sync_logs")
    op.drop_index("ix_alert_sync_logs_source", table_name="alert_sync_logs")
    op.drop_table("alert_sync_logs")
    op.drop_index("ix_alerts_date_published", table_name="alerts")
    op.drop_index("ix_alerts_hash", table_name="alerts")
    op.drop_index("ix_alerts_severity", table_name="alerts")
    op.drop_index("ix_alerts_category", table_name="alerts")
    op.drop_index("ix_alerts_source", table_name="alerts")
    op.drop_table("alerts")
