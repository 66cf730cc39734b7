"""One row per source sync run; powers /sync/status and /sync/logs."""

import uuid
from sqlalchemy import DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from regintel.models.base import Base


class AlertSyncLog(Base):
    __tablename__ = "alert_sync_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    source: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,  # running | completed | partial | failed
        default="running",
    )

    alerts_fetched: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    alerts_inserted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    alerts_updated: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    alerts_skipped: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    errors: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False, default=list)

    # "metadata" attribute name is reserved by SQLAlchemy; use column name metadata with safe attribute.
    meta: Mapped[dict | None] = mapped_column("metadata", JSONB, nullable=True)

    run_started: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )

    run_finished: Mapped[DateTime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
