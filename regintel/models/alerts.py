"""Canonical alert table - one row per (source, external_id)."""

import uuid
from sqlalchemy import DateTime, Index, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from regintel.models.base import Base


class Alert(Base):
    """Normalized regulatory alert from any source.

    Rows are only written through the hash-guarded upsert, so ``updated_at``
    moves only when the content fingerprint changes.
    """

    __tablename__ = "alerts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    source: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    external_id: Mapped[str] = mapped_column(String(255), nullable=False)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    link_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    date_published: Mapped[DateTime] = mapped_column(DateTime(timezone=True), nullable=False)
    date_updated: Mapped[DateTime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    jurisdiction: Mapped[str] = mapped_column(String(100), nullable=False, default="US")
    locations: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False, default=list)
    product_types: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False, default=list)

    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    severity: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    raw: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    hash: Mapped[str] = mapped_column(String(64), nullable=False)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    updated_at: Mapped[DateTime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("source", "external_id", name="uq_alerts_source_external_id"),
        Index("ix_alerts_hash", "hash"),
        Index("ix_alerts_date_published", "date_published"),
    )
