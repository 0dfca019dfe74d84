"""Idempotency ledger model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import JSON, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from swiftslot.core.ulid_helper import generate_ulid
from swiftslot.database import Base

from .types import UTCDateTime, now_utc


class IdempotencyRecord(Base):
    """The first response produced for a client key within a scope."""

    __tablename__ = "idempotency_records"

    __table_args__ = (
        sa.UniqueConstraint("key", "scope", name="uq_idempotency_records_key_scope"),
        sa.Index("ix_idempotency_records_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    key: Mapped[str] = mapped_column(String(255), nullable=False)
    scope: Mapped[str] = mapped_column(String(50), nullable=False)
    request_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    response_data: Mapped[dict[str, Any]] = mapped_column(
        JSONB(astext_type=Text()).with_variant(JSON(), "sqlite"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=now_utc)

    def __repr__(self) -> str:
        return f"<IdempotencyRecord scope={self.scope} key={self.key}>"
