"""
SQLAlchemy ORM model for snapshot storage.

Tables:
- snapshots: one row per storage key, payload is the session snapshot as JSON text

Why text and not a JSON column?
- We want to see exactly what was written, and a payload that no longer
  parses is something the session knows how to recover from.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from .db import Base


class SnapshotRecord(Base):
    __tablename__ = "snapshots"

    # Fixed storage key (see store.STORAGE_KEY)
    key: Mapped[str] = mapped_column(String(64), primary_key=True)

    payload: Mapped[str] = mapped_column(Text, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
