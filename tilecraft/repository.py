"""
DB-backed SessionStore that mirrors the in-memory one in store.py.

Public methods:
- load() -> decoded snapshot JSON | None
- save(snapshot) -> None

Both wrap database errors in StoreError, so the session can fall back
(treat as absent / skip the write) instead of crashing a request.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import StoreError
from .models import SnapshotRecord
from .schemas import SessionSnapshot
from .store import STORAGE_KEY, decode_payload

logger = logging.getLogger(__name__)


class DBSessionStore:
    """Drop-in replacement for MemorySessionStore, but using the database."""

    def __init__(self, db: Session, key: str = STORAGE_KEY):
        self.db = db
        self.key = key

    def load(self) -> Optional[Any]:
        try:
            record = self.db.get(SnapshotRecord, self.key)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(f"Could not read snapshot {self.key!r}: {exc}") from exc
        if record is None:
            return None
        return decode_payload(record.payload)

    def save(self, snapshot: SessionSnapshot) -> None:
        payload = snapshot.model_dump_json()
        try:
            record = self.db.get(SnapshotRecord, self.key)
            if record is None:
                record = SnapshotRecord(key=self.key, payload=payload)
                self.db.add(record)
            else:
                record.payload = payload
            record.updated_at = datetime.utcnow()
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreError(f"Could not write snapshot {self.key!r}: {exc}") from exc
        logger.debug("Saved snapshot %s for %s", self.key, snapshot.last_played_day)

    def put_raw(self, payload: str) -> None:
        """Write a payload as-is (used by tests to plant a corrupt record)."""
        record = self.db.get(SnapshotRecord, self.key)
        if record is None:
            self.db.add(SnapshotRecord(key=self.key, payload=payload))
        else:
            record.payload = payload
        self.db.commit()
