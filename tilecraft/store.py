"""
Snapshot storage.

The session only needs two calls: load() and save(). Anything that has them
is a SessionStore, so tests can hand in the in-memory one and the API uses
the database one (repository.py).

One record per installation, under a fixed key. Records are kept as JSON text
so the in-memory store goes through the same encode/decode as the real one.
"""

import json
from typing import Any, Dict, Optional, Protocol

from .errors import StoreError
from .schemas import SessionSnapshot

STORAGE_KEY = "tilecraft_daily_puzzle"


class SessionStore(Protocol):
    def load(self) -> Optional[Any]:
        """Decoded JSON of the stored snapshot, or None if there is none. May raise StoreError."""
        ...

    def save(self, snapshot: SessionSnapshot) -> None:
        """May raise StoreError."""
        ...


def decode_payload(payload: str) -> Any:
    try:
        return json.loads(payload)
    except ValueError as exc:
        raise StoreError(f"Stored snapshot is not valid JSON: {exc}") from exc


class MemorySessionStore:
    def __init__(self, key: str = STORAGE_KEY) -> None:
        self.key = key
        self._records: Dict[str, str] = {}

    def load(self) -> Optional[Any]:
        payload = self._records.get(self.key)
        if payload is None:
            return None
        return decode_payload(payload)

    def save(self, snapshot: SessionSnapshot) -> None:
        self._records[self.key] = snapshot.model_dump_json()

    # Test helpers: look at / tamper with the raw record
    def raw(self) -> Optional[str]:
        return self._records.get(self.key)

    def put_raw(self, payload: str) -> None:
        self._records[self.key] = payload
