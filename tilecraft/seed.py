"""
Day keys, seeds and the seeded pseudo-random draw.

Everybody playing on the same calendar day must get the same puzzle, so
nothing here may depend on process state. Python's built-in hash() is salted
per process, so we hash with SHA-256 instead.
"""

import hashlib
from datetime import date, datetime, timedelta

from .types import DayKey

DAY_KEY_FORMAT = "%Y-%m-%d"

# Namespace for every draw made by this game
DRAW_SALT = "tilecraft"


def day_key(day: date) -> DayKey:
    return day.strftime(DAY_KEY_FORMAT)


def parse_day_key(key: DayKey) -> date:
    """Raises ValueError for anything that isn't a YYYY-MM-DD date."""
    return datetime.strptime(key, DAY_KEY_FORMAT).date()


def previous_day_key(key: DayKey) -> DayKey:
    return day_key(parse_day_key(key) - timedelta(days=1))


def _digest_int(text: str) -> int:
    # First 4 bytes of the digest, big endian -> 0 .. 2**32 - 1
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], "big")


def derive_seed(key: DayKey) -> int:
    """
    Example:
      derive_seed("2025-03-01") -> 1680533868
    Same key, same seed, on every machine.
    """
    return _digest_int(key)


def draw(seed: int, index: int) -> int:
    """
    The only source of randomness in the game.
    Each (seed, index) pair maps to a fixed 32-bit value, so any single draw
    can be recomputed without replaying the ones before it.
    """
    return _digest_int(f"{DRAW_SALT}:{seed}:{index}")
