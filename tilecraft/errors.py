"""
Exceptions used inside the core.

Only InvalidGuessLength and InvalidSlot are meant to reach callers; the rest are
caught by the generator or the session and turned into a recovery path.
"""


class TilecraftError(Exception):
    pass


class GenerationExhausted(TilecraftError):
    """No valid candidate within the retry bound (generator falls back)."""


class InvalidGuessLength(TilecraftError, ValueError):
    pass


class InvalidSlot(TilecraftError, ValueError):
    pass


class CorruptPersistedState(TilecraftError):
    """Snapshot could not be parsed or has the wrong shape."""


class StoreError(TilecraftError):
    """Reading or writing the persisted snapshot failed."""
