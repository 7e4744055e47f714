"""
One player's day: the puzzle, their guesses, hints, draft row and streak.

States:
  playing -> won    (a guess hits the target; streak + 1)
  playing -> lost   (fifth guess misses; streak back to 0)
  playing -> playing
won / lost are final until the calendar day changes.

Every command saves a snapshot through the injected store. Storage problems
never stop the game: a snapshot we can't read counts as "no snapshot", a
snapshot we can't write is logged and skipped.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from .engine import closeness, evaluate, grade_guess, is_win
from .errors import CorruptPersistedState, InvalidGuessLength, InvalidSlot, StoreError
from .generator import DRAWS_PER_ATTEMPT, MAX_ATTEMPTS, DailyPuzzle, generate_daily_puzzle
from .schemas import GuessSnapshot, SessionSnapshot
from .seed import draw, parse_day_key, previous_day_key
from .store import SessionStore
from .tiles import Tile, is_operator, parse_tile, parse_tiles, to_token, to_tokens
from .types import Closeness, DayKey, FeedbackMark, SessionStatus

logger = logging.getLogger(__name__)

MAX_GUESSES = 5
MAX_HINTS = 2
DRAFT_SLOTS = 5
MIN_GUESS_TILES = 2
MAX_GUESS_TILES = 5

# Hint draws live after every index the generator can use
HINT_DRAW_BASE = MAX_ATTEMPTS * DRAWS_PER_ATTEMPT


@dataclass
class Guess:
    tiles: Tuple[Tile, ...]
    feedback: Tuple[FeedbackMark, ...]
    value: Optional[int]
    # Only set for a miss that has a value
    distance: Optional[int] = None
    closeness: Optional[Closeness] = None


def _graded(tiles: Tuple[Tile, ...], feedback: Tuple[FeedbackMark, ...],
            value: Optional[int], target: int) -> Guess:
    label = closeness(value, target)
    return Guess(
        tiles=tiles,
        feedback=feedback,
        value=value,
        distance=abs(value - target) if label else None,
        closeness=label,
    )


@dataclass(frozen=True)
class Hint:
    position: int
    tile: Tile


@dataclass(frozen=True)
class ShareSummary:
    guess_count: int
    max_guesses: int
    won: bool
    streak: int


def _empty_draft() -> List[Optional[Tile]]:
    return [None] * DRAFT_SLOTS


def _carried_streak(last_played_day: DayKey, streak: int, today: DayKey) -> int:
    # A streak only survives a day change if the last day played was yesterday
    if last_played_day == previous_day_key(today):
        return streak
    return 0


def _salvage_streak(raw: Any, today: DayKey) -> int:
    """Pull a trustworthy streak out of a snapshot that failed validation, else 0."""
    if not isinstance(raw, dict):
        return 0
    streak = raw.get("streak")
    last = raw.get("last_played_day")
    if isinstance(streak, bool) or not isinstance(streak, int) or streak < 0:
        return 0
    if not isinstance(last, str):
        return 0
    try:
        parse_day_key(last)
    except ValueError:
        return 0
    if last == today:
        # Today's session is rebuilt as playing, so today's win must not count twice
        status = raw.get("status")
        if status == "playing":
            return streak
        if status == "won" and streak > 0:
            return streak - 1
        return 0
    return _carried_streak(last, streak, today)


def _slot_takes(slot: int, tile: Tile) -> bool:
    # Even slots hold numbers, odd slots hold operators
    return is_operator(tile) == (slot % 2 == 1)


@dataclass
class PuzzleSession:
    puzzle: DailyPuzzle
    store: Optional[SessionStore] = None
    streak: int = 0
    status: SessionStatus = "playing"
    guesses: List[Guess] = field(default_factory=list)
    draft: List[Optional[Tile]] = field(default_factory=_empty_draft)
    hints_used: int = 0
    revealed_positions: List[int] = field(default_factory=list)

    max_guesses = MAX_GUESSES
    max_hints = MAX_HINTS

    @property
    def last_played_day(self) -> DayKey:
        return self.puzzle.day_key

    # --- Construction ---

    @classmethod
    def new(cls, today: DayKey, store: Optional[SessionStore] = None, streak: int = 0) -> "PuzzleSession":
        return cls(puzzle=generate_daily_puzzle(today), store=store, streak=streak)

    @classmethod
    def load(cls, store: SessionStore, today: DayKey) -> "PuzzleSession":
        """
        Restore today's session from the store, or start today's puzzle.
        Yesterday's streak carries over; anything older resets it.
        """
        raw = cls._read(store)

        if raw is None:
            session = cls.new(today, store)
        else:
            try:
                snapshot = cls._parse(raw)
                if snapshot.last_played_day == today:
                    session = cls._restore(snapshot, store)
                else:
                    logger.info("New day %s (last played %s), generating a fresh puzzle.",
                                today, snapshot.last_played_day)
                    streak = _carried_streak(snapshot.last_played_day, snapshot.streak, today)
                    session = cls.new(today, store, streak=streak)
            except CorruptPersistedState as exc:
                logger.warning("Ignoring stored snapshot: %s", exc)
                session = cls.new(today, store, streak=_salvage_streak(raw, today))

        session._save()
        return session

    @staticmethod
    def _read(store: SessionStore) -> Optional[Any]:
        try:
            return store.load()
        except StoreError as exc:
            logger.warning("Could not read snapshot, treating as absent: %s", exc)
            return None

    @staticmethod
    def _parse(raw: Any) -> SessionSnapshot:
        try:
            return SessionSnapshot.model_validate(raw)
        except ValidationError as exc:
            raise CorruptPersistedState(f"{exc.error_count()} validation error(s)") from exc

    @classmethod
    def _restore(cls, snapshot: SessionSnapshot, store: Optional[SessionStore]) -> "PuzzleSession":
        puzzle = generate_daily_puzzle(snapshot.last_played_day)

        guesses = []
        for g in snapshot.guesses:
            if len(g.feedback) != len(g.tiles):
                raise CorruptPersistedState("guess feedback does not match its tiles")
            guesses.append(_graded(tuple(parse_tiles(g.tiles)), tuple(g.feedback), g.value, puzzle.target))

        draft = [None if t is None else parse_tile(t) for t in snapshot.draft]
        draft.extend([None] * (DRAFT_SLOTS - len(draft)))
        for slot, tile in enumerate(draft):
            if tile is not None and not _slot_takes(slot, tile):
                raise CorruptPersistedState(f"draft slot {slot} holds the wrong kind of tile")

        positions = list(snapshot.revealed_positions)
        if len(positions) != snapshot.hints_used or len(set(positions)) != len(positions):
            raise CorruptPersistedState("revealed positions do not match hints used")
        for p in positions:
            if p < 0 or p >= len(puzzle.solution):
                raise CorruptPersistedState(f"revealed position {p} is outside the solution")
        if len({puzzle.solution[p] for p in positions}) != len(positions):
            raise CorruptPersistedState("two hints reveal the same tile")

        # Only the last guess may hit the target
        if any(is_win(g.value, puzzle.target) for g in guesses[:-1]):
            raise CorruptPersistedState("a guess before the last one already won")
        won = bool(guesses) and is_win(guesses[-1].value, puzzle.target)
        if snapshot.status == "won" and not won:
            raise CorruptPersistedState("status is won but no guess reached the target")
        if snapshot.status == "lost" and len(guesses) < MAX_GUESSES:
            raise CorruptPersistedState("status is lost with guesses remaining")
        if snapshot.status == "playing" and (won or len(guesses) >= MAX_GUESSES):
            raise CorruptPersistedState("status is playing but the game is over")

        return cls(
            puzzle=puzzle,
            store=store,
            streak=snapshot.streak,
            status=snapshot.status,
            guesses=guesses,
            draft=draft,
            hints_used=snapshot.hints_used,
            revealed_positions=positions,
        )

    # --- Persistence ---

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            last_played_day=self.last_played_day,
            status=self.status,
            guesses=[
                GuessSnapshot(tiles=to_tokens(g.tiles), feedback=list(g.feedback), value=g.value)
                for g in self.guesses
            ],
            draft=to_tokens(self.draft),
            hints_used=self.hints_used,
            revealed_positions=list(self.revealed_positions),
            streak=self.streak,
        )

    def _save(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self.snapshot())
        except StoreError as exc:
            logger.warning("Could not save snapshot for %s: %s", self.last_played_day, exc)

    # --- Daily rollover ---

    def roll_over(self, today: DayKey) -> bool:
        """Swap in today's puzzle if the day changed. Returns True when it did."""
        if today == self.last_played_day:
            return False

        logger.info("Rolling over from %s to %s.", self.last_played_day, today)
        self.streak = _carried_streak(self.last_played_day, self.streak, today)
        self.puzzle = generate_daily_puzzle(today)
        self.status = "playing"
        self.guesses = []
        self.draft = _empty_draft()
        self.hints_used = 0
        self.revealed_positions = []
        self._save()
        return True

    # --- Guessing ---

    @property
    def attempts_left(self) -> int:
        return MAX_GUESSES - len(self.guesses)

    @property
    def is_over(self) -> bool:
        return self.status != "playing"

    def submit_guess(self, tiles: Sequence[Tile]) -> Optional[Guess]:
        """
        Grade one guess and move the state machine.
        Returns None (and changes nothing) once the game is over.
        Raises InvalidGuessLength for fewer than 2 or more than 5 tiles.
        """
        if self.is_over:
            return None

        tiles = tuple(tiles)
        if len(tiles) < MIN_GUESS_TILES or len(tiles) > MAX_GUESS_TILES:
            raise InvalidGuessLength(
                f"A guess needs between {MIN_GUESS_TILES} and {MAX_GUESS_TILES} tiles, got {len(tiles)}."
            )

        # A guess that can't be evaluated still gets tile-by-tile feedback
        result = evaluate(tiles)
        guess = _graded(tiles, tuple(grade_guess(tiles, self.puzzle.solution)), result.value, self.puzzle.target)
        self.guesses.append(guess)

        if is_win(guess.value, self.puzzle.target):
            self.status = "won"
            self.streak += 1
        elif len(self.guesses) >= MAX_GUESSES:
            self.status = "lost"
            self.streak = 0

        self.draft = _empty_draft()
        self._save()
        return guess

    # --- Hints ---

    @property
    def hints(self) -> List[Hint]:
        return [Hint(p, self.puzzle.solution[p]) for p in self.revealed_positions]

    def use_hint(self) -> Optional[Hint]:
        """
        Reveal one solution tile not shown yet. None when no hint is available.
        A tile that repeats in the solution (e.g. two ×) is only ever revealed once.
        """
        if self.is_over or self.hints_used >= MAX_HINTS:
            return None

        solution = self.puzzle.solution
        shown = {solution[p] for p in self.revealed_positions}
        hidden = [i for i in range(len(solution)) if solution[i] not in shown]
        if not hidden:
            return None

        pick = hidden[draw(self.puzzle.seed, HINT_DRAW_BASE + self.hints_used) % len(hidden)]
        self.revealed_positions.append(pick)
        self.hints_used += 1
        self._save()
        return Hint(pick, self.puzzle.solution[pick])

    # --- Draft row ---

    def _check_slot(self, slot: int) -> None:
        if slot < 0 or slot >= DRAFT_SLOTS:
            raise InvalidSlot(f"Slot must be between 0 and {DRAFT_SLOTS - 1}, got {slot}.")

    def place_tile(self, slot: int, tile: Tile) -> None:
        """Numbers go in even slots, operators in odd ones. Anything else raises InvalidSlot."""
        self._check_slot(slot)
        if not _slot_takes(slot, tile):
            kind = "an operator" if slot % 2 else "a number"
            raise InvalidSlot(f"Slot {slot} takes {kind}, got {to_token(tile)}.")
        if self.is_over:
            return
        self.draft[slot] = tile
        self._save()

    def clear_slot(self, slot: int) -> None:
        self._check_slot(slot)
        if self.is_over:
            return
        self.draft[slot] = None
        self._save()

    def reset_draft(self) -> None:
        if self.is_over:
            return
        self.draft = _empty_draft()
        self._save()

    def submit_draft(self) -> Optional[Guess]:
        """Submit the filled draft slots, in slot order, as a guess."""
        return self.submit_guess([t for t in self.draft if t is not None])

    # --- Read-only views for collaborators ---

    def share_summary(self) -> ShareSummary:
        return ShareSummary(
            guess_count=len(self.guesses),
            max_guesses=MAX_GUESSES,
            won=self.status == "won",
            streak=self.streak,
        )

    def revealed_solution(self) -> Optional[List[str]]:
        """Solution tokens, only once the game is over."""
        if not self.is_over:
            return None
        return [to_token(t) for t in self.puzzle.solution]
