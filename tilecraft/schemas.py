"""
Explicit validation & Pydantic models
- SessionSnapshot is what we persist (one record, fixed key).
  Loading runs it through validation, so a corrupt record is caught here.
- The rest define the structure of API requests and responses.
Tiles travel as tokens: "7", "+", "−", "×", "÷".
"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .seed import parse_day_key
from .tiles import parse_tile
from .types import Closeness, FeedbackMark as Mark, SessionStatus as Status


def _check_token(token: str) -> str:
    # parse_tile raises ValueError, pydantic reports it as a validation error
    parse_tile(token)
    return token


# 1. Persisted snapshot
class GuessSnapshot(BaseModel):
    tiles: List[str] = Field(..., min_length=2, max_length=5)
    feedback: List[Mark]
    value: Optional[int] = None

    @field_validator("tiles")
    @classmethod
    def validate_tiles(cls, tiles: List[str]) -> List[str]:
        return [_check_token(t) for t in tiles]


class SessionSnapshot(BaseModel):
    last_played_day: str
    status: Status = "playing"
    guesses: List[GuessSnapshot] = Field(default_factory=list, max_length=5)
    draft: List[Optional[str]] = Field(default_factory=list, max_length=5)
    hints_used: int = Field(0, ge=0, le=2)
    revealed_positions: List[int] = Field(default_factory=list, max_length=2)
    streak: int = Field(0, ge=0)

    @field_validator("last_played_day")
    @classmethod
    def validate_day(cls, day: str) -> str:
        parse_day_key(day)
        return day

    @field_validator("draft")
    @classmethod
    def validate_draft(cls, draft: List[Optional[str]]) -> List[Optional[str]]:
        return [None if t is None else _check_token(t) for t in draft]


# 2. Validates a player's guess
class GuessRequest(BaseModel):
    tiles: List[str] = Field(..., description="Tile tokens in slot order, e.g. ['3', '×', '6']")

    @field_validator("tiles")
    @classmethod
    def validate_tokens(cls, tiles: List[str]) -> List[str]:
        """
        We only check that every token is a tile.
        Length and "is it in today's alphabet" are checked by the route,
        because they depend on the session.
        """
        return [_check_token(t) for t in tiles]

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"tiles": ["3", "×", "6"]},
                {"tiles": ["2", "+", "5", "×", "3"]},
            ]
        }
    }


# 3. Places one tile into a draft slot
class DraftTileRequest(BaseModel):
    tile: str = Field(..., description="Tile token")

    @field_validator("tile")
    @classmethod
    def validate_token(cls, tile: str) -> str:
        return _check_token(tile)


# 4. Feedback for a single guess
class GuessOut(BaseModel):
    tiles: List[str] = Field(..., description="The tiles the player submitted")
    feedback: List[Mark] = Field(..., description="One mark per tile")
    value: Optional[int] = Field(None, description="Left-to-right value; null if it can't be evaluated")
    distance: Optional[int] = Field(None, description="How far a miss landed from the target")
    closeness: Optional[Closeness] = Field(None, description="cold, warmer, close or very_close; null on a win")


class HintOut(BaseModel):
    position: int = Field(..., description="Index in the solution")
    tile: str = Field(..., description="Solution tile at that index")
    hints_used: int = Field(..., description="Hints used today")
    max_hints: int = Field(..., description="Hints allowed per day")


# 5. Today's puzzle as the player sees it
class PuzzleState(BaseModel):
    day: str = Field(..., description="Calendar day of this puzzle (YYYY-MM-DD)")
    target: int = Field(..., description="Number the equation has to reach")
    alphabet: List[str] = Field(..., description="Tiles available today")
    guesses: List[GuessOut] = Field(..., description="All guesses so far with feedback")
    draft: List[Optional[str]] = Field(..., description="Equation row being built")
    status: Status = Field(..., description="Current state of the game")
    attempts_left: int = Field(..., description="How many guesses remain")
    max_guesses: int = Field(..., description="Guesses allowed per day")
    hints_used: int = Field(..., description="Hints used today")
    max_hints: int = Field(..., description="Hints allowed per day")
    hints: List[HintOut] = Field(..., description="Tiles revealed by hints")
    streak: int = Field(..., description="Consecutive days won")
    solution: Optional[List[str]] = Field(None, description="Only revealed once the game is over")


# 6. Result of a guess
class GuessResponse(BaseModel):
    status: Status = Field(..., description="Current state of the game")
    attempts_left: int = Field(..., description="How many guesses remain")
    feedback: GuessOut | None = Field(None, description="Feedback for the latest guess")
    streak: int = Field(..., description="Consecutive days won")
    solution: List[str] | None = Field(None, description="The solution (only revealed if game is over)")
    note: str | None = Field(None, description="Extra note (ex. 'Game lost. No more guesses.')")


# 7. What the share collaborator gets, nothing more
class ShareSummaryOut(BaseModel):
    guess_count: int
    max_guesses: int
    won: bool
    streak: int
