"""
Pure game logic (no HTTP, no storage).

Two jobs:
- evaluate(): turn a row of tiles into a number
- grade_guess(): compare a guessed row against the solution, one mark per tile

Evaluation is STRICT LEFT-TO-RIGHT, not school precedence:
  2 + 3 × 4  ->  (2 + 3) × 4 = 20   (not 14)
The generator uses the same function to compute the target, so the solution
and every guess are always judged by the same rule.
"""

from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, List, Optional, Sequence

from .tiles import Operand, Operator, Tile
from .types import Closeness, EvalError, FeedbackMark


@dataclass(frozen=True)
class Evaluation:
    value: Optional[int] = None
    exact: Optional[Fraction] = None
    error: Optional[EvalError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _check_structure(tiles: Sequence[Tile]) -> Optional[EvalError]:
    if len(tiles) == 0:
        return "empty"
    if isinstance(tiles[0], Operator):
        return "leading_operator"
    if isinstance(tiles[-1], Operator):
        return "trailing_operator"

    i = 1
    while i < len(tiles):
        prev_is_op = isinstance(tiles[i - 1], Operator)
        this_is_op = isinstance(tiles[i], Operator)
        if prev_is_op and this_is_op:
            return "adjacent_operators"
        if not prev_is_op and not this_is_op:
            return "adjacent_operands"
        i += 1
    return None


def evaluate(tiles: Sequence[Tile]) -> Evaluation:
    """
    Example:
      [2, +, 3, ×, 4] -> Evaluation(value=20)
      [6, ÷, 0]       -> Evaluation(error="divide_by_zero")
      [3, ÷, 2]       -> Evaluation(exact=3/2, error="non_integral")

    Never raises for bad input; the reason is reported in .error instead.
    Intermediate steps may be fractional or negative, we keep them exact.
    """
    problem = _check_structure(tiles)
    if problem is not None:
        return Evaluation(error=problem)

    first: Operand = tiles[0]
    total = Fraction(first.value)

    # Structure is valid, so tiles go operand, operator, operand, ...
    i = 1
    while i < len(tiles):
        op: Operator = tiles[i]
        rhs = Fraction(tiles[i + 1].value)
        if op.symbol == "+":
            total = total + rhs
        elif op.symbol == "−":
            total = total - rhs
        elif op.symbol == "×":
            total = total * rhs
        else:
            if rhs == 0:
                return Evaluation(error="divide_by_zero")
            total = total / rhs
        i += 2

    if total.denominator != 1:
        return Evaluation(exact=total, error="non_integral")
    return Evaluation(value=int(total), exact=total)


def grade_guess(guess: Sequence[Tile], solution: Sequence[Tile]) -> List[FeedbackMark]:
    """
    Example:
      solution = [A, B, A]
      guess    = [A, A, B]
      -> ["hit", "present", "present"]

    Standard two-pass (Wordle / Mastermind) method so duplicated tiles are
    never over-credited: the hits + presents for a tile can't exceed how
    many times it appears in the solution.
    Lengths may differ; guess positions past the end of the solution can
    never be a hit.
    """

    # 1. How many of each tile the solution still has to give out
    remaining: Dict[Tile, int] = {}
    for tile in solution:
        remaining[tile] = remaining.get(tile, 0) + 1

    marks: List[FeedbackMark] = ["absent"] * len(guess)

    # 2. Exact position matches first
    i = 0
    while i < len(guess):
        if i < len(solution) and guess[i] == solution[i]:
            marks[i] = "hit"
            remaining[guess[i]] -= 1
        i += 1

    # 3. Left to right over the rest: present while the solution has copies left
    i = 0
    while i < len(guess):
        if marks[i] != "hit":
            tile = guess[i]
            if remaining.get(tile, 0) > 0:
                marks[i] = "present"
                remaining[tile] -= 1
        i += 1

    return marks


def is_win(value: Optional[int], target: int) -> bool:
    """A guess wins when its value equals the target; order of tiles doesn't matter."""
    return value is not None and value == target


def closeness(value: Optional[int], target: int) -> Optional[Closeness]:
    """
    Rough "how close was that" label for a miss.
    None for a win or for a guess without a value.
    """
    if value is None or value == target:
        return None
    diff = abs(value - target)
    if diff > 20:
        return "cold"
    if diff > 10:
        return "warmer"
    if diff > 5:
        return "close"
    return "very_close"
