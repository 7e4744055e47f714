"""
Daily puzzle generator with a clear fallback.

Everything is drawn from seed.draw(seed, index), so the same seed always
produces the same puzzle. Candidates that can't be a fair puzzle (repeated
operands, division by zero, a fraction or a negative target) are thrown away
and we try again. If we run out of attempts we fall back to a fixed template
so the game still works.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .engine import evaluate
from .errors import GenerationExhausted
from .seed import derive_seed, draw
from .tiles import OPERATORS, Operand, Operator, Tile
from .types import DayKey

logger = logging.getLogger(__name__)

OPERAND_MIN = 1
OPERAND_MAX = 12
ALPHABET_SIZE = 6
OPERATOR_TILES = 2
MAX_ATTEMPTS = 50

# Each attempt owns a block of draw indices:
#   +0 length, +1..+3 operands, +4..+5 operators, +6..+7 decoys, +8 decoy operator
DRAWS_PER_ATTEMPT = 16

# 2 + 5 × 3 = 21 when read left to right
FALLBACK_SOLUTION: Tuple[Tile, ...] = (Operand(2), Operator("+"), Operand(5), Operator("×"), Operand(3))
FALLBACK_TARGET = 21
FALLBACK_ALPHABET: Tuple[Tile, ...] = (
    Operand(1), Operand(2), Operand(3), Operand(5), Operator("+"), Operator("×"),
)


@dataclass(frozen=True)
class DailyPuzzle:
    day_key: DayKey
    seed: int
    alphabet: Tuple[Tile, ...]
    target: int
    solution: Tuple[Tile, ...]
    fallback: bool = False


def _operand_from(value: int) -> int:
    return OPERAND_MIN + value % (OPERAND_MAX - OPERAND_MIN + 1)


def _draw_candidate(seed: int, base: int) -> Tuple[List[int], List[str]]:
    # 3:1 in favour of the short (3 tile) equation
    operand_count = 3 if draw(seed, base) % 4 == 0 else 2

    values = []
    i = 0
    while i < operand_count:
        values.append(_operand_from(draw(seed, base + 1 + i)))
        i += 1

    symbols = []
    j = 0
    while j < operand_count - 1:
        symbols.append(OPERATORS[draw(seed, base + 4 + j) % len(OPERATORS)])
        j += 1

    return values, symbols


def _interleave(values: List[int], symbols: List[str]) -> Tuple[Tile, ...]:
    tiles: List[Tile] = [Operand(values[0])]
    for symbol, value in zip(symbols, values[1:]):
        tiles.append(Operator(symbol))
        tiles.append(Operand(value))
    return tuple(tiles)


def _check_candidate(values: List[int], solution: Tuple[Tile, ...]) -> Optional[int]:
    """Return the target, or None if the candidate has to be rejected."""
    if len(set(values)) != len(values):
        logger.debug("rejected %s: repeated operand", values)
        return None

    result = evaluate(solution)
    if not result.ok:
        logger.debug("rejected %s: %s", [str(t) for t in solution], result.error)
        return None
    if result.value < 0:
        logger.debug("rejected %s: negative target %d", [str(t) for t in solution], result.value)
        return None
    return result.value


def _build_alphabet(seed: int, base: int, values: List[int], symbols: List[str]) -> Tuple[Tile, ...]:
    # Decoy operands: start at a drawn value, step up past anything already used
    operands = list(values)
    decoys = (ALPHABET_SIZE - OPERATOR_TILES) - len(values)
    k = 0
    while k < decoys:
        start = draw(seed, base + 6 + k)
        step = 0
        while True:
            candidate = _operand_from(start + step)
            if candidate not in operands:
                break
            step += 1
        operands.append(candidate)
        k += 1

    # Always two operator tiles, so one of them may be a decoy
    used_ops = set(symbols)
    if len(used_ops) < OPERATOR_TILES:
        only = OPERATORS.index(symbols[0])
        decoy = OPERATORS[(only + 1 + draw(seed, base + 8) % (len(OPERATORS) - 1)) % len(OPERATORS)]
        used_ops.add(decoy)

    tiles: List[Tile] = [Operand(v) for v in sorted(operands)]
    tiles.extend(Operator(s) for s in OPERATORS if s in used_ops)
    return tuple(tiles)


def _search(seed: int, key: DayKey) -> DailyPuzzle:
    attempt = 0
    while attempt < MAX_ATTEMPTS:
        base = attempt * DRAWS_PER_ATTEMPT
        values, symbols = _draw_candidate(seed, base)
        solution = _interleave(values, symbols)

        target = _check_candidate(values, solution)
        if target is not None:
            return DailyPuzzle(
                day_key=key,
                seed=seed,
                alphabet=_build_alphabet(seed, base, values, symbols),
                target=target,
                solution=solution,
            )
        attempt += 1

    raise GenerationExhausted(f"No valid puzzle for seed {seed} after {MAX_ATTEMPTS} attempts.")


def generate_puzzle(seed: int, key: DayKey) -> DailyPuzzle:
    try:
        return _search(seed, key)
    except GenerationExhausted as exc:
        # Fallback: a known-good puzzle beats no puzzle
        logger.warning("%s Using fallback template for %s.", exc, key)
        return DailyPuzzle(
            day_key=key,
            seed=seed,
            alphabet=FALLBACK_ALPHABET,
            target=FALLBACK_TARGET,
            solution=FALLBACK_SOLUTION,
            fallback=True,
        )


def generate_daily_puzzle(key: DayKey) -> DailyPuzzle:
    """
    Example:
      generate_daily_puzzle("2025-03-01")
        target   = 18
        solution = (3, ×, 6)
        alphabet = (1, 3, 6, 12, ×, ÷)
    """
    return generate_puzzle(derive_seed(key), key)
