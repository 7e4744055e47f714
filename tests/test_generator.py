"""
Testing seeds and the daily generator.
- Same day -> same puzzle, every time
- Every puzzle is solvable and well formed
- Running out of attempts falls back to the fixed template
"""

from datetime import date, timedelta

import pytest

import tilecraft.generator as generator
from tilecraft.engine import evaluate
from tilecraft.generator import generate_daily_puzzle, generate_puzzle
from tilecraft.seed import day_key, derive_seed, draw, parse_day_key, previous_day_key
from tilecraft.tiles import Operand, Operator

def _days(start: date, count: int):
    return [day_key(start + timedelta(days=i)) for i in range(count)]

def test_day_keys():
    assert day_key(date(2025, 3, 1)) == "2025-03-01"
    assert previous_day_key("2025-03-01") == "2025-02-28"
    assert previous_day_key("2024-01-01") == "2023-12-31"
    with pytest.raises(ValueError):
        parse_day_key("03/01/2025")

def test_seed_is_stable():
    # Fixed value: must not change between processes or releases
    assert derive_seed("2025-03-01") == 1680533868
    assert derive_seed("2025-03-01") == derive_seed("2025-03-01")
    assert derive_seed("2025-03-01") != derive_seed("2025-03-02")

def test_draws_are_independent_and_repeatable():
    seed = derive_seed("2025-03-01")
    assert draw(seed, 7) == draw(seed, 7)
    assert 0 <= draw(seed, 0) < 2 ** 32
    assert len({draw(seed, i) for i in range(20)}) > 1

def test_known_day():
    puzzle = generate_daily_puzzle("2025-03-01")
    assert puzzle.target == 18
    assert puzzle.solution == (Operand(3), Operator("×"), Operand(6))
    assert puzzle.alphabet == (
        Operand(1), Operand(3), Operand(6), Operand(12), Operator("×"), Operator("÷"),
    )
    assert puzzle.fallback is False

def test_same_day_same_puzzle():
    for key in _days(date(2025, 1, 1), 10):
        assert generate_daily_puzzle(key) == generate_daily_puzzle(key)

def test_generated_puzzles_are_valid():
    for key in _days(date(2025, 1, 1), 90):
        puzzle = generate_daily_puzzle(key)

        # Solvable
        assert evaluate(puzzle.solution).value == puzzle.target
        assert puzzle.target >= 0

        # Shape: operand, operator, operand[, operator, operand]
        assert len(puzzle.solution) in (3, 5)
        for i, tile in enumerate(puzzle.solution):
            if i % 2 == 0:
                assert isinstance(tile, Operand)
            else:
                assert isinstance(tile, Operator)

        # Alphabet: 6 tiles, 2 operators, holds the solution plus 1-2 decoys
        assert len(puzzle.alphabet) == 6
        assert len(set(puzzle.alphabet)) == 6
        assert sum(1 for t in puzzle.alphabet if isinstance(t, Operator)) == 2
        for tile in puzzle.solution:
            assert tile in puzzle.alphabet

        solution_values = {t.value for t in puzzle.solution if isinstance(t, Operand)}
        decoys = [t.value for t in puzzle.alphabet if isinstance(t, Operand) and t.value not in solution_values]
        assert 1 <= len(decoys) <= 2
        for t in puzzle.alphabet:
            if isinstance(t, Operand):
                assert 1 <= t.value <= 12

def test_fallback_when_attempts_run_out(monkeypatch):
    monkeypatch.setattr(generator, "MAX_ATTEMPTS", 0)
    puzzle = generate_daily_puzzle("2025-03-01")
    assert puzzle.fallback is True
    assert puzzle.target == 21
    assert evaluate(puzzle.solution).value == 21
    assert puzzle.day_key == "2025-03-01"

def test_fallback_when_every_candidate_is_rejected(monkeypatch):
    # Draw 0 everywhere -> three operands all equal to 1 -> always rejected
    monkeypatch.setattr(generator, "draw", lambda seed, index: 0)
    puzzle = generate_puzzle(123, "2025-03-01")
    assert puzzle.fallback is True
    assert puzzle.solution == generator.FALLBACK_SOLUTION
    assert puzzle.alphabet == generator.FALLBACK_ALPHABET
