"""
Tiles are the pieces a player drops into the equation row.

A tile is either an Operand (a number) or an Operator (+, −, ×, ÷).
Both are frozen dataclasses so they can be compared, hashed and counted.

Text form ("tokens") is what we persist and what the API speaks:
  Operand(7)     <-> "7"
  Operator("×")  <-> "×"   (ASCII "*" / "x" also accepted when parsing)
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from .types import OperatorSymbol

# Canonical operator order; the generator indexes into this tuple
OPERATORS: tuple = ("+", "−", "×", "÷")

_ALIASES = {
    "+": "+",
    "-": "−",
    "−": "−",
    "*": "×",
    "x": "×",
    "X": "×",
    "×": "×",
    "/": "÷",
    "÷": "÷",
}


@dataclass(frozen=True)
class Operand:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Operator:
    symbol: OperatorSymbol

    def __post_init__(self) -> None:
        if self.symbol not in OPERATORS:
            raise ValueError(f"Unknown operator {self.symbol!r}.")

    def __str__(self) -> str:
        return self.symbol


Tile = Union[Operand, Operator]


def is_operator(tile: Tile) -> bool:
    return isinstance(tile, Operator)


def parse_tile(token: str) -> Tile:
    """
    Turn a token into a tile.
    Raises ValueError for anything that is neither an integer nor a known operator.
    """
    text = str(token).strip()
    if text in _ALIASES:
        return Operator(_ALIASES[text])
    try:
        return Operand(int(text))
    except ValueError:
        raise ValueError(f"Not a tile: {token!r}.") from None


def parse_tiles(tokens: Sequence[str]) -> List[Tile]:
    return [parse_tile(t) for t in tokens]


def to_token(tile: Optional[Tile]) -> Optional[str]:
    if tile is None:
        return None
    return str(tile)


def to_tokens(tiles: Sequence[Optional[Tile]]) -> List[Optional[str]]:
    return [to_token(t) for t in tiles]
