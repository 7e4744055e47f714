"""
Labels for clarity.
"""

from typing import Literal

DayKey = str  # "YYYY-MM-DD", local calendar day
OperatorSymbol = Literal["+", "−", "×", "÷"]
FeedbackMark = Literal["hit", "present", "absent"]
SessionStatus = Literal["playing", "won", "lost"]

# Why an equation could not produce a value
EvalError = Literal[
    "empty",
    "leading_operator",
    "trailing_operator",
    "adjacent_operators",
    "adjacent_operands",
    "divide_by_zero",
    "non_integral",
]

# How far a missed guess landed from the target
Closeness = Literal["cold", "warmer", "close", "very_close"]
