"""
Deterministic daily puzzle.

Every client has to land on the same equation for the same UTC date, so the
generator below is a contract, not an implementation detail:
- seed = YYYYMMDD as an integer
- linear congruential generator (9301, 49297, 233280)
- operator is drawn first, then the operands
Changing any of that changes every future puzzle.
"""

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Sequence, TypeVar, Union

from .types import Operator

T = TypeVar("T")

EPOCH = date(2024, 1, 1)  # puzzle #1
OPERATORS: List[Operator] = ["+", "-", "*", "/"]
MAX_ATTEMPTS = 100
FALLBACK_PUZZLE = "1 + 2 = 3"

LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280


class SeededRandom:
    """Tiny LCG; same seed -> same sequence, everywhere."""

    def __init__(self, seed: int) -> None:
        self.seed = seed

    def next(self) -> float:
        self.seed = (self.seed * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.seed / LCG_MODULUS

    def int(self, low: int, high: int) -> int:
        return math.floor(self.next() * (high - low + 1)) + low

    def choice(self, items: Sequence[T]) -> T:
        return items[self.int(0, len(items) - 1)]


def _utc_date(when: Union[date, datetime, None]) -> date:
    if when is None:
        return datetime.now(timezone.utc).date()
    if isinstance(when, datetime):
        if when.tzinfo is not None:
            when = when.astimezone(timezone.utc)
        return when.date()
    return when


def generate_seed(when: Union[date, datetime]) -> int:
    day = _utc_date(when)
    return day.year * 10000 + day.month * 100 + day.day


def puzzle_number(when: Union[date, datetime, None] = None) -> int:
    """Days since 2024-01-01, starting at 1."""
    return (_utc_date(when) - EPOCH).days + 1


def generate_daily_puzzle(when: Union[date, datetime, None] = None) -> str:
    rng = SeededRandom(generate_seed(_utc_date(when)))

    operator = rng.choice(OPERATORS)

    attempts = 0
    while attempts < MAX_ATTEMPTS:
        attempts += 1

        if operator == "+":
            left = rng.int(1, 99)
            right = rng.int(1, 99)
            result = left + right
        elif operator == "-":
            left = rng.int(1, 99)
            # subtrahend stays below the minuend so the result is never negative
            right = rng.int(1, min(left - 1, 99))
            result = left - right
        elif operator == "*":
            left = rng.int(2, 15)
            right = rng.int(2, 15)
            result = left * right
        else:
            # build divisor and quotient first so the division is always exact
            right = rng.int(2, 12)
            result = rng.int(1, 20)
            left = right * result

        if 0 <= result <= 999:
            return f"{left} {operator} {right} = {result}"

    return FALLBACK_PUZZLE


def todays_puzzle() -> str:
    return generate_daily_puzzle(None)


def puzzle_for_date(when: Union[date, datetime]) -> str:
    return generate_daily_puzzle(when)


def next_puzzle_boundary(now: Optional[datetime] = None) -> datetime:
    """
    The instant the next puzzle goes live (next UTC midnight).
    Anything tied to today's puzzle should expire here.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    tomorrow = _utc_date(now) + timedelta(days=1)
    return datetime.combine(tomorrow, time.min, tzinfo=timezone.utc)
