"""
Guess validation.

A guess is accepted when it:
1. looks like "NUM OP NUM = RESULT" (single spaces, 1-3 digit numbers)
2. keeps every number inside 0..999
3. is arithmetically true (division must leave no remainder)

validate_guess() returns None for a good guess, otherwise a Rejection saying why.
Hard mode is a separate policy (validate_hard_mode) that the solo game applies on top.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from .engine import revealed_hints
from .evaluator import EvaluationError, evaluate_expression

FORMAT_RE = re.compile(r"^[0-9]{1,3} [+\-*/×÷] [0-9]{1,3} = [0-9]{1,3}$")
MIN_NUMBER = 0
MAX_NUMBER = 999

# Reason codes, in the order they are checked
EMPTY_INPUT = "empty_input"
BAD_FORMAT = "bad_format"
OUT_OF_RANGE = "out_of_range"
NOT_WHOLE_DIVISION = "not_whole_division"
INCORRECT_EQUATION = "incorrect_equation"
HARD_MODE = "hard_mode"

MESSAGES: Dict[str, str] = {
    EMPTY_INPUT: "Please enter an equation",
    BAD_FORMAT: "Invalid equation format",
    OUT_OF_RANGE: "Numbers must be 0-999",
    NOT_WHOLE_DIVISION: "Division must result in whole number",
    INCORRECT_EQUATION: "Equation is not correct",
}


@dataclass(frozen=True)
class Rejection:
    reason: str
    message: str


def _reject(reason: str) -> Rejection:
    return Rejection(reason=reason, message=MESSAGES[reason])


def normalize_guess(raw: str) -> str:
    """Collapse runs of whitespace and use the ASCII operator symbols."""
    text = re.sub(r"\s+", " ", raw or "").strip()
    return text.replace("×", "*").replace("÷", "/")


def is_valid_format(guess: str) -> bool:
    return FORMAT_RE.match(guess) is not None


def validate_guess(guess: str) -> Optional[Rejection]:
    if not guess or guess.strip() == "":
        return _reject(EMPTY_INPUT)

    if not is_valid_format(guess):
        return _reject(BAD_FORMAT)

    left_text, operator, right_text, _, result_text = guess.split(" ")
    left, right, result = int(left_text), int(right_text), int(result_text)

    for number in (left, right, result):
        if number < MIN_NUMBER or number > MAX_NUMBER:
            return _reject(OUT_OF_RANGE)

    if operator in ("/", "÷") and right != 0 and left % right != 0:
        return _reject(NOT_WHOLE_DIVISION)

    try:
        actual = evaluate_expression(f"{left}{operator}{right}")
    except EvaluationError:
        # 5 / 0 = 0 and friends
        return _reject(INCORRECT_EQUATION)

    if actual != result:
        return _reject(INCORRECT_EQUATION)

    return None


def is_mathematically_valid(guess: str) -> bool:
    return validate_guess(guess) is None


def validate_hard_mode(guess: str, previous_guesses: List[str], target: str) -> Optional[Rejection]:
    """
    Every hint revealed so far must be reused:
      exact hints at the same position, present hints anywhere.
    The hints are rebuilt from the full history on each call.
    """
    hints = revealed_hints(previous_guesses, target)

    for position in sorted(hints.exact):
        char = hints.exact[position]
        if position >= len(guess) or guess[position] != char:
            return Rejection(HARD_MODE, f"Position {position + 1} must be {char}")

    for char in sorted(hints.present):
        if char not in guess:
            return Rejection(HARD_MODE, f"Guess must contain {char}")

    return None
