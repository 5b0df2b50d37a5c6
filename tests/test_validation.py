"""
Testing guess validation and the hard-mode policy.
"""

import pytest

from numble.validation import (
    BAD_FORMAT,
    EMPTY_INPUT,
    HARD_MODE,
    INCORRECT_EQUATION,
    NOT_WHOLE_DIVISION,
    is_mathematically_valid,
    is_valid_format,
    normalize_guess,
    validate_guess,
    validate_hard_mode,
)
from numble.evaluator import evaluate_expression


def test_valid_guesses():
    assert validate_guess("12 + 34 = 46") is None
    assert validate_guess("45 - 23 = 22") is None
    assert validate_guess("6 * 7 = 42") is None
    assert validate_guess("84 / 7 = 12") is None
    assert validate_guess("0 * 999 = 0") is None


def test_empty():
    assert validate_guess("").reason == EMPTY_INPUT
    assert validate_guess("   ").reason == EMPTY_INPUT


@pytest.mark.parametrize("guess", ["12+34=46", "12  + 34 = 46", "1234 + 1 = 1235", "12 + 34", "a + b = c", "1 + 2 = 3 = 3"])
def test_bad_format(guess):
    rejection = validate_guess(guess)
    assert rejection.reason == BAD_FORMAT
    assert rejection.message == "Invalid equation format"


def test_division_must_be_whole():
    rejection = validate_guess("10 / 3 = 3")
    assert rejection.reason == NOT_WHOLE_DIVISION
    assert rejection.message == "Division must result in whole number"


def test_division_by_zero_is_just_wrong():
    assert validate_guess("5 / 0 = 0").reason == INCORRECT_EQUATION


def test_wrong_arithmetic():
    assert validate_guess("12 + 34 = 47").reason == INCORRECT_EQUATION
    # subtraction below zero can't be written as a result
    assert validate_guess("5 - 9 = 4").reason == INCORRECT_EQUATION


def test_unicode_operators_are_accepted():
    assert is_valid_format("6 × 7 = 42")
    assert validate_guess("6 × 7 = 42") is None
    assert validate_guess("42 ÷ 6 = 7") is None


def test_normalize_guess():
    assert normalize_guess("  6   ×  7 =   42 ") == "6 * 7 = 42"
    assert normalize_guess("42 ÷ 6 = 7") == "42 / 6 = 7"
    assert normalize_guess(None) == ""


def test_valid_guesses_re_evaluate_exactly():
    for guess in ["12 + 34 = 46", "99 - 1 = 98", "15 * 15 = 225", "96 / 8 = 12"]:
        assert is_mathematically_valid(guess)
        left, result = guess.split(" = ")
        assert evaluate_expression(left) == int(result)


# --- hard mode ---

TARGET = "12 + 34 = 46"
HISTORY = ["23 + 11 = 34"]  # reveals + and = in place, 1 2 3 4 somewhere


def test_hard_mode_accepts_guess_using_all_hints():
    assert validate_hard_mode("14 + 32 = 46", HISTORY, TARGET) is None


def test_hard_mode_requires_exact_positions():
    rejection = validate_hard_mode("5 + 5 = 10", HISTORY, TARGET)
    assert rejection.reason == HARD_MODE
    assert rejection.message == "Position 4 must be +"


def test_hard_mode_requires_present_characters():
    rejection = validate_hard_mode("15 + 31 = 46", HISTORY, TARGET)
    assert rejection.reason == HARD_MODE
    assert rejection.message == "Guess must contain 2"


def test_hard_mode_without_history():
    assert validate_hard_mode("1 + 1 = 2", [], TARGET) is None
