"""
Pure game logic (no HTTP, no storage).
For each character of a guess we say whether it is:
- exact:   same character at the same position of the target
- present: character appears in the target somewhere else (not already claimed)
- absent:  nothing left to match

Digits, operators, "=" and the padding spaces are all just characters.
Duplicates are handled like Wordle: each target character can only be claimed once.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Set

from .types import Feedback, GameStatus, KeyFeedback, Mark

BOARD_WIDTH = 13  # "99 + 99 = 999" is the longest row
MAX_SOLO_GUESSES = 6

_RANK: Dict[str, int] = {"absent": 1, "present": 2, "exact": 3}
_EMOJI: Dict[str, str] = {"exact": "🟩", "present": "🟨", "absent": "⬜"}


def generate_feedback(guess: str, target: str) -> Feedback:
    """
    Example:
      target = "12 + 34 = 46"
      guess  = "23 + 11 = 34"
      -> 2 present, 3 present, + exact, first 1 present, second 1 absent,
         = exact, 3 absent (the only 3 was claimed), 4 present
    """
    n = len(guess)
    if len(target) != n:
        raise ValueError("Guess and target must be the same length.")

    marks: List[Mark] = ["absent"] * n
    consumed = [False] * n

    # 1. Exact matches first, so a present mark can never steal them
    for i in range(n):
        if guess[i] == target[i]:
            marks[i] = "exact"
            consumed[i] = True

    # 2. Left-to-right scan of what is still unclaimed
    for i in range(n):
        if marks[i] == "exact":
            continue
        for j in range(n):
            if not consumed[j] and guess[i] == target[j]:
                marks[i] = "present"
                consumed[j] = True
                break

    return marks


def pad_row(equation: str, width: int = BOARD_WIDTH) -> str:
    return equation.ljust(width)


def row_feedback(guess: str, target: str) -> Feedback:
    """Feedback for a board row: both sides padded to the board width."""
    width = max(BOARD_WIDTH, len(guess), len(target))
    return generate_feedback(pad_row(guess, width), pad_row(target, width))


def is_win(target: str, guess: str) -> bool:
    return guess == target


def keyboard_feedback(guesses: List[str], target: str) -> KeyFeedback:
    """Best mark seen for each key across all guesses (exact > present > absent); spaces are not keys."""
    keys: KeyFeedback = {}
    for guess in guesses:
        marks = row_feedback(guess, target)
        for char, mark in zip(guess, marks):
            if char == " ":
                continue
            current = keys.get(char)
            if current is None or _RANK[mark] > _RANK[current]:
                keys[char] = mark
    return keys


@dataclass
class Hints:
    exact: Dict[int, str] = field(default_factory=dict)  # position -> char
    present: Set[str] = field(default_factory=set)


def revealed_hints(guesses: List[str], target: str) -> Hints:
    """Fold every earlier guess into the hints hard mode must respect (spaces skipped)."""
    hints = Hints()
    for guess in guesses:
        marks = row_feedback(guess, target)
        for position, char in enumerate(guess):
            if char == " ":
                continue
            if marks[position] == "exact":
                hints.exact[position] = char
            elif marks[position] == "present":
                hints.present.add(char)
    return hints


def share_text(puzzle_number: int, guesses: List[str], target: str, status: GameStatus) -> str:
    attempts = str(len(guesses)) if status == "won" else "X"
    lines = [f"Numble {puzzle_number} {attempts}/{MAX_SOLO_GUESSES}", ""]
    for guess in guesses:
        marks = row_feedback(guess, target)[: len(guess)]
        lines.append("".join(_EMOJI[mark] for mark in marks))
    return "\n".join(lines).strip()
