"""
Single-player game for one calendar day.

The caller owns persistence: it hands us the saved game/statistics (plain
dataclasses, or dicts via from_dict) and stores whatever we hand back.

Status moves once: in_progress -> won | lost. Statistics are updated exactly
when that move happens, so looking at a finished game twice counts it once.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .engine import MAX_SOLO_GUESSES, is_win, row_feedback
from .types import Feedback, GameStatus
from .validation import Rejection, normalize_guess, validate_guess, validate_hard_mode

GAME_OVER = "game_over"


@dataclass
class SoloGame:
    puzzle_number: int
    guesses: List[str] = field(default_factory=list)
    status: GameStatus = "in_progress"
    last_played: Optional[str] = None  # ISO timestamp

    def to_dict(self) -> Dict[str, Any]:
        return {
            "puzzle_number": self.puzzle_number,
            "guesses": list(self.guesses),
            "status": self.status,
            "last_played": self.last_played,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SoloGame":
        return cls(
            puzzle_number=int(data["puzzle_number"]),
            guesses=list(data.get("guesses", [])),
            status=data.get("status", "in_progress"),
            last_played=data.get("last_played"),
        )


def _empty_distribution() -> Dict[int, int]:
    return {attempt: 0 for attempt in range(1, MAX_SOLO_GUESSES + 1)}


@dataclass
class Statistics:
    games_played: int = 0
    games_won: int = 0
    current_streak: int = 0
    max_streak: int = 0
    guess_distribution: Dict[int, int] = field(default_factory=_empty_distribution)

    @property
    def win_percentage(self) -> int:
        if self.games_played == 0:
            return 0
        return round(self.games_won / self.games_played * 100)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "games_played": self.games_played,
            "games_won": self.games_won,
            "current_streak": self.current_streak,
            "max_streak": self.max_streak,
            "guess_distribution": {str(k): v for k, v in self.guess_distribution.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Statistics":
        distribution = _empty_distribution()
        for attempt, count in (data.get("guess_distribution") or {}).items():
            distribution[int(attempt)] = int(count)
        return cls(
            games_played=int(data.get("games_played", 0)),
            games_won=int(data.get("games_won", 0)),
            current_streak=int(data.get("current_streak", 0)),
            max_streak=int(data.get("max_streak", 0)),
            guess_distribution=distribution,
        )


@dataclass
class GuessOutcome:
    game: SoloGame
    rejection: Optional[Rejection] = None
    feedback: Optional[Feedback] = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None


def should_reset_game(current_puzzle_number: int, saved_puzzle_number: int) -> bool:
    return current_puzzle_number != saved_puzzle_number


def start_game(puzzle_number: int, saved: Optional[SoloGame] = None) -> SoloGame:
    """Resume today's saved game; anything from another day is thrown away."""
    if saved is not None and not should_reset_game(puzzle_number, saved.puzzle_number):
        return saved
    return SoloGame(puzzle_number=puzzle_number)


def submit_guess(
    game: SoloGame,
    raw_guess: str,
    target: str,
    hard_mode: bool = False,
    now: Optional[datetime] = None,
) -> GuessOutcome:
    """Returns a new SoloGame on success; the input game is never mutated."""
    if game.status != "in_progress":
        return GuessOutcome(game=game, rejection=Rejection(GAME_OVER, "Game is already over"))

    guess = normalize_guess(raw_guess)
    rejection = validate_guess(guess)
    if rejection is None and hard_mode:
        rejection = validate_hard_mode(guess, game.guesses, target)
    if rejection is not None:
        return GuessOutcome(game=game, rejection=rejection)

    guesses = game.guesses + [guess]
    status: GameStatus = "in_progress"
    if is_win(target, guess):
        status = "won"
    elif len(guesses) >= MAX_SOLO_GUESSES:
        status = "lost"

    played_at = (now or datetime.now(timezone.utc)).isoformat()
    updated = replace(game, guesses=guesses, status=status, last_played=played_at)
    return GuessOutcome(game=updated, feedback=row_feedback(guess, target))


def update_statistics(stats: Statistics, game: SoloGame, previous: Optional[SoloGame]) -> Statistics:
    """
    Only a game that just finished counts:
    previous must be missing or still in progress, and game must be terminal.
    """
    newly_finished = game.status != "in_progress" and (previous is None or previous.status == "in_progress")
    if not newly_finished:
        return stats

    updated = replace(stats, guess_distribution=dict(stats.guess_distribution))
    updated.games_played += 1

    if game.status == "won":
        updated.games_won += 1
        attempts = len(game.guesses)
        if 1 <= attempts <= MAX_SOLO_GUESSES:
            updated.guess_distribution[attempts] += 1

        updated.current_streak += 1
        if updated.current_streak > updated.max_streak:
            updated.max_streak = updated.current_streak
    else:
        updated.current_streak = 0

    return updated


class SoloController:
    """Ties one day's puzzle to a game and the player's statistics."""

    def __init__(self, target: str, puzzle_number: int, hard_mode: bool = False) -> None:
        self.target = target
        self.puzzle_number = puzzle_number
        self.hard_mode = hard_mode

    def start(self, saved: Optional[SoloGame] = None) -> SoloGame:
        return start_game(self.puzzle_number, saved)

    def play(self, game: SoloGame, stats: Statistics, raw_guess: str, now: Optional[datetime] = None):
        """Returns (GuessOutcome, Statistics)."""
        outcome = submit_guess(game, raw_guess, self.target, hard_mode=self.hard_mode, now=now)
        if not outcome.accepted:
            return outcome, stats
        return outcome, update_statistics(stats, outcome.game, game)
