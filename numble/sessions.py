"""
Two-player sessions.

A session is created by one player (the creator), joined by at most one other
(the opponent), and then both take turns guessing today's puzzle:

    in_progress --(someone guesses the puzzle)--> won
    in_progress --(12th guess, no winner)-------> lost

Every write is read -> check -> write with the version we read; if another
request got there first the store raises VersionConflict and the caller has to
fetch again. Sessions expire at the next puzzle boundary (store TTL).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from . import puzzle as puzzles
from .engine import is_win
from .errors import (
    GameOver,
    InvalidGuess,
    MissingPlayerId,
    NotAParticipant,
    NotYourTurn,
    SelfJoin,
    SessionFull,
    SessionNotFound,
)
from .store import Clock, KeyValueStore, utc_now
from .types import GameStatus, Turn
from .validation import normalize_guess, validate_guess

logger = logging.getLogger(__name__)

KEY_PREFIX = "session:"
MAX_GUESSES_PER_PLAYER = 6
MAX_SESSION_GUESSES = 2 * MAX_GUESSES_PER_PLAYER


@dataclass
class GuessRecord:
    player_id: str
    guess: str
    timestamp: datetime


@dataclass
class MultiplayerSession:
    id: str
    puzzle_number: int
    puzzle: str
    created_at: datetime
    creator_id: str
    opponent_id: Optional[str] = None
    current_turn: Turn = "creator"
    guesses: List[GuessRecord] = field(default_factory=list)
    game_status: GameStatus = "in_progress"
    winner_id: Optional[str] = None
    # set by the store; 0 means "never saved"
    version: int = 0
    expires_at: Optional[datetime] = None

    def to_record(self) -> Dict[str, Any]:
        """Flat persisted form (camelCase, ISO timestamps). Version/expiry live on the store entry."""
        return {
            "id": self.id,
            "puzzleNumber": self.puzzle_number,
            "puzzle": self.puzzle,
            "createdAt": self.created_at.isoformat(),
            "creatorId": self.creator_id,
            "opponentId": self.opponent_id,
            "currentTurn": self.current_turn,
            "guesses": [
                {"playerId": g.player_id, "guess": g.guess, "timestamp": g.timestamp.isoformat()}
                for g in self.guesses
            ],
            "gameStatus": self.game_status,
            "winnerId": self.winner_id,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any], version: int = 0, expires_at: Optional[datetime] = None) -> "MultiplayerSession":
        return cls(
            id=record["id"],
            puzzle_number=record["puzzleNumber"],
            puzzle=record["puzzle"],
            created_at=datetime.fromisoformat(record["createdAt"]),
            creator_id=record["creatorId"],
            opponent_id=record.get("opponentId"),
            current_turn=record["currentTurn"],
            guesses=[
                GuessRecord(
                    player_id=g["playerId"],
                    guess=g["guess"],
                    timestamp=datetime.fromisoformat(g["timestamp"]),
                )
                for g in record.get("guesses", [])
            ],
            game_status=record["gameStatus"],
            winner_id=record.get("winnerId"),
            version=version,
            expires_at=expires_at,
        )


# --- small read-only helpers for callers ---

def player_role(session: MultiplayerSession, player_id: str) -> Optional[Turn]:
    if session.creator_id == player_id:
        return "creator"
    if session.opponent_id is not None and session.opponent_id == player_id:
        return "opponent"
    return None


def is_player_turn(session: MultiplayerSession, player_id: str) -> bool:
    role = player_role(session, player_id)
    return role is not None and session.current_turn == role


def player_guesses(session: MultiplayerSession, player_id: str) -> List[str]:
    return [g.guess for g in session.guesses if g.player_id == player_id]


def _other(turn: Turn) -> Turn:
    return "opponent" if turn == "creator" else "creator"


class SessionManager:
    """Owns the session rules. Storage and clock are injected."""

    def __init__(self, store: KeyValueStore, clock: Clock = utc_now) -> None:
        self.store = store
        self.clock = clock

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{KEY_PREFIX}{session_id}"

    def _load(self, session_id: str) -> MultiplayerSession:
        entry = self.store.get(self._key(session_id)) if session_id else None
        if entry is None:
            # never created and expired look the same on purpose
            raise SessionNotFound()
        return MultiplayerSession.from_record(entry.value, version=entry.version, expires_at=entry.expires_at)

    def _save(self, session: MultiplayerSession) -> MultiplayerSession:
        entry = self.store.replace(self._key(session.id), session.to_record(), expected_version=session.version)
        if entry is None:
            # expired between our read and our write
            raise SessionNotFound()
        return MultiplayerSession.from_record(entry.value, version=entry.version, expires_at=entry.expires_at)

    # --- Public API ---

    def create(self, creator_id: Optional[str]) -> MultiplayerSession:
        if not creator_id:
            raise MissingPlayerId()

        now = self.clock()
        session = MultiplayerSession(
            id=str(uuid4()),
            puzzle_number=puzzles.puzzle_number(now),
            puzzle=puzzles.generate_daily_puzzle(now),
            created_at=now,
            creator_id=creator_id,
        )
        entry = self.store.create(self._key(session.id), session.to_record(), puzzles.next_puzzle_boundary(now))
        logger.info("Session %s created by %s for puzzle #%d", session.id, creator_id, session.puzzle_number)
        return MultiplayerSession.from_record(entry.value, version=entry.version, expires_at=entry.expires_at)

    def fetch(self, session_id: str) -> MultiplayerSession:
        return self._load(session_id)

    def join(self, session_id: str, player_id: Optional[str]) -> MultiplayerSession:
        if not player_id:
            raise MissingPlayerId()

        session = self._load(session_id)
        if session.opponent_id is not None:
            raise SessionFull()
        if session.creator_id == player_id:
            raise SelfJoin()

        session.opponent_id = player_id
        saved = self._save(session)
        logger.info("Player %s joined session %s", player_id, session_id)
        return saved

    def submit_guess(self, session_id: str, player_id: Optional[str], guess_text: str) -> MultiplayerSession:
        session = self._load(session_id)

        role = player_role(session, player_id) if player_id else None
        if role is None:
            raise NotAParticipant()
        if session.game_status != "in_progress":
            raise GameOver()
        if session.current_turn != role:
            raise NotYourTurn()

        guess = normalize_guess(guess_text)
        rejection = validate_guess(guess)
        if rejection is not None:
            raise InvalidGuess(rejection.reason, rejection.message)

        session.guesses.append(GuessRecord(player_id=player_id, guess=guess, timestamp=self.clock()))

        if is_win(session.puzzle, guess):
            session.game_status = "won"
            session.winner_id = player_id
        elif len(session.guesses) >= MAX_SESSION_GUESSES:
            session.game_status = "lost"

        # flips even on the final guess; harmless since nothing is accepted after that
        session.current_turn = _other(session.current_turn)

        saved = self._save(session)
        if saved.game_status != "in_progress":
            logger.info("Session %s finished: %s (winner=%s)", session_id, saved.game_status, saved.winner_id)
        return saved
