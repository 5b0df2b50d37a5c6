"""
Everything the session core can refuse, grouped by kind:
- input:         the guess/request itself is bad
- authorization: the caller may not do this right now
- not_found:     unknown or expired session (we don't say which)
- conflict:      someone else wrote first; re-fetch and retry
- unavailable:   storage is down or too slow

Routes turn these into HTTP responses using status_code and code.
None of them leave a session modified.
"""

from typing import Optional


class NumbleError(Exception):
    kind = "input"
    code = "error"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# --- input ---

class MissingPlayerId(NumbleError):
    code = "missing_player_id"
    default_message = "Player ID is required"


class InvalidGuess(NumbleError):
    code = "invalid_guess"

    def __init__(self, reason: str, message: str) -> None:
        self.reason = reason
        super().__init__(message)


class GameOver(NumbleError):
    code = "game_over"
    status_code = 409
    default_message = "Game is already over"


# --- authorization ---

class NotAParticipant(NumbleError):
    kind = "authorization"
    code = "not_a_participant"
    status_code = 403
    default_message = "Player not in this session"


class NotYourTurn(NumbleError):
    kind = "authorization"
    code = "not_your_turn"
    status_code = 409
    default_message = "Not your turn"


class SelfJoin(NumbleError):
    kind = "authorization"
    code = "self_join"
    status_code = 409
    default_message = "Cannot join your own session"


class SessionFull(NumbleError):
    kind = "authorization"
    code = "session_full"
    status_code = 409
    default_message = "Session already has an opponent"


# --- not found ---

class SessionNotFound(NumbleError):
    kind = "not_found"
    code = "session_not_found"
    status_code = 404
    default_message = "Session not found"


# --- storage ---

class VersionConflict(NumbleError):
    kind = "conflict"
    code = "version_conflict"
    status_code = 409
    default_message = "Session changed while saving; fetch it again and retry"


class StoreUnavailable(NumbleError):
    kind = "unavailable"
    code = "store_unavailable"
    status_code = 503
    default_message = "Session storage is unavailable"
