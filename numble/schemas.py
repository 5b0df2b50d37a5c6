"""
Explicit validation & Pydantic models
- Define the structure of API requests and responses.
- Requests accept the camelCase keys the web client sends (playerId, sessionId)
  as well as snake_case.
"""

from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Status = Literal["in_progress", "won", "lost"]
MarkOut = Literal["exact", "present", "absent"]


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# 1. Multiplayer requests
class CreateSessionRequest(_Request):
    player_id: Optional[str] = Field(None, alias="playerId", description="Creator's player id")


class JoinSessionRequest(_Request):
    session_id: str = Field(..., alias="sessionId")
    player_id: Optional[str] = Field(None, alias="playerId")


class SubmitGuessRequest(_Request):
    session_id: str = Field(..., alias="sessionId")
    player_id: Optional[str] = Field(None, alias="playerId")
    guess: str = Field(..., description='Equation like "12 + 34 = 46"')

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"examples": [{"sessionId": "…", "playerId": "p1", "guess": "12 + 34 = 46"}]},
    )


# 2. Multiplayer responses
class SessionGuessOut(BaseModel):
    player_id: str
    guess: str
    timestamp: datetime
    feedback: List[MarkOut] = Field(..., description="One mark per board tile (13)")


class SessionOut(BaseModel):
    id: str
    puzzle_number: int
    puzzle: Optional[str] = Field(None, description="Only revealed once the game is over")
    created_at: datetime
    creator_id: str
    opponent_id: Optional[str] = None
    current_turn: Literal["creator", "opponent"]
    guesses: List[SessionGuessOut]
    game_status: Status
    winner_id: Optional[str] = None
    version: int = Field(..., description="Bumped on every write")
    expires_at: Optional[datetime] = None


class CreateSessionResponse(BaseModel):
    session_id: str
    session: SessionOut


class SessionResponse(BaseModel):
    session: SessionOut


class ErrorOut(BaseModel):
    detail: str
    code: str
    reason: Optional[str] = Field(None, description="Validator reason for invalid guesses")


# 3. Daily puzzle info (never the answer)
class PuzzleOut(BaseModel):
    puzzle_number: int
    puzzle_date: date
    next_puzzle_at: datetime


# 4. Solo play (stateless: the client keeps its own game and stats)
class SoloGameModel(BaseModel):
    puzzle_number: int
    guesses: List[str] = Field(default_factory=list)
    status: Status = "in_progress"
    last_played: Optional[str] = None


class StatisticsModel(BaseModel):
    games_played: int = 0
    games_won: int = 0
    current_streak: int = 0
    max_streak: int = 0
    guess_distribution: Dict[str, int] = Field(default_factory=dict)
    win_percentage: int = 0


class SoloGuessRequest(BaseModel):
    game: Optional[SoloGameModel] = Field(None, description="Saved game; ignored if it belongs to another day")
    statistics: Optional[StatisticsModel] = None
    guess: str
    hard_mode: bool = False


class RejectionOut(BaseModel):
    reason: str
    message: str


class SoloGuessResponse(BaseModel):
    accepted: bool
    game: SoloGameModel
    statistics: StatisticsModel
    feedback: Optional[List[MarkOut]] = None
    keyboard: Dict[str, MarkOut] = Field(default_factory=dict, description="Best mark per key so far")
    rejection: Optional[RejectionOut] = None
    answer: Optional[str] = Field(None, description="Revealed when the game is over")
    share_text: Optional[str] = None
