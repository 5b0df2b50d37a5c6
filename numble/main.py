'''
Numble API

Multiplayer:
POST /api/multiplayer/create        -> start a two-player session
POST /api/multiplayer/join          -> join as the opponent
POST /api/multiplayer/guess         -> submit a guess on your turn
GET  /api/multiplayer/session/{id}  -> read session state (clients poll this)

Extras:
GET  /api/puzzle                    -> today's puzzle number (not the answer)
POST /api/solo/guess                -> one solo turn; client sends its saved game/stats

Storage is the DB-backed key-value store unless NUMBLE_STORE_BACKEND=memory.
'''

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings, configure_logging
from .db import get_db
from .repository import DBKeyValueStore
from .store import InMemoryKeyValueStore, KeyValueStore
from .sessions import MultiplayerSession, SessionManager
from .errors import InvalidGuess, NumbleError
from .engine import keyboard_feedback, row_feedback, share_text
from .puzzle import generate_daily_puzzle, next_puzzle_boundary, puzzle_number
from .solo import SoloController, SoloGame, Statistics
from .bootstrap_db import create_all

from .schemas import (
    CreateSessionRequest,
    CreateSessionResponse,
    ErrorOut,
    JoinSessionRequest,
    PuzzleOut,
    RejectionOut,
    SessionGuessOut,
    SessionOut,
    SessionResponse,
    SoloGameModel,
    SoloGuessRequest,
    SoloGuessResponse,
    StatisticsModel,
    SubmitGuessRequest,
)

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Numble API", version="1.0.0")

# Allow everything in dev so the docs and front-end work easily
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# --- Dev convenience: auto-create tables locally ---
if settings.app_env == "local":
    @app.on_event("startup")
    def _dev_create_tables():
        create_all()

def current_time() -> datetime:
    return datetime.now(timezone.utc)


# Only used when NUMBLE_STORE_BACKEND=memory (single process)
memory_store = InMemoryKeyValueStore(
    timeout_seconds=settings.store_timeout_seconds,
    clock=lambda: current_time(),
)


def get_memory_store() -> KeyValueStore:
    return memory_store


# Per-request store bound to the current DB session
def get_db_store(session=Depends(get_db)) -> KeyValueStore:
    return DBKeyValueStore(session, clock=lambda: current_time())


def store_dependency(backend: str):
    """Pick the store dependency once, so the memory backend never opens a DB session."""
    return get_memory_store if backend == "memory" else get_db_store


get_store = store_dependency(settings.store_backend)


def get_manager(store: KeyValueStore = Depends(get_store)) -> SessionManager:
    return SessionManager(store, clock=lambda: current_time())


@app.exception_handler(NumbleError)
def _numble_error(request: Request, exc: NumbleError) -> JSONResponse:
    reason = exc.reason if isinstance(exc, InvalidGuess) else None
    if exc.kind in ("conflict", "unavailable"):
        logger.warning("%s %s -> %s", request.method, request.url.path, exc.code)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.code)
    body = ErrorOut(detail=exc.message, code=exc.code, reason=reason)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def _to_session_out(session: MultiplayerSession) -> SessionOut:
    finished = session.game_status != "in_progress"
    return SessionOut(
        id=session.id,
        puzzle_number=session.puzzle_number,
        puzzle=session.puzzle if finished else None,
        created_at=session.created_at,
        creator_id=session.creator_id,
        opponent_id=session.opponent_id,
        current_turn=session.current_turn,
        guesses=[
            SessionGuessOut(
                player_id=g.player_id,
                guess=g.guess,
                timestamp=g.timestamp,
                feedback=row_feedback(g.guess, session.puzzle),
            )
            for g in session.guesses
        ],
        game_status=session.game_status,
        winner_id=session.winner_id,
        version=session.version,
        expires_at=session.expires_at,
    )


# ---------------- Multiplayer ----------------

@app.post("/api/multiplayer/create", response_model=CreateSessionResponse, summary="Start a two-player session")
def create_session(
    payload: CreateSessionRequest,
    manager: SessionManager = Depends(get_manager),
) -> CreateSessionResponse:
    session = manager.create(payload.player_id)
    return CreateSessionResponse(session_id=session.id, session=_to_session_out(session))


@app.post("/api/multiplayer/join", response_model=SessionResponse, summary="Join a session as the opponent")
def join_session(
    payload: JoinSessionRequest,
    manager: SessionManager = Depends(get_manager),
) -> SessionResponse:
    session = manager.join(payload.session_id, payload.player_id)
    return SessionResponse(session=_to_session_out(session))


@app.post("/api/multiplayer/guess", response_model=SessionResponse, summary="Submit a guess on your turn")
def submit_guess(
    payload: SubmitGuessRequest,
    manager: SessionManager = Depends(get_manager),
) -> SessionResponse:
    session = manager.submit_guess(payload.session_id, payload.player_id, payload.guess)
    return SessionResponse(session=_to_session_out(session))


@app.get("/api/multiplayer/session/{session_id}", response_model=SessionResponse, summary="Get session state")
def get_session(
    session_id: str,
    manager: SessionManager = Depends(get_manager),
) -> SessionResponse:
    return SessionResponse(session=_to_session_out(manager.fetch(session_id)))


# ---------------- Daily puzzle / solo ----------------

@app.get("/api/puzzle", response_model=PuzzleOut, summary="Today's puzzle number")
def get_puzzle() -> PuzzleOut:
    now = current_time()
    return PuzzleOut(
        puzzle_number=puzzle_number(now),
        puzzle_date=now.date(),
        next_puzzle_at=next_puzzle_boundary(now),
    )


@app.post("/api/solo/guess", response_model=SoloGuessResponse, summary="Play one solo turn")
def solo_guess(payload: SoloGuessRequest) -> SoloGuessResponse:
    now = current_time()
    controller = SoloController(
        target=generate_daily_puzzle(now),
        puzzle_number=puzzle_number(now),
        hard_mode=payload.hard_mode,
    )

    saved: Optional[SoloGame] = SoloGame.from_dict(payload.game.model_dump()) if payload.game else None
    stats = Statistics.from_dict(payload.statistics.model_dump()) if payload.statistics else Statistics()

    game = controller.start(saved)
    outcome, stats = controller.play(game, stats, payload.guess, now=now)

    finished = outcome.game.status != "in_progress"
    return SoloGuessResponse(
        accepted=outcome.accepted,
        game=SoloGameModel(**outcome.game.to_dict()),
        statistics=StatisticsModel(**stats.to_dict(), win_percentage=stats.win_percentage),
        feedback=outcome.feedback,
        keyboard=keyboard_feedback(outcome.game.guesses, controller.target),
        rejection=RejectionOut(reason=outcome.rejection.reason, message=outcome.rejection.message)
        if outcome.rejection
        else None,
        answer=controller.target if finished else None,
        share_text=share_text(controller.puzzle_number, outcome.game.guesses, controller.target, outcome.game.status)
        if finished
        else None,
    )
