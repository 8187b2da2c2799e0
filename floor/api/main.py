"""
FastAPI backend for The Floor.
Exposes the turn engine to the game-master UI: one in-memory session per game,
a state snapshot, and one endpoint per transition.
"""

import logging
import random
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from floor.config import get_settings
from floor.engine import MIN_BOARD_SIZE, MAX_BOARD_SIZE, MIN_PLAYERS, MIN_CATEGORIES
from floor.engine.state import Player, Category
from floor.engine.actions import (
    Action,
    start_game,
    assign_square,
    assign_player_category,
    draft_player,
    select_challenge,
    start_clock,
    correct_answer,
    skip_question,
    use_bonus,
    report_duel_outcome,
    cancel_duel,
    continue_turn,
    end_turn,
    replay,
    reset_game,
)
from floor.engine.errors import (
    FloorError,
    ValidationError,
    UnknownEntity,
    InvalidTransition,
    NoEligibleOpponents,
)
from floor.engine.queries import get_available_actions, get_player_stats, get_board_view
from floor.engine.setup import default_players
from floor.session import GameSession

logger = logging.getLogger(__name__)

app = FastAPI(
    title="The Floor API",
    description="Turn engine for The Floor - a territory-conquest trivia game",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method and path so 500s can be traced to the failing endpoint."""
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("[500] %s %s", request.method, request.url.path)
        raise
    if response.status_code >= 500:
        logger.error("[%s] %s %s", response.status_code, request.method, request.url.path)
    return response


# Rejected transitions -> HTTP status
ERROR_STATUS = {
    ValidationError: 422,
    UnknownEntity: 404,
    InvalidTransition: 409,
    NoEligibleOpponents: 409,
}


@app.exception_handler(FloorError)
async def floor_error_handler(request: Request, exc: FloorError):
    status = next((s for cls, s in ERROR_STATUS.items() if isinstance(exc, cls)), 400)
    return JSONResponse(
        status_code=status,
        content={"error": {"code": exc.code, "message": str(exc)}},
    )


# In-memory sessions; nothing survives a restart
games: dict[str, GameSession] = {}


# ===== Pydantic Models =====

class QuestionIn(BaseModel):
    id: str | None = None
    text: str = ""
    image_url: str | None = None


class CategoryIn(BaseModel):
    id: str
    name: str
    questions: list[QuestionIn] = Field(default_factory=list)


class PlayerIn(BaseModel):
    id: str
    name: str
    emoji: str | None = None
    image_url: str | None = None
    category_id: str | None = None


class StartGameRequest(BaseModel):
    rows: int = 3
    cols: int = 3
    players: list[PlayerIn]
    categories: list[CategoryIn]
    # player_id -> square_id pins for starting squares
    placements: dict[str, str] | None = None
    duel_seconds: int | None = None
    # Seeds drafting and placement for reproducible games
    seed: int | None = None


class AssignSquareRequest(BaseModel):
    category_id: str
    owner_id: str | None = None


class AssignPlayerCategoryRequest(BaseModel):
    category_id: str


class ChallengeRequest(BaseModel):
    square_id: str
    duel_seconds: int | None = None


class BonusRequest(BaseModel):
    player_id: str


class OutcomeRequest(BaseModel):
    winner_id: str


# ===== Helper Functions =====

def get_session(game_id: str) -> GameSession:
    """Get a game session; raise 404 if not found."""
    session = games.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Game {game_id} not found")
    return session


def _start_action(request: StartGameRequest) -> Action:
    players = [Player.from_dict(p.model_dump()) for p in request.players]
    categories = [Category.from_dict(c.model_dump()) for c in request.categories]
    return start_game(
        request.rows,
        request.cols,
        players,
        categories,
        placements=request.placements,
        duel_seconds=request.duel_seconds if request.duel_seconds is not None else get_settings().DUEL_SECONDS,
    )


def state_for_response(session: GameSession) -> dict[str, Any]:
    """State dict including computed scoreboard and board hints for the UI."""
    state = session.state
    out = state.to_dict()
    out["game_id"] = session.game_id
    out["player_stats"] = get_player_stats(state)
    out["board"] = get_board_view(state)
    return out


async def _apply(game_id: str, action: Action) -> dict[str, Any]:
    session = get_session(game_id)
    _, events = await session.apply(action)
    return {
        "state": state_for_response(session),
        "events": [e.to_dict() for e in events],
    }


@app.on_event("shutdown")
async def on_shutdown():
    for session in list(games.values()):
        await session.close()
    games.clear()


# ===== API Endpoints =====

@app.get("/")
def root():
    return {"message": "The Floor API", "version": "1.0.0"}


@app.get("/defaults")
def get_defaults():
    """Starter roster and setup limits for the setup screen."""
    return {
        "players": [p.to_dict() for p in default_players()],
        "rows": {"min": MIN_BOARD_SIZE, "max": MAX_BOARD_SIZE, "default": 3},
        "cols": {"min": MIN_BOARD_SIZE, "max": MAX_BOARD_SIZE, "default": 3},
        "min_players": MIN_PLAYERS,
        "min_categories": MIN_CATEGORIES,
        "duel_seconds": get_settings().DUEL_SECONDS,
    }


# ----- Games -----

@app.post("/games", status_code=201)
async def create_game(request: StartGameRequest):
    """Create a session and start the game in it. Setup errors leave no session behind."""
    rng = random.Random(request.seed) if request.seed is not None else None
    session = GameSession(rng=rng)
    _, events = await session.apply(_start_action(request))
    games[session.game_id] = session
    logger.info("Game %s created (%sx%s, %s players)", session.game_id, request.rows, request.cols, len(request.players))
    return {
        "game_id": session.game_id,
        "state": state_for_response(session),
        "events": [e.to_dict() for e in events],
    }


@app.get("/games")
def list_games():
    return {"games": [{"game_id": gid, "phase": s.state.phase} for gid, s in games.items()]}


@app.get("/games/{game_id}")
def get_game_state(game_id: str):
    """Read-only snapshot, plus the most recent events (clock timeouts happen between requests)."""
    session = get_session(game_id)
    return {
        "state": state_for_response(session),
        "recent_events": [e.to_dict() for e in session.recent_events],
    }


@app.get("/games/{game_id}/available-actions")
def get_game_available_actions(game_id: str):
    return get_available_actions(get_session(game_id).state)


@app.delete("/games/{game_id}")
async def delete_game(game_id: str):
    session = get_session(game_id)
    await session.close()
    del games[game_id]
    return {"message": f"Game {game_id} deleted"}


@app.post("/games/{game_id}/start")
async def start_existing_game(game_id: str, request: StartGameRequest):
    """Start a new game in a session that was reset to setup."""
    session = get_session(game_id)
    if request.seed is not None:
        session.rng = random.Random(request.seed)
    return await _apply(game_id, _start_action(request))


@app.post("/games/{game_id}/replay")
async def do_replay(game_id: str):
    return await _apply(game_id, replay())


@app.post("/games/{game_id}/reset")
async def do_reset(game_id: str):
    """Full teardown back to setup. The session (and its id) stays for the next start."""
    return await _apply(game_id, reset_game())


# ----- Board -----

@app.post("/games/{game_id}/squares/{square_id}/assign")
async def do_assign_square(game_id: str, square_id: str, request: AssignSquareRequest):
    return await _apply(game_id, assign_square(square_id, request.category_id, request.owner_id))


@app.post("/games/{game_id}/players/{player_id}/category")
async def do_assign_player_category(game_id: str, player_id: str, request: AssignPlayerCategoryRequest):
    return await _apply(game_id, assign_player_category(player_id, request.category_id))


# ----- Turns -----

@app.post("/games/{game_id}/draft")
async def do_draft(game_id: str):
    return await _apply(game_id, draft_player())


@app.post("/games/{game_id}/challenge")
async def do_challenge(game_id: str, request: ChallengeRequest):
    return await _apply(game_id, select_challenge(request.square_id, request.duel_seconds))


@app.post("/games/{game_id}/continue")
async def do_continue(game_id: str):
    return await _apply(game_id, continue_turn())


@app.post("/games/{game_id}/end-turn")
async def do_end_turn(game_id: str):
    return await _apply(game_id, end_turn())


# ----- Duel -----

@app.post("/games/{game_id}/duel/start-clock")
async def do_start_clock(game_id: str):
    return await _apply(game_id, start_clock())


@app.post("/games/{game_id}/duel/correct")
async def do_correct(game_id: str):
    return await _apply(game_id, correct_answer())


@app.post("/games/{game_id}/duel/skip")
async def do_skip(game_id: str):
    return await _apply(game_id, skip_question())


@app.post("/games/{game_id}/duel/bonus")
async def do_bonus(game_id: str, request: BonusRequest):
    return await _apply(game_id, use_bonus(request.player_id))


@app.post("/games/{game_id}/duel/outcome")
async def do_outcome(game_id: str, request: OutcomeRequest):
    """Declare the duel winner (game-master judging)."""
    return await _apply(game_id, report_duel_outcome(request.winner_id))


@app.post("/games/{game_id}/duel/cancel")
async def do_cancel_duel(game_id: str):
    return await _apply(game_id, cancel_duel())


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=get_settings().LOG_LEVEL)
    uvicorn.run(app, host="0.0.0.0", port=8000)
