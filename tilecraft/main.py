'''
Tilecraft daily puzzle API

Endpoints:
GET    /puzzle                  -> today's puzzle, guesses, hints, streak
POST   /puzzle/guess            -> submit a guess
POST   /puzzle/hint             -> reveal one solution tile (2 per day)
PUT    /puzzle/draft/{slot}     -> place a tile in the draft row
DELETE /puzzle/draft/{slot}     -> clear one draft slot
DELETE /puzzle/draft            -> clear the whole draft row
POST   /puzzle/draft/submit     -> submit the draft row as a guess
GET    /puzzle/summary          -> data for the share collaborator

Every request loads the session (rolling over to a new puzzle if the day
changed), applies one command, and the session saves itself.
'''

import logging
import os
from datetime import date
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware

from .db import get_db                      # SQLAlchemy Session dependency
from .repository import DBSessionStore      # DB-backed snapshot store
from .bootstrap_db import create_all        # dev-only: create tables
from .errors import InvalidGuessLength, InvalidSlot
from .seed import day_key
from .session import Guess, PuzzleSession
from .tiles import Tile, parse_tile, parse_tiles, to_token, to_tokens

from .schemas import (
    DraftTileRequest,
    GuessOut,
    GuessRequest,
    GuessResponse,
    HintOut,
    PuzzleState,
    ShareSummaryOut,
)

APP_ENV = os.getenv("APP_ENV", "local")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Tilecraft API", version="1.0.0")

# Allow everything in dev so the docs and front-end work easily
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# --- Dev convenience: auto-create tables locally ---
if APP_ENV == "local":
    @app.on_event("startup")
    def _dev_create_tables():
        create_all()

# Today's key from the local clock; tests override this dependency
def get_today() -> str:
    return day_key(date.today())

# Small factories so routes get a per-request store and session
def get_store(db = Depends(get_db)) -> DBSessionStore:
    return DBSessionStore(db)

def get_game(
    store: DBSessionStore = Depends(get_store),
    today: str = Depends(get_today),
) -> PuzzleSession:
    return PuzzleSession.load(store, today)

# ---------------- Helpers ----------------

def _to_guess_out(guess: Guess) -> GuessOut:
    return GuessOut(
        tiles=to_tokens(guess.tiles),
        feedback=list(guess.feedback),
        value=guess.value,
        distance=guess.distance,
        closeness=guess.closeness,
    )

def _to_state(game: PuzzleSession) -> PuzzleState:
    return PuzzleState(
        day=game.last_played_day,
        target=game.puzzle.target,
        alphabet=to_tokens(game.puzzle.alphabet),
        guesses=[_to_guess_out(g) for g in game.guesses],
        draft=to_tokens(game.draft),
        status=game.status,
        attempts_left=game.attempts_left,
        max_guesses=game.max_guesses,
        hints_used=game.hints_used,
        max_hints=game.max_hints,
        hints=[
            HintOut(position=h.position, tile=to_token(h.tile), hints_used=game.hints_used, max_hints=game.max_hints)
            for h in game.hints
        ],
        streak=game.streak,
        solution=game.revealed_solution(),
    )

def _require_alphabet(game: PuzzleSession, tiles: List[Tile]) -> None:
    # Players can only use today's tiles
    unknown = [to_token(t) for t in tiles if t not in game.puzzle.alphabet]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Not in today's tiles: {', '.join(unknown)}")

def _require_playing(game: PuzzleSession) -> None:
    if game.is_over:
        raise HTTPException(status_code=409, detail=f"Game {game.status}. Come back tomorrow.")

def _guess_response(game: PuzzleSession, guess: Optional[Guess]) -> GuessResponse:
    return GuessResponse(
        status=game.status,
        attempts_left=game.attempts_left,
        feedback=_to_guess_out(guess) if guess else None,
        streak=game.streak,
        # When the game ends, include the solution in the response
        solution=game.revealed_solution(),
        note=(f"Game {game.status}. No more guesses allowed."
              if game.is_over else None),
    )

# ---------------- Routes ----------------

@app.get("/puzzle", response_model=PuzzleState, summary="Get today's puzzle state")
def get_puzzle(game: PuzzleSession = Depends(get_game)) -> PuzzleState:
    return _to_state(game)

@app.post("/puzzle/guess", response_model=GuessResponse, summary="Submit a guess")
def submit_guess(
    payload: GuessRequest,
    game: PuzzleSession = Depends(get_game),
) -> GuessResponse:
    tiles = parse_tiles(payload.tiles)
    _require_alphabet(game, tiles)
    # session.submit_guess() performs the length check & updates guesses/status/streak
    try:
        guess = game.submit_guess(tiles)
    except InvalidGuessLength as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if guess is not None and game.is_over:
        logger.info("Puzzle %s %s after %d guess(es).", game.last_played_day, game.status, len(game.guesses))
    return _guess_response(game, guess)

@app.post("/puzzle/hint", response_model=HintOut, summary="Reveal one tile of the solution")
def use_hint(game: PuzzleSession = Depends(get_game)) -> HintOut:
    if game.is_over:
        raise HTTPException(status_code=409, detail="Game finished. No hint available.")
    hint = game.use_hint()
    if hint is None:
        raise HTTPException(status_code=409, detail="No hints left for today's puzzle.")
    return HintOut(
        position=hint.position,
        tile=to_token(hint.tile),
        hints_used=game.hints_used,
        max_hints=game.max_hints,
    )

@app.put("/puzzle/draft/{slot}", response_model=PuzzleState, summary="Place a tile in the draft row")
def place_tile(
    slot: int,
    payload: DraftTileRequest,
    game: PuzzleSession = Depends(get_game),
) -> PuzzleState:
    _require_playing(game)
    tile = parse_tile(payload.tile)
    _require_alphabet(game, [tile])
    try:
        game.place_tile(slot, tile)
    except InvalidSlot as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _to_state(game)

@app.delete("/puzzle/draft/{slot}", response_model=PuzzleState, summary="Clear one draft slot")
def clear_slot(slot: int, game: PuzzleSession = Depends(get_game)) -> PuzzleState:
    _require_playing(game)
    try:
        game.clear_slot(slot)
    except InvalidSlot as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _to_state(game)

@app.delete("/puzzle/draft", response_model=PuzzleState, summary="Clear the draft row")
def reset_draft(game: PuzzleSession = Depends(get_game)) -> PuzzleState:
    _require_playing(game)
    game.reset_draft()
    return _to_state(game)

@app.post("/puzzle/draft/submit", response_model=GuessResponse, summary="Submit the draft row")
def submit_draft(game: PuzzleSession = Depends(get_game)) -> GuessResponse:
    try:
        guess = game.submit_draft()
    except InvalidGuessLength as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _guess_response(game, guess)

@app.get("/puzzle/summary", response_model=ShareSummaryOut, summary="Result data for sharing")
def share_summary(game: PuzzleSession = Depends(get_game)) -> ShareSummaryOut:
    summary = game.share_summary()
    return ShareSummaryOut(
        guess_count=summary.guess_count,
        max_guesses=summary.max_guesses,
        won=summary.won,
        streak=summary.streak,
    )
