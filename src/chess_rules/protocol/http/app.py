from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .error import (
    chess_error_handler,
    exception_handler,
    http_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from .session import InMemorySessionStore, SessionLimitReached
from ... import __version__
from ...config import Settings
from ...engine.board import STARTPOS_FEN, Board
from ...engine.errors import ChessError
from ...engine.game import Game
from ...engine.move import parse_move, square_to_str, str_to_square
from ...engine.perft import perft as perft_nodes
from ...engine.piece import Color


logger = logging.getLogger(__name__)


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class MoveRequest(BaseModel):
    """Either ``{"from": "e2", "to": "e4"}`` or ``{"move": "e2e4"}``."""

    model_config = ConfigDict(populate_by_name=True)

    from_square: Optional[str] = Field(default=None, alias="from", description="Origin, e.g. e2")
    to: Optional[str] = Field(default=None, description="Destination, e.g. e4")
    move: Optional[str] = Field(default=None, description="Coordinate move, e.g. e2e4")

    @model_validator(mode="after")
    def _one_form(self) -> "MoveRequest":
        if self.move is None and (self.from_square is None or self.to is None):
            raise ValueError("provide either 'move' or both 'from' and 'to'")
        return self


class PerftRequest(BaseModel):
    fen: str = Field(default=STARTPOS_FEN, description="FEN string")
    depth: int = Field(default=1, ge=0, le=4)


class LegalMovesResponse(BaseModel):
    square: str
    destinations: List[str]


class GameStateResponse(BaseModel):
    game_id: str
    fen: str
    turn: str
    state: str
    in_check: bool
    checkmate: bool
    stalemate: bool
    last_move: Optional[str]
    move_history: List[str]
    captured: Dict[str, List[str]]


def _state_response(game_id: str, game: Game) -> GameStateResponse:
    status = game.status()
    history = list(game.move_history())
    return GameStateResponse(
        game_id=game_id,
        fen=game.to_fen(),
        turn=_color_name(status.turn),
        state=status.state.value,
        in_check=status.in_check,
        checkmate=status.is_checkmate,
        stalemate=status.is_stalemate,
        last_move=history[-1] if history else None,
        move_history=history,
        captured={
            _color_name(color): [kind.name.lower() for kind in kinds]
            for color, kinds in game.captured_pieces().items()
        },
    )


def _color_name(color: Color) -> str:
    return color.name.lower()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    app = FastAPI(title="Chess Rules API", version=__version__)

    logging.basicConfig(level=settings.log_level.upper())

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ChessError, chess_error_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore(max_sessions=settings.max_sessions)
    app.state.sessions = store

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game() -> CreateGameResponse:
        game = Game.new()
        try:
            game_id = store.create(game)
        except SessionLimitReached as e:
            raise HTTPException(status_code=409, detail=str(e))
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameStateResponse)
    async def get_state(game_id: str) -> GameStateResponse:
        with store.session(game_id) as game:
            return _state_response(game_id, _require_game(game))

    @app.get("/api/games/{game_id}/moves/{square}", response_model=LegalMovesResponse)
    async def legal_moves(game_id: str, square: str) -> LegalMovesResponse:
        sq = str_to_square(square)
        with store.session(game_id) as game:
            dests = _require_game(game).legal_moves(sq)
        return LegalMovesResponse(square=square, destinations=[square_to_str(d) for d in dests])

    @app.post("/api/games/{game_id}/move", response_model=GameStateResponse)
    async def make_move(game_id: str, req: MoveRequest) -> GameStateResponse:
        if req.move is not None:
            try:
                move = parse_move(req.move)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            from_sq, to_sq = move.from_sq, move.to_sq
        else:
            from_sq, to_sq = str_to_square(req.from_square or ""), str_to_square(req.to or "")
        with store.session(game_id) as game:
            game = _require_game(game)
            record = game.apply_move(from_sq, to_sq)
            logger.info("move", extra={"game_id": game_id, "move": record.notation})
            return _state_response(game_id, game)

    @app.post("/api/games/{game_id}/undo", response_model=GameStateResponse)
    async def undo(game_id: str) -> GameStateResponse:
        with store.session(game_id) as game:
            game = _require_game(game)
            game.undo_strict()
            return _state_response(game_id, game)

    @app.post("/api/games/{game_id}/reset", response_model=GameStateResponse)
    async def reset(game_id: str) -> GameStateResponse:
        with store.session(game_id) as game:
            game = _require_game(game)
            game.new_game()
            return _state_response(game_id, game)

    @app.delete("/api/games/{game_id}", status_code=204)
    async def delete_game(game_id: str) -> Response:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return Response(status_code=204)

    @app.post("/api/perft")
    async def perft(req: PerftRequest) -> Dict[str, int]:
        try:
            board = Board.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return {"nodes": perft_nodes(board, req.depth)}

    return app


def _require_game(game: Optional[Game]) -> Game:
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game
