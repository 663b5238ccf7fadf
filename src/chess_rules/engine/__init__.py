from .board import STARTPOS_FEN, Board
from .errors import ChessError, IllegalMove, InvalidSquare, NoHistory, TerminalState
from .game import Game, GameState, GameStatus, evaluate_status
from .move import CastlingRights, CastlingSide, Move, MoveRecord, Square, parse_move, square_to_str, str_to_square
from .piece import Color, Piece, PieceKind

__all__ = [
    "STARTPOS_FEN",
    "Board",
    "CastlingRights",
    "CastlingSide",
    "ChessError",
    "Color",
    "Game",
    "GameState",
    "GameStatus",
    "IllegalMove",
    "InvalidSquare",
    "Move",
    "MoveRecord",
    "NoHistory",
    "Piece",
    "PieceKind",
    "Square",
    "TerminalState",
    "evaluate_status",
    "parse_move",
    "square_to_str",
    "str_to_square",
]
