from __future__ import annotations

from chess_rules.engine.game import Game
from chess_rules.engine.piece import Color, Piece, PieceKind


def test_white_pawn_push_promotes_to_queen() -> None:
    fen = "k7/4P3/8/8/8/8/8/4K3 w - - 0 1"
    game = Game.from_fen(fen)
    record = game.apply_move("e7", "e8")
    assert record.is_promotion
    assert record.piece == Piece(PieceKind.PAWN, Color.WHITE)
    assert game.board.piece_at("e8") == Piece(PieceKind.QUEEN, Color.WHITE)
    # queen on e8 sees a8 along the empty back rank
    assert record.notation == "Pe7-e8=Q+"
    assert game.status().in_check

    game.undo()
    assert game.board.piece_at("e7") == Piece(PieceKind.PAWN, Color.WHITE)
    assert game.board.piece_at("e8") is None
    assert game.to_fen() == fen


def test_white_pawn_capture_promotion() -> None:
    game = Game.from_fen("3rk3/4P3/8/8/8/8/8/4K3 w - - 0 1")
    record = game.apply_move("e7", "d8")
    assert record.is_promotion
    assert record.captured == Piece(PieceKind.ROOK, Color.BLACK)
    assert record.notation == "Pe7xd8=Q+"
    assert game.captured_pieces()[Color.BLACK] == (PieceKind.ROOK,)


def test_black_pawn_push_promotion() -> None:
    game = Game.from_fen("4k3/8/8/8/8/8/3p4/K7 b - - 0 1")
    game.apply_move("d2", "d1")
    assert game.board.piece_at("d1") == Piece(PieceKind.QUEEN, Color.BLACK)
    assert game.status().in_check
