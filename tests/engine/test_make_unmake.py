from __future__ import annotations

import copy
import random

import pytest

from chess_rules.engine.board import Board, STARTPOS_FEN
from chess_rules.engine.errors import IllegalMove
from chess_rules.engine.game import Game
from chess_rules.engine.move import Move, str_to_square
from chess_rules.engine.piece import Color, Piece, PieceKind


def _snapshot(game: Game):
    return (
        copy.deepcopy(game.board),
        game.captured_pieces(),
        game.status(),
        game.move_history(),
    )


@pytest.mark.parametrize(
    "fen, frm, to",
    [
        # quiet
        (STARTPOS_FEN, "g1", "f3"),
        # double step (sets ep target)
        (STARTPOS_FEN, "e2", "e4"),
        # capture
        ("4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1", "e4", "d5"),
        # en passant
        ("4k3/8/8/3Pp3/8/8/8/4K3 w - e6 0 1", "d5", "e6"),
        # kingside castle
        ("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1", "e1", "g1"),
        # queenside castle
        ("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1", "e1", "c1"),
        # promotion
        ("k7/4P3/8/8/8/8/8/4K3 w - - 0 1", "e7", "e8"),
        # rook capture on its home square
        ("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1", "a1", "a8"),
    ],
)
def test_undo_restores_everything(fen: str, frm: str, to: str) -> None:
    game = Game.from_fen(fen)
    before = _snapshot(game)
    game.apply_move(frm, to)
    assert game.to_fen() != fen
    game.undo()
    assert _snapshot(game) == before
    assert game.to_fen() == fen


def test_make_unmake_restores_position() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    record = b.make_move(Move(str_to_square("e2"), str_to_square("e4")))
    assert b.to_fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"
    b.unmake_move(record)
    assert b.to_fen() == STARTPOS_FEN


def test_make_move_rejects_bad_origin_without_mutating() -> None:
    b = Board.startpos()
    with pytest.raises(IllegalMove):
        b.make_move(Move(str_to_square("e4"), str_to_square("e5")))
    with pytest.raises(IllegalMove):
        b.make_move(Move(str_to_square("e7"), str_to_square("e5")))
    assert b.to_fen() == STARTPOS_FEN


def _assert_king_cache(b: Board) -> None:
    for color, sq in b.king_squares.items():
        assert b.piece_at(sq) == Piece(PieceKind.KING, color)


@pytest.mark.parametrize("seed", [1, 7, 42])
def test_random_playout_keeps_invariants_and_unwinds(seed: int) -> None:
    rng = random.Random(seed)
    game = Game.new()
    for _ in range(80):
        if game.status().is_terminal:
            break
        moves = game.all_legal_moves()
        assert moves
        m = rng.choice(moves)
        mover = game.status().turn
        game.apply_move(m.from_sq, m.to_sq)
        # the side that just moved is never left in check
        assert not game.board.in_check(mover)
        _assert_king_cache(game.board)
    plies = len(game.records())
    assert plies > 0
    while game.undo() is not None:
        _assert_king_cache(game.board)
    assert game.to_fen() == STARTPOS_FEN
    assert game.captured_pieces() == {Color.WHITE: (), Color.BLACK: ()}
    assert game.board == Board.startpos()
