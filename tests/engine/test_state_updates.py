from __future__ import annotations

from chess_rules.engine.board import Board
from chess_rules.engine.game import Game
from chess_rules.engine.move import Move, str_to_square


def _mv(coord: str) -> Move:
    return Move(str_to_square(coord[0:2]), str_to_square(coord[2:4]))


def test_halfmove_and_fullmove_counters_and_ep_clearing() -> None:
    b = Board.startpos()
    assert b.halfmove_clock == 0 and b.fullmove_number == 1

    # e2e4: pawn move resets halfmove, sets ep to e3, side -> black
    b.make_move(_mv("e2e4"))
    assert b.halfmove_clock == 0
    assert b.ep_square == str_to_square("e3")
    assert b.fullmove_number == 1  # increments after black moves

    # g8f6: knight move increments halfmove, clears ep, fullmove -> 2
    b.make_move(_mv("g8f6"))
    assert b.halfmove_clock == 1
    assert b.ep_square is None
    assert b.fullmove_number == 2


def test_rook_move_revokes_only_its_side() -> None:
    game = Game.from_fen("r3k2r/p6p/8/8/8/8/P6P/R3K2R w KQkq - 0 1")
    game.apply_move("h1", "g1")
    rights = game.board.castling
    assert not rights.white_kingside
    assert rights.white_queenside and rights.black_kingside and rights.black_queenside

    # undo/redo of an unrelated move leaves the revoked right revoked
    game.apply_move("a7", "a6")
    game.undo()
    game.apply_move("a7", "a6")
    assert game.board.castling.to_fen() == "Qkq"

    # undoing the rook move itself restores it
    game.undo()
    game.undo()
    assert game.board.castling.to_fen() == "KQkq"


def test_king_move_revokes_both_sides() -> None:
    game = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
    game.apply_move("e8", "d8")
    assert game.board.castling.to_fen() == "KQ"


def test_rook_captured_on_home_square_revokes_owner_right() -> None:
    # Ra1xa8: white loses Q for moving, black loses q because its rook is gone
    game = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    record = game.apply_move("a1", "a8")
    assert record.notation == "Ra1xa8+"
    assert game.board.castling.to_fen() == "Kk"

    game.undo()
    assert game.board.castling.to_fen() == "KQkq"


def test_rook_captured_off_home_square_leaves_rights() -> None:
    game = Game.from_fen("4k2r/8/8/8/8/8/r7/R3K3 w Qk - 0 1")
    game.apply_move("a1", "a2")
    assert game.board.castling.to_fen() == "k"
