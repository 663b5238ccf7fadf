from __future__ import annotations

from chess_rules.engine.board import Board
from chess_rules.engine.move import square_to_str, str_to_square
from chess_rules.engine.piece import Color


def names(squares) -> set[str]:
    return {square_to_str(s) for s in squares}


def legal(b: Board, sq: str) -> set[str]:
    return names(b.legal_moves(str_to_square(sq)))


def test_startpos_pawn_and_knight() -> None:
    b = Board.startpos()
    assert legal(b, "e2") == {"e3", "e4"}
    assert legal(b, "g1") == {"f3", "h3"}
    assert legal(b, "b1") == {"a3", "c3"}
    assert legal(b, "a1") == set()
    assert legal(b, "d1") == set()
    assert len(b.all_legal_moves()) == 20


def test_not_side_to_move_or_empty_square_gives_nothing() -> None:
    b = Board.startpos()
    assert legal(b, "e7") == set()
    assert legal(b, "e4") == set()
    assert b.pseudo_legal_moves(str_to_square("e4")) == []


def test_pawn_double_step_needs_both_squares_empty() -> None:
    # knight on e3 blocks e2 entirely; knight on d4 blocks only d2-d4
    b = Board.from_fen("4k3/8/8/8/3n4/4n3/3PP3/4K3 w - - 0 1")
    assert legal(b, "e2") == set()
    assert legal(b, "d2") == {"d3", "e3"}


def test_black_pawn_moves_down_the_board() -> None:
    b = Board.from_fen("4k3/3p4/4P3/8/8/8/8/4K3 b - - 0 1")
    assert legal(b, "d7") == {"d6", "d5", "e6"}


def test_rook_ray_stops_at_pieces() -> None:
    # white rook a1, own pawn a4, black knight c1
    b = Board.from_fen("4k3/8/8/8/P7/8/8/R1n1K3 w - - 0 1")
    assert legal(b, "a1") == {"a2", "a3", "b1", "c1"}


def test_bishop_and_queen_rays() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/8/2B1K3 w - - 0 1")
    assert legal(b, "c1") == {"b2", "a3", "d2", "e3", "f4", "g5", "h6"}
    b = Board.from_fen("4k3/8/8/8/8/8/8/3QK3 w - - 0 1")
    assert {"d2", "d8", "c1", "a1", "c2", "a4", "e2", "h5"} <= legal(b, "d1")
    assert "e1" not in legal(b, "d1")


def test_knight_in_center() -> None:
    b = Board.from_fen("4k3/8/8/8/3N4/8/8/4K3 w - - 0 1")
    assert legal(b, "d4") == {"b3", "b5", "c2", "c6", "e2", "e6", "f3", "f5"}


def test_pinned_rook_stays_on_file() -> None:
    b = Board.from_fen("4r1k1/8/8/8/8/8/4R3/4K3 w - - 0 1")
    assert "d2" in names(b.pseudo_legal_moves(str_to_square("e2")))
    assert legal(b, "e2") == {"e3", "e4", "e5", "e6", "e7", "e8"}


def test_king_cannot_step_into_attack() -> None:
    # black rook on d8 covers the d-file
    b = Board.from_fen("3rk3/8/8/8/8/8/8/4K3 w - - 0 1")
    assert legal(b, "e1") == {"e2", "f1", "f2"}


def test_only_check_evasions_are_legal() -> None:
    # white in check from bishop b4; knight can block on d2/c3, king can step aside
    b = Board.from_fen("4k3/8/8/8/1b6/8/8/1N2K3 w - - 0 1")
    assert b.in_check()
    assert legal(b, "b1") == {"c3", "d2"}
    assert legal(b, "e1") == {"d1", "e2", "f1", "f2"}


def test_attack_query() -> None:
    b = Board.from_fen("4k3/8/8/8/P7/8/4P3/R3K3 w - - 0 1")
    # pawns cover empty diagonals, never the square in front
    assert b.is_attacked(str_to_square("d3"), Color.WHITE)
    assert b.is_attacked(str_to_square("f3"), Color.WHITE)
    assert not b.is_attacked(str_to_square("e3"), Color.WHITE)
    # rook ray is blocked by the a4 pawn but covers the pawn's own square
    assert b.is_attacked(str_to_square("a4"), Color.WHITE)
    assert not b.is_attacked(str_to_square("a5"), Color.WHITE)
    # black king covers its neighbourhood only
    assert b.is_attacked(str_to_square("d7"), Color.BLACK)
    assert not b.is_attacked(str_to_square("e6"), Color.BLACK)
