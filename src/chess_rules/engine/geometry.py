from __future__ import annotations

from typing import Iterable, Iterator, Tuple

from .move import Square
from .piece import Color

# (d_row, d_col); row grows toward white's back rank
ROOK_DIRECTIONS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))
BISHOP_DIRECTIONS: Tuple[Tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
QUEEN_DIRECTIONS = ROOK_DIRECTIONS + BISHOP_DIRECTIONS

KNIGHT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-2, -1),
    (-2, 1),
    (-1, -2),
    (-1, 2),
    (1, -2),
    (1, 2),
    (2, -1),
    (2, 1),
)
KING_OFFSETS = QUEEN_DIRECTIONS


def is_on_board(row: int, col: int) -> bool:
    return 0 <= row < 8 and 0 <= col < 8


def offset_squares(sq: Square, offsets: Iterable[Tuple[int, int]]) -> Iterator[Square]:
    """Yield the on-board squares at each (d_row, d_col) offset from ``sq``."""
    for dr, dc in offsets:
        r, c = sq.row + dr, sq.col + dc
        if is_on_board(r, c):
            yield Square(r, c)


def walk_ray(sq: Square, dr: int, dc: int) -> Iterator[Square]:
    """Yield squares along one direction from ``sq`` (exclusive) to the edge.

    Callers stop iterating at the first occupied square.
    """
    r, c = sq.row + dr, sq.col + dc
    while is_on_board(r, c):
        yield Square(r, c)
        r += dr
        c += dc


def pawn_direction(color: Color) -> int:
    """Row delta of a pawn advance: white moves toward row 0."""
    return -1 if color is Color.WHITE else 1


def pawn_start_row(color: Color) -> int:
    return 6 if color is Color.WHITE else 1


def promotion_row(color: Color) -> int:
    return 0 if color is Color.WHITE else 7


def back_row(color: Color) -> int:
    return 7 if color is Color.WHITE else 0


def pawn_attack_squares(sq: Square, color: Color) -> Iterator[Square]:
    """Yield the two forward diagonals a pawn covers, whether occupied or not."""
    d = pawn_direction(color)
    return offset_squares(sq, ((d, -1), (d, 1)))
