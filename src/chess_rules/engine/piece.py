from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Color(Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE


class PieceKind(Enum):
    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"

    @property
    def letter(self) -> str:
        """Uppercase letter used in move descriptors (``P``, ``N`` ...)."""
        return self.value.upper()


@dataclass(frozen=True)
class Piece:
    """Immutable (kind, color) value occupying a square."""

    kind: PieceKind
    color: Color

    def to_fen_char(self) -> str:
        """Return the FEN symbol: uppercase for white, lowercase for black."""
        ch = self.kind.value
        return ch.upper() if self.color is Color.WHITE else ch

    @classmethod
    def from_fen_char(cls, ch: str) -> "Piece":
        """Parse a single FEN piece symbol.

        Raises:
            ValueError: If ``ch`` is not one of ``pnbrqkPNBRQK``.
        """
        try:
            kind = PieceKind(ch.lower())
        except ValueError as e:
            raise ValueError(f"invalid piece in FEN: {ch!r}") from e
        color = Color.WHITE if ch.isupper() else Color.BLACK
        return cls(kind, color)

    def __str__(self) -> str:
        return self.to_fen_char()


BACK_RANK_ORDER = (
    PieceKind.ROOK,
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.QUEEN,
    PieceKind.KING,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
    PieceKind.ROOK,
)
