from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import NamedTuple, Optional, Tuple, Union

from .errors import InvalidSquare
from .piece import Color, Piece, PieceKind


class Square(NamedTuple):
    """Board coordinate.

    Row 0 is black's back rank (rank 8) and row 7 white's (rank 1); col 0 is
    the a-file.
    """

    row: int
    col: int

    def __str__(self) -> str:
        return square_to_str(self)


SquareLike = Union[Square, Tuple[int, int], str]


def str_to_square(s: str) -> Square:
    """Convert algebraic notation into a Square.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        Square: Row/col coordinate for ``s``.

    Raises:
        InvalidSquare: If ``s`` is not a valid square.
    """
    if not isinstance(s, str) or len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise InvalidSquare(f"invalid square: {s!r}")
    col = ord(s[0]) - ord("a")
    row = 8 - int(s[1])
    return Square(row, col)


def square_to_str(sq: Square) -> str:
    """Convert a Square into algebraic notation.

    Raises:
        InvalidSquare: If ``sq`` lies outside the board.
    """
    row, col = sq
    if not (0 <= row < 8 and 0 <= col < 8):
        raise InvalidSquare(f"invalid square: ({row}, {col})")
    return chr(ord("a") + col) + str(8 - row)


def as_square(value: SquareLike) -> Square:
    """Normalize a Square, (row, col) pair or algebraic name into a Square.

    Raises:
        InvalidSquare: If the value does not denote an on-board square.
    """
    if isinstance(value, str):
        return str_to_square(value)
    try:
        row, col = value
    except (TypeError, ValueError) as e:
        raise InvalidSquare(f"invalid square: {value!r}") from e
    if not isinstance(row, int) or not isinstance(col, int):
        raise InvalidSquare(f"invalid square: {value!r}")
    if not (0 <= row < 8 and 0 <= col < 8):
        raise InvalidSquare(f"invalid square: ({row}, {col})")
    return Square(row, col)


@dataclass(frozen=True)
class Move:
    """A (from, to) request in coordinate form.

    Attributes:
        from_sq (Square): Origin square.
        to_sq (Square): Destination square.
    """

    from_sq: Square
    to_sq: Square

    def to_coord(self) -> str:
        """Serialize the move like ``"e2e4"``."""
        return square_to_str(self.from_sq) + square_to_str(self.to_sq)


def parse_move(text: str) -> Move:
    """Parse a coordinate move string such as ``"e2e4"``.

    A trailing promotion letter is accepted only when it is ``q``, since
    promotion is always to a queen.

    Raises:
        InvalidSquare: If either square is malformed.
        ValueError: If the string has an invalid length or promotion piece.
    """
    if len(text) not in (4, 5):
        raise ValueError(f"invalid move length: {text!r}")
    if len(text) == 5 and text[4].lower() != "q":
        raise ValueError(f"unsupported promotion piece: {text[4]!r}")
    return Move(str_to_square(text[0:2]), str_to_square(text[2:4]))


class CastlingSide(Enum):
    NONE = "none"
    KINGSIDE = "kingside"
    QUEENSIDE = "queenside"


@dataclass(frozen=True)
class CastlingRights:
    """Per-color kingside/queenside availability.

    Values are immutable so a reference doubles as an undo snapshot.
    """

    white_kingside: bool = True
    white_queenside: bool = True
    black_kingside: bool = True
    black_queenside: bool = True

    @classmethod
    def none(cls) -> "CastlingRights":
        return cls(False, False, False, False)

    @classmethod
    def from_fen(cls, field: str) -> "CastlingRights":
        """Parse the FEN castling field (``"KQkq"`` subset or ``"-"``)."""
        if field == "-":
            return cls.none()
        for ch in field:
            if ch not in "KQkq":
                raise ValueError("invalid castling rights")
        return cls("K" in field, "Q" in field, "k" in field, "q" in field)

    def to_fen(self) -> str:
        out = ""
        if self.white_kingside:
            out += "K"
        if self.white_queenside:
            out += "Q"
        if self.black_kingside:
            out += "k"
        if self.black_queenside:
            out += "q"
        return out or "-"

    def has(self, color: Color, side: CastlingSide) -> bool:
        if side is CastlingSide.KINGSIDE:
            return self.white_kingside if color is Color.WHITE else self.black_kingside
        if side is CastlingSide.QUEENSIDE:
            return self.white_queenside if color is Color.WHITE else self.black_queenside
        return False

    def revoke(self, color: Color, side: CastlingSide) -> "CastlingRights":
        """Return a copy with one right cleared."""
        if side is CastlingSide.KINGSIDE:
            key = "white_kingside" if color is Color.WHITE else "black_kingside"
        elif side is CastlingSide.QUEENSIDE:
            key = "white_queenside" if color is Color.WHITE else "black_queenside"
        else:
            return self
        return replace(self, **{key: False})

    def revoke_all(self, color: Color) -> "CastlingRights":
        return self.revoke(color, CastlingSide.KINGSIDE).revoke(color, CastlingSide.QUEENSIDE)


@dataclass(frozen=True)
class MoveRecord:
    """Everything needed to describe and reverse one applied move.

    Attributes:
        from_sq (Square): Origin square.
        to_sq (Square): Destination square.
        piece (Piece): The moving piece before the move (a pawn, even when
            it promoted).
        captured (Optional[Piece]): Captured piece, if any.
        captured_sq (Optional[Square]): Where the captured piece stood; for
            en passant this is the square behind ``to_sq``.
        is_en_passant (bool): Capture was en passant.
        castling (CastlingSide): Which side castled, if any.
        is_promotion (bool): Pawn was replaced by a queen on ``to_sq``.
        prev_ep_square (Optional[Square]): En-passant target before the move.
        prev_castling (CastlingRights): Castling rights before the move.
        prev_halfmove_clock (int): Halfmove clock before the move.
        prev_fullmove_number (int): Fullmove number before the move.
        suffix (str): ``"+"`` or ``"#"`` once the resulting status is known.
    """

    from_sq: Square
    to_sq: Square
    piece: Piece
    captured: Optional[Piece]
    captured_sq: Optional[Square]
    is_en_passant: bool
    castling: CastlingSide
    is_promotion: bool
    prev_ep_square: Optional[Square]
    prev_castling: CastlingRights
    prev_halfmove_clock: int
    prev_fullmove_number: int
    suffix: str = ""

    @property
    def move(self) -> Move:
        return Move(self.from_sq, self.to_sq)

    @property
    def notation(self) -> str:
        """Human-readable descriptor, e.g. ``Ng1-f3``, ``Pe5xd6 e.p.``, ``O-O``."""
        if self.castling is CastlingSide.KINGSIDE:
            return "O-O" + self.suffix
        if self.castling is CastlingSide.QUEENSIDE:
            return "O-O-O" + self.suffix
        sep = "x" if self.captured is not None else "-"
        text = f"{self.piece.kind.letter}{square_to_str(self.from_sq)}{sep}{square_to_str(self.to_sq)}"
        if self.is_promotion:
            text += "=" + PieceKind.QUEEN.letter
        if self.is_en_passant:
            text += " e.p."
        return text + self.suffix

    def __str__(self) -> str:
        return self.notation
