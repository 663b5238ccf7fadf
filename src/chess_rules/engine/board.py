from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import IllegalMove
from .geometry import (
    BISHOP_DIRECTIONS,
    KING_OFFSETS,
    KNIGHT_OFFSETS,
    QUEEN_DIRECTIONS,
    ROOK_DIRECTIONS,
    back_row,
    offset_squares,
    pawn_attack_squares,
    pawn_direction,
    pawn_start_row,
    promotion_row,
    walk_ray,
)
from .move import (
    CastlingRights,
    CastlingSide,
    Move,
    MoveRecord,
    Square,
    SquareLike,
    as_square,
    square_to_str,
    str_to_square,
)
from .piece import BACK_RANK_ORDER, Color, Piece, PieceKind


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

KING_HOME_COL = 4
# side -> (rook home col, rook col after castling, king col after castling)
CASTLING_COLS = {
    CastlingSide.KINGSIDE: (7, 5, 6),
    CastlingSide.QUEENSIDE: (0, 3, 2),
}

SLIDER_DIRECTIONS = {
    PieceKind.ROOK: ROOK_DIRECTIONS,
    PieceKind.BISHOP: BISHOP_DIRECTIONS,
    PieceKind.QUEEN: QUEEN_DIRECTIONS,
}

Grid = List[List[Optional[Piece]]]


def _empty_grid() -> Grid:
    return [[None] * 8 for _ in range(8)]


@dataclass
class Board:
    """Mutable board state: piece grid plus auxiliary state.

    Notes:
    - Squares are (row, col); row 0 is rank 8, row 7 is rank 1.
    - ``king_squares`` always mirrors where each king actually stands. Every
      mutation that moves a king updates it.
    - The board keeps no history; ``make_move`` returns the record that
      ``unmake_move`` needs.
    """

    grid: Grid
    side_to_move: Color
    castling: CastlingRights
    ep_square: Optional[Square]
    halfmove_clock: int = 0
    fullmove_number: int = 1
    king_squares: Dict[Color, Square] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.king_squares:
            self.king_squares = self._locate_kings()

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board in the standard starting position, white to move."""
        grid = _empty_grid()
        for col, kind in enumerate(BACK_RANK_ORDER):
            grid[0][col] = Piece(kind, Color.BLACK)
            grid[7][col] = Piece(kind, Color.WHITE)
        for col in range(8):
            grid[1][col] = Piece(PieceKind.PAWN, Color.BLACK)
            grid[6][col] = Piece(PieceKind.PAWN, Color.WHITE)
        return cls(
            grid=grid,
            side_to_move=Color.WHITE,
            castling=CastlingRights(),
            ep_square=None,
        )

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a Forsyth-Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string describing the position to load.

        Returns:
            Board: Board initialized with the state encoded in ``fen``.

        Raises:
            ValueError: If ``fen`` is empty, has the wrong number of fields,
                contains invalid placement, castling rights, en passant
                square or counters, does not have exactly one king per
                side, or leaves the side not to move in check.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        grid = _empty_grid()
        # first FEN rank is rank 8, which is row 0
        for row, rank in enumerate(ranks):
            col = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    col += n
                else:
                    if col >= 8:
                        raise ValueError("too many squares in FEN rank")
                    grid[row][col] = Piece.from_fen_char(ch)
                    col += 1
            if col != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")

        side = Color(stm)
        rights = CastlingRights.from_fen(castling)

        ep_square: Optional[Square]
        if ep == "-":
            ep_square = None
        else:
            try:
                ep_square = str_to_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            # the opponent just double-stepped past ep_square
            opp = side.opponent
            if ep_square.row != pawn_start_row(opp) + pawn_direction(opp):
                raise ValueError("invalid en passant square rank")
            landed_row = ep_square.row + pawn_direction(opp)
            if (
                grid[ep_square.row][ep_square.col] is not None
                or grid[pawn_start_row(opp)][ep_square.col] is not None
                or grid[landed_row][ep_square.col] != Piece(PieceKind.PAWN, opp)
            ):
                raise ValueError("invalid en passant square")

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise ValueError("invalid move counters in FEN")

        board = cls(
            grid=grid,
            side_to_move=side,
            castling=rights,
            ep_square=ep_square,
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
        )
        if board.in_check(side.opponent):
            raise ValueError("side not to move is in check")
        return board

    def to_fen(self) -> str:
        """Serialize the current position into a FEN string."""
        ranks_str: List[str] = []
        for row in self.grid:
            run = 0
            out = []
            for piece in row:
                if piece is None:
                    run += 1
                    continue
                if run > 0:
                    out.append(str(run))
                    run = 0
                out.append(piece.to_fen_char())
            if run > 0:
                out.append(str(run))
            ranks_str.append("".join(out))
        placement = "/".join(ranks_str)
        ep = square_to_str(self.ep_square) if self.ep_square is not None else "-"
        return (
            f"{placement} {self.side_to_move.value} {self.castling.to_fen()} {ep} "
            f"{self.halfmove_clock} {self.fullmove_number}"
        )

    def _locate_kings(self) -> Dict[Color, Square]:
        found: Dict[Color, List[Square]] = {Color.WHITE: [], Color.BLACK: []}
        for sq, piece in self.pieces():
            if piece.kind is PieceKind.KING:
                found[piece.color].append(sq)
        for color, squares in found.items():
            if len(squares) != 1:
                raise ValueError(f"position must have exactly one {color.name.lower()} king")
        return {color: squares[0] for color, squares in found.items()}

    # --- Cell access ---
    def piece_at(self, sq: SquareLike) -> Optional[Piece]:
        """Return the piece on ``sq`` or None.

        Raises:
            InvalidSquare: If ``sq`` is off the board.
        """
        s = as_square(sq)
        return self.grid[s.row][s.col]

    def _at(self, sq: Square) -> Optional[Piece]:
        return self.grid[sq.row][sq.col]

    def _put(self, sq: Square, piece: Optional[Piece]) -> None:
        self.grid[sq.row][sq.col] = piece

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Square, Piece]]:
        """Yield (square, piece) for every occupied square, optionally one color."""
        for r, row in enumerate(self.grid):
            for c, piece in enumerate(row):
                if piece is not None and (color is None or piece.color is color):
                    yield Square(r, c), piece

    # --- Pseudo-legal generation ---
    def pseudo_legal_moves(self, sq: Square) -> List[Square]:
        """Return destinations reachable by the piece on ``sq``, ignoring self-check.

        Returns an empty list when ``sq`` is empty. Castling destinations are
        appended after the ordinary king steps.
        """
        piece = self._at(sq)
        if piece is None:
            return []
        kind = piece.kind
        if kind is PieceKind.PAWN:
            return self._pawn_moves(sq, piece)
        if kind is PieceKind.KNIGHT:
            return self._step_moves(sq, piece, KNIGHT_OFFSETS)
        if kind is PieceKind.KING:
            return self._step_moves(sq, piece, KING_OFFSETS) + self._castling_moves(sq, piece)
        return self._slider_moves(sq, piece, SLIDER_DIRECTIONS[kind])

    def _pawn_moves(self, sq: Square, piece: Piece) -> List[Square]:
        out: List[Square] = []
        d = pawn_direction(piece.color)
        r = sq.row + d
        if 0 <= r < 8:
            one = Square(r, sq.col)
            if self._at(one) is None:
                out.append(one)
                if sq.row == pawn_start_row(piece.color):
                    two = Square(r + d, sq.col)
                    if self._at(two) is None:
                        out.append(two)
        for target in pawn_attack_squares(sq, piece.color):
            occupant = self._at(target)
            if occupant is not None:
                if occupant.color is not piece.color:
                    out.append(target)
            elif target == self.ep_square and self._en_passant_victim(piece.color) is not None:
                out.append(target)
        return out

    def _en_passant_victim(self, color: Color) -> Optional[Square]:
        """Square of the pawn ``color`` may take en passant, or None."""
        if self.ep_square is None or color is not self.side_to_move:
            return None
        victim = Square(self.ep_square.row - pawn_direction(color), self.ep_square.col)
        if self._at(victim) != Piece(PieceKind.PAWN, color.opponent):
            return None
        return victim

    def _step_moves(self, sq: Square, piece: Piece, offsets) -> List[Square]:
        out: List[Square] = []
        for target in offset_squares(sq, offsets):
            occupant = self._at(target)
            if occupant is None or occupant.color is not piece.color:
                out.append(target)
        return out

    def _slider_moves(self, sq: Square, piece: Piece, directions) -> List[Square]:
        out: List[Square] = []
        for dr, dc in directions:
            for target in walk_ray(sq, dr, dc):
                occupant = self._at(target)
                if occupant is None:
                    out.append(target)
                    continue
                if occupant.color is not piece.color:
                    out.append(target)
                break
        return out

    def _castling_moves(self, sq: Square, piece: Piece) -> List[Square]:
        color = piece.color
        row = back_row(color)
        if sq != (row, KING_HOME_COL):
            return []
        opponent = color.opponent
        if not (self.castling.has(color, CastlingSide.KINGSIDE) or self.castling.has(color, CastlingSide.QUEENSIDE)):
            return []
        if self.is_attacked(sq, opponent):
            return []
        out: List[Square] = []
        rook = Piece(PieceKind.ROOK, color)
        for side, (rook_col, _, king_col) in CASTLING_COLS.items():
            if not self.castling.has(color, side):
                continue
            if self.grid[row][rook_col] != rook:
                continue
            lo, hi = sorted((KING_HOME_COL, rook_col))
            if any(self.grid[row][c] is not None for c in range(lo + 1, hi)):
                continue
            # only the squares the king crosses; the queenside rook's b-file transit is not checked
            step = 1 if king_col > KING_HOME_COL else -1
            transit = (Square(row, KING_HOME_COL + step), Square(row, king_col))
            if any(self.is_attacked(t, opponent) for t in transit):
                continue
            out.append(Square(row, king_col))
        return out

    # --- Attack query ---
    def is_attacked(self, sq: Square, by: Color) -> bool:
        """Return True if any piece of color ``by`` covers ``sq``.

        Pawns cover their two forward diagonals whether or not anything stands
        there; kings cover adjacent squares only (castling never attacks).
        """
        for origin, piece in self.pieces(by):
            if self._covers(origin, piece, sq):
                return True
        return False

    def _covers(self, origin: Square, piece: Piece, target: Square) -> bool:
        dr = target.row - origin.row
        dc = target.col - origin.col
        if dr == 0 and dc == 0:
            return False
        kind = piece.kind
        if kind is PieceKind.PAWN:
            return dr == pawn_direction(piece.color) and abs(dc) == 1
        if kind is PieceKind.KNIGHT:
            return (abs(dr), abs(dc)) in ((1, 2), (2, 1))
        if kind is PieceKind.KING:
            return max(abs(dr), abs(dc)) == 1
        straight = dr == 0 or dc == 0
        diagonal = abs(dr) == abs(dc)
        if kind is PieceKind.ROOK and not straight:
            return False
        if kind is PieceKind.BISHOP and not diagonal:
            return False
        if kind is PieceKind.QUEEN and not (straight or diagonal):
            return False
        step_r = (dr > 0) - (dr < 0)
        step_c = (dc > 0) - (dc < 0)
        for between in walk_ray(origin, step_r, step_c):
            if between == target:
                return True
            if self._at(between) is not None:
                return False
        return False

    def in_check(self, color: Optional[Color] = None) -> bool:
        """Return True if ``color`` (default: side to move) has its king attacked."""
        c = self.side_to_move if color is None else color
        return self.is_attacked(self.king_squares[c], c.opponent)

    # --- Legal filter ---
    def legal_moves(self, sq: Square) -> List[Square]:
        """Return pseudo-legal destinations that do not leave the mover in check.

        Empty if ``sq`` is empty or holds a piece of the side not to move.
        Each candidate is applied and reverted on this board.
        """
        piece = self._at(sq)
        if piece is None or piece.color is not self.side_to_move:
            return []
        color = piece.color
        legal: List[Square] = []
        for target in self.pseudo_legal_moves(sq):
            record = self.make_move(Move(sq, target))
            exposed = self.is_attacked(self.king_squares[color], color.opponent)
            self.unmake_move(record)
            if not exposed:
                legal.append(target)
        return legal

    def all_legal_moves(self) -> List[Move]:
        """Return every legal move for the side to move."""
        moves: List[Move] = []
        for sq, _ in list(self.pieces(self.side_to_move)):
            moves.extend(Move(sq, to) for to in self.legal_moves(sq))
        return moves

    def has_legal_moves(self) -> bool:
        """Return True if the side to move has at least one legal move."""
        for sq, _ in list(self.pieces(self.side_to_move)):
            if self.legal_moves(sq):
                return True
        return False

    # --- Make / unmake ---
    def make_move(self, move: Move) -> MoveRecord:
        """Apply ``move`` in place and return the record that reverses it.

        Only ownership is checked here; legality is the caller's concern
        (see ``Game.apply_move``). The record is built before any cell is
        written, so a rejected move leaves the board untouched.

        Raises:
            IllegalMove: If ``from_sq`` is empty or not the side to move's.
        """
        from_sq, to_sq = move.from_sq, move.to_sq
        piece = self._at(from_sq)
        if piece is None:
            raise IllegalMove(f"no piece on {square_to_str(from_sq)}")
        if piece.color is not self.side_to_move:
            raise IllegalMove(f"piece on {square_to_str(from_sq)} is not the side to move's")
        color = piece.color
        target = self._at(to_sq)

        is_pawn = piece.kind is PieceKind.PAWN
        victim: Optional[Square] = None
        if is_pawn and target is None and to_sq == self.ep_square and to_sq.col != from_sq.col:
            victim = self._en_passant_victim(color)
        is_en_passant = victim is not None
        captured: Optional[Piece]
        captured_sq: Optional[Square]
        if victim is not None:
            captured_sq = victim
            captured = self._at(victim)
        elif target is not None:
            captured_sq = to_sq
            captured = target
        else:
            captured_sq = None
            captured = None

        castling = CastlingSide.NONE
        if piece.kind is PieceKind.KING and abs(to_sq.col - from_sq.col) == 2:
            castling = CastlingSide.KINGSIDE if to_sq.col > from_sq.col else CastlingSide.QUEENSIDE
        is_promotion = is_pawn and to_sq.row == promotion_row(color)

        record = MoveRecord(
            from_sq=from_sq,
            to_sq=to_sq,
            piece=piece,
            captured=captured,
            captured_sq=captured_sq,
            is_en_passant=is_en_passant,
            castling=castling,
            is_promotion=is_promotion,
            prev_ep_square=self.ep_square,
            prev_castling=self.castling,
            prev_halfmove_clock=self.halfmove_clock,
            prev_fullmove_number=self.fullmove_number,
        )

        if captured_sq is not None:
            self._put(captured_sq, None)
        self._put(from_sq, None)
        self._put(to_sq, Piece(PieceKind.QUEEN, color) if is_promotion else piece)

        if castling is not CastlingSide.NONE:
            rook_from, rook_to, _ = CASTLING_COLS[castling]
            row = from_sq.row
            self.grid[row][rook_to] = self.grid[row][rook_from]
            self.grid[row][rook_from] = None

        if piece.kind is PieceKind.KING:
            self.king_squares[color] = to_sq

        self.castling = self._rights_after(piece, from_sq, captured, captured_sq)

        self.ep_square = None
        if is_pawn and abs(to_sq.row - from_sq.row) == 2:
            self.ep_square = Square((from_sq.row + to_sq.row) // 2, from_sq.col)

        if is_pawn or captured is not None:
            self.halfmove_clock = 0
        else:
            self.halfmove_clock += 1
        if color is Color.BLACK:
            self.fullmove_number += 1

        self.side_to_move = color.opponent
        return record

    def unmake_move(self, record: MoveRecord) -> None:
        """Reverse ``record``, which must be the last move made on this board."""
        color = record.piece.color
        self.side_to_move = color

        self._put(record.to_sq, None)
        self._put(record.from_sq, record.piece)

        if record.castling is not CastlingSide.NONE:
            rook_from, rook_to, _ = CASTLING_COLS[record.castling]
            row = record.from_sq.row
            self.grid[row][rook_from] = self.grid[row][rook_to]
            self.grid[row][rook_to] = None

        if record.captured is not None and record.captured_sq is not None:
            self._put(record.captured_sq, record.captured)

        if record.piece.kind is PieceKind.KING:
            self.king_squares[color] = record.from_sq

        self.castling = record.prev_castling
        self.ep_square = record.prev_ep_square
        self.halfmove_clock = record.prev_halfmove_clock
        self.fullmove_number = record.prev_fullmove_number

    def _rights_after(
        self,
        piece: Piece,
        from_sq: Square,
        captured: Optional[Piece],
        captured_sq: Optional[Square],
    ) -> CastlingRights:
        """Castling rights after ``piece`` leaves ``from_sq``, capturing ``captured``."""
        rights = self.castling
        if piece.kind is PieceKind.KING:
            rights = rights.revoke_all(piece.color)
        elif piece.kind is PieceKind.ROOK:
            rights = rights.revoke(piece.color, _rook_home_side(piece.color, from_sq))
        # a rook taken on its home square takes its owner's right with it
        if captured is not None and captured.kind is PieceKind.ROOK and captured_sq is not None:
            rights = rights.revoke(captured.color, _rook_home_side(captured.color, captured_sq))
        return rights


def _rook_home_side(color: Color, sq: Square) -> CastlingSide:
    if sq.row != back_row(color):
        return CastlingSide.NONE
    for side, (rook_col, _, _) in CASTLING_COLS.items():
        if sq.col == rook_col:
            return side
    return CastlingSide.NONE
