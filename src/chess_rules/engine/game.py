from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .board import Board
from .errors import IllegalMove, NoHistory, TerminalState
from .move import Move, MoveRecord, Square, SquareLike, as_square, square_to_str
from .piece import Color, PieceKind


logger = logging.getLogger(__name__)


class GameState(Enum):
    NORMAL = "normal"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


@dataclass(frozen=True)
class GameStatus:
    """Status of the side to move, derived from the current position."""

    turn: Color
    in_check: bool
    is_checkmate: bool
    is_stalemate: bool

    @property
    def state(self) -> GameState:
        if self.is_checkmate:
            return GameState.CHECKMATE
        if self.is_stalemate:
            return GameState.STALEMATE
        if self.in_check:
            return GameState.CHECK
        return GameState.NORMAL

    @property
    def is_terminal(self) -> bool:
        return self.is_checkmate or self.is_stalemate


def evaluate_status(board: Board) -> GameStatus:
    """Derive check / checkmate / stalemate for the side to move."""
    attacked = board.in_check()
    has_moves = board.has_legal_moves()
    return GameStatus(
        turn=board.side_to_move,
        in_check=attacked,
        is_checkmate=attacked and not has_moves,
        is_stalemate=(not attacked) and not has_moves,
    )


def _empty_ledger() -> Dict[Color, List[PieceKind]]:
    return {Color.WHITE: [], Color.BLACK: []}


@dataclass
class Game:
    """One game in progress: board, move history and captured-piece ledger.

    Responsibility: validate and apply moves, undo them, and keep the
    derived status in sync with the board after every ply.
    """

    board: Board
    history: List[MoveRecord] = field(default_factory=list)
    captured: Dict[Color, List[PieceKind]] = field(default_factory=_empty_ledger)
    _status: Optional[GameStatus] = field(default=None, repr=False)

    @classmethod
    def new(cls) -> "Game":
        return cls(board=Board.startpos())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(board=Board.from_fen(fen))

    def __post_init__(self) -> None:
        if self._status is None:
            self._status = evaluate_status(self.board)

    def to_fen(self) -> str:
        return self.board.to_fen()

    def new_game(self) -> None:
        """Reset this game in place to the standard starting position."""
        self.board = Board.startpos()
        self.history.clear()
        self.captured = _empty_ledger()
        self._status = evaluate_status(self.board)
        logger.debug("new game")

    def legal_moves(self, square: SquareLike) -> List[Square]:
        """Return the legal destinations for the piece on ``square``.

        Empty when the square is empty, holds a piece of the side not to
        move, or the game is over.

        Raises:
            InvalidSquare: If ``square`` is off the board.
        """
        sq = as_square(square)
        if self.status().is_terminal:
            return []
        return self.board.legal_moves(sq)

    def all_legal_moves(self) -> List[Move]:
        if self.status().is_terminal:
            return []
        return self.board.all_legal_moves()

    def apply_move(self, from_square: SquareLike, to_square: SquareLike) -> MoveRecord:
        """Validate and apply a move for the side to move.

        Either every side effect is committed or none is.

        Returns:
            MoveRecord: The record pushed onto the history.

        Raises:
            InvalidSquare: If either square is off the board.
            TerminalState: If the game already ended.
            IllegalMove: If ``to_square`` is not a legal destination.
        """
        from_sq = as_square(from_square)
        to_sq = as_square(to_square)
        status = self.status()
        if status.is_terminal:
            raise TerminalState(f"game is over ({status.state.value})")
        if to_sq not in self.board.legal_moves(from_sq):
            raise IllegalMove(f"illegal move {square_to_str(from_sq)}{square_to_str(to_sq)}")

        record = self.board.make_move(Move(from_sq, to_sq))
        self._status = evaluate_status(self.board)
        if self._status.is_checkmate:
            record = replace(record, suffix="#")
        elif self._status.in_check:
            record = replace(record, suffix="+")
        self.history.append(record)
        if record.captured is not None:
            self.captured[record.captured.color].append(record.captured.kind)

        logger.debug("applied %s", record.notation)
        if self._status.is_terminal:
            logger.info(
                "game over: %s after %d plies", self._status.state.value, len(self.history)
            )
        return record

    def undo(self) -> Optional[MoveRecord]:
        """Reverse the last applied move; no-op returning None with no history.

        Status is re-derived from the restored position.
        """
        if not self.history:
            return None
        record = self.history.pop()
        self.board.unmake_move(record)
        if record.captured is not None:
            ledger = self.captured[record.captured.color]
            # drop the most recent entry of that kind
            for i in range(len(ledger) - 1, -1, -1):
                if ledger[i] is record.captured.kind:
                    del ledger[i]
                    break
        self._status = evaluate_status(self.board)
        logger.debug("undid %s", record.notation)
        return record

    def undo_strict(self) -> MoveRecord:
        """Like ``undo`` but raise instead of silently doing nothing.

        Raises:
            NoHistory: If there is no move to undo.
        """
        record = self.undo()
        if record is None:
            raise NoHistory("no moves to undo")
        return record

    def status(self) -> GameStatus:
        if self._status is None:
            self._status = evaluate_status(self.board)
        return self._status

    def captured_pieces(self) -> Dict[Color, Tuple[PieceKind, ...]]:
        """Pieces captured from each color, oldest first."""
        return {color: tuple(kinds) for color, kinds in self.captured.items()}

    def move_history(self) -> Tuple[str, ...]:
        return tuple(r.notation for r in self.history)

    def records(self) -> Tuple[MoveRecord, ...]:
        return tuple(self.history)

    def last_move(self) -> Optional[MoveRecord]:
        return self.history[-1] if self.history else None
