from __future__ import annotations


class ChessError(ValueError):
    """Base class for recoverable engine errors.

    Subclasses ``ValueError`` so callers that only care about "bad input"
    can keep catching that.
    """


class InvalidSquare(ChessError):
    """Coordinates or a square name outside the 8x8 board."""


class IllegalMove(ChessError):
    """Destination is not in the legal set for the given origin."""


class NoHistory(ChessError):
    """Undo requested with an empty move history."""


class TerminalState(ChessError):
    """Move attempted after checkmate or stalemate."""
