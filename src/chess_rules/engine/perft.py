from __future__ import annotations

from typing import Dict

from .board import Board


def perft(board: Board, depth: int) -> int:
    """Count leaf nodes of the legal move tree below ``board`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Children are visited with make/unmake on ``board`` itself, which is left
    as it was found. Promotions are always to a queen, so counts match the
    published tables only for positions where no promotion is reachable.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    moves = board.all_legal_moves()
    if depth == 1:
        return len(moves)
    nodes = 0
    for m in moves:
        record = board.make_move(m)
        nodes += perft(board, depth - 1)
        board.unmake_move(record)
    return nodes


def divide(board: Board, depth: int) -> Dict[str, int]:
    """Per-root-move perft counts keyed by coordinate move (``"e2e4"``)."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for m in board.all_legal_moves():
        record = board.make_move(m)
        out[m.to_coord()] = perft(board, depth - 1)
        board.unmake_move(record)
    return out
