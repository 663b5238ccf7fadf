from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

from ...engine.game import Game


class SessionLimitReached(RuntimeError):
    """The store already holds ``max_sessions`` games."""


@dataclass
class _Session:
    game: Game
    lock: threading.Lock = field(default_factory=threading.Lock)


class InMemorySessionStore:
    """Thread-safe in-memory game session store.

    Responsibilities:
    - Create new sessions with unique `game_id`s
    - Hand out exclusive access to one game at a time (`session`)
    - Delete sessions

    The engine itself has no locking; every read or mutation of a game goes
    through `session`, which holds that game's lock for the whole block.
    """

    def __init__(self, max_sessions: Optional[int] = None) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, _Session] = {}
        self._max_sessions = max_sessions

    def create(self, game: Optional[Game] = None) -> str:
        """Create a new game session and return its `game_id`."""
        gid = str(uuid.uuid4())
        if game is None:
            game = Game.new()
        with self._lock:
            if self._max_sessions is not None and len(self._sessions) >= self._max_sessions:
                raise SessionLimitReached(f"session limit of {self._max_sessions} reached")
            self._sessions[gid] = _Session(game)
        return gid

    @contextmanager
    def session(self, game_id: str) -> Iterator[Optional[Game]]:
        """Yield the game for `game_id` under its exclusive lock, or None."""
        with self._lock:
            entry = self._sessions.get(game_id)
        if entry is None:
            yield None
            return
        with entry.lock:
            yield entry.game

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(game_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
