from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ...search.service import AlphaBeta


@dataclass
class SearchSession:
    """A search over one bundled game, kept between requests."""

    game: str
    params: Dict[str, Any]
    state: Any
    depth: int
    search: AlphaBeta


class InMemorySessionStore:
    """Thread-safe in-memory store of search sessions keyed by `search_id`."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, SearchSession] = {}

    def create(self, session: SearchSession) -> str:
        sid = str(uuid.uuid4())
        with self._lock:
            self._sessions[sid] = session
        return sid

    def get(self, search_id: str) -> Optional[SearchSession]:
        with self._lock:
            return self._sessions.get(search_id)

    def delete(self, search_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(search_id, None) is not None
