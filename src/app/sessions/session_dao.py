"""SessionDao: registro em memória das sessões ativas por usuário."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from app.sessions.session import Session

if TYPE_CHECKING:
    from app.domain.user import UserKey


class SessionDao:
    """Mapa thread-safe ``UserKey -> Session``; começa vazio."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[UserKey, Session] = {}

    def get(self, key: UserKey) -> Session | None:
        with self._lock:
            return self._sessions.get(key)

    def get_or_create(self, key: UserKey) -> Session:
        with self._lock:
            session = self._sessions.get(key)
            if session is None:
                session = Session(key)
                self._sessions[key] = session
            return session

    def remove(self, key: UserKey) -> Session | None:
        with self._lock:
            return self._sessions.pop(key, None)

    def remove_if_empty(self, key: UserKey) -> bool:
        with self._lock:
            session = self._sessions.get(key)
            if session is not None and session.is_empty:
                del self._sessions[key]
                return True
            return False

    def snapshot(self) -> list[tuple[UserKey, Session]]:
        """Cópia dos pares atuais, segura para iterar fora do lock."""
        with self._lock:
            return list(self._sessions.items())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
