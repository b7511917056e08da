from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol, TypeVar

from barber_assistant.application.ports.session_store import SessionStorePort


class _Timestamped(Protocol):
    created_at: datetime


S = TypeVar("S", bound=_Timestamped)


class MemorySessionStore(SessionStorePort[S]):
    """
    In-process session map. ``ttl`` is an absolute lifetime counted from the
    session's ``created_at``; ``None`` keeps sessions until they are deleted.
    """

    def __init__(self, ttl: timedelta | None = None) -> None:
        self._sessions: dict[str, S] = {}
        self._ttl = ttl

    @property
    def ttl(self) -> timedelta | None:
        return self._ttl

    def get(self, key: str) -> S | None:
        return self._sessions.get(key)

    def set(self, key: str, session: S) -> None:
        self._sessions[key] = session

    def delete(self, key: str) -> None:
        self._sessions.pop(key, None)

    def is_expired(self, key: str, now: datetime) -> bool:
        session = self._sessions.get(key)
        if session is None or self._ttl is None:
            return False
        return now - session.created_at > self._ttl

    def sweep_expired(self, now: datetime, grace: timedelta = timedelta(0)) -> list[str]:
        expired = [key for key in self._sessions if self.is_expired(key, now - grace)]
        for key in expired:
            del self._sessions[key]
        return expired

    def __len__(self) -> int:
        return len(self._sessions)
