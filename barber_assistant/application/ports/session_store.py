from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Generic, TypeVar

S = TypeVar("S")


class SessionStorePort(ABC, Generic[S]):
    """Keyed store for ephemeral conversation sessions."""

    @abstractmethod
    def get(self, key: str) -> S | None:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, session: S) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def is_expired(self, key: str, now: datetime) -> bool:
        """True when a session exists for key and its lifetime has elapsed."""
        raise NotImplementedError

    @abstractmethod
    def sweep_expired(self, now: datetime, grace: timedelta = timedelta(0)) -> list[str]:
        """Drop every session expired for longer than ``grace``. Returns the removed keys."""
        raise NotImplementedError
