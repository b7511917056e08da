from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Client:
    id: str
    phone: str
    name: str
    total_visits: int
    created_at: datetime
    last_visit: datetime | None = None
