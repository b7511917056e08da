from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class BookingStep(str, Enum):
    IDLE = "idle"
    SELECTING_SERVICE = "selecting_service"
    SELECTING_DATE = "selecting_date"
    SELECTING_TIME = "selecting_time"
    AWAITING_NAME = "awaiting_name"
    CONFIRMING = "confirming"


@dataclass(frozen=True)
class BookingSession:
    phone: str
    created_at: datetime
    step: BookingStep = BookingStep.IDLE
    service_id: str | None = None
    date: str | None = None  # YYYY-MM-DD
    time: str | None = None  # HH:MM
    client_name: str | None = None
    offered_times: tuple[str, ...] = ()  # slot list last shown, in menu order
