from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

APPOINTMENT_ID_PREFIX = "apt_"
SHORT_ID_LENGTH = 8


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


ACTIVE_STATUSES = (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED)


@dataclass(frozen=True)
class Appointment:
    id: str
    client_id: str
    client_phone: str
    client_name: str
    service_id: str
    service_name: str
    price: Decimal
    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    end_time: str  # HH:MM, fixed at creation
    status: AppointmentStatus
    created_at: datetime
    confirmed_at: datetime | None = None

    @property
    def short_id(self) -> str:
        return short_id(self.id)


def short_id(appointment_id: str) -> str:
    """Compact reference used in manager commands (``confirmar <short_id>``)."""
    return appointment_id.removeprefix(APPOINTMENT_ID_PREFIX)[:SHORT_ID_LENGTH]
