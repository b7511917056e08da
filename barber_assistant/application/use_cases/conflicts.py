from __future__ import annotations

import logging
from collections.abc import Iterable

from barber_assistant.application.ports.repository import BarbershopRepositoryPort
from barber_assistant.application.use_cases.availability import AvailabilityCalculator
from barber_assistant.application.utils.time_utils import interval, to_minutes
from barber_assistant.domain.entities.appointment import Appointment, AppointmentStatus
from barber_assistant.domain.entities.service import Service


def is_available(
    start: str,
    duration_minutes: int,
    existing: Iterable[Appointment],
    exclude_id: str | None = None,
) -> bool:
    """
    True when [start, start + duration) overlaps no non-cancelled booking.
    Touching endpoints do not conflict.
    """
    new_start = to_minutes(start)
    new_end = new_start + duration_minutes
    for appointment in existing:
        if exclude_id and appointment.id == exclude_id:
            continue
        if appointment.status == AppointmentStatus.CANCELLED:
            continue
        existing_start, existing_end = interval(appointment.time, appointment.end_time)
        if new_start < existing_end and new_end > existing_start:
            return False
    return True


class ConflictDetector:
    def __init__(self, calculator: AvailabilityCalculator, repository: BarbershopRepositoryPort) -> None:
        self._calculator = calculator
        self._repository = repository
        self._logger = logging.getLogger(__name__)

    def is_available(
        self,
        date: str,
        start: str,
        duration_minutes: int,
        exclude_id: str | None = None,
    ) -> bool:
        existing = self._repository.list_appointments_by_date(date)
        return is_available(start, duration_minutes, existing, exclude_id)

    def available_slots(self, date: str, service: Service) -> list[str]:
        """Slots a customer may pick for this service on this date."""
        existing = self._repository.list_appointments_by_date(date)
        slots = [
            slot
            for slot in self._calculator.candidate_slots(date, service.duration)
            if is_available(slot, service.duration, existing)
        ]
        self._logger.debug(
            "Computed available slots",
            extra={"date": date, "service": service.id, "slot_count": len(slots)},
        )
        return slots
