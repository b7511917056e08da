from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from barber_assistant.application.utils.time_utils import compute_end_time, from_minutes, to_minutes


@dataclass(frozen=True)
class ScheduleConfig:
    working_hour_start: str = "09:00"
    working_hour_end: str = "20:00"
    slot_granularity: int = 60  # fixed grid, independent of service duration
    lunch_start: str = "12:00"
    lunch_end: str = "13:00"
    closed_weekday: int | None = 6  # date.weekday(); Sunday
    horizon_days: int = 30
    menu_days: int = 7


class BusinessDays:
    """Finite, re-iterable run of working days starting at ``start``."""

    def __init__(self, start: date, horizon: int, closed_weekday: int | None) -> None:
        self._start = start
        self._horizon = horizon
        self._closed_weekday = closed_weekday

    def __iter__(self) -> Iterator[str]:
        for offset in range(self._horizon):
            day = self._start + timedelta(days=offset)
            if day.weekday() == self._closed_weekday:
                continue
            yield day.isoformat()

    def first(self, count: int) -> list[str]:
        days: list[str] = []
        for day in self:
            if len(days) >= count:
                break
            days.append(day)
        return days


class AvailabilityCalculator:
    def __init__(
        self,
        config: ScheduleConfig,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._config = config
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    @property
    def config(self) -> ScheduleConfig:
        return self._config

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> str:
        return self._clock().date().isoformat()

    def business_days(self, horizon: int | None = None) -> BusinessDays:
        return BusinessDays(
            start=self._clock().date(),
            horizon=self._config.horizon_days if horizon is None else horizon,
            closed_weekday=self._config.closed_weekday,
        )

    def next_business_days(self, count: int | None = None) -> list[str]:
        """Dates offered in menus (first ``menu_days`` business days)."""
        return self.business_days().first(self._config.menu_days if count is None else count)

    def is_lunch_time(self, time_str: str) -> bool:
        minutes = to_minutes(time_str)
        return to_minutes(self._config.lunch_start) <= minutes < to_minutes(self._config.lunch_end)

    def candidate_slots(self, date_str: str, service_duration: int | None = None) -> list[str]:
        """
        Grid start times for a date, before looking at existing bookings.
        ``service_duration`` does not change the grid; it is accepted so callers
        can pass the service they are booking.
        """
        step = self._config.slot_granularity
        start = to_minutes(self._config.working_hour_start)
        end = to_minutes(self._config.working_hour_end)
        lunch_start = to_minutes(self._config.lunch_start)
        lunch_end = to_minutes(self._config.lunch_end)

        now = self._clock()
        is_today = date_str == now.date().isoformat()
        now_minutes = now.hour * 60 + now.minute

        slots: list[str] = []
        for minutes in range(start, end, step):
            # Grid cell touching the lunch window at all is dropped.
            if minutes < lunch_end and minutes + step > lunch_start:
                continue
            if is_today and minutes <= now_minutes:
                continue
            slots.append(from_minutes(minutes))
        return slots

    def compute_end_time(self, start: str, duration_minutes: int) -> str:
        return compute_end_time(start, duration_minutes)
