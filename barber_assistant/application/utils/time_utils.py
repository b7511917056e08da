from __future__ import annotations

MINUTES_PER_DAY = 24 * 60


def to_minutes(time_str: str) -> int:
    """Minutes since midnight for an ``HH:MM`` string."""
    hours, minutes = time_str.split(":")
    return int(hours) * 60 + int(minutes)


def from_minutes(total_minutes: int) -> str:
    total_minutes %= MINUTES_PER_DAY
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def compute_end_time(start: str, duration_minutes: int) -> str:
    """End of an appointment. Wraps past midnight and is never capped at closing time."""
    return from_minutes(to_minutes(start) + duration_minutes)


def interval(start: str, end: str) -> tuple[int, int]:
    """Half-open [start, end) in minutes; an end at or before start is read as the next day."""
    start_min = to_minutes(start)
    end_min = to_minutes(end)
    if end_min <= start_min:
        end_min += MINUTES_PER_DAY
    return start_min, end_min
