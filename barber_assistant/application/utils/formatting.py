from __future__ import annotations

from datetime import date as date_type
from decimal import Decimal

MONTHS_PT = (
    "janeiro",
    "fevereiro",
    "março",
    "abril",
    "maio",
    "junho",
    "julho",
    "agosto",
    "setembro",
    "outubro",
    "novembro",
    "dezembro",
)


def format_date(value: str | date_type) -> str:
    """``2026-10-17`` -> ``17 de outubro de 2026``."""
    day = date_type.fromisoformat(value) if isinstance(value, str) else value
    return f"{day.day:02d} de {MONTHS_PT[day.month - 1]} de {day.year}"


def format_date_time(date_str: str, time_str: str) -> str:
    return f"{format_date(date_str)} às {time_str}"


def format_money(amount: Decimal | int | float) -> str:
    return f"R$ {Decimal(amount):.2f}"
