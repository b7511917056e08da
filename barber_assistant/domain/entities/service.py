from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    price: Decimal
    duration: int  # minutes
    description: str | None = None
    active: bool = True
