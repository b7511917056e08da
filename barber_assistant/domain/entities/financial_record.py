from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum


class FinancialType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True)
class FinancialRecord:
    id: str
    type: FinancialType
    category: str
    amount: Decimal
    description: str
    date: datetime
    appointment_id: str | None = None


@dataclass(frozen=True)
class FinancialSummary:
    income: Decimal
    expense: Decimal

    @property
    def balance(self) -> Decimal:
        return self.income - self.expense
