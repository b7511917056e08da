from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from barber_assistant.domain.entities.financial_record import FinancialType


class FinancialStep(str, Enum):
    SELECTING_TYPE = "selecting_type"
    SELECTING_CATEGORY = "selecting_category"
    ENTERING_AMOUNT = "entering_amount"
    ENTERING_DESCRIPTION = "entering_description"
    CONFIRMING = "confirming"


@dataclass(frozen=True)
class FinancialSession:
    phone: str
    created_at: datetime  # start of the expiry window
    type: FinancialType
    step: FinancialStep = FinancialStep.SELECTING_TYPE
    category: str | None = None
    amount: Decimal | None = None
    description: str | None = None
