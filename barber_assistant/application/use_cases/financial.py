from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from decimal import Decimal

from barber_assistant.application.ports.repository import BarbershopRepositoryPort
from barber_assistant.application.utils import texts
from barber_assistant.application.utils.message_rules import (
    SKIP_TOKENS,
    is_affirmative,
    is_cancel,
    normalize,
    parse_amount,
    parse_index,
)
from barber_assistant.domain.entities.financial_record import FinancialRecord, FinancialSummary, FinancialType
from barber_assistant.domain.entities.financial_session import FinancialSession, FinancialStep

INCOME_CATEGORIES: tuple[str, ...] = (
    "Corte de Cabelo",
    "Barba",
    "Corte + Barba",
    "Navalhado",
    "Coloração",
    "Hidratação",
    "Outro Serviço",
)

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Produtos/Insumos",
    "Aluguel",
    "Contas (luz/água)",
    "Equipamentos",
    "Marketing",
    "Transporte",
    "Impostos",
    "Outro",
)

TYPE_CHOICES = {
    "1": FinancialType.INCOME,
    "entrada": FinancialType.INCOME,
    "2": FinancialType.EXPENSE,
    "saída": FinancialType.EXPENSE,
    "saida": FinancialType.EXPENSE,
}

FREE_TEXT_STEPS = frozenset({FinancialStep.ENTERING_AMOUNT, FinancialStep.ENTERING_DESCRIPTION})

RECENT_RECORDS_LIMIT = 10


def categories_for(record_type: FinancialType) -> tuple[str, ...]:
    return INCOME_CATEGORIES if record_type == FinancialType.INCOME else EXPENSE_CATEGORIES


@dataclass(frozen=True)
class FinancialResult:
    action: str
    messages: list[str]
    updated_session: FinancialSession | None  # None ends the session
    record: FinancialRecord | None = None


class FinancialEntryUseCase:
    """Owner-only flow for recording income and expenses."""

    def __init__(
        self,
        repository: BarbershopRepositoryPort,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def start(self, phone: str, record_type: FinancialType | None = None) -> FinancialResult:
        now = self._clock()
        if record_type is None:
            return FinancialResult(
                action="ask_type",
                messages=[texts.TYPE_MENU],
                updated_session=FinancialSession(phone=phone, created_at=now, type=FinancialType.INCOME),
            )
        return FinancialResult(
            action="ask_category",
            messages=[texts.category_menu(record_type, categories_for(record_type))],
            updated_session=FinancialSession(
                phone=phone,
                created_at=now,
                type=record_type,
                step=FinancialStep.SELECTING_CATEGORY,
            ),
        )

    def process(self, session: FinancialSession, text: str) -> FinancialResult:
        if is_cancel(text, allow_zero=session.step not in FREE_TEXT_STEPS):
            return self._cancelled()

        if session.step == FinancialStep.SELECTING_TYPE:
            record_type = TYPE_CHOICES.get(normalize(text))
            if record_type is None:
                return FinancialResult(
                    action="ask_type",
                    messages=[texts.INVALID_TYPE],
                    updated_session=session,
                )
            return FinancialResult(
                action="ask_category",
                messages=[texts.category_menu(record_type, categories_for(record_type))],
                updated_session=replace(session, type=record_type, step=FinancialStep.SELECTING_CATEGORY),
            )

        if session.step == FinancialStep.SELECTING_CATEGORY:
            categories = categories_for(session.type)
            index = parse_index(text, len(categories))
            if index is None:
                return FinancialResult(
                    action="ask_category",
                    messages=[texts.INVALID_CATEGORY, texts.category_menu(session.type, categories)],
                    updated_session=session,
                )
            return FinancialResult(
                action="ask_amount",
                messages=[texts.ask_amount(session.type)],
                updated_session=replace(
                    session, category=categories[index], step=FinancialStep.ENTERING_AMOUNT
                ),
            )

        if session.step == FinancialStep.ENTERING_AMOUNT:
            amount = parse_amount(text)
            if amount is None:
                return FinancialResult(action="ask_amount", messages=[texts.INVALID_AMOUNT], updated_session=session)
            return FinancialResult(
                action="ask_description",
                messages=[texts.ASK_DESCRIPTION],
                updated_session=replace(session, amount=amount, step=FinancialStep.ENTERING_DESCRIPTION),
            )

        if session.step == FinancialStep.ENTERING_DESCRIPTION:
            description = "" if normalize(text) in SKIP_TOKENS else (text or "").strip()
            updated = replace(session, description=description, step=FinancialStep.CONFIRMING)
            return FinancialResult(
                action="confirm",
                messages=[
                    texts.financial_summary_prompt(updated.type, updated.category, updated.amount, description)
                ],
                updated_session=updated,
            )

        if session.step == FinancialStep.CONFIRMING and is_affirmative(text):
            return self._commit(session)

        return self._cancelled()

    def _commit(self, session: FinancialSession) -> FinancialResult:
        record = FinancialRecord(
            id=f"fin_{uuid.uuid4().hex}",
            type=session.type,
            category=session.category or "",
            amount=session.amount,
            description=session.description or "",
            date=self._clock(),
        )
        self._repository.insert_financial_record(record)
        self._logger.info(
            "Financial record saved",
            extra={"phone": session.phone, "reason": f"{record.type.value}:{record.category}"},
        )
        return FinancialResult(
            action="saved",
            messages=[texts.financial_saved(record)],
            updated_session=None,
            record=record,
        )

    def _cancelled(self) -> FinancialResult:
        return FinancialResult(action="cancelled", messages=[texts.OPERATION_CANCELLED], updated_session=None)

    def summary(self, start: datetime | None, end: datetime | None) -> FinancialSummary:
        income = Decimal("0")
        expense = Decimal("0")
        for record in self._repository.list_financial_records(start, end):
            if record.type == FinancialType.INCOME:
                income += record.amount
            else:
                expense += record.amount
        return FinancialSummary(income=income, expense=expense)

    def report(self) -> str:
        now = self._clock()
        # Week starts on Sunday, month on day 1.
        start_of_week = (now - timedelta(days=(now.weekday() + 1) % 7)).replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        start_of_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        recent = self._repository.list_financial_records(now - timedelta(days=7), now)[:RECENT_RECORDS_LIMIT]
        return texts.financial_report(
            today=now.date().isoformat(),
            week=self.summary(start_of_week, now),
            month=self.summary(start_of_month, now),
            recent=recent,
        )
