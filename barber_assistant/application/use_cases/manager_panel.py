from __future__ import annotations

import logging
from datetime import date, timedelta

from barber_assistant.application.ports.repository import BarbershopRepositoryPort
from barber_assistant.application.use_cases.availability import AvailabilityCalculator
from barber_assistant.application.use_cases.financial import FinancialEntryUseCase
from barber_assistant.application.utils import texts
from barber_assistant.application.utils.formatting import format_date_time
from barber_assistant.domain.entities.appointment import (
    APPOINTMENT_ID_PREFIX,
    Appointment,
    AppointmentStatus,
)
from barber_assistant.domain.entities.reply import OutboundMessage

TODAY_TOKENS = frozenset({"hoje"})
TOMORROW_TOKENS = frozenset({"amanhã", "amanha"})
WEEK_TOKENS = frozenset({"semana"})
ALL_TOKENS = frozenset({"agendamentos"})
FINANCE_TOKENS = frozenset({"finanças", "financas", "extrato"})
CLIENT_TOKENS = frozenset({"clientes"})
CONFIRM_PREFIX = "confirmar "
CANCEL_PREFIX = "cancelar "


class ManagerPanelUseCase:
    """Owner commands issued from the manager channel."""

    def __init__(
        self,
        repository: BarbershopRepositoryPort,
        calculator: AvailabilityCalculator,
        financial: FinancialEntryUseCase,
    ) -> None:
        self._repository = repository
        self._calculator = calculator
        self._financial = financial
        self._logger = logging.getLogger(__name__)

    def execute(self, command: str, reply_to: str) -> list[OutboundMessage]:
        """``command`` must already be normalized."""
        if command in TODAY_TOKENS:
            text = texts.appointments_list("AGENDA DE HOJE", self._active_on(self._calculator.today()))
        elif command in TOMORROW_TOKENS:
            tomorrow = (date.fromisoformat(self._calculator.today()) + timedelta(days=1)).isoformat()
            text = texts.appointments_list("AGENDA DE AMANHÃ", self._active_on(tomorrow))
        elif command in WEEK_TOKENS:
            days = self._calculator.next_business_days()
            text = texts.week_agenda([(day, self._active_on(day)) for day in days])
        elif command in ALL_TOKENS:
            upcoming = self._repository.list_upcoming_appointments(self._calculator.today())
            text = texts.appointments_list("TODOS OS AGENDAMENTOS", upcoming)
        elif command in FINANCE_TOKENS:
            text = self._financial.report()
        elif command in CLIENT_TOKENS:
            text = texts.client_list(self._repository.list_clients())
        elif command.startswith(CONFIRM_PREFIX):
            return self._change_status(command[len(CONFIRM_PREFIX):], AppointmentStatus.CONFIRMED, reply_to)
        elif command.startswith(CANCEL_PREFIX):
            return self._change_status(command[len(CANCEL_PREFIX):], AppointmentStatus.CANCELLED, reply_to)
        else:
            text = texts.manager_menu()
        return [OutboundMessage(reply_to, text)]

    def resolve_short_id(self, short_ref: str) -> Appointment | None:
        """First appointment whose id starts with ``apt_<short_ref>``."""
        short_ref = short_ref.strip()
        if not short_ref:
            return None
        matches = self._repository.find_appointments_by_id_prefix(
            f"{APPOINTMENT_ID_PREFIX}{short_ref.removeprefix(APPOINTMENT_ID_PREFIX)}"
        )
        return matches[0] if matches else None

    def _active_on(self, day: str) -> list[Appointment]:
        appointments = self._repository.list_appointments_by_date(day)
        return sorted(
            (a for a in appointments if a.status != AppointmentStatus.CANCELLED),
            key=lambda a: a.time,
        )

    def _change_status(
        self,
        short_ref: str,
        status: AppointmentStatus,
        reply_to: str,
    ) -> list[OutboundMessage]:
        parts = short_ref.split()
        short_ref = parts[0] if parts else ""
        appointment = self.resolve_short_id(short_ref)
        if appointment is None:
            self._logger.info("Appointment not found", extra={"reason": short_ref})
            return [OutboundMessage(reply_to, texts.appointment_not_found(short_ref))]

        if appointment.status == status:
            return [OutboundMessage(reply_to, f"ℹ️ Agendamento já está {_status_label(status)}: {appointment.client_name}")]
        if appointment.status not in (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED):
            return [
                OutboundMessage(
                    reply_to,
                    f"❌ Agendamento {_status_label(appointment.status)} não pode ser alterado: {appointment.short_id}",
                )
            ]

        self._repository.update_appointment_status(appointment.id, status, at=self._calculator.now())
        self._logger.info(
            "Appointment status changed",
            extra={"appointment_id": appointment.id, "reason": status.value},
        )

        when = format_date_time(appointment.date, appointment.time)
        if status == AppointmentStatus.CONFIRMED:
            return [
                OutboundMessage(appointment.client_phone, texts.appointment_confirmed_for_customer(appointment)),
                OutboundMessage(reply_to, f"✅ Agendamento confirmado: {appointment.client_name} - {when}"),
            ]
        return [
            OutboundMessage(appointment.client_phone, texts.appointment_cancelled_for_customer(appointment)),
            OutboundMessage(reply_to, f"❌ Agendamento cancelado: {appointment.client_name} - {when}"),
        ]


def _status_label(status: AppointmentStatus) -> str:
    return {
        AppointmentStatus.PENDING: "pendente",
        AppointmentStatus.CONFIRMED: "confirmado",
        AppointmentStatus.COMPLETED: "concluído",
        AppointmentStatus.CANCELLED: "cancelado",
        AppointmentStatus.NO_SHOW: "marcado como falta",
    }[status]
