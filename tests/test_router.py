"""
End-to-end routing tests: customer menu, booking flow, manager channel and
the owner's financial flow, driven through HandleIncomingMessageUseCase.
"""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta
from decimal import Decimal

from barber_assistant.application.exceptions import PersistenceError, TransportError
from barber_assistant.application.ports.message_platform import MessagePlatformPort
from barber_assistant.application.use_cases.availability import AvailabilityCalculator, ScheduleConfig
from barber_assistant.application.use_cases.booking import BookingUseCase
from barber_assistant.application.use_cases.conflicts import ConflictDetector
from barber_assistant.application.use_cases.financial import FinancialEntryUseCase
from barber_assistant.application.use_cases.handle_incoming_message import (
    MANAGER_CHANNEL_CONFIG_KEY,
    HandleIncomingMessageUseCase,
)
from barber_assistant.application.use_cases.manager_panel import ManagerPanelUseCase
from barber_assistant.application.use_cases.send_reply import SendReplyUseCase
from barber_assistant.application.utils import texts
from barber_assistant.domain.entities.appointment import AppointmentStatus
from barber_assistant.domain.entities.financial_record import FinancialType
from barber_assistant.domain.entities.message import Message
from barber_assistant.domain.entities.service import Service
from barber_assistant.infrastructure.store.memory_repository import MemoryRepository
from barber_assistant.infrastructure.store.memory_session_store import MemorySessionStore
from barber_assistant.infrastructure.whatsapp.mock_platform import RecordingPlatform

OWNER = "5511999990000"
CUSTOMER = "5511988887777"
OTHER_CUSTOMER = "5511977776666"
GROUP = "120363000000000001@g.us"
BUSINESS = "BARBER SHOP"
CORTE = Service("svc_1", "Corte", Decimal("50"), 45)

_ids = itertools.count()


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class Harness:
    def __init__(
        self,
        repository: MemoryRepository | None = None,
        platform: MessagePlatformPort | None = None,
        manager_channel_id: str | None = GROUP,
        booking_ttl: timedelta | None = None,
        owner_phone: str = OWNER,
    ) -> None:
        self.clock = FakeClock(datetime(2026, 10, 19, 8, 0))  # Monday
        self.repository = repository if repository is not None else MemoryRepository(services=[CORTE])
        self.platform = platform if platform is not None else RecordingPlatform()
        calculator = AvailabilityCalculator(ScheduleConfig(), clock=self.clock)
        self.detector = ConflictDetector(calculator, self.repository)
        financial = FinancialEntryUseCase(self.repository, clock=self.clock)
        self.booking_sessions = MemorySessionStore(ttl=booking_ttl)
        self.financial_sessions = MemorySessionStore(ttl=timedelta(minutes=15))
        self.use_case = HandleIncomingMessageUseCase(
            repository=self.repository,
            booking=BookingUseCase(self.repository, calculator, self.detector),
            financial=financial,
            manager_panel=ManagerPanelUseCase(self.repository, calculator, financial),
            send_reply=SendReplyUseCase(platform=self.platform, enabled=True),
            booking_sessions=self.booking_sessions,
            financial_sessions=self.financial_sessions,
            owner_phone=owner_phone,
            business_name=BUSINESS,
            bot_name="BarberBot",
            clock=self.clock,
            manager_channel_id=manager_channel_id,
        )

    def send(self, text: str, phone: str = CUSTOMER, group_id: str | None = None) -> None:
        self.use_case.handle(
            Message(
                id=f"wamid.{next(_ids)}",
                chat_id=group_id or phone,
                sender_phone=phone,
                text=text,
                timestamp=1_760_000_000,
                group_id=group_id,
            )
        )

    def manager(self, text: str) -> list[str]:
        before = len(self.platform.sent)
        self.send(text, phone=OWNER, group_id=GROUP)
        return [m.text for m in self.platform.sent[before:] if m.recipient_id == GROUP]

    def last_to(self, recipient: str) -> str:
        return self.platform.texts_to(recipient)[-1]

    def book(self, phone: str = CUSTOMER, name: str = "João", date_choice: str = "1", time_choice: str = "1"):
        for text in ("1", "1", date_choice, time_choice, name, "confirmar"):
            self.send(text, phone=phone)
        return self.repository.list_upcoming_appointments("2026-10-19")[-1]


def test_customer_books_and_manager_is_notified():
    harness = Harness()

    harness.send("oi")
    assert harness.last_to(CUSTOMER) == texts.main_menu(BUSINESS)

    appointment = harness.book()

    assert "AGENDAMENTO REALIZADO" in harness.last_to(CUSTOMER)
    assert appointment.status == AppointmentStatus.PENDING
    assert appointment.date == "2026-10-19"
    assert appointment.time == "09:00"
    assert appointment.client_phone == CUSTOMER
    assert harness.repository.get_client_by_phone(CUSTOMER).total_visits == 0
    assert harness.booking_sessions.get(CUSTOMER) is None

    notification = harness.last_to(GROUP)
    assert "NOVO AGENDAMENTO" in notification
    assert appointment.id[4:12] in notification


def test_without_manager_channel_only_the_customer_hears_back():
    harness = Harness(manager_channel_id=None)

    harness.book()

    assert {m.recipient_id for m in harness.platform.sent} == {CUSTOMER}


def test_confirm_with_unknown_short_id_reports_not_found():
    harness = Harness()
    appointment = harness.book()

    replies = harness.manager("confirmar ab12cd34")

    assert replies == [texts.appointment_not_found("ab12cd34")]
    assert harness.repository.get_appointment(appointment.id).status == AppointmentStatus.PENDING


def test_manager_confirms_by_short_id_and_customer_is_told():
    harness = Harness()
    appointment = harness.book()
    harness.platform.clear()

    replies = harness.manager(f"Confirmar {appointment.short_id}")

    stored = harness.repository.get_appointment(appointment.id)
    assert stored.status == AppointmentStatus.CONFIRMED
    assert stored.confirmed_at == harness.clock.now
    assert "Seu horário foi confirmado!" in harness.last_to(CUSTOMER)
    assert replies[0].startswith("✅ Agendamento confirmado: João")

    harness.send("3")
    assert "✅ *Corte*" in harness.last_to(CUSTOMER)


def test_manager_cancel_frees_the_slot():
    harness = Harness()
    appointment = harness.book()
    assert "09:00" not in harness.detector.available_slots("2026-10-19", CORTE)

    harness.manager(f"cancelar {appointment.short_id}")

    assert harness.repository.get_appointment(appointment.id).status == AppointmentStatus.CANCELLED
    assert "Agendamento Cancelado" in harness.last_to(CUSTOMER)
    assert "09:00" in harness.detector.available_slots("2026-10-19", CORTE)

    replies = harness.manager(f"confirmar {appointment.short_id}")
    assert "não pode ser alterado" in replies[0]
    assert harness.repository.get_appointment(appointment.id).status == AppointmentStatus.CANCELLED


def test_non_owner_in_manager_channel_is_ignored():
    harness = Harness()

    harness.send("hoje", phone=CUSTOMER, group_id=GROUP)
    harness.send("menu", phone=CUSTOMER, group_id=GROUP)

    assert harness.platform.sent == []


def test_other_groups_are_ignored():
    harness = Harness()

    harness.send("oi", phone=CUSTOMER, group_id="999@g.us")
    harness.send("hoje", phone=OWNER, group_id="999@g.us")

    assert harness.platform.sent == []


def test_owner_installs_manager_channel():
    harness = Harness(manager_channel_id=None)

    harness.send("!instalar", phone=CUSTOMER, group_id=GROUP)
    assert harness.use_case.manager_channel_id is None

    harness.send("!instalar", phone=OWNER, group_id=GROUP)

    assert harness.use_case.manager_channel_id == GROUP
    assert harness.repository.get_config(MANAGER_CHANNEL_CONFIG_KEY) == GROUP
    assert "Grupo de Gerenciamento Configurado" in harness.last_to(GROUP)
    assert "MENU DO BARBEIRO" in harness.manager("qualquer coisa")[0]


def test_owner_phone_is_compared_by_digits():
    harness = Harness(owner_phone="+55 (11) 99999-0000")

    assert "AGENDA DE HOJE" in harness.manager("hoje")[0]


def test_manager_listings():
    harness = Harness()
    harness.book(name="João")
    harness.book(phone=OTHER_CUSTOMER, name="Pedro", date_choice="2")

    today = harness.manager("hoje")[0]
    assert "João" in today
    assert "Pedro" not in today

    tomorrow = harness.manager("amanhã")[0]
    assert "Pedro" in tomorrow
    assert harness.manager("amanha") == [tomorrow]

    week = harness.manager("semana")[0]
    assert "João" in week and "Pedro" in week

    everything = harness.manager("agendamentos")[0]
    assert everything.index("João") < everything.index("Pedro")

    clients = harness.manager("clientes")[0]
    assert "CLIENTES CADASTRADOS* (2)" in clients

    assert "RELATÓRIO FINANCEIRO" in harness.manager("finanças")[0]
    assert "RELATÓRIO FINANCEIRO" in harness.manager("extrato")[0]
    assert harness.manager("menu") == [texts.manager_menu()]


def test_financial_entry_from_manager_channel():
    harness = Harness()

    replies = []
    for text in ("entrada", "2", "75,50", "pular", "confirmar"):
        replies += harness.manager(text)

    assert "REGISTRADA" in replies[-1]
    (record,) = harness.repository.list_financial_records()
    assert record.type == FinancialType.INCOME
    assert record.amount == Decimal("75.50")
    assert record.description == ""
    assert harness.financial_sessions.get(OWNER) is None


def test_financial_session_expires_after_fifteen_minutes():
    harness = Harness()

    harness.send("saída", phone=OWNER)
    assert "CATEGORIA DE SAÍDA" in harness.last_to(OWNER)

    harness.clock.advance(minutes=14)
    harness.send("1", phone=OWNER)
    assert "VALOR DA SAÍDA" in harness.last_to(OWNER)

    harness.clock.advance(minutes=2)
    harness.send("50", phone=OWNER)
    assert harness.last_to(OWNER) == texts.SESSION_EXPIRED
    assert harness.financial_sessions.get(OWNER) is None
    assert harness.repository.list_financial_records() == []


def test_owner_direct_chat_falls_back_to_customer_menu():
    harness = Harness()

    harness.send("ajuda", phone=OWNER)

    assert harness.last_to(OWNER) == texts.help_text()


def test_customers_cannot_start_the_financial_flow():
    harness = Harness()

    harness.send("entrada")

    assert harness.last_to(CUSTOMER) == texts.main_menu(BUSINESS)
    assert len(harness.financial_sessions) == 0


def test_mid_flow_text_is_flow_input():
    harness = Harness()
    harness.send("agendar")
    harness.send("1")

    harness.send("menu")
    assert harness.last_to(CUSTOMER) == texts.INVALID_DATE

    harness.send("2")
    assert "SELECIONE O HORÁRIO" in harness.last_to(CUSTOMER)

    harness.send("cancelar")
    assert harness.last_to(CUSTOMER) == texts.BOOKING_CANCELLED
    assert harness.booking_sessions.get(CUSTOMER) is None


def test_superscript_digit_mid_flow_reprompts():
    harness = Harness()
    harness.send("1")

    harness.send("²")

    assert harness.platform.texts_to(CUSTOMER)[-2] == texts.INVALID_SERVICE
    assert harness.booking_sessions.get(CUSTOMER) is not None


def test_top_level_vocabulary():
    harness = Harness()

    harness.send("0")
    assert harness.last_to(CUSTOMER) == texts.NOTHING_TO_CANCEL

    harness.send("serviços")
    assert "SERVIÇOS DISPONÍVEIS" in harness.last_to(CUSTOMER)
    assert "Corte" in harness.last_to(CUSTOMER)

    harness.send("?")
    assert harness.last_to(CUSTOMER) == texts.help_text()

    harness.send("meus horarios")
    assert harness.last_to(CUSTOMER) == texts.NO_APPOINTMENTS_YET

    harness.send("quero cortar o cabelo")
    assert harness.last_to(CUSTOMER) == texts.main_menu(BUSINESS)


def test_my_appointments_lists_only_the_callers_bookings():
    harness = Harness()
    harness.book(name="João")
    harness.book(phone=OTHER_CUSTOMER, name="Pedro", date_choice="2")

    harness.send("3")

    reply = harness.last_to(CUSTOMER)
    assert "19 de outubro de 2026 às 09:00" in reply
    assert "20 de outubro" not in reply


def test_booking_session_expiry_when_configured():
    harness = Harness(booking_ttl=timedelta(minutes=30))
    harness.send("1")

    harness.clock.advance(minutes=31)
    harness.send("1")

    assert harness.last_to(CUSTOMER) == texts.SESSION_EXPIRED
    assert harness.booking_sessions.get(CUSTOMER) is None


def test_abandoned_sessions_are_swept_by_later_traffic():
    harness = Harness()
    harness.send("entrada", phone=OWNER)
    harness.send("1", phone=OTHER_CUSTOMER)

    # Still inside the grace period: kept so the owner can be told it expired.
    harness.clock.advance(minutes=30)
    harness.send("oi")
    assert harness.financial_sessions.get(OWNER) is not None

    harness.clock.advance(minutes=60)
    harness.send("oi")
    assert harness.financial_sessions.get(OWNER) is None
    # Booking sessions have no lifetime by default.
    assert harness.booking_sessions.get(OTHER_CUSTOMER) is not None


class FailingPlatform(MessagePlatformPort):
    def __init__(self) -> None:
        self.attempts = 0

    def send_text(self, recipient_id: str, text: str) -> None:
        self.attempts += 1
        raise TransportError("connection lost")


class BrokenRepository(MemoryRepository):
    def list_active_services(self):
        raise PersistenceError("database is locked")


def test_transport_failure_abandons_the_message():
    platform = FailingPlatform()
    harness = Harness(platform=platform)

    harness.send("oi")

    assert platform.attempts == 1


def test_persistence_failure_sends_nothing():
    harness = Harness(repository=BrokenRepository())

    harness.send("serviços")
    harness.send("agendar")

    assert harness.platform.sent == []
    assert harness.booking_sessions.get(CUSTOMER) is None


def test_welcome_is_sent_once_on_connect():
    harness = Harness()

    harness.use_case.handle_transport_event("qr_ready")
    harness.use_case.handle_transport_event("connected")
    harness.use_case.handle_transport_event("reconnecting")
    harness.use_case.handle_transport_event("connected")

    welcome = [t for t in harness.platform.texts_to(GROUP) if "Bem-vindo ao BarberBot" in t]
    assert len(welcome) == 1


def test_no_welcome_without_manager_channel():
    harness = Harness(manager_channel_id=None)

    harness.use_case.handle_transport_event("connected")

    assert harness.platform.sent == []
