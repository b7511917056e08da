from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from barber_assistant.application.exceptions import PersistenceError, TransportError
from barber_assistant.application.ports.repository import BarbershopRepositoryPort
from barber_assistant.application.ports.session_store import SessionStorePort
from barber_assistant.application.use_cases.booking import BookingResult, BookingUseCase
from barber_assistant.application.use_cases.financial import FinancialEntryUseCase
from barber_assistant.application.use_cases.manager_panel import ManagerPanelUseCase
from barber_assistant.application.use_cases.send_reply import SendReplyUseCase
from barber_assistant.application.utils import texts
from barber_assistant.application.utils.message_rules import CANCEL_TOKENS, digits_only, normalize
from barber_assistant.domain.entities.booking_session import BookingSession, BookingStep
from barber_assistant.domain.entities.financial_record import FinancialType
from barber_assistant.domain.entities.financial_session import FinancialSession
from barber_assistant.domain.entities.message import Message
from barber_assistant.domain.entities.reply import OutboundMessage

MANAGER_CHANNEL_CONFIG_KEY = "manager_group_jid"
INSTALL_COMMAND = "!instalar"

# None asks the owner for the type first.
FINANCIAL_START_TOKENS: dict[str, FinancialType | None] = {
    "entrada": FinancialType.INCOME,
    "receita": FinancialType.INCOME,
    "saída": FinancialType.EXPENSE,
    "saida": FinancialType.EXPENSE,
    "despesa": FinancialType.EXPENSE,
    "registrar": None,
}

MENU_TOKENS = frozenset({"menu", "oi", "olá", "ola", "início", "inicio"})
BOOK_TOKENS = frozenset({"1", "agendar"})
SERVICES_TOKENS = frozenset({"2", "serviços", "servicos", "servico"})
MY_APPOINTMENTS_TOKENS = frozenset({"3", "meus horários", "meus horarios"})
HELP_TOKENS = frozenset({"ajuda", "help", "?"})

TRANSPORT_EVENTS = frozenset({"qr_ready", "connected", "reconnecting", "disconnected"})


class HandleIncomingMessageUseCase:
    """
    Entry point for every inbound chat message.

    Routing priority:
      1. ``!instalar`` from the owner inside a group installs that group as the manager channel.
      2. Manager channel: owner only; financial flow first, then manager commands.
      3. Any other group is ignored.
      4. Owner direct chat: financial flow when a session is live or a start token is sent.
      5. Customer: an active booking session takes the text as flow input,
         otherwise the top-level menu vocabulary applies.
    """

    def __init__(
        self,
        repository: BarbershopRepositoryPort,
        booking: BookingUseCase,
        financial: FinancialEntryUseCase,
        manager_panel: ManagerPanelUseCase,
        send_reply: SendReplyUseCase,
        booking_sessions: SessionStorePort[BookingSession],
        financial_sessions: SessionStorePort[FinancialSession],
        owner_phone: str,
        business_name: str,
        bot_name: str,
        clock: Callable[[], datetime] = datetime.now,
        manager_channel_id: str | None = None,
        session_sweep_grace: timedelta = timedelta(hours=1),
    ) -> None:
        self._repository = repository
        self._booking = booking
        self._financial = financial
        self._manager_panel = manager_panel
        self._send_reply = send_reply
        self._booking_sessions = booking_sessions
        self._financial_sessions = financial_sessions
        self._owner_phone = digits_only(owner_phone)
        self._business_name = business_name
        self._bot_name = bot_name
        self._clock = clock
        self._manager_channel_id = manager_channel_id
        self._session_sweep_grace = session_sweep_grace
        self._welcome_sent = False
        self._logger = logging.getLogger(__name__)

    @property
    def manager_channel_id(self) -> str | None:
        return self._manager_channel_id

    def handle(self, message: Message) -> None:
        try:
            replies = self.route(message)
            self._send_reply.execute_all(replies)
        except (TransportError, PersistenceError) as e:
            # The message is abandoned: no reply, no retry.
            self._logger.exception(
                "Message handling failed",
                extra={"message_id": message.id, "phone": message.sender_phone, "error": type(e).__name__},
            )

    def route(self, message: Message) -> list[OutboundMessage]:
        text = normalize(message.text)
        is_owner = self._is_owner(message.sender_phone)
        self._logger.info(
            "Incoming message",
            extra={"message_id": message.id, "phone": message.sender_phone, "reason": message.group_id or "direct"},
        )
        self._sweep_sessions()

        if message.is_group and is_owner and text == INSTALL_COMMAND:
            self.set_manager_channel(message.group_id)
            return [OutboundMessage(message.chat_id, texts.manager_installed())]

        if message.is_group and message.group_id == self._manager_channel_id:
            if not is_owner:
                return []
            financial = self._route_financial(message, text)
            if financial is not None:
                return financial
            return self._manager_panel.execute(text, reply_to=message.chat_id)

        if message.is_group:
            self._logger.info("Group message ignored", extra={"message_id": message.id, "reason": message.group_id})
            return []

        if is_owner:
            financial = self._route_financial(message, text)
            if financial is not None:
                return financial

        return self._route_customer(message, text)

    def set_manager_channel(self, channel_id: str, persist: bool = True) -> None:
        self._manager_channel_id = channel_id
        if persist:
            self._repository.set_config(MANAGER_CHANNEL_CONFIG_KEY, channel_id)
        self._logger.info("Manager channel set", extra={"reason": channel_id})

    def handle_transport_event(self, event: str) -> None:
        if event not in TRANSPORT_EVENTS:
            self._logger.warning("Unknown transport event", extra={"reason": event})
            return
        self._logger.info("Transport event", extra={"reason": event})
        if event != "connected" or self._welcome_sent or not self._manager_channel_id:
            return
        try:
            self._send_reply.execute(OutboundMessage(self._manager_channel_id, texts.manager_welcome(self._bot_name)))
            self._welcome_sent = True
        except TransportError:
            self._logger.exception("Manager welcome failed", extra={"reason": self._manager_channel_id})

    def _sweep_sessions(self) -> None:
        # Recently expired sessions stay so their owner still gets the expiry notice.
        now = self._clock()
        for store in (self._booking_sessions, self._financial_sessions):
            removed = store.sweep_expired(now, grace=self._session_sweep_grace)
            if removed:
                self._logger.info("Expired sessions dropped", extra={"reason": f"count={len(removed)}"})

    def _is_owner(self, phone: str) -> bool:
        return bool(self._owner_phone) and digits_only(phone) == self._owner_phone

    def _route_financial(self, message: Message, text: str) -> list[OutboundMessage] | None:
        key = digits_only(message.sender_phone)
        session = self._financial_sessions.get(key)

        if session is not None:
            if self._financial_sessions.is_expired(key, self._clock()):
                self._financial_sessions.delete(key)
                self._logger.info("Financial session expired", extra={"phone": key, "step": session.step.value})
                return [OutboundMessage(message.chat_id, texts.SESSION_EXPIRED)]
            result = self._financial.process(session, message.text)
        elif text in FINANCIAL_START_TOKENS:
            result = self._financial.start(key, FINANCIAL_START_TOKENS[text])
        else:
            return None

        if result.updated_session is None:
            self._financial_sessions.delete(key)
        else:
            self._financial_sessions.set(key, result.updated_session)
        return [OutboundMessage(message.chat_id, m) for m in result.messages]

    def _route_customer(self, message: Message, text: str) -> list[OutboundMessage]:
        phone = message.sender_phone
        session = self._booking_sessions.get(phone)

        if session is not None and self._booking_sessions.is_expired(phone, self._clock()):
            self._booking_sessions.delete(phone)
            self._logger.info("Booking session expired", extra={"phone": phone, "step": session.step.value})
            return [OutboundMessage(message.chat_id, texts.SESSION_EXPIRED)]

        if session is not None and session.step != BookingStep.IDLE:
            return self._run_booking(message, self._booking.process(session, message.text))

        if text in CANCEL_TOKENS:
            self._booking_sessions.delete(phone)
            return [OutboundMessage(message.chat_id, texts.NOTHING_TO_CANCEL)]
        if text in MENU_TOKENS:
            return [OutboundMessage(message.chat_id, texts.main_menu(self._business_name))]
        if text in BOOK_TOKENS:
            return self._run_booking(message, self._booking.start(phone))
        if text in SERVICES_TOKENS:
            services = self._repository.list_active_services()
            return [OutboundMessage(message.chat_id, texts.services_catalog(services))]
        if text in MY_APPOINTMENTS_TOKENS:
            return [OutboundMessage(message.chat_id, self._my_appointments(phone))]
        if text in HELP_TOKENS:
            return [OutboundMessage(message.chat_id, texts.help_text())]
        return [OutboundMessage(message.chat_id, texts.main_menu(self._business_name))]

    def _run_booking(self, message: Message, result: BookingResult) -> list[OutboundMessage]:
        phone = message.sender_phone
        if result.updated_session is None:
            self._booking_sessions.delete(phone)
        else:
            self._booking_sessions.set(phone, result.updated_session)

        replies = [OutboundMessage(message.chat_id, m) for m in result.messages]
        if result.notification:
            if self._manager_channel_id:
                replies.append(OutboundMessage(self._manager_channel_id, result.notification))
            else:
                self._logger.info("No manager channel, notification skipped", extra={"phone": phone})
        return replies

    def _my_appointments(self, phone: str) -> str:
        client = self._repository.get_client_by_phone(phone)
        if client is None:
            return texts.NO_APPOINTMENTS_YET
        today = self._clock().date().isoformat()
        upcoming = [a for a in self._repository.list_upcoming_appointments(today) if a.client_id == client.id]
        if not upcoming:
            return texts.NO_UPCOMING_APPOINTMENTS
        return texts.customer_appointments(upcoming)
