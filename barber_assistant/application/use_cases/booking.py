from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace

from barber_assistant.application.ports.repository import BarbershopRepositoryPort
from barber_assistant.application.use_cases.availability import AvailabilityCalculator
from barber_assistant.application.use_cases.conflicts import ConflictDetector
from barber_assistant.application.utils import texts
from barber_assistant.application.utils.message_rules import (
    is_affirmative,
    is_cancel,
    is_negative,
    parse_date_reselect,
    parse_index,
)
from barber_assistant.domain.entities.appointment import APPOINTMENT_ID_PREFIX, Appointment, AppointmentStatus
from barber_assistant.domain.entities.booking_session import BookingSession, BookingStep
from barber_assistant.domain.entities.client import Client
from barber_assistant.domain.entities.service import Service

MIN_NAME_LENGTH = 2
DEFAULT_CLIENT_NAME = "Cliente"


@dataclass(frozen=True)
class BookingResult:
    action: str
    messages: list[str]
    updated_session: BookingSession | None  # None ends the session
    appointment: Appointment | None = None
    notification: str | None = None  # for the manager channel


class BookingUseCase:
    """Customer booking conversation: service -> date -> time -> name -> confirmation."""

    def __init__(
        self,
        repository: BarbershopRepositoryPort,
        calculator: AvailabilityCalculator,
        detector: ConflictDetector,
    ) -> None:
        self._repository = repository
        self._calculator = calculator
        self._detector = detector
        self._logger = logging.getLogger(__name__)

    def start(self, phone: str) -> BookingResult:
        services = self._repository.list_active_services()
        if not services:
            return BookingResult(action="unavailable", messages=[texts.NO_SERVICES], updated_session=None)
        return BookingResult(
            action="ask_service",
            messages=[texts.services_menu(services)],
            updated_session=BookingSession(
                phone=phone,
                created_at=self._calculator.now(),
                step=BookingStep.SELECTING_SERVICE,
            ),
        )

    def process(self, session: BookingSession, text: str) -> BookingResult:
        if is_cancel(text):
            return self._cancelled(session)

        if session.step == BookingStep.SELECTING_SERVICE:
            return self._select_service(session, text)
        if session.step == BookingStep.SELECTING_DATE:
            return self._select_date(session, text)
        if session.step == BookingStep.SELECTING_TIME:
            return self._select_time(session, text)
        if session.step == BookingStep.AWAITING_NAME:
            return self._enter_name(session, text)
        if session.step == BookingStep.CONFIRMING:
            if is_affirmative(text):
                return self._commit(session)
            if is_negative(text):
                return self._cancelled(session)
            return BookingResult(action="confirm", messages=[texts.CONFIRM_OR_CANCEL], updated_session=session)

        return self.start(session.phone)

    def _select_service(self, session: BookingSession, text: str) -> BookingResult:
        services = self._repository.list_active_services()
        index = parse_index(text, len(services))
        if index is None:
            return BookingResult(
                action="ask_service",
                messages=[texts.INVALID_SERVICE, texts.services_menu(services)],
                updated_session=session,
            )
        return BookingResult(
            action="ask_date",
            messages=[texts.dates_menu(self._calculator.next_business_days())],
            updated_session=replace(session, step=BookingStep.SELECTING_DATE, service_id=services[index].id),
        )

    def _select_date(self, session: BookingSession, text: str) -> BookingResult:
        service = self._session_service(session)
        if service is None:
            return self._service_gone(session)

        dates = self._calculator.next_business_days()
        index = parse_index(text, len(dates))
        if index is None:
            return BookingResult(action="ask_date", messages=[texts.INVALID_DATE], updated_session=session)
        return self._offer_times(session, service, dates[index])

    def _select_time(self, session: BookingSession, text: str) -> BookingResult:
        service = self._session_service(session)
        if service is None or session.date is None:
            return self._service_gone(session)

        dates = self._calculator.next_business_days()
        reselect = parse_date_reselect(text, len(dates))
        if reselect is not None:
            return self._offer_times(session, service, dates[reselect])

        # Indices refer to the list the customer was shown.
        times = list(session.offered_times) or self._detector.available_slots(session.date, service)
        if not times:
            return self._back_to_dates(session, texts.NO_SLOTS)

        index = parse_index(text, len(times))
        if index is None:
            # A bare number past the slot list but inside the date list changes the date.
            date_index = parse_index(text, len(dates))
            if date_index is not None:
                return self._offer_times(session, service, dates[date_index])
            return BookingResult(action="ask_time", messages=[texts.INVALID_TIME], updated_session=session)

        if times[index] not in self._detector.available_slots(session.date, service):
            return self._slot_taken(session, service)

        chosen = replace(session, time=times[index])
        client = self._repository.get_client_by_phone(session.phone)
        if client is not None:
            return self._ask_confirmation(replace(chosen, client_name=client.name), service)
        return BookingResult(
            action="ask_name",
            messages=[texts.ASK_NAME],
            updated_session=replace(chosen, step=BookingStep.AWAITING_NAME),
        )

    def _enter_name(self, session: BookingSession, text: str) -> BookingResult:
        name = " ".join((text or "").split())
        if len(name) < MIN_NAME_LENGTH:
            return BookingResult(action="ask_name", messages=[texts.INVALID_NAME], updated_session=session)
        service = self._session_service(session)
        if service is None:
            return self._service_gone(session)
        return self._ask_confirmation(replace(session, client_name=name), service)

    def _ask_confirmation(self, session: BookingSession, service: Service) -> BookingResult:
        end_time = self._calculator.compute_end_time(session.time, service.duration)
        return BookingResult(
            action="confirm",
            messages=[
                texts.booking_summary(
                    service=service,
                    date=session.date,
                    time=session.time,
                    end_time=end_time,
                    client_name=session.client_name or DEFAULT_CLIENT_NAME,
                )
            ],
            updated_session=replace(session, step=BookingStep.CONFIRMING),
        )

    def _offer_times(self, session: BookingSession, service: Service, date: str) -> BookingResult:
        times = self._detector.available_slots(date, service)
        if not times:
            return BookingResult(
                action="no_slots",
                messages=[texts.NO_SLOTS],
                updated_session=replace(
                    session, step=BookingStep.SELECTING_DATE, date=None, time=None, offered_times=()
                ),
            )
        return BookingResult(
            action="ask_time",
            messages=[texts.times_menu(date, service, times)],
            updated_session=replace(
                session, step=BookingStep.SELECTING_TIME, date=date, time=None, offered_times=tuple(times)
            ),
        )

    def _slot_taken(self, session: BookingSession, service: Service, times: list[str] | None = None) -> BookingResult:
        if times is None:
            times = self._detector.available_slots(session.date, service)
        if not times:
            return self._back_to_dates(session, texts.NO_SLOTS)
        return BookingResult(
            action="slot_taken",
            messages=[texts.SLOT_TAKEN, texts.times_menu(session.date, service, times)],
            updated_session=replace(session, step=BookingStep.SELECTING_TIME, time=None, offered_times=tuple(times)),
        )

    def _back_to_dates(self, session: BookingSession, reason: str) -> BookingResult:
        return BookingResult(
            action="no_slots",
            messages=[reason, texts.dates_menu(self._calculator.next_business_days())],
            updated_session=replace(session, step=BookingStep.SELECTING_DATE, date=None, time=None, offered_times=()),
        )

    def _commit(self, session: BookingSession) -> BookingResult:
        service = self._session_service(session)
        if service is None or session.date is None or session.time is None:
            return self._service_gone(session)

        # Someone else may have taken the slot while this customer was typing.
        times = self._detector.available_slots(session.date, service)
        if session.time not in times:
            self._logger.info(
                "Slot taken before confirmation",
                extra={"phone": session.phone, "reason": f"{session.date} {session.time}"},
            )
            return self._slot_taken(session, service, times)

        now = self._calculator.now()
        client = self._repository.get_client_by_phone(session.phone)
        if client is None:
            client = Client(
                id=f"cli_{uuid.uuid4().hex}",
                phone=session.phone,
                name=session.client_name or DEFAULT_CLIENT_NAME,
                total_visits=0,
                created_at=now,
            )
            self._repository.insert_client(client)
        else:
            client = replace(client, total_visits=client.total_visits + 1, last_visit=now)
            self._repository.update_client(client)

        appointment = Appointment(
            id=f"{APPOINTMENT_ID_PREFIX}{uuid.uuid4().hex}",
            client_id=client.id,
            client_phone=client.phone,
            client_name=client.name,
            service_id=service.id,
            service_name=service.name,
            price=service.price,
            date=session.date,
            time=session.time,
            end_time=self._calculator.compute_end_time(session.time, service.duration),
            status=AppointmentStatus.PENDING,
            created_at=now,
        )
        self._repository.insert_appointment(appointment)
        self._logger.info(
            "Appointment created",
            extra={"appointment_id": appointment.id, "phone": session.phone},
        )
        return BookingResult(
            action="booked",
            messages=[texts.booking_done(appointment)],
            updated_session=None,
            appointment=appointment,
            notification=texts.new_booking_notification(appointment),
        )

    def _cancelled(self, session: BookingSession) -> BookingResult:
        return BookingResult(
            action="cancelled",
            messages=[texts.BOOKING_CANCELLED],
            updated_session=None,
        )

    def _service_gone(self, session: BookingSession) -> BookingResult:
        self._logger.warning(
            "Booking session lost its service, restarting",
            extra={"phone": session.phone, "step": session.step.value},
        )
        return self.start(session.phone)

    def _session_service(self, session: BookingSession) -> Service | None:
        if not session.service_id:
            return None
        service = self._repository.get_service(session.service_id)
        if service is None or not service.active:
            return None
        return service
