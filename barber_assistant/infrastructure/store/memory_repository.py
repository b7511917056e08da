from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from barber_assistant.application.ports.repository import BarbershopRepositoryPort
from barber_assistant.domain.entities.appointment import ACTIVE_STATUSES, Appointment, AppointmentStatus
from barber_assistant.domain.entities.client import Client
from barber_assistant.domain.entities.financial_record import FinancialRecord
from barber_assistant.domain.entities.service import Service
from barber_assistant.infrastructure.store.default_services import DEFAULT_SERVICES


class MemoryRepository(BarbershopRepositoryPort):
    def __init__(self, services: list[Service] | tuple[Service, ...] | None = None) -> None:
        seed = DEFAULT_SERVICES if services is None else services
        self._services: dict[str, Service] = {service.id: service for service in seed}
        self._clients: dict[str, Client] = {}
        self._appointments: dict[str, Appointment] = {}
        self._financial_records: list[FinancialRecord] = []
        self._config: dict[str, str] = {}

    def get_client_by_phone(self, phone: str) -> Client | None:
        if not phone:
            return None
        return self._clients.get(phone)

    def insert_client(self, client: Client) -> None:
        self._clients[client.phone] = client

    def update_client(self, client: Client) -> None:
        self._clients[client.phone] = client

    def list_clients(self) -> list[Client]:
        return sorted(self._clients.values(), key=lambda c: c.name)

    def list_active_services(self) -> list[Service]:
        return sorted((s for s in self._services.values() if s.active), key=lambda s: s.name)

    def get_service(self, service_id: str) -> Service | None:
        return self._services.get(service_id)

    def insert_appointment(self, appointment: Appointment) -> None:
        self._appointments[appointment.id] = appointment

    def get_appointment(self, appointment_id: str) -> Appointment | None:
        return self._appointments.get(appointment_id)

    def find_appointments_by_id_prefix(self, prefix: str) -> list[Appointment]:
        if not prefix:
            return []
        return [a for a in self._appointments.values() if a.id.startswith(prefix)]

    def list_appointments_by_date(self, date: str) -> list[Appointment]:
        return sorted((a for a in self._appointments.values() if a.date == date), key=lambda a: a.time)

    def list_upcoming_appointments(self, today: str) -> list[Appointment]:
        upcoming = (
            a for a in self._appointments.values() if a.date >= today and a.status in ACTIVE_STATUSES
        )
        return sorted(upcoming, key=lambda a: (a.date, a.time))

    def update_appointment_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        at: datetime | None = None,
    ) -> None:
        appointment = self._appointments.get(appointment_id)
        if appointment is None:
            return
        if status == AppointmentStatus.CONFIRMED:
            appointment = replace(appointment, confirmed_at=at)
        self._appointments[appointment_id] = replace(appointment, status=status)

    def insert_financial_record(self, record: FinancialRecord) -> None:
        self._financial_records.append(record)

    def list_financial_records(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[FinancialRecord]:
        records = [
            r
            for r in self._financial_records
            if (start is None or r.date >= start) and (end is None or r.date <= end)
        ]
        return sorted(records, key=lambda r: r.date, reverse=True)

    def get_config(self, key: str) -> str | None:
        return self._config.get(key)

    def set_config(self, key: str, value: str) -> None:
        if not key or value is None:
            return
        self._config[key] = value
