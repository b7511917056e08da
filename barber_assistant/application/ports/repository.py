from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from barber_assistant.domain.entities.appointment import Appointment, AppointmentStatus
from barber_assistant.domain.entities.client import Client
from barber_assistant.domain.entities.financial_record import FinancialRecord
from barber_assistant.domain.entities.service import Service


class BarbershopRepositoryPort(ABC):
    # Clients
    @abstractmethod
    def get_client_by_phone(self, phone: str) -> Client | None:
        raise NotImplementedError

    @abstractmethod
    def insert_client(self, client: Client) -> None:
        raise NotImplementedError

    @abstractmethod
    def update_client(self, client: Client) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_clients(self) -> list[Client]:
        """All clients ordered by name."""
        raise NotImplementedError

    # Services
    @abstractmethod
    def list_active_services(self) -> list[Service]:
        """Active services ordered by name."""
        raise NotImplementedError

    @abstractmethod
    def get_service(self, service_id: str) -> Service | None:
        raise NotImplementedError

    # Appointments
    @abstractmethod
    def insert_appointment(self, appointment: Appointment) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_appointment(self, appointment_id: str) -> Appointment | None:
        raise NotImplementedError

    @abstractmethod
    def find_appointments_by_id_prefix(self, prefix: str) -> list[Appointment]:
        raise NotImplementedError

    @abstractmethod
    def list_appointments_by_date(self, date: str) -> list[Appointment]:
        """Every appointment of a civil date (any status), ordered by time."""
        raise NotImplementedError

    @abstractmethod
    def list_upcoming_appointments(self, today: str) -> list[Appointment]:
        """Pending/confirmed appointments dated today or later, ordered by date and time."""
        raise NotImplementedError

    @abstractmethod
    def update_appointment_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        at: datetime | None = None,
    ) -> None:
        """Set status; ``at`` becomes confirmed_at when confirming."""
        raise NotImplementedError

    # Finance
    @abstractmethod
    def insert_financial_record(self, record: FinancialRecord) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_financial_records(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[FinancialRecord]:
        """Records within [start, end], newest first."""
        raise NotImplementedError

    # Config
    @abstractmethod
    def get_config(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def set_config(self, key: str, value: str) -> None:
        raise NotImplementedError
