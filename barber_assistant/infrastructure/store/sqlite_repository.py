from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from barber_assistant.application.exceptions import PersistenceError
from barber_assistant.application.ports.repository import BarbershopRepositoryPort
from barber_assistant.domain.entities.appointment import Appointment, AppointmentStatus
from barber_assistant.domain.entities.client import Client
from barber_assistant.domain.entities.financial_record import FinancialRecord, FinancialType
from barber_assistant.domain.entities.service import Service
from barber_assistant.infrastructure.store.default_services import DEFAULT_SERVICES

_SCHEMA = """
CREATE TABLE IF NOT EXISTS clients (
    id TEXT PRIMARY KEY,
    phone TEXT UNIQUE NOT NULL,
    name TEXT NOT NULL,
    created_at TEXT NOT NULL,
    last_visit TEXT,
    total_visits INTEGER DEFAULT 0
);
CREATE TABLE IF NOT EXISTS services (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    price TEXT NOT NULL,
    duration INTEGER NOT NULL,
    description TEXT,
    active INTEGER DEFAULT 1
);
CREATE TABLE IF NOT EXISTS appointments (
    id TEXT PRIMARY KEY,
    client_id TEXT NOT NULL,
    client_phone TEXT NOT NULL,
    client_name TEXT NOT NULL,
    service_id TEXT NOT NULL,
    service_name TEXT NOT NULL,
    price TEXT NOT NULL,
    date TEXT NOT NULL,
    time TEXT NOT NULL,
    end_time TEXT NOT NULL,
    status TEXT DEFAULT 'pending',
    created_at TEXT NOT NULL,
    confirmed_at TEXT,
    FOREIGN KEY (client_id) REFERENCES clients(id)
);
CREATE INDEX IF NOT EXISTS idx_appointments_date ON appointments(date);
CREATE TABLE IF NOT EXISTS financial_records (
    id TEXT PRIMARY KEY,
    type TEXT NOT NULL,
    category TEXT NOT NULL,
    amount TEXT NOT NULL,
    description TEXT,
    date TEXT NOT NULL,
    appointment_id TEXT
);
CREATE TABLE IF NOT EXISTS config (
    key TEXT PRIMARY KEY,
    value TEXT
);
"""


class SqliteRepository(BarbershopRepositoryPort):
    def __init__(self, db_path: str = "./data/barber.db") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._logger = logging.getLogger(__name__)
        self._init_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Connection that commits on success and always closes."""
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open database {self._db_path}") from e
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        except sqlite3.Error as e:
            self._logger.error("Database operation failed", extra={"error": str(e)})
            raise PersistenceError(str(e)) from e
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(_SCHEMA)
            (count,) = conn.execute("SELECT COUNT(*) FROM services").fetchone()
            if count == 0:
                conn.executemany(
                    "INSERT INTO services (id, name, price, duration, description, active) VALUES (?, ?, ?, ?, ?, ?)",
                    [
                        (s.id, s.name, str(s.price), s.duration, s.description, int(s.active))
                        for s in DEFAULT_SERVICES
                    ],
                )
                self._logger.info("Seeded default services", extra={"count": len(DEFAULT_SERVICES)})

    # Clients

    def get_client_by_phone(self, phone: str) -> Client | None:
        if not phone:
            return None
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM clients WHERE phone = ?", (phone,)).fetchone()
        return _client_from_row(row) if row else None

    def insert_client(self, client: Client) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO clients (id, phone, name, created_at, last_visit, total_visits) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    client.id,
                    client.phone,
                    client.name,
                    client.created_at.isoformat(),
                    _iso_or_none(client.last_visit),
                    client.total_visits,
                ),
            )

    def update_client(self, client: Client) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE clients SET name = ?, last_visit = ?, total_visits = ? WHERE phone = ?",
                (client.name, _iso_or_none(client.last_visit), client.total_visits, client.phone),
            )

    def list_clients(self) -> list[Client]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM clients ORDER BY name").fetchall()
        return [_client_from_row(row) for row in rows]

    # Services

    def list_active_services(self) -> list[Service]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM services WHERE active = 1 ORDER BY name").fetchall()
        return [_service_from_row(row) for row in rows]

    def get_service(self, service_id: str) -> Service | None:
        if not service_id:
            return None
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM services WHERE id = ?", (service_id,)).fetchone()
        return _service_from_row(row) if row else None

    # Appointments

    def insert_appointment(self, appointment: Appointment) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO appointments (id, client_id, client_phone, client_name, service_id, service_name, "
                "price, date, time, end_time, status, created_at, confirmed_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    appointment.id,
                    appointment.client_id,
                    appointment.client_phone,
                    appointment.client_name,
                    appointment.service_id,
                    appointment.service_name,
                    str(appointment.price),
                    appointment.date,
                    appointment.time,
                    appointment.end_time,
                    appointment.status.value,
                    appointment.created_at.isoformat(),
                    _iso_or_none(appointment.confirmed_at),
                ),
            )

    def get_appointment(self, appointment_id: str) -> Appointment | None:
        if not appointment_id:
            return None
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM appointments WHERE id = ?", (appointment_id,)).fetchone()
        return _appointment_from_row(row) if row else None

    def find_appointments_by_id_prefix(self, prefix: str) -> list[Appointment]:
        if not prefix:
            return []
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM appointments WHERE id LIKE ? ESCAPE '\\' ORDER BY created_at",
                (f"{escaped}%",),
            ).fetchall()
        return [_appointment_from_row(row) for row in rows]

    def list_appointments_by_date(self, date: str) -> list[Appointment]:
        if not date:
            return []
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM appointments WHERE date = ? ORDER BY time", (date,)).fetchall()
        return [_appointment_from_row(row) for row in rows]

    def list_upcoming_appointments(self, today: str) -> list[Appointment]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM appointments WHERE date >= ? AND status IN (?, ?) ORDER BY date, time",
                (today, AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value),
            ).fetchall()
        return [_appointment_from_row(row) for row in rows]

    def update_appointment_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        at: datetime | None = None,
    ) -> None:
        confirmed_at = at if status == AppointmentStatus.CONFIRMED else None
        with self._connect() as conn:
            conn.execute(
                "UPDATE appointments SET status = ?, confirmed_at = COALESCE(?, confirmed_at) WHERE id = ?",
                (status.value, _iso_or_none(confirmed_at), appointment_id),
            )

    # Finance

    def insert_financial_record(self, record: FinancialRecord) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO financial_records (id, type, category, amount, description, date, appointment_id) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    record.id,
                    record.type.value,
                    record.category,
                    str(record.amount),
                    record.description,
                    record.date.isoformat(),
                    record.appointment_id,
                ),
            )

    def list_financial_records(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[FinancialRecord]:
        query = "SELECT * FROM financial_records"
        clauses: list[str] = []
        params: list[str] = []
        if start is not None:
            clauses.append("date >= ?")
            params.append(start.isoformat())
        if end is not None:
            clauses.append("date <= ?")
            params.append(end.isoformat())
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY date DESC"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_financial_record_from_row(row) for row in rows]

    # Config

    def get_config(self, key: str) -> str | None:
        if not key:
            return None
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM config WHERE key = ?", (key,)).fetchone()
        return str(row["value"] or "") if row else None

    def set_config(self, key: str, value: str) -> None:
        if not key or value is None:
            self._logger.warning("Ignoring invalid config write", extra={"reason": f"key={key!r}"})
            return
        with self._connect() as conn:
            conn.execute("INSERT OR REPLACE INTO config (key, value) VALUES (?, ?)", (key, value))


def _iso_or_none(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _to_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


def _to_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError):
        return Decimal("0")


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _client_from_row(row: sqlite3.Row) -> Client:
    return Client(
        id=str(row["id"] or ""),
        phone=str(row["phone"] or ""),
        name=str(row["name"] or ""),
        total_visits=_to_int(row["total_visits"]),
        created_at=_to_datetime(row["created_at"]) or datetime.now(),
        last_visit=_to_datetime(row["last_visit"]),
    )


def _service_from_row(row: sqlite3.Row) -> Service:
    return Service(
        id=str(row["id"] or ""),
        name=str(row["name"] or ""),
        price=_to_decimal(row["price"]),
        duration=_to_int(row["duration"], default=30),
        description=str(row["description"]) if row["description"] else None,
        active=bool(row["active"]),
    )


def _appointment_from_row(row: sqlite3.Row) -> Appointment:
    try:
        status = AppointmentStatus(row["status"])
    except ValueError:
        status = AppointmentStatus.PENDING
    return Appointment(
        id=str(row["id"] or ""),
        client_id=str(row["client_id"] or ""),
        client_phone=str(row["client_phone"] or ""),
        client_name=str(row["client_name"] or ""),
        service_id=str(row["service_id"] or ""),
        service_name=str(row["service_name"] or ""),
        price=_to_decimal(row["price"]),
        date=str(row["date"] or ""),
        time=str(row["time"] or ""),
        end_time=str(row["end_time"] or ""),
        status=status,
        created_at=_to_datetime(row["created_at"]) or datetime.now(),
        confirmed_at=_to_datetime(row["confirmed_at"]),
    )


def _financial_record_from_row(row: sqlite3.Row) -> FinancialRecord:
    try:
        record_type = FinancialType(row["type"])
    except ValueError:
        record_type = FinancialType.INCOME
    return FinancialRecord(
        id=str(row["id"] or ""),
        type=record_type,
        category=str(row["category"] or ""),
        amount=_to_decimal(row["amount"]),
        description=str(row["description"] or ""),
        date=_to_datetime(row["date"]) or datetime.now(),
        appointment_id=str(row["appointment_id"]) if row["appointment_id"] else None,
    )
