"""
Tests for the SQLite repository: seeding, typed round trips and queries.
"""

from __future__ import annotations

import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from barber_assistant.domain.entities.appointment import Appointment, AppointmentStatus
from barber_assistant.domain.entities.client import Client
from barber_assistant.domain.entities.financial_record import FinancialRecord, FinancialType
from barber_assistant.infrastructure.store.sqlite_repository import SqliteRepository

NOW = datetime(2026, 10, 19, 8, 0)


def _appointment(appointment_id: str, date: str, time: str, status=AppointmentStatus.PENDING) -> Appointment:
    return Appointment(
        id=appointment_id,
        client_id="cli_1",
        client_phone="5511988887777",
        client_name="João",
        service_id="svc_1",
        service_name="Corte Masculino",
        price=Decimal("50.00"),
        date=date,
        time=time,
        end_time="10:45" if time == "10:00" else "09:45",
        status=status,
        created_at=NOW,
    )


def test_default_services_are_seeded_once():
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = str(Path(tmpdir) / "nested" / "barber.db")
        repository = SqliteRepository(db_path)
        services = repository.list_active_services()

        assert len(services) == 6
        assert [s.name for s in services] == sorted(s.name for s in services)
        corte = repository.get_service("svc_1")
        assert corte.price == Decimal("50.00")
        assert corte.duration == 45

        # Reopening does not seed again.
        assert len(SqliteRepository(db_path).list_active_services()) == 6


def test_client_round_trip_and_update():
    with tempfile.TemporaryDirectory() as tmpdir:
        repository = SqliteRepository(str(Path(tmpdir) / "barber.db"))
        client = Client(id="cli_1", phone="5511988887777", name="João", total_visits=0, created_at=NOW)

        repository.insert_client(client)
        assert repository.get_client_by_phone("5511988887777") == client
        assert repository.get_client_by_phone("") is None

        visited = Client(
            id="cli_1",
            phone="5511988887777",
            name="João",
            total_visits=1,
            created_at=NOW,
            last_visit=datetime(2026, 10, 20, 9, 0),
        )
        repository.update_client(visited)
        assert repository.get_client_by_phone("5511988887777") == visited
        assert repository.list_clients() == [visited]


def test_appointment_round_trip_and_queries():
    with tempfile.TemporaryDirectory() as tmpdir:
        repository = SqliteRepository(str(Path(tmpdir) / "barber.db"))
        first = _appointment("apt_ab12cd34ef", "2026-10-20", "10:00")
        second = _appointment("apt_ab99ffff00", "2026-10-20", "09:00")
        past = _appointment("apt_000000aaaa", "2026-10-10", "09:00")
        cancelled = _appointment("apt_cccccccc00", "2026-10-21", "09:00", status=AppointmentStatus.CANCELLED)
        lookalike = _appointment("aptxab00000000", "2026-10-10", "10:00")
        for appointment in (first, second, past, cancelled, lookalike):
            repository.insert_appointment(appointment)

        assert repository.get_appointment(first.id) == first
        assert repository.get_appointment("apt_missing") is None

        assert [a.id for a in repository.list_appointments_by_date("2026-10-20")] == [second.id, first.id]
        assert [a.id for a in repository.list_upcoming_appointments("2026-10-19")] == [second.id, first.id]

        assert [a.id for a in repository.find_appointments_by_id_prefix("apt_ab12cd34")] == [first.id]
        assert len(repository.find_appointments_by_id_prefix("apt_ab")) == 2
        # "_" is literal, not a wildcard.
        assert lookalike.id not in [a.id for a in repository.find_appointments_by_id_prefix("apt_ab")]
        assert repository.find_appointments_by_id_prefix("") == []


def test_status_updates_keep_confirmation_time():
    with tempfile.TemporaryDirectory() as tmpdir:
        repository = SqliteRepository(str(Path(tmpdir) / "barber.db"))
        appointment = _appointment("apt_ab12cd34ef", "2026-10-20", "10:00")
        repository.insert_appointment(appointment)
        confirmed_at = datetime(2026, 10, 19, 12, 30)

        repository.update_appointment_status(appointment.id, AppointmentStatus.CONFIRMED, at=confirmed_at)
        stored = repository.get_appointment(appointment.id)
        assert stored.status == AppointmentStatus.CONFIRMED
        assert stored.confirmed_at == confirmed_at

        repository.update_appointment_status(appointment.id, AppointmentStatus.CANCELLED, at=NOW)
        stored = repository.get_appointment(appointment.id)
        assert stored.status == AppointmentStatus.CANCELLED
        assert stored.confirmed_at == confirmed_at
        assert repository.list_upcoming_appointments("2026-10-19") == []


def test_financial_records_are_filtered_by_range():
    with tempfile.TemporaryDirectory() as tmpdir:
        repository = SqliteRepository(str(Path(tmpdir) / "barber.db"))
        records = [
            FinancialRecord("fin_1", FinancialType.INCOME, "Barba", Decimal("75.50"), "", datetime(2026, 10, 18, 10, 0)),
            FinancialRecord("fin_2", FinancialType.EXPENSE, "Aluguel", Decimal("1200"), "outubro", datetime(2026, 10, 1, 9, 0)),
            FinancialRecord(
                "fin_3", FinancialType.INCOME, "Corte de Cabelo", Decimal("50"), "", datetime(2026, 9, 28, 9, 0),
                appointment_id="apt_ab12cd34ef",
            ),
        ]
        for record in records:
            repository.insert_financial_record(record)

        everything = repository.list_financial_records()
        assert [r.id for r in everything] == ["fin_1", "fin_2", "fin_3"]
        assert everything[0] == records[0]
        assert everything[2].appointment_id == "apt_ab12cd34ef"

        october = repository.list_financial_records(datetime(2026, 10, 1), datetime(2026, 10, 31, 23, 59))
        assert [r.id for r in october] == ["fin_1", "fin_2"]
        assert [r.id for r in repository.list_financial_records(start=datetime(2026, 10, 2))] == ["fin_1"]
        assert [r.id for r in repository.list_financial_records(end=datetime(2026, 9, 30))] == ["fin_3"]


def test_config_values():
    with tempfile.TemporaryDirectory() as tmpdir:
        repository = SqliteRepository(str(Path(tmpdir) / "barber.db"))

        assert repository.get_config("manager_group_jid") is None
        repository.set_config("manager_group_jid", "111@g.us")
        repository.set_config("manager_group_jid", "222@g.us")

        assert repository.get_config("manager_group_jid") == "222@g.us"
