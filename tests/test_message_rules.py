"""
Tests for input parsing and pt-BR formatting helpers.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from barber_assistant.application.utils.formatting import format_date, format_date_time, format_money
from barber_assistant.application.utils.message_rules import (
    digits_only,
    is_affirmative,
    is_cancel,
    is_negative,
    parse_amount,
    parse_date_reselect,
    parse_index,
)


def test_parse_index_is_one_based():
    assert parse_index("1", 3) == 0
    assert parse_index(" 3 ", 3) == 2
    assert parse_index("4", 3) is None
    assert parse_index("0", 3) is None
    assert parse_index("-1", 3) is None
    assert parse_index("um", 3) is None
    assert parse_index("", 3) is None
    assert parse_index("²", 3) is None
    assert parse_index("٣", 3) is None


def test_parse_date_reselect():
    assert parse_date_reselect("data 2", 7) == 1
    assert parse_date_reselect("Data2", 7) == 1
    assert parse_date_reselect("d7", 7) == 6
    assert parse_date_reselect("d8", 7) is None
    assert parse_date_reselect("2", 7) is None
    assert parse_date_reselect("dados", 7) is None
    assert parse_date_reselect("d²", 7) is None


def test_parse_amount():
    assert parse_amount("75,50") == Decimal("75.50")
    assert parse_amount("75.5") == Decimal("75.5")
    assert parse_amount("R$ 120") == Decimal("120")
    assert parse_amount("0") is None
    assert parse_amount("-3") is None
    assert parse_amount("1.000,00") is None
    assert parse_amount("dez") is None


def test_tokens():
    assert is_cancel("0") and is_cancel(" Cancelar ") and is_cancel("cancel")
    assert not is_cancel("não")
    assert not is_cancel("0", allow_zero=False)
    assert is_cancel("cancelar", allow_zero=False)
    assert is_affirmative("SIM") and is_affirmative("confirmar") and is_affirmative("s")
    assert is_negative("não") and is_negative("nao") and is_negative("n")
    assert digits_only("+55 (11) 98888-7777") == "5511988887777"
    assert digits_only(None) == ""


def test_pt_br_formatting():
    assert format_date("2026-10-19") == "19 de outubro de 2026"
    assert format_date(date(2026, 3, 5)) == "05 de março de 2026"
    assert format_date_time("2026-12-01", "09:00") == "01 de dezembro de 2026 às 09:00"
    assert format_money(Decimal("75.5")) == "R$ 75.50"
    assert format_money(50) == "R$ 50.00"
