from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

CANCEL_TOKENS = frozenset({"0", "cancelar", "cancel"})
# Free-text steps only accept the spelled-out tokens; "0" there is input.
WORD_CANCEL_TOKENS = CANCEL_TOKENS - {"0"}
AFFIRMATIVE_TOKENS = frozenset({"confirmar", "sim", "s"})
NEGATIVE_TOKENS = frozenset({"cancelar", "não", "nao", "n"})
SKIP_TOKENS = frozenset({"pular"})

_DATE_RESELECT_RE = re.compile(r"^(?:data\s*|d)(\d+)$", re.ASCII)
_AMOUNT_RE = re.compile(r"^\d+(?:[.,]\d+)?$", re.ASCII)


def normalize(text: str | None) -> str:
    return (text or "").strip().lower()


def is_cancel(text: str, allow_zero: bool = True) -> bool:
    return normalize(text) in (CANCEL_TOKENS if allow_zero else WORD_CANCEL_TOKENS)


def is_affirmative(text: str) -> bool:
    return normalize(text) in AFFIRMATIVE_TOKENS


def is_negative(text: str) -> bool:
    return normalize(text) in NEGATIVE_TOKENS


def parse_index(text: str, size: int) -> int | None:
    """
    Parse a 1-based menu choice into a 0-based index.
    Returns None for non-numeric, zero, negative or out-of-range input.
    """
    normalized = normalize(text)
    if not (normalized.isascii() and normalized.isdigit()):
        return None
    choice = int(normalized)
    if 1 <= choice <= size:
        return choice - 1
    return None


def parse_date_reselect(text: str, size: int) -> int | None:
    """Explicit date change while picking a time: ``data 2`` or ``d2``."""
    match = _DATE_RESELECT_RE.match(normalize(text))
    if not match:
        return None
    return parse_index(match.group(1), size)


def parse_amount(text: str) -> Decimal | None:
    """Positive decimal amount; accepts ``,`` or ``.`` as the fractional separator."""
    normalized = normalize(text).replace("r$", "").strip()
    if not _AMOUNT_RE.match(normalized):
        return None
    try:
        amount = Decimal(normalized.replace(",", "."))
    except InvalidOperation:
        return None
    if amount <= 0:
        return None
    return amount


def digits_only(phone: str | None) -> str:
    return re.sub(r"[^0-9]", "", phone or "")
