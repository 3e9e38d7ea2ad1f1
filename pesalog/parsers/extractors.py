"""Field extractors shared by the category handlers.

Every function takes normalized message text (see normalize_message) and
never raises: a missing field comes back as None or a documented default.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Iterable

from .base import UNKNOWN, ZERO, AccountKind

_NUMBER = r"(\d+(?:\.\d+)?)"

_TX_ID_RE = re.compile(r"^([A-Z0-9]{6,})\s+Confirmed", re.IGNORECASE)
_AMOUNT_RE = re.compile(r"Ksh\s?" + _NUMBER)
_DATETIME_RE = re.compile(
    r"\bon\s([\d/]+)\s+at\s(\d{1,2}:\d{2}(?::\d{2})?(?:\s?(?:AM|PM))?)", re.IGNORECASE,
)
_COST_RE = re.compile(r"Transaction cost,?\s*Ksh\s?" + _NUMBER, re.IGNORECASE)
_SAVINGS_COST_RE = re.compile(
    r"(?:M-?PESA )?Transaction cost,?\s*(?:is\s*)?Ksh\s?" + _NUMBER, re.IGNORECASE,
)

# +2547XXXXXXXX, 2547XXXXXXXX, 07XXXXXXXX (10-digit leading zero), 7XXXXXXXX
PHONE_RE = re.compile(r"(?<![\d+])(\+?2547\d{8}|0\d{9}|7\d{8})(?!\d)")

_BALANCE_RES: dict[AccountKind, re.Pattern] = {
    AccountKind.MPESA: re.compile(
        r"M-?PESA balance is Ksh\s?" + _NUMBER, re.IGNORECASE,
    ),
    AccountKind.POCHI: re.compile(
        r"(?:Business|Pochi(?: la Biashara)?) (?:account )?balance is Ksh\s?" + _NUMBER,
        re.IGNORECASE,
    ),
    AccountKind.MSHWARI: re.compile(
        r"M[- ]?Shwari (?:savings? )?(?:account )?balance is Ksh\s?" + _NUMBER,
        re.IGNORECASE,
    ),
}

_TRAILING_PUNCT_RE = re.compile(r"[.,;:]+$")


def parse_decimal(token: str | None) -> Decimal | None:
    """Convert a numeric token to Decimal. Tolerates commas and a trailing dot."""
    if not token:
        return None
    token = token.replace(",", "").strip().rstrip(".")
    try:
        return Decimal(token)
    except (InvalidOperation, ValueError):
        return None


def extract_tx_id(text: str) -> str:
    """Leading reference code (6+ alphanumerics) before 'Confirmed'."""
    m = _TX_ID_RE.match(text)
    return m.group(1) if m else UNKNOWN


def extract_amount(text: str) -> Decimal:
    """First Ksh-prefixed amount in the message, or 0."""
    m = _AMOUNT_RE.search(text)
    value = parse_decimal(m.group(1)) if m else None
    return value if value is not None else ZERO


def extract_datetime(text: str) -> tuple[str | None, str | None]:
    """Date and time from an 'on <date> at <time>' phrase, as written."""
    m = _DATETIME_RE.search(text)
    if not m:
        return None, None
    return m.group(1), m.group(2).strip()


def extract_cost(text: str) -> Decimal:
    m = _COST_RE.search(text)
    value = parse_decimal(m.group(1)) if m else None
    return value if value is not None else ZERO


def extract_savings_cost(text: str) -> Decimal:
    """Transaction cost as worded in M-Shwari transfer confirmations."""
    m = _SAVINGS_COST_RE.search(text)
    value = parse_decimal(m.group(1)) if m else None
    return value if value is not None else ZERO


def extract_phone(text: str) -> str | None:
    m = PHONE_RE.search(text)
    return m.group(1) if m else None


def extract_balance(text: str, kind: AccountKind) -> Decimal | None:
    """Balance reported for one wallet, or None if the message doesn't state it."""
    m = _BALANCE_RES[kind].search(text)
    return parse_decimal(m.group(1)) if m else None


def extract_balances(
    text: str, kinds: Iterable[AccountKind],
) -> dict[AccountKind, Decimal]:
    """Balances for the given wallets. Only wallets actually mentioned are keys."""
    balances: dict[AccountKind, Decimal] = {}
    for kind in kinds:
        value = extract_balance(text, kind)
        if value is not None:
            balances[kind] = value
    return balances


def strip_trailing_punctuation(value: str) -> str:
    return _TRAILING_PUNCT_RE.sub("", value).strip()


def split_phone(party: str) -> tuple[str, str | None]:
    """Separate an embedded phone number from a counterparty label.

    Returns (name, phone). The name has its trailing punctuation removed.
    """
    party = party.strip()
    phone = extract_phone(party)
    if phone:
        party = party.replace(phone, "", 1).strip()
        party = re.sub(r"\s{2,}", " ", party)
    return strip_trailing_punctuation(party), phone
