"""Base types for M-Pesa message parsing: record model, enums, normalizer, builder."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping

ZERO = Decimal("0")

# Canonical wallet names used as counterparties for own-account movements
MPESA = "M-PESA"
POCHI = "POCHI"
MSHWARI = "M-SHWARI"
UNKNOWN = "UNKNOWN"


class Category(str, Enum):
    RECEIVED = "Received"
    SENT = "Sent"
    INTERNAL = "Internal"
    SAVINGS_TRANSFER = "SavingsTransfer"
    OTHER = "Other"


class Direction(str, Enum):
    IN = "In"
    OUT = "Out"
    INTERNAL = "Internal"
    UNKNOWN = "Unknown"


class AccountKind(str, Enum):
    """Wallets whose balance a message can report."""
    MPESA = "mpesa"
    POCHI = "pochi"
    MSHWARI = "mshwari"


CATEGORY_DIRECTION: Mapping[Category, Direction] = MappingProxyType({
    Category.RECEIVED: Direction.IN,
    Category.SENT: Direction.OUT,
    Category.INTERNAL: Direction.INTERNAL,
    Category.SAVINGS_TRANSFER: Direction.INTERNAL,
    Category.OTHER: Direction.UNKNOWN,
})


@dataclass(frozen=True)
class TransactionRecord:
    """A parsed M-Pesa transaction. Built once per message, never mutated.

    ``direction`` is derived from ``category`` and cannot be set on its own.
    ``balances`` only holds the wallets the message actually mentioned; a
    missing key means "not reported", not zero. Balances count towards
    equality but not towards the hash.
    """
    transaction_id: str
    category: Category
    action_label: str
    raw_text: str
    amount: Decimal = ZERO
    counterparty_from: str = ""
    counterparty_to: str = ""
    phone: str | None = None
    account_reference: str | None = None
    date: str | None = None
    time: str | None = None
    transaction_cost: Decimal = ZERO
    balances: Mapping[AccountKind, Decimal] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "balances", MappingProxyType(dict(self.balances)))

    @property
    def direction(self) -> Direction:
        return CATEGORY_DIRECTION[self.category]

    def to_dict(self) -> dict:
        """JSON-friendly view: enum values as strings, decimals as strings."""
        return {
            "transaction_id": self.transaction_id,
            "category": self.category.value,
            "direction": self.direction.value,
            "action_label": self.action_label,
            "amount": str(self.amount),
            "counterparty_from": self.counterparty_from,
            "counterparty_to": self.counterparty_to,
            "phone": self.phone,
            "account_reference": self.account_reference,
            "date": self.date,
            "time": self.time,
            "transaction_cost": str(self.transaction_cost),
            "balances": {k.value: str(v) for k, v in self.balances.items()},
            "raw_text": self.raw_text,
        }


@dataclass
class HandlerResult:
    """Category-specific fields produced by a category handler.

    transaction_cost=None means the common "Transaction cost" extractor applies.
    """
    action_label: str
    counterparty_from: str = ""
    counterparty_to: str = ""
    phone: str | None = None
    account_reference: str | None = None
    balances: dict[AccountKind, Decimal] = field(default_factory=dict)
    transaction_cost: Decimal | None = None


_WHITESPACE_RE = re.compile(r"\s+")
# Currency marker spellings: KES, ksh, Ksh., KSH.. (any case, any trailing dots)
_CURRENCY_RE = re.compile(r"\b(?:KES|KSH)\.*", re.IGNORECASE)


def normalize_message(raw: str) -> str:
    """Canonicalize an SMS body for matching.

    - Strip digit-grouping commas
    - Collapse whitespace runs to one space
    - Rewrite every currency marker spelling to ``Ksh``
    - Trim

    Idempotent: normalizing twice gives the same text as normalizing once.
    """
    text = raw.replace(",", "")
    text = _WHITESPACE_RE.sub(" ", text)
    text = _CURRENCY_RE.sub("Ksh", text)
    return text.strip()


def build_record(
    raw_text: str,
    category: Category,
    result: HandlerResult,
    transaction_id: str = UNKNOWN,
    amount: Decimal = ZERO,
    date: str | None = None,
    time: str | None = None,
    transaction_cost: Decimal = ZERO,
) -> TransactionRecord:
    """Merge common fields with a handler result into the final record."""
    cost = result.transaction_cost if result.transaction_cost is not None else transaction_cost
    return TransactionRecord(
        transaction_id=transaction_id or UNKNOWN,
        category=category,
        action_label=result.action_label,
        raw_text=raw_text,
        amount=amount if amount is not None else ZERO,
        counterparty_from=result.counterparty_from,
        counterparty_to=result.counterparty_to,
        phone=result.phone,
        account_reference=result.account_reference,
        date=date,
        time=time,
        transaction_cost=cost if cost is not None else ZERO,
        balances=result.balances,
    )
