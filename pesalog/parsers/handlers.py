"""Category handlers: one extraction routine per message category.

Each handler takes normalized text and returns a HandlerResult with the
counterparties, references and balances its template carries. Common
fields (id, amount, date, time, cost) are extracted separately by the
pipeline in mpesa.py.
"""

from __future__ import annotations

import re

from .base import MPESA, MSHWARI, POCHI, UNKNOWN, AccountKind, HandlerResult
from .extractors import (
    extract_balance,
    extract_balances,
    extract_phone,
    extract_savings_cost,
    split_phone,
    strip_trailing_punctuation,
)

_RECEIVED_RE = re.compile(
    r"you have received\s+Ksh\s?\d+(?:\.\d+)?\s+from\s+(.+?)"
    r"(?:\s+on\b|\s+at\b|\.?\s+New\b|$)",
    re.IGNORECASE,
)
_LOOSE_FROM_RE = re.compile(r"\bfrom\s+([A-Za-z0-9\s.\-&']+)", re.IGNORECASE)

_SENT_RE = re.compile(
    r"\b(sent to|paid to|transferred to(?!\s+(?:your\s+)?M[- ]?Shwari\b))\s+(.+?)"
    r"(?:\s+for account\b|\s+from your\b|\s+on\b|\.?\s+New\b|\.?\s+Transaction cost\b|$)",
    re.IGNORECASE,
)
_ACCOUNT_RE = re.compile(
    r"\bfor account\s+(.+?)(?:\s+on\b|\.?\s+New\b|\.?\s+Transaction cost\b|$)",
    re.IGNORECASE,
)

_MOVED_FROM_RE = re.compile(r"moved from your ([A-Za-z\-\s]+?) account", re.IGNORECASE)
_MOVED_TO_RE = re.compile(r"\bto your ([A-Za-z\-\s]+?) account", re.IGNORECASE)

_TO_SAVINGS_RE = re.compile(r"\btransferred to (?:your )?M[- ]?Shwari\b", re.IGNORECASE)

# Wording that places a payment on the Pochi la Biashara wallet
BUSINESS_RE = re.compile(r"\bBusiness (?:account|balance)\b|\bPochi\b", re.IGNORECASE)
_BUSINESS_NAME_RE = re.compile(r"business|pochi", re.IGNORECASE)

_WALLET_KINDS = (AccountKind.MPESA, AccountKind.POCHI)
_SAVINGS_KINDS = (AccountKind.MPESA, AccountKind.MSHWARI)


def _wallet_name(label: str) -> str:
    """Resolve an own-account label ("Business", "M-PESA") to a wallet name."""
    return POCHI if _BUSINESS_NAME_RE.search(label) else MPESA


def handle_received(text: str) -> HandlerResult:
    """Money in: sender name and phone, destination wallet, wallet balances."""
    phone = None
    m = _RECEIVED_RE.search(text)
    if m:
        sender, phone = split_phone(m.group(1))
    else:
        # Template drifted; take whatever follows "from" and look for a
        # phone number anywhere in the message.
        loose = _LOOSE_FROM_RE.search(text)
        sender = ""
        if loose:
            sender, phone = split_phone(loose.group(1))
        if phone is None:
            phone = extract_phone(text)

    to_wallet = POCHI if extract_balance(text, AccountKind.POCHI) is not None else MPESA
    return HandlerResult(
        action_label="received from",
        counterparty_from=sender or UNKNOWN,
        counterparty_to=to_wallet,
        phone=phone,
        balances=extract_balances(text, _WALLET_KINDS),
    )


def handle_sent(text: str) -> HandlerResult:
    """Money out: recipient, paybill account reference, source wallet."""
    m = _SENT_RE.search(text)
    action = m.group(1).lower() if m else "sent to"
    recipient = ""
    phone = None
    if m:
        recipient, phone = split_phone(m.group(2))

    account = None
    acct_match = _ACCOUNT_RE.search(text)
    if acct_match:
        account = strip_trailing_punctuation(acct_match.group(1)) or None
        # A paybill reference that contains the short name is the fuller label
        if account and recipient and recipient.lower() in account.lower():
            recipient = account

    from_wallet = POCHI if BUSINESS_RE.search(text) else MPESA
    return HandlerResult(
        action_label=action,
        counterparty_from=from_wallet,
        counterparty_to=recipient or UNKNOWN,
        phone=phone,
        account_reference=account,
        balances=extract_balances(text, _WALLET_KINDS),
    )


def handle_internal(text: str) -> HandlerResult:
    """Move between the user's own M-PESA and Pochi wallets."""
    from_match = _MOVED_FROM_RE.search(text)
    to_match = _MOVED_TO_RE.search(text)
    return HandlerResult(
        action_label="has been moved",
        counterparty_from=_wallet_name(from_match.group(1) if from_match else ""),
        counterparty_to=_wallet_name(to_match.group(1) if to_match else ""),
        balances=extract_balances(text, _WALLET_KINDS),
    )


def handle_savings_transfer(text: str) -> HandlerResult:
    """Transfer between M-PESA and the M-Shwari savings account."""
    if _TO_SAVINGS_RE.search(text):
        action, source, target = "transferred to M-Shwari", MPESA, MSHWARI
    else:
        action, source, target = "transferred from M-Shwari", MSHWARI, MPESA
    return HandlerResult(
        action_label=action,
        counterparty_from=source,
        counterparty_to=target,
        balances=extract_balances(text, _SAVINGS_KINDS),
        transaction_cost=extract_savings_cost(text),
    )


def handle_other(text: str) -> HandlerResult:
    return HandlerResult(action_label="other")
