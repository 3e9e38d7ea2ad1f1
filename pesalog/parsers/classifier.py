"""Classifier: ordered matcher table selecting exactly one category per message.

Matchers are evaluated top to bottom and the first predicate that matches
wins. The order matters because templates overlap loosely:

1. Received         "you have received"
2. Sent             "sent to" / "paid to" / "transferred to" (not into M-Shwari)
3. Internal         "has been moved"
4. SavingsTransfer  mentions M-Shwari and "transferred"
5. Other            fallback, always matches
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from .base import Category, HandlerResult
from .handlers import (
    handle_internal,
    handle_other,
    handle_received,
    handle_savings_transfer,
    handle_sent,
)

_RECEIVED_RE = re.compile(r"\byou have received\b", re.IGNORECASE)
# "transferred to M-Shwari" is a savings deposit, not a payment
_SENT_RE = re.compile(
    r"\b(?:sent to|paid to)\b|\btransferred to\b(?!\s+(?:your\s+)?M[- ]?Shwari\b)",
    re.IGNORECASE,
)
_INTERNAL_RE = re.compile(r"\bhas been moved\b", re.IGNORECASE)
_SAVINGS_NAME_RE = re.compile(r"\bM[- ]?Shwari\b", re.IGNORECASE)
_TRANSFERRED_RE = re.compile(r"\btransferred\b", re.IGNORECASE)


@dataclass(frozen=True)
class Matcher:
    """One entry of the dispatch table."""
    category: Category
    predicate: Callable[[str], bool]
    handler: Callable[[str], HandlerResult]


def is_received(text: str) -> bool:
    return bool(_RECEIVED_RE.search(text))


def is_sent(text: str) -> bool:
    return bool(_SENT_RE.search(text))


def is_internal(text: str) -> bool:
    return bool(_INTERNAL_RE.search(text))


def is_savings_transfer(text: str) -> bool:
    return bool(_SAVINGS_NAME_RE.search(text) and _TRANSFERRED_RE.search(text))


def _always(text: str) -> bool:
    return True


MATCHERS: tuple[Matcher, ...] = (
    Matcher(Category.RECEIVED, is_received, handle_received),
    Matcher(Category.SENT, is_sent, handle_sent),
    Matcher(Category.INTERNAL, is_internal, handle_internal),
    Matcher(Category.SAVINGS_TRANSFER, is_savings_transfer, handle_savings_transfer),
    Matcher(Category.OTHER, _always, handle_other),
)


def select_matcher(normalized: str) -> Matcher:
    """Return the first matcher whose predicate accepts the text."""
    for matcher in MATCHERS:
        if matcher.predicate(normalized):
            return matcher
    return MATCHERS[-1]


def classify(normalized: str) -> Category:
    return select_matcher(normalized).category
