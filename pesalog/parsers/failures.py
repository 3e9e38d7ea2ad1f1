"""Failure filter: recognizes notifications for transactions that did not happen.

Failure messages reuse the vocabulary of successful templates (amounts,
accounts, "Confirmed"), so this check runs before classification and its
answer is final.
"""

from __future__ import annotations

import re
from typing import Iterable

FAILURE_PATTERNS: tuple[str, ...] = (
    # processing failure
    r"\bfailed\b",
    r"\bcould not be (?:processed|completed)\b",
    r"\bunable to (?:process|complete)\b",
    r"\bnot processed\b",
    # insufficient funds
    r"\binsufficient (?:funds|balance)\b",
    r"\bdo not have (?:sufficient|enough) (?:funds|money)\b",
    r"\bnot enough (?:funds|money)\b",
    # wrong authorization code
    r"\b(?:wrong|incorrect|invalid) (?:M-?PESA )?PIN\b",
    # generic
    r"\bwas not successful\b",
    r"\bunsuccessful\b",
)

_FAILURE_RE = re.compile("|".join(f"(?:{p})" for p in FAILURE_PATTERNS), re.IGNORECASE)


def is_failed_transaction(normalized: str, extra_phrases: Iterable[str] = ()) -> bool:
    """Return True if the message reports a failed or rejected transaction.

    extra_phrases are matched as literal case-insensitive substrings in
    addition to the built-in patterns.
    """
    if _FAILURE_RE.search(normalized):
        return True
    lowered = normalized.lower()
    return any(phrase and phrase.lower() in lowered for phrase in extra_phrases)
