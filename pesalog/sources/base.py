"""Base reader: shared interface and helpers for exported SMS inboxes."""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable


@dataclass
class SmsMessage:
    """One inbox message as exported from the device."""
    address: str               # sender id, e.g. "MPESA"
    body: str
    received_at: str | None = None  # ISO-8601 UTC, when the export has it


class BaseReader(ABC):
    """Abstract base for inbox export readers.

    Attributes:
        skipped_count: Number of entries skipped during parsing (missing
            body or sender, wrong shape). Check this after parse().
    """

    def __init__(self):
        self.skipped_count: int = 0

    @abstractmethod
    def parse(self, file_path: Path) -> list[SmsMessage]:
        """Read every message in the export, in file order."""

    @abstractmethod
    def detect(self, file_path: Path) -> bool:
        """Return True if this reader can handle the given file."""


def filter_messages(
    messages: Iterable[SmsMessage],
    senders: Iterable[str],
    max_count: int | None = None,
) -> list[SmsMessage]:
    """Keep messages from the given senders, at most max_count of them.

    Sender comparison ignores case and surrounding whitespace. Order is
    preserved; no deduplication is done.
    """
    wanted = {s.strip().upper() for s in senders if s and s.strip()}
    selected: list[SmsMessage] = []
    for msg in messages:
        if max_count is not None and len(selected) >= max_count:
            break
        if msg.address.strip().upper() in wanted:
            selected.append(msg)
    return selected


def epoch_millis_to_iso(value) -> str | None:
    """Android content-provider dates are epoch milliseconds. None if invalid."""
    try:
        millis = int(value)
    except (TypeError, ValueError):
        return None
    try:
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).isoformat()
    except (OverflowError, OSError, ValueError):
        return None


def compute_file_hash(file_path: Path) -> str:
    """SHA256 of the entire file, used to skip exports already processed."""
    h = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()
