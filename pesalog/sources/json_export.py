"""JSON inbox export reader.

Reads the list shape returned by the Android SMS content provider:

    [{"address": "MPESA", "body": "QAB1X2Y3 Confirmed. ...", "date": 1731330600000}, ...]

A top-level object with a "messages" list is also accepted.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .base import BaseReader, SmsMessage, epoch_millis_to_iso

logger = logging.getLogger(__name__)


class JsonExportReader(BaseReader):
    """Parse JSON SMS inbox exports."""

    def detect(self, file_path: Path) -> bool:
        """JSON exports start with '[' or '{' and mention an address field."""
        try:
            with open(file_path, "r", encoding="utf-8", errors="replace") as f:
                head = f.read(2048).lstrip("\ufeff").lstrip()
            return head[:1] in ("[", "{") and '"address"' in head
        except (OSError, UnicodeDecodeError):
            return False

    def parse(self, file_path: Path) -> list[SmsMessage]:
        with open(file_path, "r", encoding="utf-8-sig") as f:
            data = json.load(f)

        if isinstance(data, dict):
            data = data.get("messages", [])
        if not isinstance(data, list):
            raise ValueError(f"Expected a list of messages in {file_path}")

        messages: list[SmsMessage] = []
        self.skipped_count = 0  # Reset for each parse
        for entry in data:
            msg = self._parse_entry(entry)
            if msg is not None:
                messages.append(msg)
            else:
                self.skipped_count += 1

        if self.skipped_count:
            logger.warning(
                "Skipped %d malformed message(s) in %s",
                self.skipped_count, file_path.name,
            )
        return messages

    @staticmethod
    def _parse_entry(entry) -> SmsMessage | None:
        if not isinstance(entry, dict):
            return None
        address = entry.get("address")
        body = entry.get("body")
        if not isinstance(address, str) or not isinstance(body, str) or not body:
            return None
        return SmsMessage(
            address=address,
            body=body,
            received_at=epoch_millis_to_iso(entry.get("date")),
        )
