"""XML inbox export reader for SMS Backup & Restore files.

    <?xml version='1.0' encoding='UTF-8' standalone='yes' ?>
    <smses count="2">
      <sms address="MPESA" body="QAB1X2Y3 Confirmed. ..." date="1731330600000" type="1" />
    </smses>
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from .base import BaseReader, SmsMessage, epoch_millis_to_iso

logger = logging.getLogger(__name__)


class XmlExportReader(BaseReader):
    """Parse SMS Backup & Restore XML exports."""

    def detect(self, file_path: Path) -> bool:
        """Backup files carry an <smses> root near the top."""
        try:
            with open(file_path, "r", encoding="utf-8", errors="replace") as f:
                head = f.read(1024)
            return "<smses" in head
        except (OSError, UnicodeDecodeError):
            return False

    def parse(self, file_path: Path) -> list[SmsMessage]:
        root = ET.parse(file_path).getroot()

        messages: list[SmsMessage] = []
        self.skipped_count = 0  # Reset for each parse
        for elem in root.iter("sms"):
            msg = self._parse_element(elem)
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
    def _parse_element(elem: ET.Element) -> SmsMessage | None:
        address = elem.get("address")
        body = elem.get("body")
        if not address or not body:
            return None
        return SmsMessage(
            address=address,
            body=body,
            received_at=epoch_millis_to_iso(elem.get("date")),
        )
