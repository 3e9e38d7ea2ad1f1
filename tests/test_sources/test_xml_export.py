"""Tests for the SMS Backup & Restore XML reader."""

from pathlib import Path
from xml.sax.saxutils import quoteattr

from pesalog.sources.xml_export import XmlExportReader
from tests.conftest import INTERNAL_MSG, RECEIVED_MSG


def _sms(address: str | None, body: str | None, date: str = "0") -> str:
    attrs = []
    if address is not None:
        attrs.append(f"address={quoteattr(address)}")
    if body is not None:
        attrs.append(f"body={quoteattr(body)}")
    attrs.append(f'date="{date}" type="1"')
    return f"  <sms {' '.join(attrs)} />\n"


def _write_backup(tmp_path: Path, sms_block: str, filename: str = "backup.xml") -> Path:
    content = (
        "<?xml version='1.0' encoding='UTF-8' standalone='yes' ?>\n"
        '<smses count="0">\n'
        f"{sms_block}"
        "</smses>\n"
    )
    f = tmp_path / filename
    f.write_text(content, encoding="utf-8")
    return f


class TestDetect:
    def test_backup_file(self, tmp_path):
        f = _write_backup(tmp_path, _sms("MPESA", RECEIVED_MSG))
        assert XmlExportReader().detect(f) is True

    def test_other_xml(self, tmp_path):
        f = tmp_path / "other.xml"
        f.write_text("<?xml version='1.0'?><OFX></OFX>")
        assert XmlExportReader().detect(f) is False

    def test_missing_file(self, tmp_path):
        assert XmlExportReader().detect(tmp_path / "missing.xml") is False


class TestParse:
    def test_reads_attributes(self, tmp_path):
        f = _write_backup(
            tmp_path,
            _sms("MPESA", RECEIVED_MSG, date="86400000") + _sms("MPESA", INTERNAL_MSG),
        )
        reader = XmlExportReader()
        messages = reader.parse(f)
        assert len(messages) == 2
        assert messages[0].address == "MPESA"
        assert messages[0].body == RECEIVED_MSG
        assert messages[0].received_at == "1970-01-02T00:00:00+00:00"
        assert messages[1].body == INTERNAL_MSG

    def test_escaped_body_round_trips(self, tmp_path):
        body = 'Ksh5.00 paid to "A & B" <shop>'
        f = _write_backup(tmp_path, _sms("MPESA", body))
        assert XmlExportReader().parse(f)[0].body == body

    def test_missing_attributes_skipped(self, tmp_path):
        f = _write_backup(
            tmp_path,
            _sms("MPESA", RECEIVED_MSG) + _sms(None, "no sender") + _sms("MPESA", None),
        )
        reader = XmlExportReader()
        assert len(reader.parse(f)) == 1
        assert reader.skipped_count == 2

    def test_empty_backup(self, tmp_path):
        f = _write_backup(tmp_path, "")
        reader = XmlExportReader()
        assert reader.parse(f) == []
        assert reader.skipped_count == 0
