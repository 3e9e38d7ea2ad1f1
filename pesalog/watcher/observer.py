"""File watcher: PollingObserver + ImportPipeline orchestration.

Watches a drop folder for exported SMS inboxes (.json, .xml), waits until
the export stops changing, validates it is complete, auto-detects the
reader, then runs the import pipeline:
  detect → stable → read → filter senders → parse messages → write records

Records for each export are written as JSON lines to the output directory,
one file per export (<export stem>.records.jsonl), in message order.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path

from watchdog.events import FileSystemEventHandler

from pesalog.config import DEFAULT_MAX_COUNT, DEFAULT_SENDERS, Config
from pesalog.parsers.base import TransactionRecord
from pesalog.parsers.mpesa import MpesaMessageParser
from pesalog.sources.base import BaseReader, compute_file_hash, filter_messages
from pesalog.sources.json_export import JsonExportReader
from pesalog.sources.xml_export import XmlExportReader

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".json", ".xml"}

# Inbox exports are a few hundred KB written in one go
DEFAULT_STABILITY_SECONDS = 2.0
DEFAULT_CHECK_INTERVAL = 0.5
DEFAULT_MAX_WAIT = 60.0
DEFAULT_POLL_INTERVAL = 5


@dataclass
class ImportResult:
    """Result of importing a single export file."""
    file_name: str
    status: str  # "success", "duplicate", "error"
    message_count: int = 0   # messages from configured senders, after max_count
    record_count: int = 0
    ignored_count: int = 0   # failed-transaction messages dropped
    skipped_count: int = 0   # malformed export entries
    records: list[TransactionRecord] | None = None
    output_path: Path | None = None
    error_message: str | None = None


class FileStabilityError(Exception):
    """Raised when a file fails post-stability validation."""


# ── File stability & validation ──────────────────────────


def _signature(filepath: Path) -> tuple[int, int]:
    stat = filepath.stat()
    return stat.st_size, stat.st_mtime_ns


def wait_for_stable(
    filepath: Path,
    stability_seconds: float = DEFAULT_STABILITY_SECONDS,
    check_interval: float = DEFAULT_CHECK_INTERVAL,
    max_wait: float = DEFAULT_MAX_WAIT,
) -> None:
    """Block until size and mtime have not changed for stability_seconds.

    Raises:
        TimeoutError: If the file keeps changing past max_wait.
        OSError: If the file disappears while waiting.
    """
    deadline = time.monotonic() + max_wait
    last = _signature(filepath)
    unchanged_since = time.monotonic()

    while time.monotonic() - unchanged_since < stability_seconds:
        if time.monotonic() > deadline:
            raise TimeoutError(f"File did not stabilize within {max_wait}s: {filepath}")
        time.sleep(check_interval)
        current = _signature(filepath)
        if current != last:
            last, unchanged_since = current, time.monotonic()


def validate_file_completeness(filepath: Path) -> None:
    """Post-stability validation: ensure the export was fully written.

    - JSON files: must end with a closing ']' or '}'
    - XML files: must contain the closing </smses> tag

    Raises:
        FileStabilityError: If file appears incomplete.
    """
    suffix = filepath.suffix.lower()
    content = filepath.read_text(encoding="utf-8", errors="replace").rstrip()

    if not content:
        raise FileStabilityError(f"Empty export file: {filepath}")

    if suffix == ".json":
        if content[-1] not in ("]", "}"):
            raise FileStabilityError(
                f"JSON export is truncated (no closing bracket): {filepath}"
            )
    elif suffix == ".xml":
        if "</smses>" not in content:
            raise FileStabilityError(
                f"XML export missing closing </smses> tag: {filepath}"
            )


# ── Reader auto-detection ─────────────────────────────────


def detect_reader(filepath: Path) -> BaseReader:
    """Auto-detect the reader for an inbox export.

    Raises:
        ValueError: If no reader can handle the file.
    """
    suffix = filepath.suffix.lower()

    if suffix == ".json":
        reader = JsonExportReader()
        if reader.detect(filepath):
            return reader

    if suffix == ".xml":
        reader = XmlExportReader()
        if reader.detect(filepath):
            return reader

    raise ValueError(f"No reader found for file: {filepath}")


# ── Import pipeline ──────────────────────────────────────


class ImportPipeline:
    """Orchestrate: detect → read → filter → parse → write.

    Args:
        config: Optional application config (senders, max_count, failure
            phrases). Defaults apply without one.
        output_dir: Where to write <stem>.records.jsonl. None disables
            writing; records are still returned in the ImportResult.
        max_workers: Thread pool size for message parsing. None parses
            sequentially.
    """

    def __init__(
        self,
        config: Config | None = None,
        output_dir: Path | None = None,
        max_workers: int | None = None,
    ):
        self.config = config
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.max_workers = max_workers
        self.senders = config.senders if config else list(DEFAULT_SENDERS)
        self.max_count = config.max_count if config else DEFAULT_MAX_COUNT
        self.parser = MpesaMessageParser(
            config.failure_phrases if config else None,
        )
        self._seen_hashes: set[str] = set()

    def process_file(self, filepath: Path) -> ImportResult:
        """Run the import pipeline on a single export.

        Steps:
        1. Check file extension
        2. Skip exports already processed in this session (content hash)
        3. Auto-detect reader and read messages
        4. Filter by sender, cap at max_count
        5. Parse messages (failed transactions are dropped)
        6. Write records (if an output directory is set)
        """
        file_name = filepath.name

        if filepath.suffix.lower() not in SUPPORTED_EXTENSIONS:
            return ImportResult(
                file_name=file_name,
                status="error",
                error_message=f"Unsupported file extension: {filepath.suffix}",
            )

        try:
            file_hash = compute_file_hash(filepath)
            if file_hash in self._seen_hashes:
                logger.info("Duplicate export skipped: %s", file_name)
                return ImportResult(file_name=file_name, status="duplicate")

            reader = detect_reader(filepath)
            messages = reader.parse(filepath)
            selected = filter_messages(messages, self.senders, self.max_count)
            logger.debug(
                "%s: %d message(s), %d from %s",
                file_name, len(messages), len(selected), ", ".join(self.senders),
            )

            records = self.parser.parse_many(
                (m.body for m in selected), max_workers=self.max_workers,
            )

            output_path = None
            if self.output_dir is not None:
                output_path = write_records(
                    records, self.output_dir / f"{filepath.stem}.records.jsonl",
                )

            self._seen_hashes.add(file_hash)
            return ImportResult(
                file_name=file_name,
                status="success",
                message_count=len(selected),
                record_count=len(records),
                ignored_count=self.parser.ignored_count,
                skipped_count=reader.skipped_count,
                records=records,
                output_path=output_path,
            )

        except Exception as e:
            logger.exception("Import failed for %s", file_name)
            return ImportResult(
                file_name=file_name,
                status="error",
                error_message=str(e),
            )


def write_records(records: list[TransactionRecord], path: Path) -> Path:
    """Write records as JSON lines, overwriting any previous output."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for record in records:
            f.write(json.dumps(record.to_dict(), ensure_ascii=False) + "\n")
    return path


# ── File watcher ─────────────────────────────────────────


class FileWatcher(FileSystemEventHandler):
    """Import inbox exports as they land in watch_dir.

    Sync apps either write the export in place or write a temp file and
    rename it, so both created and moved-in events are handled. Files are
    imported one at a time, in event order.
    """

    def __init__(
        self,
        watch_dir: Path,
        pipeline: ImportPipeline,
        stability_seconds: float = DEFAULT_STABILITY_SECONDS,
        check_interval: float = DEFAULT_CHECK_INTERVAL,
    ):
        self.watch_dir = Path(watch_dir)
        self.pipeline = pipeline
        self.stability_seconds = stability_seconds
        self.check_interval = check_interval
        self._observer = None

    def start(self) -> None:
        from watchdog.observers.polling import PollingObserver

        self.watch_dir.mkdir(parents=True, exist_ok=True)
        self._observer = PollingObserver(timeout=DEFAULT_POLL_INTERVAL)
        self._observer.schedule(self, str(self.watch_dir), recursive=False)
        self._observer.start()
        logger.info("Watching %s for inbox exports", self.watch_dir)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None
        logger.info("Stopped watching %s", self.watch_dir)

    def on_created(self, event) -> None:
        if not event.is_directory:
            self._handle(Path(event.src_path))

    def on_moved(self, event) -> None:
        if not event.is_directory:
            self._handle(Path(event.dest_path))

    def _handle(self, filepath: Path) -> None:
        if filepath.suffix.lower() not in SUPPORTED_EXTENSIONS:
            return
        logger.info("Export arrived: %s", filepath.name)
        self._process_file(filepath)

    def _process_file(self, filepath: Path) -> ImportResult:
        """Wait for the export to settle, check it is whole, then import it."""
        try:
            wait_for_stable(
                filepath,
                stability_seconds=self.stability_seconds,
                check_interval=self.check_interval,
            )
            validate_file_completeness(filepath)
        except (FileStabilityError, TimeoutError) as e:
            logger.error("Not importing %s: %s", filepath.name, e)
            return ImportResult(file_name=filepath.name, status="error", error_message=str(e))
        except OSError as e:
            # Deleted or renamed away before it settled
            logger.warning("Export %s went away: %s", filepath.name, e)
            return ImportResult(file_name=filepath.name, status="error", error_message=str(e))

        result = self.pipeline.process_file(filepath)
        logger.info(
            "%s: %s (records=%d, ignored=%d, skipped=%d)",
            filepath.name, result.status,
            result.record_count, result.ignored_count, result.skipped_count,
        )
        return result
