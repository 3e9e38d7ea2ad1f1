"""CLI entry point for pesalog.

Commands:
    pesalog parse TEXT               Parse one message body, print the record as JSON
    pesalog show TEXT                Print every field of one parsed message
    pesalog import FILE              Parse an exported inbox (.json / .xml)
    pesalog watch                    Watch a drop folder for inbox exports
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time
from pathlib import Path

logger = logging.getLogger(__name__)

DIRECTION_LABELS = {
    "In": "Incoming",
    "Out": "Outgoing",
    "Internal": "Internal Transfer",
    "Unknown": "Other",
}


def _setup_logging() -> None:
    """Configure logging based on PESALOG_LOG_LEVEL env var."""
    level = os.environ.get("PESALOG_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _get_config():
    """Load application config.

    An explicit PESALOG_CONFIG_DIR must exist. Without it, ./config is used
    when present and built-in defaults otherwise.
    """
    from pesalog.config import Config

    config_dir = os.environ.get("PESALOG_CONFIG_DIR")
    if config_dir:
        return Config(config_dir=config_dir)
    if Path("config").is_dir():
        return Config(config_dir="config")
    return None


def _get_watch_dir() -> Path:
    """Get the watch directory from env or default."""
    return Path(os.environ.get("PESALOG_WATCH_DIR", "inbox"))


def _get_output_dir() -> Path:
    """Get the records output directory from env or default."""
    return Path(os.environ.get("PESALOG_OUTPUT_DIR", "records"))


def _read_text(args: argparse.Namespace) -> str:
    """Message text from the positional argument, or stdin for '-'."""
    if args.text == "-":
        return sys.stdin.read()
    return args.text


def _failure_phrases() -> list[str]:
    config = _get_config()
    return config.failure_phrases if config else []


def _format_row(record) -> str:
    d = record.to_dict()
    party = d["counterparty_from"] if d["direction"] == "In" else d["counterparty_to"]
    return (
        f"  {d['transaction_id']:<12}  {DIRECTION_LABELS[d['direction']]:<17}"
        f"  {record.amount:>10.2f}  {party[:30]:<30}  {d['date'] or '--'}"
    )


# ── Command handlers ─────────────────────────────────────


def cmd_parse(args: argparse.Namespace) -> int:
    """Parse a single message and print the record as JSON."""
    from pesalog.parsers.mpesa import parse_mpesa_message

    record = parse_mpesa_message(_read_text(args), _failure_phrases())
    if record is None:
        print("Ignored: failed transaction")
        return 0
    print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Print every field of a parsed message, one per line."""
    from pesalog.parsers.mpesa import parse_mpesa_message

    record = parse_mpesa_message(_read_text(args), _failure_phrases())
    if record is None:
        print("Ignored: failed transaction")
        return 0

    print("Transaction Details")
    print("=" * 40)
    for key, value in record.to_dict().items():
        if key == "balances":
            for kind, amount in value.items():
                print(f"  {'balance.' + kind:<20} {amount}")
            continue
        print(f"  {key:<20} {value if value is not None else '--'}")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    """Parse an exported inbox file and list its records."""
    from pesalog.watcher.observer import ImportPipeline, SUPPORTED_EXTENSIONS

    filepath = args.file.resolve()
    if not filepath.exists():
        print(f"Error: File not found: {filepath}")
        return 1
    if filepath.suffix.lower() not in SUPPORTED_EXTENSIONS:
        print(f"Error: Unsupported file type: {filepath.suffix}")
        return 1

    pipeline = ImportPipeline(
        config=_get_config(),
        output_dir=args.output,
        max_workers=args.workers,
    )
    if args.sender:
        pipeline.senders = args.sender
    if args.limit is not None:
        if args.limit < 1:
            print("Error: --limit must be positive")
            return 1
        pipeline.max_count = args.limit

    result = pipeline.process_file(filepath)
    if result.status == "error":
        print(f"Error: {result.error_message}")
        return 1

    records = result.records or []
    if args.json:
        for record in records:
            print(json.dumps(record.to_dict(), ensure_ascii=False))
        return 0

    print(f"M-Pesa transactions ({len(records)}):")
    print("-" * 80)
    for record in records:
        print(_format_row(record))

    counts: dict[str, int] = {}
    for record in records:
        counts[record.category.value] = counts.get(record.category.value, 0) + 1
    summary = ", ".join(f"{k}={v}" for k, v in counts.items()) or "none"
    print(
        f"\n{result.message_count} messages: {result.record_count} records"
        f" ({summary}), {result.ignored_count} ignored, {result.skipped_count} skipped"
    )
    if result.output_path is not None:
        print(f"Records written to {result.output_path}")
    return 0


def cmd_watch(args: argparse.Namespace) -> int:
    """Start the drop-folder watcher."""
    from pesalog.watcher.observer import FileWatcher, ImportPipeline

    pipeline = ImportPipeline(config=_get_config(), output_dir=_get_output_dir())
    watcher = FileWatcher(_get_watch_dir(), pipeline)
    watcher.start()
    print(f"Watching {watcher.watch_dir} (Ctrl+C to stop)")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()
    return 0


_COMMANDS = {
    "parse": cmd_parse,
    "show": cmd_show,
    "import": cmd_import,
    "watch": cmd_watch,
}


def main(argv: list[str] | None = None):
    _setup_logging()

    parser = argparse.ArgumentParser(
        prog="pesalog",
        description="pesalog M-Pesa SMS transaction parser",
    )
    subparsers = parser.add_subparsers(dest="command")

    # parse
    parse_p = subparsers.add_parser("parse", help="Parse one message body to JSON")
    parse_p.add_argument("text", help="Message body, or '-' to read stdin")

    # show
    show_p = subparsers.add_parser("show", help="Show every field of one parsed message")
    show_p.add_argument("text", help="Message body, or '-' to read stdin")

    # import
    import_p = subparsers.add_parser("import", help="Parse an exported SMS inbox")
    import_p.add_argument("file", type=Path, help="Inbox export (.json or .xml)")
    import_p.add_argument(
        "--sender", action="append",
        help="Sender address to include (repeatable, overrides config)",
    )
    import_p.add_argument("--limit", type=int, help="Maximum messages to read")
    import_p.add_argument("--output", type=Path, help="Directory for records JSONL")
    import_p.add_argument("--workers", type=int, help="Parse on a thread pool of this size")
    import_p.add_argument("--json", action="store_true", help="Print records as JSON lines")

    # watch
    subparsers.add_parser("watch", help="Watch a drop folder for inbox exports")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    handler = _COMMANDS.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}")
        sys.exit(1)

    sys.exit(handler(args))


if __name__ == "__main__":
    main()
