"""M-Pesa SMS parser: normalize → failure filter → classify → extract → build.

parse_mpesa_message() is a pure function of its input: it holds no state,
does no I/O and is safe to call from any number of threads. It returns
None only for failed-transaction notifications; any other text, however
unrecognizable, yields a record (category Other in the worst case).
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from .base import Category, TransactionRecord, build_record, normalize_message
from .classifier import select_matcher
from .extractors import extract_amount, extract_cost, extract_datetime, extract_tx_id
from .failures import is_failed_transaction

logger = logging.getLogger(__name__)


def parse_mpesa_message(
    raw: str,
    extra_failure_phrases: Iterable[str] = (),
) -> TransactionRecord | None:
    """Parse one M-Pesa confirmation SMS body.

    Args:
        raw: The message body exactly as received.
        extra_failure_phrases: Additional phrases marking a failed
            transaction, on top of the built-in patterns.

    Returns:
        A TransactionRecord, or None if the message reports a transaction
        that did not go through.
    """
    text = normalize_message(raw)

    if is_failed_transaction(text, extra_failure_phrases):
        logger.debug("Ignoring failed-transaction message: %.40s", text)
        return None

    matcher = select_matcher(text)
    if matcher.category is Category.OTHER:
        logger.debug("No template matched, recording as Other: %.40s", text)

    date, time = extract_datetime(text)
    return build_record(
        raw_text=raw,
        category=matcher.category,
        result=matcher.handler(text),
        transaction_id=extract_tx_id(text),
        amount=extract_amount(text),
        date=date,
        time=time,
        transaction_cost=extract_cost(text),
    )


class MpesaMessageParser:
    """Parse message bodies with configured failure phrases.

    Attributes:
        ignored_count: Messages dropped as failed transactions since the
            last reset. Check after parse_many() to see how many were skipped.
    """

    def __init__(self, extra_failure_phrases: Iterable[str] | None = None):
        self.extra_failure_phrases: tuple[str, ...] = tuple(extra_failure_phrases or ())
        self.ignored_count: int = 0

    def parse(self, body: str) -> TransactionRecord | None:
        record = parse_mpesa_message(body, self.extra_failure_phrases)
        if record is None:
            self.ignored_count += 1
        return record

    def parse_many(
        self,
        bodies: Iterable[str],
        max_workers: int | None = None,
    ) -> list[TransactionRecord]:
        """Parse a batch, keeping input order and dropping ignored messages.

        ignored_count is reset to the number dropped from this batch.
        """
        results = parse_messages(
            bodies, max_workers=max_workers,
            extra_failure_phrases=self.extra_failure_phrases,
            keep_ignored=True,
        )
        records = [r for r in results if r is not None]
        self.ignored_count = len(results) - len(records)
        return records


def parse_messages(
    bodies: Iterable[str],
    max_workers: int | None = None,
    extra_failure_phrases: Iterable[str] = (),
    keep_ignored: bool = False,
) -> list[TransactionRecord | None]:
    """Parse many message bodies, preserving input order.

    Messages are independent, so with max_workers > 1 they are parsed on a
    thread pool. Ignored (failed) messages are dropped unless keep_ignored
    is set, in which case their slot holds None.
    """
    phrases = tuple(extra_failure_phrases)
    bodies = list(bodies)

    def _parse(body: str) -> TransactionRecord | None:
        return parse_mpesa_message(body, phrases)

    if max_workers is not None and max_workers > 1 and len(bodies) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(_parse, bodies))
    else:
        results = [_parse(body) for body in bodies]

    if keep_ignored:
        return results
    return [r for r in results if r is not None]
