"""Deduplication logic for Statement Converter."""

import hashlib
import logging

from statement_converter.models import TransactionRecord

logger = logging.getLogger(__name__)


def compute_file_hash(contents: bytes) -> str:
    """Compute SHA256 hash of file contents."""
    return hashlib.sha256(contents).hexdigest()


def transaction_key(record: TransactionRecord) -> tuple[str, str, str]:
    """
    Identity of a transaction for deduplication.

    Fields are compared exactly as parsed; near-duplicates that differ in
    spacing or case are kept.
    """
    return (record.date, record.description, record.amount)


def deduplicate_transactions(records: list[TransactionRecord]) -> tuple[list[TransactionRecord], int]:
    """
    Remove repeated transactions, keeping the first occurrence.

    Returns:
        (kept records in original order, number removed)
    """
    seen: set[tuple[str, str, str]] = set()
    deduplicated = []

    for record in records:
        key = transaction_key(record)
        if key in seen:
            logger.debug(f"Skipping duplicate transaction: {record.description} on {record.date}")
            continue
        seen.add(key)
        deduplicated.append(record)

    removed = len(records) - len(deduplicated)
    if removed:
        logger.info(f"Removed {removed} duplicate transactions")

    return deduplicated, removed
