"""Bank identification and account metadata probes over raw statement text."""

import logging

from statement_converter.models import AccountMetadata, BankIdentification
from statement_converter.parsers.patterns import ACCOUNT_PATTERNS, BANK_PATTERNS

logger = logging.getLogger(__name__)

UNKNOWN_BANK = "Unknown"


def detect_bank(text: str) -> BankIdentification:
    """
    Identify the issuing bank from keyword matches.

    Each bank scores (number of matches / text length) * 100, capped at 100.
    The highest score wins; on a tie the bank listed first in BANK_PATTERNS
    is kept. Long documents score low even when the bank is named often.
    """
    if not text or not isinstance(text, str):
        return BankIdentification(bank=UNKNOWN_BANK, confidence=0.0)

    best = BankIdentification(bank=UNKNOWN_BANK, confidence=0.0)
    text_length = len(text)

    for bank_name, pattern in BANK_PATTERNS:
        matches = pattern.findall(text)
        if not matches:
            continue

        confidence = min(len(matches) / text_length * 100, 100.0)
        if confidence > best.confidence:
            best = BankIdentification(bank=bank_name, confidence=confidence)

    logger.debug(f"Bank detection: {best.bank} ({best.confidence:.4f})")
    return best


def extract_account_metadata(text: str) -> AccountMetadata:
    """Probe the text for account number, routing number, statement date and balance."""
    if not text or not isinstance(text, str):
        return AccountMetadata()

    found = {}
    for field_name, pattern in ACCOUNT_PATTERNS.items():
        match = pattern.search(text)
        if match:
            found[field_name] = match.group(1)

    return AccountMetadata(**found)
