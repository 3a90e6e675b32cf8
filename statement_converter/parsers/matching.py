"""Date and amount lookups over statement lines."""

from decimal import Decimal

from statement_converter.parsers.patterns import AMOUNT_PATTERNS, DATE_PATTERNS, MIN_AMOUNT
from statement_converter.parsers.validation import parse_amount_safe


def find_date(text: str) -> str | None:
    """Return the first date found, trying DATE_PATTERNS in order."""
    for pattern in DATE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return None


def strip_dates(text: str) -> str:
    """Remove every recognised date from the text."""
    for pattern in DATE_PATTERNS:
        text = pattern.sub(" ", text)
    return text


def find_amount(text: str) -> Decimal | None:
    """
    Return the first usable amount in the text.

    Patterns are tried in order; within a pattern the leftmost match wins.
    Amounts that do not parse or are no larger than MIN_AMOUNT are passed over.
    """
    for pattern in AMOUNT_PATTERNS:
        for match in pattern.finditer(text):
            amount, ok = parse_amount_safe(match.group(0))
            if ok and abs(amount) > MIN_AMOUNT:
                return amount
    return None


def strip_amounts(text: str) -> str:
    """Remove every recognised amount from the text."""
    for pattern in AMOUNT_PATTERNS:
        text = pattern.sub(" ", text)
    return text
