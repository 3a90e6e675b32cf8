"""Shared validation utilities for statement text parsers."""

import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from statement_converter.models import ParseStats, ParseStrategy, TransactionRecord
from statement_converter.parsers.patterns import MONTH_ABBREVIATIONS, VALID_DATE_SHAPES

# Configure logging for parsers
logger = logging.getLogger("statement_converter.parsers")

# Control characters that are not whitespace; not allowed in XML or worksheets
_CONTROL_CHARACTERS = re.compile(r"[\x00-\x08\x0e-\x1b\x7f]")


@dataclass
class ParseResult:
    """Result of parsing statement text."""

    transactions: list[TransactionRecord]
    strategy: ParseStrategy = ParseStrategy.LOOKAHEAD
    used_fallback: bool = False  # True when transactions are the built-in sample set
    total_rows_processed: int = 0
    rows_skipped: int = 0
    candidates_considered: int = 0
    candidates_rejected: int = 0
    duplicates_filtered: int = 0
    truncated: int = 0  # Records dropped by the max_records cap
    warnings: list[str] = field(default_factory=list)

    @property
    def candidates_accepted(self) -> int:
        """Candidates that passed validation."""
        return self.candidates_considered - self.candidates_rejected

    @property
    def success_rate(self) -> float:
        """Calculate the share of candidates that passed validation."""
        if self.candidates_considered == 0:
            return 0.0
        return (self.candidates_accepted / self.candidates_considered) * 100

    def stats(self) -> ParseStats:
        """Snapshot the counters as an API model."""
        return ParseStats(
            lines_processed=self.total_rows_processed,
            rows_skipped=self.rows_skipped,
            candidates_considered=self.candidates_considered,
            candidates_accepted=self.candidates_accepted,
            candidates_rejected=self.candidates_rejected,
            duplicates_filtered=self.duplicates_filtered,
            truncated=self.truncated,
        )


class ValidationError(Exception):
    """Raised when validation fails."""

    pass


class FileTooLargeError(ValidationError):
    """Raised when an upload exceeds the size limit."""

    pass


def validate_file_contents(contents: bytes, max_size: int, min_size: int = 10) -> None:
    """
    Validate uploaded file contents before text extraction.

    Args:
        contents: Raw file bytes
        max_size: Maximum accepted size in bytes
        min_size: Minimum expected file size in bytes

    Raises:
        ValidationError: If validation fails
    """
    if not contents:
        raise ValidationError("File is empty")

    if len(contents) < min_size:
        raise ValidationError(f"File too small ({len(contents)} bytes), minimum {min_size} bytes expected")

    if len(contents) > max_size:
        raise FileTooLargeError(f"File too large. Maximum size is {max_size // (1024 * 1024)}MB.")


def clean_amount_string(amount_str: str) -> str:
    """
    Clean an amount string for parsing.

    Only currency symbols, thousands separators and whitespace are removed.
    Accounting notation such as "(45.67)" is left alone and fails to parse.
    """
    if not amount_str:
        return ""

    return amount_str.replace("$", "").replace(",", "").replace(" ", "").strip()


def parse_amount_safe(amount_str: str) -> tuple[Decimal, bool]:
    """
    Safely parse an amount string.

    Returns:
        Tuple of (parsed amount, success flag). The amount is zero on failure.
    """
    cleaned = clean_amount_string(amount_str)
    if not cleaned or cleaned in ("-", "+"):
        return Decimal(0), False

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return Decimal(0), False

    if not amount.is_finite():
        return Decimal(0), False

    return amount, True


def format_amount(amount: Decimal) -> str:
    """Render an amount with its sign and two decimals."""
    return f"{amount.quantize(Decimal('0.01')):.2f}"


def normalize_description(description: str) -> str:
    """Drop control characters and collapse runs of whitespace."""
    if not description:
        return ""
    return " ".join(_CONTROL_CHARACTERS.sub("", description).split())


def is_valid_date(date_str: str) -> bool:
    """
    Check that a date string has one of the accepted shapes.

    Numeric dates must be plausible as either month-first or day-first.
    """
    if not date_str:
        return False

    date_str = date_str.strip()
    numeric, month_first, day_first = VALID_DATE_SHAPES

    match = numeric.match(date_str)
    if match:
        first, second = int(match.group(1)), int(match.group(2))
        return _is_day_month(second, first) or _is_day_month(first, second)

    match = month_first.match(date_str)
    if match:
        return match.group(1).lower() in MONTH_ABBREVIATIONS and 1 <= int(match.group(2)) <= 31

    match = day_first.match(date_str)
    if match:
        return match.group(2).lower() in MONTH_ABBREVIATIONS and 1 <= int(match.group(1)) <= 31

    return False


def _is_day_month(day: int, month: int) -> bool:
    return 1 <= month <= 12 and 1 <= day <= 31


def is_valid_record(record: TransactionRecord) -> bool:
    """A record needs a date and an amount, a finite amount and an accepted date shape."""
    if not record.date or not record.amount:
        return False

    _, ok = parse_amount_safe(record.amount)
    if not ok:
        return False

    return is_valid_date(record.date)


def log_parse_result(result: ParseResult, parser_name: str) -> None:
    """
    Log parsing results for debugging.

    Args:
        result: The parse result
        parser_name: Name of the parser
    """
    logger.info(
        f"{parser_name}: Parsed {len(result.transactions)} transactions "
        f"(lines {result.total_rows_processed}, "
        f"skipped {result.rows_skipped}, "
        f"rejected {result.candidates_rejected}/{result.candidates_considered}, "
        f"duplicates {result.duplicates_filtered}, "
        f"truncated {result.truncated}"
        f"{', sample data' if result.used_fallback else ''})"
    )

    if result.warnings:
        for warning in result.warnings[:5]:  # Log first 5 warnings
            logger.debug(f"{parser_name}: {warning}")
