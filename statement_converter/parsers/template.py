"""Template parser: whole-line patterns tried in priority order."""

import re

from statement_converter.models import TransactionRecord
from statement_converter.parsers.matching import find_date
from statement_converter.parsers.patterns import HEADER_KEYWORDS, LINE_TEMPLATES, MAX_DESCRIPTION_LENGTH
from statement_converter.parsers.validation import (
    ParseResult,
    clean_amount_string,
    format_amount,
    is_valid_record,
    normalize_description,
    parse_amount_safe,
)


def parse_template(lines: list[str], result: ParseResult) -> list[TransactionRecord]:
    """
    Extract transactions from lines that match a full-line template.

    Lines without a date of their own (description and amount only) take the
    date of the closest dated line above them. Lines that contain a date are
    only tried against dated templates.

    Args:
        lines: Trimmed, non-empty lines in document order
        result: Parse bookkeeping, updated in place

    Returns:
        Valid records in document order
    """
    transactions: list[TransactionRecord] = []
    carried_date = ""

    for line in lines:
        if _is_header_line(line):
            result.rows_skipped += 1
            continue

        line_date = find_date(line)
        if line_date is not None and line_date == line:
            # A date on its own heads the entries printed below it
            carried_date = line_date
            result.rows_skipped += 1
            continue

        matched = False
        record = None
        for name, template in LINE_TEMPLATES:
            if line_date is not None and "date" not in template.groupindex:
                continue

            match = template.fullmatch(line)
            if not match:
                continue

            matched = True
            candidate = _record_from_match(match, carried_date)
            if is_valid_record(candidate):
                record = candidate
                break
            result.warnings.append(f"Template {name} gave an invalid record: {line[:60]}")

        if not matched:
            result.rows_skipped += 1
            continue

        result.candidates_considered += 1
        if record is None:
            result.candidates_rejected += 1
            continue

        if line_date is not None:
            carried_date = record.date
        transactions.append(record)

    return transactions


def _is_header_line(line: str) -> bool:
    """Check if a line carries column headings."""
    line_lower = line.lower()
    return any(keyword in line_lower for keyword in HEADER_KEYWORDS)


def _record_from_match(match: re.Match[str], carried_date: str) -> TransactionRecord:
    """Build a record from a template match; dateless templates use carried_date."""
    groups = match.groupdict()
    raw_amount = clean_amount_string(groups["amount"])
    amount, ok = parse_amount_safe(raw_amount)

    balance = None
    if groups.get("balance"):
        balance_value, balance_ok = parse_amount_safe(groups["balance"])
        if balance_ok:
            balance = format_amount(balance_value)

    description = normalize_description(groups["description"])[:MAX_DESCRIPTION_LENGTH].strip() or "Transaction"

    return TransactionRecord(
        date=(groups.get("date") or carried_date).strip(),
        description=description,
        amount=format_amount(amount) if ok else raw_amount,
        type="debit" if raw_amount.startswith("-") else "credit",
        balance=balance,
    )
