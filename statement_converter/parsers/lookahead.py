"""Lookahead parser: dated lines joined with the lines that follow them.

Statements often print the date, the description and the amount on separate
lines once the PDF text is flattened. For every line carrying a date this
parser reads a small window of following lines and takes the first amount in
it as the transaction amount.
"""

from decimal import Decimal

from statement_converter.models import TransactionRecord
from statement_converter.parsers.classification import classify_transaction_type
from statement_converter.parsers.matching import find_amount, find_date, strip_amounts, strip_dates
from statement_converter.parsers.patterns import MAX_DESCRIPTION_LENGTH
from statement_converter.parsers.validation import (
    ParseResult,
    format_amount,
    is_valid_record,
    normalize_description,
    parse_amount_safe,
)


def parse_lookahead(lines: list[str], lookahead_lines: int, result: ParseResult) -> list[TransactionRecord]:
    """
    Extract candidate transactions from segmented lines.

    Args:
        lines: Trimmed, non-empty lines in document order
        lookahead_lines: How many following lines may belong to a dated line
        result: Parse bookkeeping, updated in place

    Returns:
        Valid records in document order, without balances
    """
    transactions: list[TransactionRecord] = []

    for index, line in enumerate(lines):
        date_str = find_date(line)
        if date_str is None:
            result.rows_skipped += 1
            continue

        window = _window(lines, index, lookahead_lines)
        undated = strip_dates(window)
        amount = find_amount(undated)
        if amount is None:
            result.rows_skipped += 1
            result.warnings.append(f"No amount near date {date_str}")
            continue

        result.candidates_considered += 1
        record = TransactionRecord(
            date=date_str,
            description=_description(undated),
            amount=format_amount(amount),
            type=classify_transaction_type(undated),
        )

        if not is_valid_record(record):
            result.candidates_rejected += 1
            result.warnings.append(f"Rejected candidate: {record.date} {record.amount}")
            continue

        transactions.append(record)

    return transactions


def apply_running_balance(records: list[TransactionRecord]) -> list[TransactionRecord]:
    """
    Attach a running balance to each record, starting from zero.

    The balance is the sum of signed amounts so far. It is not reconciled
    against balances printed on the statement.
    """
    balance = Decimal(0)
    balanced = []

    for record in records:
        amount, _ = parse_amount_safe(record.amount)
        balance += amount
        balanced.append(record.model_copy(update={"balance": format_amount(balance)}))

    return balanced


def _window(lines: list[str], index: int, lookahead_lines: int) -> str:
    """Join a dated line with following lines up to the next dated line."""
    window = [lines[index]]
    for line in lines[index + 1 : index + 1 + lookahead_lines]:
        if find_date(line) is not None:
            break
        window.append(line)
    return " ".join(window)


def _description(undated: str) -> str:
    description = normalize_description(strip_amounts(undated))
    return description[:MAX_DESCRIPTION_LENGTH].strip() or "Transaction"
