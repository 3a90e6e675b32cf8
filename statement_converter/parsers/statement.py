"""Unified entry point for statement text parsing."""

from dataclasses import dataclass

from statement_converter.models import (
    AccountMetadata,
    BankIdentification,
    NoMatchPolicy,
    ParseOptions,
    ParseStrategy,
    StatementReview,
    TransactionRecord,
)
from statement_converter.parsers.bank_detection import UNKNOWN_BANK, detect_bank, extract_account_metadata
from statement_converter.parsers.lines import segment_lines
from statement_converter.parsers.lookahead import apply_running_balance, parse_lookahead
from statement_converter.parsers.template import parse_template
from statement_converter.parsers.validation import ParseResult, log_parse_result
from statement_converter.services.dedup import deduplicate_transactions

# Confidence below which a bank guess is reported as weak
MIN_BANK_CONFIDENCE = 50

SAMPLE_TRANSACTIONS: tuple[TransactionRecord, ...] = (
    TransactionRecord(
        date="Sep 14, 2025",
        description="Direct Deposit - Salary",
        amount="3200.00",
        type="Deposit",
        balance="4850.49",
    ),
    TransactionRecord(
        date="Sep 13, 2025",
        description="ATM Withdrawal - Main St",
        amount="-100.00",
        type="Withdrawal",
        balance="1650.49",
    ),
    TransactionRecord(
        date="Sep 12, 2025",
        description="Online Purchase - Amazon",
        amount="-89.99",
        type="Payment",
        balance="1750.49",
    ),
    TransactionRecord(
        date="Sep 11, 2025",
        description="Transfer to Savings",
        amount="-500.00",
        type="Transfer",
        balance="1840.48",
    ),
    TransactionRecord(
        date="Sep 10, 2025",
        description="Interest Earned",
        amount="0.49",
        type="Interest",
        balance="2340.48",
    ),
)


@dataclass
class StatementAnalysis:
    """Everything recovered from one statement's text."""

    result: ParseResult
    bank: BankIdentification
    account_info: AccountMetadata
    review: StatementReview


def sample_transactions() -> list[TransactionRecord]:
    """Fresh copies of the built-in sample set."""
    return [record.model_copy() for record in SAMPLE_TRANSACTIONS]


def parse_statement(text: str, options: ParseOptions | None = None) -> ParseResult:
    """
    Parse statement text into transactions.

    Args:
        text: Text already extracted from the statement PDF
        options: Strategy, record cap and no-match policy

    Returns:
        ParseResult whose used_fallback flag tells sample data apart from
        real transactions
    """
    options = options or ParseOptions()
    result = ParseResult(transactions=[], strategy=options.strategy)

    lines = segment_lines(text)
    result.total_rows_processed = len(lines)

    if options.strategy == ParseStrategy.TEMPLATE:
        candidates = parse_template(lines, result)
    else:
        candidates = parse_lookahead(lines, options.lookahead_lines, result)

    records, result.duplicates_filtered = deduplicate_transactions(candidates)

    if options.strategy == ParseStrategy.LOOKAHEAD:
        records = apply_running_balance(records)

    if len(records) > options.max_records:
        result.truncated = len(records) - options.max_records
        records = records[: options.max_records]

    if not records and options.on_no_matches == NoMatchPolicy.RETURN_SAMPLE:
        records = sample_transactions()
        result.used_fallback = True
        result.warnings.append("No transactions recognised, returning sample data")

    result.transactions = records
    log_parse_result(result, f"{options.strategy.value} parser")
    return result


def review_statement(bank: BankIdentification, result: ParseResult) -> StatementReview:
    """Flag statements whose bank or transactions could not be recovered."""
    errors = []

    if bank.bank == UNKNOWN_BANK:
        errors.append("Could not identify bank")

    if not result.transactions or result.used_fallback:
        errors.append("No transactions found")

    if bank.confidence < MIN_BANK_CONFIDENCE:
        errors.append("Low confidence in bank detection")

    return StatementReview(is_valid=not errors, errors=errors)


def analyze_statement(text: str, options: ParseOptions | None = None) -> StatementAnalysis:
    """Parse transactions and probe bank and account details from the same text."""
    result = parse_statement(text, options)
    bank = detect_bank(text)
    return StatementAnalysis(
        result=result,
        bank=bank,
        account_info=extract_account_metadata(text),
        review=review_statement(bank, result),
    )
