"""PDF statement conversion service."""

import logging
from pathlib import PurePath

from statement_converter.config import settings
from statement_converter.models import (
    ConversionResponse,
    ExportFormat,
    NoMatchPolicy,
    ParseOptions,
    ParseStrategy,
    StatementResponse,
)
from statement_converter.parsers.pdf_text import extract_pdf_text_with_timeout
from statement_converter.parsers.statement import StatementAnalysis, analyze_statement
from statement_converter.parsers.validation import ValidationError, validate_file_contents
from statement_converter.services.dedup import compute_file_hash
from statement_converter.services.exporters import MEDIA_TYPES, ExportedFile, export_statement, transactions_to_csv

logger = logging.getLogger(__name__)


def build_parse_options(
    strategy: ParseStrategy | None = None,
    on_no_matches: NoMatchPolicy | None = None,
) -> ParseOptions:
    """Settings defaults, overridden per request where given."""
    options = settings.parse_options()
    if strategy is not None:
        options.strategy = strategy
    if on_no_matches is not None:
        options.on_no_matches = on_no_matches
    return options


def validate_upload(filename: str | None, contents: bytes) -> None:
    """
    Check an uploaded file before extraction.

    Raises:
        ValidationError: If the file is missing a name, is not a PDF, or has a bad size
    """
    if not filename:
        raise ValidationError("No filename provided")

    if not filename.lower().endswith(".pdf"):
        raise ValidationError("Only PDF files are allowed")

    validate_file_contents(contents, max_size=settings.max_upload_bytes)


def converted_filename(original: str, export_format: ExportFormat = ExportFormat.CSV) -> str:
    """statement.pdf -> statement_converted.csv"""
    _, extension = MEDIA_TYPES[ExportFormat(export_format)]
    return f"{PurePath(original).stem}_converted{extension}"


def to_statement_response(analysis: StatementAnalysis) -> StatementResponse:
    """Shape an analysis for the API."""
    result = analysis.result
    return StatementResponse(
        bank=analysis.bank,
        account_info=analysis.account_info,
        transactions=result.transactions,
        transaction_count=len(result.transactions),
        strategy=result.strategy,
        used_fallback=result.used_fallback,
        review=analysis.review,
        stats=result.stats(),
    )


async def analyze_pdf(filename: str | None, contents: bytes, options: ParseOptions) -> StatementAnalysis:
    """
    Validate an upload, extract its text and parse it.

    Raises:
        ValidationError: If the upload is rejected
        ExtractionError: If no text can be extracted in time
    """
    validate_upload(filename, contents)

    file_hash = compute_file_hash(contents)
    logger.info(f"Processing PDF {filename} ({len(contents)} bytes, {file_hash[:8]}...)")

    text = await extract_pdf_text_with_timeout(contents, timeout=settings.pdf_extraction_timeout)
    logger.info(f"PDF text extracted, length: {len(text)}")

    analysis = analyze_statement(text, options)
    logger.info(
        f"Parsed {len(analysis.result.transactions)} transactions from {filename} "
        f"(bank: {analysis.bank.bank}, strategy: {options.strategy.value})"
    )
    return analysis


async def convert_pdf(filename: str | None, contents: bytes, options: ParseOptions) -> ConversionResponse:
    """Convert an uploaded PDF statement into transactions plus inline CSV."""
    analysis = await analyze_pdf(filename, contents, options)
    statement = to_statement_response(analysis)

    return ConversionResponse(
        **statement.model_dump(),
        filename=converted_filename(filename),  # type: ignore[arg-type]
        original_filename=filename,  # type: ignore[arg-type]
        csv_data=transactions_to_csv(analysis.result.transactions),
    )


async def convert_pdf_to_file(
    filename: str | None, contents: bytes, options: ParseOptions, export_format: ExportFormat
) -> tuple[str, ExportedFile]:
    """Convert an uploaded PDF statement into a downloadable file."""
    analysis = await analyze_pdf(filename, contents, options)
    exported = export_statement(analysis, export_format)
    return converted_filename(filename, export_format), exported  # type: ignore[arg-type]
