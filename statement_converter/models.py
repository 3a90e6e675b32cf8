"""Data models for Statement Converter."""

from enum import Enum

from pydantic import BaseModel, Field


class ParseStrategy(str, Enum):
    """Transaction extraction strategies."""

    LOOKAHEAD = "lookahead"  # Dated line plus the following lines searched for an amount
    TEMPLATE = "template"  # Whole-line templates tried in priority order


class NoMatchPolicy(str, Enum):
    """What to return when a statement yields no transactions."""

    RETURN_EMPTY = "return_empty"
    RETURN_SAMPLE = "return_sample"


class ExportFormat(str, Enum):
    """Supported export formats."""

    CSV = "csv"
    JSON = "json"
    XML = "xml"
    EXCEL = "excel"


class TransactionRecord(BaseModel):
    """A transaction line item recovered from statement text."""

    date: str  # As printed on the statement, e.g. "03/15/2024" or "Aug 31, 2025"
    description: str
    amount: str  # Signed, two decimals: "-45.67"
    type: str
    balance: str | None = None


class BankIdentification(BaseModel):
    """Best guess of the institution that issued a statement."""

    bank: str = "Unknown"
    confidence: float = Field(default=0.0, ge=0, le=100)


class AccountMetadata(BaseModel):
    """Account details probed from the statement text."""

    account_number: str | None = None
    routing_number: str | None = None
    statement_date: str | None = None
    balance: str | None = None


class ParseOptions(BaseModel):
    """Options controlling a single parse."""

    strategy: ParseStrategy = ParseStrategy.LOOKAHEAD
    on_no_matches: NoMatchPolicy = NoMatchPolicy.RETURN_EMPTY
    max_records: int = Field(default=50, ge=1)
    lookahead_lines: int = Field(default=2, ge=0)


class StatementReview(BaseModel):
    """Sanity check of a parsed statement."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class ParseStats(BaseModel):
    """Counters describing how a parse went."""

    lines_processed: int
    rows_skipped: int
    candidates_considered: int
    candidates_accepted: int
    candidates_rejected: int
    duplicates_filtered: int
    truncated: int


class ParseTextRequest(BaseModel):
    """Request to parse already extracted statement text."""

    text: str
    strategy: ParseStrategy | None = None
    on_no_matches: NoMatchPolicy | None = None


class StatementResponse(BaseModel):
    """Parsed statement returned by the API."""

    bank: BankIdentification
    account_info: AccountMetadata
    transactions: list[TransactionRecord]
    transaction_count: int
    strategy: ParseStrategy
    used_fallback: bool
    review: StatementReview
    stats: ParseStats


class ConversionResponse(StatementResponse):
    """Response after converting an uploaded PDF."""

    success: bool = True
    filename: str
    original_filename: str
    csv_data: str
