"""Pattern tables shared by the statement text parsers.

Every table here is ordered. Callers scan them front to back and the first
hit wins, so moving an entry changes parse results.
"""

import re

MONTH_ABBREVIATIONS = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")

_MONTH = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)"

# Dates as printed on statements: 03/15/2024, 03-15-24, Aug 31, 2025, 31 Aug 2025
DATE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(?<!\d)\d{1,2}/\d{1,2}/\d{2,4}(?!\d)"),
    re.compile(r"(?<!\d)\d{1,2}-\d{1,2}-\d{2,4}(?!\d)"),
    re.compile(rf"\b{_MONTH}\s+\d{{1,2}},?\s+\d{{4}}\b", re.IGNORECASE),
    re.compile(rf"(?<!\d)\d{{1,2}}\s+{_MONTH}\s+\d{{4}}\b", re.IGNORECASE),
]

# Shapes a record's date must have to be accepted
VALID_DATE_SHAPES: list[re.Pattern[str]] = [
    re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{2,4})$"),
    re.compile(r"^([A-Za-z]{3})\s+(\d{1,2}),?\s+(\d{4})$"),
    re.compile(r"^(\d{1,2})\s+([A-Za-z]{3})\s+(\d{4})$"),
]

# Amounts: optional sign, optional $, optional thousands separators
AMOUNT_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(?<![\w.])[+-]?\$?-?(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}(?![\d.])"),
    re.compile(r"(?<![\w.])[+-]?\$?-?\d{1,3}(?:,\d{3})+(?![\d.,])"),
]

# Amounts below this are treated as noise
MIN_AMOUNT = 0.01

MAX_DESCRIPTION_LENGTH = 100

# Keywords checked in list order, not in order of appearance in the text
TRANSACTION_TYPE_KEYWORDS = [
    "deposit",
    "withdrawal",
    "transfer",
    "payment",
    "debit",
    "credit",
    "check",
    "atm",
    "fee",
    "interest",
    "dividend",
    "purchase",
    "refund",
    "direct deposit",
    "automatic payment",
    "wire transfer",
    "ach",
]

# Column headings; any line containing one is skipped by the template parser
HEADER_KEYWORDS = ["date", "description", "amount", "balance", "type", "transaction"]

_NUMERIC_DATE = r"\d{1,2}[/-]\d{1,2}[/-]\d{2,4}"
_TEMPLATE_AMOUNT = r"[+-]?\$?-?(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}"

# Whole-line templates in priority order
LINE_TEMPLATES: list[tuple[str, re.Pattern[str]]] = [
    (
        "date_description_amount_balance",
        re.compile(
            rf"(?P<date>{_NUMERIC_DATE})\s+(?P<description>.+?)\s+"
            rf"(?P<amount>{_TEMPLATE_AMOUNT})\s+(?P<balance>{_TEMPLATE_AMOUNT})"
        ),
    ),
    (
        "date_description_amount",
        re.compile(rf"(?P<date>{_NUMERIC_DATE})\s+(?P<description>.+?)\s+(?P<amount>{_TEMPLATE_AMOUNT})"),
    ),
    (
        "amount_date_description",
        re.compile(rf"(?P<amount>{_TEMPLATE_AMOUNT})\s+(?P<date>{_NUMERIC_DATE})\s+(?P<description>.+)"),
    ),
    (
        "description_amount_balance",
        re.compile(rf"(?P<description>.+?)\s+(?P<amount>{_TEMPLATE_AMOUNT})\s+(?P<balance>{_TEMPLATE_AMOUNT})"),
    ),
    (
        "description_amount",
        re.compile(rf"(?P<description>.+?)\s+(?P<amount>{_TEMPLATE_AMOUNT})"),
    ),
    (
        "month_date_description_amount",
        re.compile(
            rf"(?P<date>{_MONTH}\s+\d{{1,2}},?\s+\d{{4}})\s+(?P<description>.+?)\s+(?P<amount>{_TEMPLATE_AMOUNT})",
            re.IGNORECASE,
        ),
    ),
]

# Institutions recognised in statement text, in tie-breaking order
BANK_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("Chase", re.compile(r"chase|jpmorgan|j\.p\.\s*morgan|chase\s+bank", re.IGNORECASE)),
    ("Bank of America", re.compile(r"bank\s+of\s+america|bofa|b\.o\.a|bank\s+of\s+america\s+corp", re.IGNORECASE)),
    ("Wells Fargo", re.compile(r"wells\s+fargo|wells\s+fargo\s+bank", re.IGNORECASE)),
    ("Citi", re.compile(r"citibank|citi|citigroup", re.IGNORECASE)),
    ("US Bank", re.compile(r"us\s+bank|usbank|u\.s\.\s+bank", re.IGNORECASE)),
    ("PNC", re.compile(r"pnc\s+bank|pnc\s+financial", re.IGNORECASE)),
    ("Capital One", re.compile(r"capital\s+one|capital\s+one\s+bank", re.IGNORECASE)),
    ("TD Bank", re.compile(r"td\s+bank|toronto\s+dominion|td\s+ameritrade", re.IGNORECASE)),
    ("HSBC", re.compile(r"hsbc|hsbc\s+bank", re.IGNORECASE)),
    ("American Express", re.compile(r"american\s+express|amex|american\s+express\s+bank", re.IGNORECASE)),
    ("Discover", re.compile(r"discover|discover\s+bank|discover\s+financial", re.IGNORECASE)),
    ("Ally Bank", re.compile(r"ally\s+bank|ally\s+financial", re.IGNORECASE)),
    ("Charles Schwab", re.compile(r"charles\s+schwab|schwab|schwab\s+bank", re.IGNORECASE)),
    ("Fidelity", re.compile(r"fidelity|fidelity\s+bank|fidelity\s+investments", re.IGNORECASE)),
    ("Vanguard", re.compile(r"vanguard|vanguard\s+bank", re.IGNORECASE)),
    ("Goldman Sachs", re.compile(r"goldman\s+sachs|goldman\s+sachs\s+bank", re.IGNORECASE)),
    ("Morgan Stanley", re.compile(r"morgan\s+stanley|morgan\s+stanley\s+bank", re.IGNORECASE)),
    ("JP Morgan", re.compile(r"jp\s+morgan|j\.p\.\s+morgan\s+chase", re.IGNORECASE)),
    ("Bank of New York", re.compile(r"bank\s+of\s+new\s+york|bny\s+mellon", re.IGNORECASE)),
    ("State Street", re.compile(r"state\s+street|state\s+street\s+bank", re.IGNORECASE)),
]

ACCOUNT_PATTERNS: dict[str, re.Pattern[str]] = {
    "account_number": re.compile(r"account\s*(?:number|#)?\s*:?\s*(\d{4,})", re.IGNORECASE),
    "routing_number": re.compile(r"routing\s*(?:number|#)?\s*:?\s*(\d{9})(?!\d)", re.IGNORECASE),
    "statement_date": re.compile(r"statement\s*date\s*:?\s*(\d{1,2}[/-]\d{1,2}[/-]\d{2,4})", re.IGNORECASE),
    "balance": re.compile(r"(?:balance|total)\s*:?\s*\$?(\d[\d,]*(?:\.\d+)?)", re.IGNORECASE),
}
