"""Keyword-based transaction type classification."""

from statement_converter.parsers.patterns import TRANSACTION_TYPE_KEYWORDS


def classify_transaction_type(text: str) -> str:
    """
    Label a transaction from the text surrounding it.

    The first keyword in TRANSACTION_TYPE_KEYWORDS found anywhere in the text
    wins, regardless of where it appears. Without a keyword the label falls
    back to the sign: a literal minus or "withdrawal" means Withdrawal,
    anything else is a Deposit.
    """
    text_lower = text.lower()

    for keyword in TRANSACTION_TYPE_KEYWORDS:
        if keyword in text_lower:
            return keyword.capitalize()

    if "-" in text or "withdrawal" in text_lower:
        return "Withdrawal"
    return "Deposit"
