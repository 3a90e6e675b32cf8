"""Serialization of parsed statements for download."""

import csv
import json
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from io import BytesIO, StringIO

import pandas as pd

from statement_converter.models import ExportFormat, TransactionRecord
from statement_converter.parsers.statement import StatementAnalysis

logger = logging.getLogger(__name__)

CSV_HEADERS = ["DATE", "TYPE", "DESCRIPTION", "AMOUNT", "BALANCE"]


class ExportError(Exception):
    """Raised when a statement cannot be exported."""

    pass


@dataclass
class ExportedFile:
    """Serialized statement ready to be sent to the client."""

    content: bytes
    media_type: str
    extension: str


MEDIA_TYPES = {
    ExportFormat.CSV: ("text/csv", ".csv"),
    ExportFormat.JSON: ("application/json", ".json"),
    ExportFormat.XML: ("application/xml", ".xml"),
    ExportFormat.EXCEL: ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", ".xlsx"),
}


def transactions_to_csv(transactions: list[TransactionRecord]) -> str:
    """Render transactions as CSV with every cell quoted."""
    buffer = StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for txn in transactions:
        writer.writerow([txn.date, txn.type, txn.description, txn.amount, txn.balance or ""])
    return buffer.getvalue()


def statement_to_dict(analysis: StatementAnalysis) -> dict:
    """Plain-data view of a statement, shared by the JSON and XML exports."""
    return {
        "bank": analysis.bank.bank,
        "confidence": analysis.bank.confidence,
        "account_info": analysis.account_info.model_dump(exclude_none=True),
        "used_fallback": analysis.result.used_fallback,
        "transactions": [txn.model_dump() for txn in analysis.result.transactions],
    }


def statement_to_json(analysis: StatementAnalysis) -> str:
    return json.dumps(statement_to_dict(analysis), indent=2)


def statement_to_xml(analysis: StatementAnalysis) -> str:
    """Render the statement as an XML document."""
    data = statement_to_dict(analysis)

    root = ET.Element("statement")
    ET.SubElement(root, "bank").text = data["bank"]
    ET.SubElement(root, "confidence").text = str(data["confidence"])

    if data["account_info"]:
        account = ET.SubElement(root, "account")
        for key, value in data["account_info"].items():
            ET.SubElement(account, key).text = value

    transactions = ET.SubElement(root, "transactions")
    for txn in data["transactions"]:
        element = ET.SubElement(transactions, "transaction")
        for key in ("date", "description", "amount", "type", "balance"):
            ET.SubElement(element, key).text = txn[key] or ""

    ET.indent(root, space="  ")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(root, encoding="unicode")


def transactions_to_excel(transactions: list[TransactionRecord]) -> bytes:
    """Render transactions as an .xlsx workbook with a bold header row."""
    from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
    from openpyxl.styles import Font

    rows = [[txn.date, txn.type, txn.description, txn.amount, txn.balance or ""] for txn in transactions]
    df = pd.DataFrame(
        [[ILLEGAL_CHARACTERS_RE.sub("", value) for value in row] for row in rows],
        columns=CSV_HEADERS,
    )

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Transactions", index=False)
        ws = writer.sheets["Transactions"]
        for cell in ws[1]:
            cell.font = Font(bold=True)
        for column in ws.columns:
            max_length = max(len(str(cell.value or "")) for cell in column)
            ws.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)
        ws.freeze_panes = "A2"

    return buffer.getvalue()


def export_statement(analysis: StatementAnalysis, export_format: ExportFormat) -> ExportedFile:
    """
    Serialize a parsed statement.

    Raises:
        ExportError: If the format is not supported
    """
    try:
        export_format = ExportFormat(export_format)
    except ValueError as e:
        raise ExportError(f"Unsupported export format: {export_format}") from e

    transactions = analysis.result.transactions
    if export_format == ExportFormat.CSV:
        content = transactions_to_csv(transactions).encode("utf-8")
    elif export_format == ExportFormat.JSON:
        content = statement_to_json(analysis).encode("utf-8")
    elif export_format == ExportFormat.XML:
        content = statement_to_xml(analysis).encode("utf-8")
    else:
        content = transactions_to_excel(transactions)

    media_type, extension = MEDIA_TYPES[export_format]
    logger.info(f"Exported {len(transactions)} transactions as {export_format.value} ({len(content)} bytes)")
    return ExportedFile(content=content, media_type=media_type, extension=extension)
