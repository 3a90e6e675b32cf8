"""Tests for the template statement parser."""

from statement_converter.models import TransactionRecord
from statement_converter.parsers.lines import segment_lines
from statement_converter.parsers.template import _is_header_line, parse_template
from statement_converter.parsers.validation import ParseResult


def _parse(text: str) -> tuple[list[TransactionRecord], ParseResult]:
    result = ParseResult(transactions=[])
    records = parse_template(segment_lines(text), result)
    return records, result


class TestIsHeaderLine:
    """Test column header detection."""

    def test_detects_headers(self):
        """Lines with column headings are headers."""
        assert _is_header_line("Date Description Amount Balance") is True
        assert _is_header_line("TRANSACTION DETAIL") is True

    def test_regular_line(self):
        """Ordinary transaction lines are not headers."""
        assert _is_header_line("03/15/2024 Grocery Store -45.67") is False


class TestParseTemplate:
    """Test the template parser."""

    def test_date_description_amount(self):
        """Should parse a dated line with one amount."""
        records, _ = _parse("03/15/2024 Grocery Store -45.67")

        assert records == [
            TransactionRecord(
                date="03/15/2024",
                description="Grocery Store",
                amount="-45.67",
                type="debit",
                balance=None,
            )
        ]

    def test_date_description_amount_balance(self):
        """A second amount is captured as the balance."""
        records, _ = _parse("03/16/2024 Payroll Deposit $1,500.00 $2,454.33")

        assert len(records) == 1
        assert records[0].description == "Payroll Deposit"
        assert records[0].amount == "1500.00"
        assert records[0].balance == "2454.33"
        assert records[0].type == "credit"

    def test_amount_date_description(self):
        """Should parse lines that lead with the amount."""
        records, _ = _parse("-20.00 03/17/2024 Parking Garage")

        assert len(records) == 1
        assert records[0].date == "03/17/2024"
        assert records[0].description == "Parking Garage"
        assert records[0].type == "debit"

    def test_month_name_date(self):
        """Should parse 'Mon D, YYYY' dated lines."""
        records, _ = _parse("Aug 31, 2025 Interest earned 0.49")

        assert len(records) == 1
        assert records[0].date == "Aug 31, 2025"
        assert records[0].description == "Interest earned"

    def test_undated_lines_use_previous_date(self):
        """Description and amount lines take the date printed above them."""
        text = "03/18/2024\nCoffee Shop -4.50\nBookstore -12.99 987.01"
        records, result = _parse(text)

        assert [r.date for r in records] == ["03/18/2024", "03/18/2024"]
        assert records[0].balance is None
        assert records[1].balance == "987.01"
        assert result.rows_skipped == 1

    def test_undated_line_without_previous_date_is_rejected(self):
        """Without any date above it an undated line cannot be used."""
        records, result = _parse("Coffee Shop -4.50")

        assert records == []
        assert result.candidates_considered == 1
        assert result.candidates_rejected == 1

    def test_invalid_date_is_not_rescued(self):
        """A line with a malformed date is dropped rather than re-dated."""
        text = "03/18/2024 Coffee Shop -4.50\n13/45/2024 Mystery Charge -10.00"
        records, result = _parse(text)

        assert [r.description for r in records] == ["Coffee Shop"]
        assert result.candidates_rejected == 1

    def test_skips_headers(self):
        """Header lines are skipped before matching."""
        text = "Date Description Amount\n03/15/2024 Grocery Store -45.67"
        records, result = _parse(text)

        assert len(records) == 1
        assert result.rows_skipped == 1

    def test_no_running_balance(self):
        """Balances only come from the line itself."""
        records, _ = _parse("03/15/2024 Grocery Store -45.67\n03/16/2024 Refund 10.00")
        assert all(r.balance is None for r in records)

    def test_unmatched_lines_are_skipped(self):
        """Free text lines count as skipped."""
        records, result = _parse("Thank you for banking with us")
        assert records == []
        assert result.rows_skipped == 1
        assert result.candidates_considered == 0
