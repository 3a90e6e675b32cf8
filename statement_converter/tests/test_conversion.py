"""Tests for the conversion service and the HTTP API."""

import time
from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from statement_converter.config import settings
from statement_converter.main import app, content_disposition
from statement_converter.models import ExportFormat, NoMatchPolicy, ParseOptions, ParseStrategy
from statement_converter.parsers.pdf_text import (
    ExtractionError,
    ExtractionTimeoutError,
    NoTextError,
    extract_pdf_text,
    extract_pdf_text_with_timeout,
)
from statement_converter.parsers.validation import FileTooLargeError, ValidationError
from statement_converter.services.conversion import (
    build_parse_options,
    convert_pdf,
    convert_pdf_to_file,
    converted_filename,
    validate_upload,
)

PDF_BYTES = b"%PDF-1.4 placeholder statement bytes"
EXTRACTED_TEXT = """Wells Fargo Bank
03/15/2024 Grocery Store -45.67
03/31/2024
Interest earned 0.49
"""

EXTRACT_TARGET = "statement_converter.services.conversion.extract_pdf_text_with_timeout"


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


class TestValidateUpload:
    """Test upload checks."""

    def test_requires_filename(self):
        """Should reject uploads without a filename."""
        with pytest.raises(ValidationError, match="No filename"):
            validate_upload(None, PDF_BYTES)

    def test_requires_pdf(self):
        """Should reject non-PDF files."""
        with pytest.raises(ValidationError, match="Only PDF"):
            validate_upload("statement.csv", PDF_BYTES)

    def test_rejects_oversized(self):
        """Should reject files over the configured limit."""
        with patch.object(settings, "max_upload_bytes", 16):
            with pytest.raises(FileTooLargeError):
                validate_upload("statement.pdf", PDF_BYTES)

    def test_accepts_pdf(self):
        """Should accept a reasonable PDF upload."""
        validate_upload("Statement.PDF", PDF_BYTES)


class TestConvertedFilename:
    """Test output filenames."""

    def test_default_csv(self):
        """Should replace the extension with _converted.csv."""
        assert converted_filename("march.pdf") == "march_converted.csv"

    def test_other_formats(self):
        """Should use the export format's extension."""
        assert converted_filename("march.pdf", ExportFormat.EXCEL) == "march_converted.xlsx"


class TestBuildParseOptions:
    """Test per-request option overrides."""

    def test_defaults_from_settings(self):
        """Without overrides the settings apply."""
        options = build_parse_options()
        assert options.strategy == settings.parse_strategy
        assert options.max_records == settings.max_records

    def test_overrides(self):
        """Request values override settings."""
        options = build_parse_options(ParseStrategy.TEMPLATE, NoMatchPolicy.RETURN_SAMPLE)
        assert options.strategy == ParseStrategy.TEMPLATE
        assert options.on_no_matches == NoMatchPolicy.RETURN_SAMPLE


class TestExtractPdfText:
    """Test PDF text extraction."""

    def test_rejects_non_pdf_bytes(self):
        """Unreadable content raises ExtractionError."""
        with pytest.raises(ExtractionError):
            extract_pdf_text(b"this is not a pdf at all")

    def test_no_text(self):
        """A PDF whose pages have no text raises NoTextError."""
        page = MagicMock()
        page.extract_text.return_value = None
        with patch("statement_converter.parsers.pdf_text.pdfplumber.open") as mock_open:
            mock_open.return_value.__enter__.return_value.pages = [page]
            with pytest.raises(NoTextError):
                extract_pdf_text(PDF_BYTES)

    def test_joins_pages(self):
        """Page texts are joined with newlines."""
        pages = [MagicMock(), MagicMock()]
        pages[0].extract_text.return_value = "page one"
        pages[1].extract_text.return_value = "page two"
        with patch("statement_converter.parsers.pdf_text.pdfplumber.open") as mock_open:
            mock_open.return_value.__enter__.return_value.pages = pages
            assert extract_pdf_text(PDF_BYTES) == "page one\npage two\n"


@pytest.mark.asyncio
class TestConvertPdf:
    """Test the conversion service with extraction mocked."""

    async def test_converts_statement(self):
        """Should return transactions, bank, CSV and stats."""
        options = ParseOptions()
        with patch(EXTRACT_TARGET, new=AsyncMock(return_value=EXTRACTED_TEXT)):
            response = await convert_pdf("march.pdf", PDF_BYTES, options)

        assert response.success is True
        assert response.filename == "march_converted.csv"
        assert response.original_filename == "march.pdf"
        assert response.transaction_count == 2
        assert response.bank.bank == "Wells Fargo"
        assert response.used_fallback is False
        assert response.stats.candidates_accepted == 2
        assert response.csv_data.splitlines()[0] == '"DATE","TYPE","DESCRIPTION","AMOUNT","BALANCE"'

    async def test_flags_sample_data(self):
        """Sample data is flagged in the response."""
        options = ParseOptions(on_no_matches=NoMatchPolicy.RETURN_SAMPLE)
        with patch(EXTRACT_TARGET, new=AsyncMock(return_value="nothing useful")):
            response = await convert_pdf("march.pdf", PDF_BYTES, options)

        assert response.used_fallback is True
        assert response.transaction_count == 5
        assert "No transactions found" in response.review.errors

    async def test_validation_runs_before_extraction(self):
        """Invalid uploads never reach the extractor."""
        extractor = AsyncMock(return_value=EXTRACTED_TEXT)
        with patch(EXTRACT_TARGET, new=extractor):
            with pytest.raises(ValidationError):
                await convert_pdf("march.txt", PDF_BYTES, ParseOptions())
        extractor.assert_not_called()

    async def test_convert_to_file(self):
        """Should return a download name and serialized content."""
        with patch(EXTRACT_TARGET, new=AsyncMock(return_value=EXTRACTED_TEXT)):
            filename, exported = await convert_pdf_to_file("march.pdf", PDF_BYTES, ParseOptions(), ExportFormat.XML)

        assert filename == "march_converted.xml"
        assert b"<bank>Wells Fargo</bank>" in exported.content

    async def test_extraction_timeout(self):
        """Slow extraction raises ExtractionTimeoutError."""

        def slow_extract(contents):
            time.sleep(0.5)
            return EXTRACTED_TEXT

        with patch("statement_converter.parsers.pdf_text.extract_pdf_text", new=slow_extract):
            with pytest.raises(ExtractionTimeoutError):
                await extract_pdf_text_with_timeout(PDF_BYTES, timeout=0.05)


class TestApi:
    """Test the HTTP endpoints."""

    def test_health(self, client):
        """Health check responds."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_convert(self, client):
        """Uploading a PDF returns parsed transactions."""
        with patch(EXTRACT_TARGET, new=AsyncMock(return_value=EXTRACTED_TEXT)):
            response = client.post(
                "/convert",
                files={"file": ("march.pdf", PDF_BYTES, "application/pdf")},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["transaction_count"] == 2
        assert body["transactions"][1]["type"] == "Interest"
        assert body["strategy"] == "lookahead"
        assert body["used_fallback"] is False

    def test_convert_with_template_strategy(self, client):
        """The strategy can be chosen per request."""
        with patch(EXTRACT_TARGET, new=AsyncMock(return_value=EXTRACTED_TEXT)):
            response = client.post(
                "/convert?strategy=template",
                files={"file": ("march.pdf", PDF_BYTES, "application/pdf")},
            )

        assert response.status_code == 200
        assert response.json()["transactions"][0]["type"] == "debit"

    def test_rejects_non_pdf(self, client):
        """Non-PDF uploads are a 400."""
        response = client.post("/convert", files={"file": ("march.csv", b"a,b,c\n1,2,3\n", "text/csv")})
        assert response.status_code == 400
        assert "Only PDF" in response.json()["detail"]

    def test_rejects_oversized(self, client):
        """Oversized uploads are a 413."""
        with patch.object(settings, "max_upload_bytes", 16):
            response = client.post("/convert", files={"file": ("march.pdf", PDF_BYTES, "application/pdf")})
        assert response.status_code == 413

    def test_no_text_is_400(self, client):
        """Image-only PDFs are a 400."""
        with patch(EXTRACT_TARGET, new=AsyncMock(side_effect=NoTextError("The PDF appears to contain only images"))):
            response = client.post("/convert", files={"file": ("march.pdf", PDF_BYTES, "application/pdf")})
        assert response.status_code == 400

    def test_unreadable_pdf_is_422(self, client):
        """Corrupt PDFs are a 422."""
        with patch(EXTRACT_TARGET, new=AsyncMock(side_effect=ExtractionError("Failed to parse PDF"))):
            response = client.post("/convert", files={"file": ("march.pdf", PDF_BYTES, "application/pdf")})
        assert response.status_code == 422

    def test_timeout_is_504(self, client):
        """Extraction timeouts are a 504."""
        with patch(EXTRACT_TARGET, new=AsyncMock(side_effect=ExtractionTimeoutError("PDF parsing timeout"))):
            response = client.post("/convert", files={"file": ("march.pdf", PDF_BYTES, "application/pdf")})
        assert response.status_code == 504

    def test_download_json(self, client):
        """The download endpoint sets media type and filename."""
        with patch(EXTRACT_TARGET, new=AsyncMock(return_value=EXTRACTED_TEXT)):
            response = client.post(
                "/convert/download?format=json",
                files={"file": ("march.pdf", PDF_BYTES, "application/pdf")},
            )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert 'filename="march_converted.json"' in response.headers["content-disposition"]
        assert response.json()["bank"] == "Wells Fargo"

    def test_parse_text(self, client):
        """Already extracted text can be parsed directly."""
        response = client.post("/parse", json={"text": EXTRACTED_TEXT})

        assert response.status_code == 200
        body = response.json()
        assert body["transaction_count"] == 2
        assert body["stats"]["lines_processed"] == 4

    def test_parse_empty_text_with_sample(self, client):
        """The sample fallback is visible in the response."""
        response = client.post("/parse", json={"text": "", "on_no_matches": "return_sample"})

        body = response.json()
        assert body["used_fallback"] is True
        assert body["transaction_count"] == 5

    def test_download_non_ascii_filename(self, client):
        """Non-ASCII upload names are sent in the UTF-8 filename parameter."""
        with patch(EXTRACT_TARGET, new=AsyncMock(return_value=EXTRACTED_TEXT)):
            response = client.post(
                "/convert/download?format=json",
                files={"file": ("对账单.pdf", PDF_BYTES, "application/pdf")},
            )

        assert response.status_code == 200
        disposition = response.headers["content-disposition"]
        assert "filename*=UTF-8''" + quote("对账单_converted.json") in disposition
        assert 'filename="___converted.json"' in disposition


class TestContentDisposition:
    """Test the download header."""

    def test_ascii_name(self):
        """Plain names appear unchanged in both parameters."""
        assert content_disposition("march_converted.csv") == (
            "attachment; filename=\"march_converted.csv\"; filename*=UTF-8''march_converted.csv"
        )

    def test_quotes_replaced_in_fallback(self):
        """Quotes cannot end the fallback filename early."""
        header = content_disposition('my "march"_converted.csv')

        assert 'filename="my _march__converted.csv"' in header
        assert "filename*=UTF-8''my%20%22march%22_converted.csv" in header

    def test_header_is_latin1_encodable(self):
        """The header only contains ASCII."""
        assert content_disposition("relevé_converted.xlsx").isascii()
