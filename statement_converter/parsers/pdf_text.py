"""PDF text extraction."""

import asyncio
import logging
from io import BytesIO

import pdfplumber

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Raised when text cannot be extracted from a PDF."""

    pass


class NoTextError(ExtractionError):
    """Raised when a PDF opens but yields no text (scanned or image-only)."""

    pass


class ExtractionTimeoutError(ExtractionError):
    """Raised when text extraction exceeds its time budget."""

    pass


def extract_pdf_text(contents: bytes) -> str:
    """
    Extract the text of every page, pages separated by a newline.

    Raises:
        ExtractionError: If the PDF cannot be opened or read
        NoTextError: If the PDF contains no extractable text
    """
    full_text = ""

    try:
        with pdfplumber.open(BytesIO(contents)) as pdf:
            for page in pdf.pages:
                text = page.extract_text()
                if text:
                    full_text += text + "\n"
    except Exception as e:
        logger.error(f"PDF extraction failed: {e}")
        raise ExtractionError(f"Failed to parse PDF: {e}") from e

    if not full_text.strip():
        raise NoTextError("The PDF appears to contain only images or is password protected")

    return full_text


async def extract_pdf_text_with_timeout(contents: bytes, timeout: float) -> str:
    """
    Run extract_pdf_text in a worker thread, bounded by timeout seconds.

    Raises:
        ExtractionTimeoutError: If extraction does not finish in time
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(extract_pdf_text, contents), timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error(f"PDF extraction timed out after {timeout}s")
        raise ExtractionTimeoutError("PDF parsing timeout") from e
