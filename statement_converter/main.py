"""FastAPI application for Statement Converter."""

import logging
import re
from urllib.parse import quote

from fastapi import FastAPI, File, HTTPException, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from statement_converter.config import settings
from statement_converter.models import (
    ConversionResponse,
    ExportFormat,
    NoMatchPolicy,
    ParseStrategy,
    ParseTextRequest,
    StatementResponse,
)
from statement_converter.parsers.pdf_text import ExtractionError, ExtractionTimeoutError, NoTextError
from statement_converter.parsers.statement import analyze_statement
from statement_converter.parsers.validation import FileTooLargeError, ValidationError
from statement_converter.services.conversion import (
    build_parse_options,
    convert_pdf,
    convert_pdf_to_file,
    to_statement_response,
)
from statement_converter.services.exporters import ExportError

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Statement Converter",
    description="Convert PDF bank statements into CSV, JSON, XML or Excel",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.on_event("startup")
async def startup():
    """Initialize on startup."""
    settings.configure_logging()


def _raise_http_error(e: Exception) -> None:
    """Map service errors onto HTTP responses."""
    if isinstance(e, FileTooLargeError):
        raise HTTPException(status_code=413, detail=str(e))
    if isinstance(e, (ValidationError, NoTextError, ExportError)):
        raise HTTPException(status_code=400, detail=str(e))
    if isinstance(e, ExtractionTimeoutError):
        raise HTTPException(status_code=504, detail=str(e))
    if isinstance(e, ExtractionError):
        raise HTTPException(
            status_code=422,
            detail=f"{e}. The PDF might be corrupted, password protected, or contain only images",
        )
    logger.exception("Unexpected error while converting statement")
    raise HTTPException(status_code=500, detail=f"Error processing file: {str(e)}")


def content_disposition(filename: str) -> str:
    """
    Attachment header for a download name.

    Headers are latin-1, so the plain filename is an ASCII fallback and the
    real name goes in the UTF-8 filename* parameter.
    """
    fallback = re.sub(r'[^\x20-\x7e]|["\\]', "_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "message": "Statement Converter API is running"}


@app.post("/convert", response_model=ConversionResponse)
async def convert(
    file: UploadFile = File(...),
    strategy: ParseStrategy | None = None,
    on_no_matches: NoMatchPolicy | None = None,
):
    """Convert a PDF statement; transactions are returned inline with a CSV rendering."""
    contents = await file.read()
    options = build_parse_options(strategy, on_no_matches)

    try:
        return await convert_pdf(file.filename, contents, options)
    except Exception as e:
        _raise_http_error(e)


@app.post("/convert/download")
async def convert_download(
    file: UploadFile = File(...),
    format: ExportFormat = ExportFormat.CSV,
    strategy: ParseStrategy | None = None,
    on_no_matches: NoMatchPolicy | None = None,
):
    """Convert a PDF statement and return the export as a file download."""
    contents = await file.read()
    options = build_parse_options(strategy, on_no_matches)

    try:
        filename, exported = await convert_pdf_to_file(file.filename, contents, options, format)
    except Exception as e:
        _raise_http_error(e)

    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": content_disposition(filename)},
    )


@app.post("/parse", response_model=StatementResponse)
async def parse_text(request: ParseTextRequest):
    """Parse statement text that was extracted elsewhere."""
    options = build_parse_options(request.strategy, request.on_no_matches)
    analysis = analyze_statement(request.text, options)
    return to_statement_response(analysis)


if __name__ == "__main__":
    import uvicorn

    settings.log_config()
    uvicorn.run(
        "statement_converter.main:app",
        host=settings.api_host,
        port=settings.api_port,
    )
