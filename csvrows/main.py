from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, File, Query, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from .config import get_settings
from .errors import ConfigurationError, ParseError
from .logging_setup import setup_logging
from .models import CsvPayload, ErrorResponse, HealthResponse, ParseResponse
from .output import dump_rows
from .parser import ParserOptions
from .rules import DEFAULT_DELIMITER, DEFAULT_QUOTE
from .sources import parse_async_chunks, parse_text

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, json_format=settings.log_json)
    yield


app = FastAPI(
    title="csvrows",
    description="Streaming CSV to JSON conversion",
    version="0.1.0",
    lifespan=lifespan,
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return _error(400, str(exc))


@app.exception_handler(ParseError)
async def parse_error_handler(request: Request, exc: ParseError):
    return _error(422, str(exc))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unexpected failure on %s", request.url.path)
    return _error(500, str(exc) or "Unknown error")


def _options(delimiter: Optional[str], quote: Optional[str], parse_number: Optional[str]) -> ParserOptions:
    # empty query values fall back to the defaults
    return ParserOptions(
        delimiter=delimiter or DEFAULT_DELIMITER,
        quote=quote or DEFAULT_QUOTE,
        parse_numbers=parse_number != "false",
    )


async def _read_upload(file: UploadFile, chunk_size: int) -> AsyncIterator[bytes]:
    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        yield chunk


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/csv2json", responses=ERROR_RESPONSES)
async def csv_to_json(
    request: Request,
    delimiter: Optional[str] = Query(default=None),
    quote: Optional[str] = Query(default=None),
    mode: str = Query(default="compact"),
    parse_number: Optional[str] = Query(default=None, alias="parseNumber"),
):
    options = _options(delimiter, quote, parse_number)
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("text/csv"):
        result = await parse_async_chunks(request.stream(), options)
    elif content_type.startswith("application/json"):
        try:
            payload = CsvPayload.model_validate(await request.json())
        except ValueError:
            return _error(400, "Missing 'csv' in JSON body")
        if not payload.csv:
            return _error(400, "Missing 'csv' in JSON body")
        result = parse_text(payload.csv, options)
    else:
        result = parse_text(await request.body(), options)

    logger.info("Converted %d rows (%d columns)", result.count, len(result.headers))
    return Response(
        content=dump_rows(result.rows, pretty=mode == "pretty"),
        media_type="application/json; charset=utf-8",
    )


@app.post("/csv2json/upload", response_model=ParseResponse, responses=ERROR_RESPONSES)
async def upload_csv(
    file: UploadFile = File(...),
    delimiter: Optional[str] = Query(default=None),
    quote: Optional[str] = Query(default=None),
    parse_number: Optional[str] = Query(default=None, alias="parseNumber"),
):
    if not (file.filename or "").lower().endswith(".csv"):
        return _error(422, "Only CSV files are supported")

    options = _options(delimiter, quote, parse_number)
    result = await parse_async_chunks(_read_upload(file, get_settings().chunk_size), options)
    logger.info("Converted %s: %d rows", file.filename, result.count)
    return ParseResponse(headers=list(result.headers), count=result.count, rows=list(result.rows))
