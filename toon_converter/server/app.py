"""FastAPI application exposing JSON <> TOON conversion over HTTP.

WHY: Scripts, notebooks, and other services want the converter without a
window. The API wraps the same core as the GUI and CLI, so a document
converts identically everywhere.

HOW: Four endpoints.
  POST /conversions       JSON body {text, mode}; returns the conversion
  POST /conversions/file  multipart upload + mode; the upload goes
                          through ingest() like a GUI drop
  GET  /modes             supported directions and accepted extensions
  GET  /health            liveness check

RULES:
- A malformed document is returned as 200 with ``error`` set
- Upload type rejection -> 415, unreadable upload -> 400,
  oversized upload -> 413
- Error responses use the ErrorResponse schema
- Uploaded bytes are never written to disk
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, List

from fastapi import FastAPI, File, Form, HTTPException, UploadFile

from toon_converter import __version__
from toon_converter.config import (
    API_HOST,
    API_PORT,
    JSON_FILE_EXTENSIONS,
    LOG_FORMAT,
    LOG_LEVEL,
    MAX_UPLOAD_BYTES,
    TOON_FILE_EXTENSIONS,
)
from toon_converter.core.conversion import Mode, convert
from toon_converter.core.ingest import (
    FileReadFailure,
    FileTypeRejected,
    MemoryFile,
    ingest,
)
from toon_converter.server.models import (
    ConversionMode,
    ConversionRequest,
    ConversionResponse,
    ErrorResponse,
    HealthResponse,
    ModeInfo,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="JSON <> TOON Converter API",
    description=(
        "Convert documents between JSON and TOON (Token-Oriented Object "
        "Notation) and compare approximate token counts. Token estimates "
        "are one token per four characters, rounded up."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Endpoints: Conversions
# ---------------------------------------------------------------------------


@app.post(
    "/conversions",
    response_model=ConversionResponse,
    tags=["conversions"],
    summary="Convert a document",
    description=(
        "Convert the submitted text in the requested direction. Malformed "
        "input is reported in the `error` field with an empty "
        "`converted_text`."
    ),
)
async def create_conversion(request: ConversionRequest) -> ConversionResponse:
    mode = Mode(request.mode.value)
    result = convert(request.text, mode)
    if result.error is not None:
        logger.info("Conversion %s failed: %s", mode.value, result.error)
    return ConversionResponse.from_result(result, mode)


@app.post(
    "/conversions/file",
    response_model=ConversionResponse,
    tags=["conversions"],
    summary="Convert an uploaded file",
    description=(
        "Upload a document file. The file type must match the source side "
        "of `mode` (.json for json-to-toon; .toon, .txt, .yaml, .yml or a "
        "plain-text media type for toon-to-json)."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "File could not be read as UTF-8 text"},
        413: {"model": ErrorResponse, "description": "File too large"},
        415: {"model": ErrorResponse, "description": "File type does not match the mode"},
    },
)
async def create_file_conversion(
    file: Annotated[
        UploadFile,
        File(description="Document to convert."),
    ],
    mode: Annotated[
        ConversionMode,
        Form(description="Conversion direction."),
    ] = ConversionMode.json_to_toon,
) -> ConversionResponse:
    # Sanitize filename to prevent path components leaking into messages
    filename = Path(file.filename or "upload").name
    content = await file.read()
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail="File too large ({} bytes, max {}).".format(len(content), MAX_UPLOAD_BYTES),
        )

    core_mode = Mode(mode.value)
    dropped = MemoryFile(
        name=filename,
        media_type=file.content_type or "",
        content=content,
    )
    try:
        text = await ingest(dropped, core_mode)
    except FileTypeRejected as exc:
        raise HTTPException(status_code=415, detail=exc.message)
    except FileReadFailure as exc:
        raise HTTPException(status_code=400, detail=exc.message)

    result = convert(text, core_mode)
    return ConversionResponse.from_result(result, core_mode)


# ---------------------------------------------------------------------------
# Endpoints: Modes
# ---------------------------------------------------------------------------


@app.get(
    "/modes",
    response_model=List[ModeInfo],
    tags=["modes"],
    summary="List conversion directions",
)
async def list_modes() -> List[ModeInfo]:
    result = []
    for mode in Mode:
        if mode is Mode.JSON_TO_TOON:
            extensions = list(JSON_FILE_EXTENSIONS)
        else:
            extensions = list(TOON_FILE_EXTENSIONS)
        result.append(ModeInfo(
            mode=ConversionMode(mode.value),
            source_format=mode.source_format,
            target_format=mode.target_format,
            accepted_extensions=extensions,
        ))
    return result


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api() -> None:
    """Entry point for the toon-converter-api console script."""
    import uvicorn

    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    uvicorn.run(app, host=API_HOST, port=API_PORT)
