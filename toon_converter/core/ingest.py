"""File ingestion: validate a dropped file's type and read its text.

WHY: Users drop or open files instead of pasting. A file that does not
match the active mode's source format should be rejected up front with a
short, mode-specific message, before any read is attempted.

HOW: DroppedFile is the minimal surface a drop source must offer: a
name, a declared media type, and an async full-text read. LocalFile wraps
a filesystem path (reads off the event loop via asyncio.to_thread) and
MemoryFile wraps bytes already in memory (HTTP uploads, tests).
ingest() validates, then awaits the read, raising IngestError subclasses.

RULES:
- JSON mode accepts media type application/json or a .json name
- TOON mode accepts an empty, text/plain, or *yaml* media type, or a
  .toon/.txt/.yaml/.yml name
- Validation failure raises FileTypeRejected and never reads the file
- Read failures (OSError, UnicodeDecodeError) raise FileReadFailure
- Extension checks are case-sensitive suffix matches on the file name
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from toon_converter.config import (
    JSON_FILE_EXTENSIONS,
    JSON_MEDIA_TYPE,
    TOON_FILE_EXTENSIONS,
    TOON_MEDIA_TYPE_MARKER,
    TOON_MEDIA_TYPES,
)
from toon_converter.core.conversion import Mode

logger = logging.getLogger(__name__)

JSON_REJECTED_MESSAGE = "Unsupported file type. Please drop a .json file."
TOON_REJECTED_MESSAGE = "Unsupported file type. Please drop a TOON file."
READ_FAILED_MESSAGE = "Failed to read file. Please try again."


class IngestError(Exception):
    """Base class for file ingestion failures.

    RULES:
    - ``message`` is short and user-facing (shown as the drop message)
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class FileTypeRejected(IngestError):
    """Raised when a file does not match the active mode's source format."""


class FileReadFailure(IngestError):
    """Raised when a validated file cannot be read as text."""


class DroppedFile(Protocol):
    """What a drop surface hands to the ingestor."""

    name: str
    media_type: str

    async def read_text(self) -> str:
        ...


@dataclass
class LocalFile:
    """A file on disk, offered to the ingestor as if dropped."""

    path: Path
    name: str
    media_type: str

    @classmethod
    def from_path(cls, path: Path) -> LocalFile:
        path = Path(path)
        guessed, _ = mimetypes.guess_type(path.name)
        return cls(path=path, name=path.name, media_type=guessed or "")

    async def read_text(self) -> str:
        return await asyncio.to_thread(self.path.read_text, encoding="utf-8")


@dataclass
class MemoryFile:
    """File content already held in memory (e.g. an HTTP upload)."""

    name: str
    media_type: str
    content: bytes

    async def read_text(self) -> str:
        return self.content.decode("utf-8")


def _is_json_file(file: DroppedFile) -> bool:
    return file.media_type == JSON_MEDIA_TYPE or file.name.endswith(JSON_FILE_EXTENSIONS)


def _is_toon_file(file: DroppedFile) -> bool:
    media_type = file.media_type or ""
    return (
        media_type in TOON_MEDIA_TYPES
        or TOON_MEDIA_TYPE_MARKER in media_type
        or file.name.endswith(TOON_FILE_EXTENSIONS)
    )


def is_acceptable(file: DroppedFile, mode: Mode) -> bool:
    """Return True if *file* may be ingested as the source side of *mode*."""
    if Mode(mode) is Mode.JSON_TO_TOON:
        return _is_json_file(file)
    return _is_toon_file(file)


def rejection_message(mode: Mode) -> str:
    if Mode(mode) is Mode.JSON_TO_TOON:
        return JSON_REJECTED_MESSAGE
    return TOON_REJECTED_MESSAGE


def validate_file(file: DroppedFile, mode: Mode) -> None:
    """Raise FileTypeRejected if *file* does not fit *mode*'s source side."""
    if not is_acceptable(file, mode):
        logger.info(
            "Rejected file %r (media type %r) in %s mode",
            file.name, file.media_type, Mode(mode).value,
        )
        raise FileTypeRejected(rejection_message(mode))


async def ingest(file: DroppedFile, mode: Mode) -> str:
    """Validate *file* for *mode* and return its full text content.

    Raises:
        FileTypeRejected: The file type does not match the mode; no read
            was attempted.
        FileReadFailure: The read failed or the content is not UTF-8 text.
    """
    validate_file(file, mode)
    try:
        text = await file.read_text()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to read dropped file %r: %s", file.name, exc)
        raise FileReadFailure(READ_FAILED_MESSAGE) from exc
    logger.debug("Read %d characters from %r", len(text), file.name)
    return text


def describe_accepted(mode: Mode) -> str:
    """Short hint listing the extensions accepted in *mode*, e.g. "(.json)"."""
    if Mode(mode) is Mode.JSON_TO_TOON:
        return "({})".format(", ".join(JSON_FILE_EXTENSIONS))
    return "({})".format(", ".join(TOON_FILE_EXTENSIONS[:2]))
