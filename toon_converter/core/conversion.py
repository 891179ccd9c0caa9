"""Bidirectional JSON <> TOON conversion with captured errors.

WHY: Every surface (GUI, CLI, HTTP API) needs the same answer to "what
does this document look like in the other format, and what does it
cost?". Conversion runs on every keystroke, so a malformed document is
an expected state, not an exception; the result must carry the error.

HOW: convert() parses the source text with the parser for the mode's
source side (json.loads or toon_format.decode), serializes the value with
the target side's writer (json.dumps or toon_format.encode), and wraps
the text with token estimates in an immutable ConversionResult.

RULES:
- Whitespace-only input yields an empty, error-free result
- Parse and encode failures are captured in ConversionResult.error
- convert() never raises and performs no I/O
- saved_tokens is floored at zero; token_delta is the signed difference
- JSON parsing is strict: NaN / Infinity literals are rejected
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from toon_format import decode, encode

from toon_converter.config import JSON_INDENT, TOON_INDENT
from toon_converter.core.tokens import estimate_tokens

logger = logging.getLogger(__name__)


class Mode(str, enum.Enum):
    """Active conversion direction.

    HOW: Inherits from str so values serialize cleanly to JSON and can be
    used directly as CLI choices.
    """

    JSON_TO_TOON = "json-to-toon"
    TOON_TO_JSON = "toon-to-json"

    @property
    def source_format(self) -> str:
        return "json" if self is Mode.JSON_TO_TOON else "toon"

    @property
    def target_format(self) -> str:
        return "toon" if self is Mode.JSON_TO_TOON else "json"

    def toggled(self) -> Mode:
        """Return the opposite direction."""
        if self is Mode.JSON_TO_TOON:
            return Mode.TOON_TO_JSON
        return Mode.JSON_TO_TOON


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting one document in one direction.

    Attributes:
        converted_text: The target-format document, or "" on failure or
                        whitespace-only input.
        source_tokens: Estimated tokens of the input text.
        target_tokens: Estimated tokens of converted_text (0 on failure).
        saved_tokens: ``max(source_tokens - target_tokens, 0)``.
        error: Parser/encoder failure message, or None on success.
    """

    converted_text: str
    source_tokens: int
    target_tokens: int
    saved_tokens: int
    error: Optional[str] = None

    @property
    def token_delta(self) -> int:
        """Signed ``target_tokens - source_tokens``; negative means the output is cheaper."""
        return self.target_tokens - self.source_tokens

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.converted_text)


def _reject_constant(name: str) -> Any:
    raise ValueError("Unexpected token {} in JSON".format(name))


def _parse_json(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def _dump_json(value: Any) -> str:
    return json.dumps(value, indent=JSON_INDENT, ensure_ascii=False)


def _dump_toon(value: Any) -> str:
    return encode(value, {"indent": TOON_INDENT})


def _require_utf8(text: str) -> str:
    """Reject text holding lone surrogates, which no UTF-8 sink can write."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValueError(
            "Unpaired surrogate {!r} is not valid Unicode".format(exc.object[exc.start])
        ) from exc
    return text


def _convert(
    source_text: str,
    parse: Callable[[str], Any],
    serialize: Callable[[Any], str],
    source_label: str,
) -> ConversionResult:
    source_tokens = estimate_tokens(source_text)

    if not source_text.strip():
        return ConversionResult(
            converted_text="",
            source_tokens=source_tokens,
            target_tokens=0,
            saved_tokens=0,
            error=None,
        )

    try:
        converted = _require_utf8(serialize(parse(source_text)))
    except Exception as exc:
        logger.debug("%s conversion failed: %s", source_label, exc)
        message = str(exc) or "Unknown error while parsing {}".format(source_label)
        return ConversionResult(
            converted_text="",
            source_tokens=source_tokens,
            target_tokens=0,
            saved_tokens=0,
            error=message,
        )

    target_tokens = estimate_tokens(converted)
    return ConversionResult(
        converted_text=converted,
        source_tokens=source_tokens,
        target_tokens=target_tokens,
        saved_tokens=max(source_tokens - target_tokens, 0),
        error=None,
    )


def convert_json_to_toon(json_text: str) -> ConversionResult:
    """Convert a JSON document to TOON (indent 2)."""
    return _convert(json_text, _parse_json, _dump_toon, "JSON")


def convert_toon_to_json(toon_text: str) -> ConversionResult:
    """Convert a TOON document to pretty-printed JSON (indent 2)."""
    return _convert(toon_text, decode, _dump_json, "TOON")


def convert(source_text: str, mode: Mode) -> ConversionResult:
    """Convert *source_text* in the direction given by *mode*.

    Args:
        source_text: Raw document text in the mode's source format.
        mode: Conversion direction.

    Returns:
        A fresh ConversionResult. Failures are reported through its
        ``error`` field; this function does not raise.
    """
    if Mode(mode) is Mode.JSON_TO_TOON:
        return convert_json_to_toon(source_text)
    return convert_toon_to_json(source_text)
