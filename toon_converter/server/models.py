"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and OpenAPI documentation.

HOW: One request model for text conversion, one response model shared by
text and file conversion, plus small models for modes, errors, and
health. Every field carries a description for the /docs UI.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- ConversionMode values match toon_converter.core.conversion.Mode exactly
- A conversion error is part of the response body, not an HTTP error
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from toon_converter.core.conversion import ConversionResult, Mode


class ConversionMode(str, Enum):
    """Conversion direction accepted by the API."""

    json_to_toon = Mode.JSON_TO_TOON.value
    toon_to_json = Mode.TOON_TO_JSON.value


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class ConversionRequest(BaseModel):
    """A document to convert."""

    text: str = Field(
        description="Source document in the mode's source format.",
    )
    mode: ConversionMode = Field(
        default=ConversionMode.json_to_toon,
        description="Conversion direction.",
    )


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class ConversionResponse(BaseModel):
    """Converted document with token estimates.

    RULES:
    - converted_text is "" when error is set or the input is blank
    - token_delta is target_tokens - source_tokens (may be negative)
    """

    mode: ConversionMode = Field(description="Direction that was applied.")
    converted_text: str = Field(description="Document in the target format.")
    source_tokens: int = Field(ge=0, description="Estimated tokens of the input.")
    target_tokens: int = Field(ge=0, description="Estimated tokens of the output.")
    saved_tokens: int = Field(
        ge=0,
        description="max(source_tokens - target_tokens, 0).",
    )
    token_delta: int = Field(
        description="Signed target_tokens - source_tokens.",
    )
    error: Optional[str] = Field(
        default=None,
        description="Parser message when the input is malformed.",
    )

    @classmethod
    def from_result(cls, result: ConversionResult, mode: Mode) -> ConversionResponse:
        return cls(
            mode=ConversionMode(mode.value),
            converted_text=result.converted_text,
            source_tokens=result.source_tokens,
            target_tokens=result.target_tokens,
            saved_tokens=result.saved_tokens,
            token_delta=result.token_delta,
            error=result.error,
        )


class ModeInfo(BaseModel):
    """One supported conversion direction."""

    mode: ConversionMode = Field(description="Mode identifier.")
    source_format: str = Field(description="Input format, 'json' or 'toon'.")
    target_format: str = Field(description="Output format, 'json' or 'toon'.")
    accepted_extensions: List[str] = Field(
        description="File name extensions accepted for upload in this mode.",
    )


class ErrorResponse(BaseModel):
    """Consistent error body for 4xx responses."""

    detail: str = Field(description="Human-readable error message.")


class HealthResponse(BaseModel):
    """Liveness/readiness payload."""

    status: str = Field(description="Always 'ok' when the service is up.")
    version: str = Field(description="Package version.")
