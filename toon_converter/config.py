"""Configuration constants, accepted file types, and .env loading.

WHY: Centralizes every tunable value (timings, indent widths, accepted
drop file types, telemetry and server settings) so they are easy to find
and override without digging through logic.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values, tuples, and strings. load_ga_credentials() gives a
clear error when analytics is requested without credentials.

RULES:
- Conversion constants (indents, chars per token, copy reset delay) are fixed
- File type rules are plain data, consumed by core.ingest
- Telemetry is off unless TOON_CONVERTER_TELEMETRY says otherwise
- All environment overrides are optional
"""

from __future__ import annotations

import os
from typing import Tuple

from dotenv import load_dotenv

# Load .env from the project root (where the app is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------

CHARS_PER_TOKEN = 4
"""Characters per estimated token (rough GPT-style heuristic)."""

JSON_INDENT = 2
TOON_INDENT = 2

COPY_RESET_DELAY_S = 2.0
"""Seconds before "Copied!" / "Copy failed" feedback reverts to idle."""

INITIAL_JSON = """{
  "title": "JSON to TOON",
  "items": [
    { "sku": "A1", "name": "Widget", "qty": 2, "price": 9.99 },
    { "sku": "B2", "name": "Gadget", "qty": 1, "price": 14.5 }
  ]
}"""
"""Sample document shown in the input pane on first launch."""

# ---------------------------------------------------------------------------
# Drop / upload file types
# ---------------------------------------------------------------------------

JSON_MEDIA_TYPE = "application/json"
JSON_FILE_EXTENSIONS: Tuple[str, ...] = (".json",)

TOON_MEDIA_TYPES: Tuple[str, ...] = ("", "text/plain")
TOON_MEDIA_TYPE_MARKER = "yaml"
TOON_FILE_EXTENSIONS: Tuple[str, ...] = (".toon", ".txt", ".yaml", ".yml")

MAX_UPLOAD_BYTES = int(os.getenv("TOON_CONVERTER_MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("TOON_CONVERTER_LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

# ---------------------------------------------------------------------------
# Telemetry
# ---------------------------------------------------------------------------

TELEMETRY_MODE = os.getenv("TOON_CONVERTER_TELEMETRY", "off").strip().lower()
"""One of "off", "debug" (log events locally), or "ga" (Google Analytics)."""

GA_MEASUREMENT_ID = os.getenv("GA_MEASUREMENT_ID", "")
GA_API_SECRET = os.getenv("GA_API_SECRET", "")
GA_COLLECT_URL = os.getenv(
    "GA_COLLECT_URL", "https://www.google-analytics.com/mp/collect"
)

# ---------------------------------------------------------------------------
# HTTP API
# ---------------------------------------------------------------------------

API_HOST = os.getenv("TOON_CONVERTER_API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("TOON_CONVERTER_API_PORT", "8000"))

# ---------------------------------------------------------------------------
# Outbound links
# ---------------------------------------------------------------------------

JSON_COMPARISON_URL = "https://smartjsondiff.com"
TOON_SPEC_URL = "https://github.com/toon-format/toon#readme"


def load_ga_credentials() -> Tuple[str, str]:
    """Return the (measurement_id, api_secret) pair for Google Analytics.

    RULES:
    - Raises ValueError if either value is missing or empty
    - Never returns a placeholder value
    """
    measurement_id = GA_MEASUREMENT_ID.strip()
    api_secret = GA_API_SECRET.strip()
    if not measurement_id or not api_secret:
        raise ValueError(
            "Google Analytics telemetry requested but not configured. "
            "Add GA_MEASUREMENT_ID and GA_API_SECRET to the .env file."
        )
    return measurement_id, api_secret
