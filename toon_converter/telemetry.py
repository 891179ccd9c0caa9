"""Usage telemetry: paste, copy, mode-switch, and outbound-link events.

WHY: The maintainers want to know which direction people convert in and
whether the copy button gets used. None of that may slow down or change
a conversion, and local development should send nothing.

HOW: Telemetry is an injected object with an idempotent init() called
once by the composition root (the GUI's main()). Three implementations:
  NullTelemetry             drops every event (default)
  DebugTelemetry            logs events at DEBUG instead of sending them
  GoogleAnalyticsTelemetry  posts GA4 Measurement Protocol events with
                            httpx.AsyncClient as fire-and-forget tasks
create_telemetry() picks one from TOON_CONVERTER_TELEMETRY.

RULES:
- track() never blocks and never raises
- Importing this module has no side effects
- GA events use a random per-session client id; nothing is persisted
- Transport errors are logged at WARNING and dropped; any other send
  failure is logged with its traceback and dropped
- With no running event loop, GA events are dropped
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Set

import httpx

from toon_converter.config import (
    GA_COLLECT_URL,
    TELEMETRY_MODE,
    load_ga_credentials,
)

logger = logging.getLogger(__name__)

_GA_TIMEOUT_S = 5.0


class Telemetry(ABC):
    """Fire-and-forget event sink."""

    def __init__(self) -> None:
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(self) -> None:
        """Prepare the sink. Safe to call more than once."""
        if self._initialized:
            return
        self._initialized = True
        self._setup()

    def _setup(self) -> None:
        pass

    @abstractmethod
    def track(self, event: str, **params: Any) -> None:
        """Record *event* with optional parameters."""

    async def aclose(self) -> None:
        pass


class NullTelemetry(Telemetry):
    def track(self, event: str, **params: Any) -> None:
        return None


class DebugTelemetry(Telemetry):
    """Logs events locally; the equivalent of running on localhost."""

    def track(self, event: str, **params: Any) -> None:
        logger.debug("Analytics (debug): %s %s", event, params)


class GoogleAnalyticsTelemetry(Telemetry):
    """Sends events to the GA4 Measurement Protocol endpoint.

    HOW: init() opens an httpx.AsyncClient. track() schedules a POST on
    the running loop and keeps a reference to the task until it finishes.
    aclose() waits for in-flight sends and closes the client.
    """

    def __init__(
        self,
        measurement_id: str,
        api_secret: str,
        collect_url: str = GA_COLLECT_URL,
        client_id: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__()
        self._measurement_id = measurement_id
        self._api_secret = api_secret
        self._collect_url = collect_url
        self._client_id = client_id or str(uuid.uuid4())
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._pending: Set[asyncio.Task] = set()

    def _setup(self) -> None:
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(_GA_TIMEOUT_S),
            transport=self._transport,
        )

    def _payload(self, event: str, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "client_id": self._client_id,
            "events": [{"name": event, "params": params}],
        }

    def track(self, event: str, **params: Any) -> None:
        if self._client is None:
            logger.debug("Telemetry not initialized; dropping %s", event)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; dropping %s", event)
            return
        task = loop.create_task(self._send(event, params))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, event: str, params: Dict[str, Any]) -> None:
        assert self._client is not None
        try:
            response = await self._client.post(
                self._collect_url,
                params={
                    "measurement_id": self._measurement_id,
                    "api_secret": self._api_secret,
                },
                json=self._payload(event, params),
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Failed to send telemetry event %s: %s", event, exc)
        except Exception:
            logger.exception("Unexpected error sending telemetry event %s", event)

    async def aclose(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def create_telemetry(mode: Optional[str] = None) -> Telemetry:
    """Build the telemetry sink selected by *mode* (default: config).

    RULES:
    - "off" (or anything unrecognized) -> NullTelemetry
    - "debug" -> DebugTelemetry
    - "ga" -> GoogleAnalyticsTelemetry; raises ValueError without credentials
    """
    mode = (mode or TELEMETRY_MODE).strip().lower()
    if mode == "ga":
        measurement_id, api_secret = load_ga_credentials()
        return GoogleAnalyticsTelemetry(measurement_id, api_secret)
    if mode == "debug":
        return DebugTelemetry()
    if mode != "off":
        logger.warning("Unknown telemetry mode %r; telemetry disabled", mode)
    return NullTelemetry()
