"""Shared test fixtures for the toon_converter test suite.

WHY: Several test modules need the same sample documents, a controllable
clock for the copy-feedback timer, and recording fakes for the clipboard
and telemetry.

HOW: Plain pytest fixtures plus small fake classes. FakeScheduler mimics
the part of the asyncio loop the SessionController uses
(``call_later`` returning a cancellable handle) and lets tests advance
simulated time explicitly.

RULES:
- No test touches the real clipboard, network, or event-loop clock
- Sample documents are small enough to read at a glance
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest


# ---------------------------------------------------------------------------
# Sample documents
# ---------------------------------------------------------------------------

ADA_JSON = json.dumps({"name": "Ada", "role": "admin"}, separators=(",", ":"))
ADA_TOON = "name: Ada\nrole: admin"

CATALOG: Dict[str, Any] = {
    "title": "JSON to TOON",
    "items": [
        {"sku": "A1", "name": "Widget", "qty": 2, "price": 9.99},
        {"sku": "B2", "name": "Gadget", "qty": 1, "price": 14.5},
    ],
}


@pytest.fixture
def ada_json() -> str:
    return ADA_JSON


@pytest.fixture
def ada_toon() -> str:
    return ADA_TOON


@pytest.fixture
def catalog() -> Dict[str, Any]:
    return json.loads(json.dumps(CATALOG))


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Deterministic stand-in for ``loop.call_later``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: List[Tuple[float, FakeHandle, Callable[[], None]]] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle()
        self._timers.append((self.now + delay, handle, callback))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, handle, _ in self._timers if not handle.cancelled)

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = [t for t in self._timers if t[0] <= self.now + 1e-9]
        self._timers = [t for t in self._timers if t[0] > self.now + 1e-9]
        for _, handle, callback in sorted(due, key=lambda t: t[0]):
            if not handle.cancelled:
                callback()


class FakeClipboard:
    """Async clipboard writer that records writes or fails on demand."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.writes: List[str] = []

    async def __call__(self, text: str) -> None:
        if self.error is not None:
            raise self.error
        self.writes.append(text)


class RecordingTelemetry:
    def __init__(self) -> None:
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def track(self, event: str, **params: Any) -> None:
        self.events.append((event, params))


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def telemetry() -> RecordingTelemetry:
    return RecordingTelemetry()
