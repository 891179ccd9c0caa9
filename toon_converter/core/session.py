"""Session state machine: mode, input text, copy feedback, and drop state.

WHY: The interactive surface has a handful of moving parts: the active
conversion direction, the text being edited, transient "Copied!" feedback
that must revert on its own, and drag/drop status messages. Keeping them
in one immutable record with named transitions makes every interaction
testable without a window on screen.

HOW: Two layers.
  Session + transition functions: a frozen dataclass and pure, total
      functions that each return a new Session. No I/O, no timers.
  SessionController: owns the current Session on one event loop. It
      runs the two asynchronous operations (clipboard write, file read),
      arms the copy-feedback reset timer, emits telemetry, and notifies
      subscribers after each transition.

RULES:
- The ConversionResult is derived from (input_text, mode), never stored
- Toggling mode carries the last good output over as the new input
- Toggling always resets copy_state to IDLE and clears drop_message
- Copy feedback reverts to IDLE exactly COPY_RESET_DELAY_S after it was
  set; a newer copy request restarts the countdown
- A file read that resolves after a newer drop, edit, or toggle is discarded
- All mutation happens on one thread; no locks
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from toon_converter.config import COPY_RESET_DELAY_S, INITIAL_JSON
from toon_converter.core.conversion import ConversionResult, Mode, convert
from toon_converter.core.ingest import DroppedFile, IngestError, ingest

logger = logging.getLogger(__name__)

ClipboardWriter = Callable[[str], Awaitable[None]]
Listener = Callable[["Session"], None]


class CopyState(str, enum.Enum):
    """Clipboard feedback shown on the copy button."""

    IDLE = "idle"
    COPIED = "copied"
    ERROR = "error"


@dataclass(frozen=True)
class Session:
    """Everything the interactive surface needs to render, except the conversion.

    Attributes:
        mode: Active conversion direction.
        input_text: Raw text in the mode's source format.
        copy_state: Clipboard feedback; reverts to IDLE on a timer.
        drop_message: Transient file-ingestion failure text, or None.
        drag_active: True while a drag hovers over the drop region.
    """

    mode: Mode = Mode.JSON_TO_TOON
    input_text: str = INITIAL_JSON
    copy_state: CopyState = CopyState.IDLE
    drop_message: Optional[str] = None
    drag_active: bool = False


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def derive_conversion(session: Session) -> ConversionResult:
    return convert(session.input_text, session.mode)


def set_input_text(session: Session, text: str) -> Session:
    return replace(session, input_text=text)


def toggle_mode(session: Session, conversion: ConversionResult) -> Session:
    """Flip the mode, carrying a successful conversion over as the new input.

    Args:
        session: Current state.
        conversion: The result for ``session``'s current text and mode.
    """
    input_text = session.input_text
    if conversion.error is None and conversion.converted_text:
        input_text = conversion.converted_text
    return replace(
        session,
        mode=session.mode.toggled(),
        input_text=input_text,
        copy_state=CopyState.IDLE,
        drop_message=None,
    )


def copy_succeeded(session: Session) -> Session:
    return replace(session, copy_state=CopyState.COPIED)


def copy_failed(session: Session) -> Session:
    return replace(session, copy_state=CopyState.ERROR)


def copy_reset(session: Session) -> Session:
    return replace(session, copy_state=CopyState.IDLE)


def drag_enter(session: Session) -> Session:
    return replace(session, drag_active=True, drop_message=None)


def drag_over(session: Session) -> Session:
    return replace(session, drag_active=True)


def drag_leave(session: Session, related_inside: bool) -> Session:
    """End the drag unless the pointer only moved onto a nested element.

    Args:
        related_inside: True when the element the pointer moved to is
            still contained in the drop region.
    """
    if related_inside:
        return session
    return replace(session, drag_active=False)


def drop_started(session: Session) -> Session:
    return replace(session, drag_active=False)


def drop_succeeded(session: Session, text: str) -> Session:
    return replace(set_input_text(session, text), drop_message=None)


def drop_failed(session: Session, message: str) -> Session:
    return replace(session, drop_message=message)


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class SessionController:
    """Owns one Session on an event loop and runs its async operations.

    WHY: Transitions are pure, but copy and drop are not; they wait on
    the clipboard and the filesystem, and copy feedback expires on a
    timer. Something has to sequence those effects and feed the results
    back through the transitions.

    HOW: Holds the current Session and a cached ConversionResult keyed by
    (input_text, mode). Clipboard writes and file reads are awaited
    in-line; their outcome is applied with a transition. The reset timer
    is armed on ``scheduler`` (any object with ``call_later(delay,
    callback)`` returning a cancellable handle; the running asyncio loop
    by default).

    RULES:
    - Subscribers are called with the new Session after every change
    - Telemetry is fire-and-forget and never affects state
    - close() cancels a pending reset timer
    """

    def __init__(
        self,
        clipboard: ClipboardWriter,
        session: Optional[Session] = None,
        scheduler: Any = None,
        telemetry: Any = None,
        reset_delay_s: float = COPY_RESET_DELAY_S,
    ) -> None:
        self._session = session if session is not None else Session()
        self._clipboard = clipboard
        self._scheduler = scheduler
        self._telemetry = telemetry
        self._reset_delay_s = reset_delay_s
        self._reset_handle: Any = None
        self._listeners: List[Listener] = []
        self._generation = 0
        self._conversion_key: Optional[Tuple[str, Mode]] = None
        self._conversion: Optional[ConversionResult] = None

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    @property
    def conversion(self) -> ConversionResult:
        """The result for the current text and mode (recomputed on change)."""
        key = (self._session.input_text, self._session.mode)
        if self._conversion is None or key != self._conversion_key:
            self._conversion = derive_conversion(self._session)
            self._conversion_key = key
        return self._conversion

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _apply(self, session: Session) -> None:
        if session == self._session:
            return
        self._session = session
        for listener in list(self._listeners):
            listener(session)

    def _track(self, event: str, **params: Any) -> None:
        if self._telemetry is not None:
            self._telemetry.track(event, **params)

    # ------------------------------------------------------------------
    # Synchronous transitions
    # ------------------------------------------------------------------

    def set_input_text(self, text: str) -> None:
        self._generation += 1
        self._apply(set_input_text(self._session, text))

    def toggle_mode(self) -> None:
        previous = self._session.mode
        conversion = self.conversion
        self._generation += 1
        self._cancel_reset()
        self._track("switch_mode", type=previous.source_format)
        self._apply(toggle_mode(self._session, conversion))
        logger.debug("Switched mode %s -> %s", previous.value, self._session.mode.value)

    def drag_enter(self) -> None:
        self._apply(drag_enter(self._session))

    def drag_over(self) -> None:
        self._apply(drag_over(self._session))

    def drag_leave(self, related_inside: bool = False) -> None:
        self._apply(drag_leave(self._session, related_inside))

    def record_paste(self) -> None:
        self._track("paste_input", type=self._session.mode.source_format)

    # ------------------------------------------------------------------
    # Asynchronous operations
    # ------------------------------------------------------------------

    async def request_copy(self, text: Optional[str] = None) -> None:
        """Copy *text* (default: the current output) to the clipboard.

        RULES:
        - Empty text is a no-op
        - Success sets COPIED, any clipboard exception sets ERROR
        - Either way the reset timer is (re)armed
        """
        if text is None:
            text = self.conversion.converted_text
        if not text:
            return

        target_format = self._session.mode.target_format
        try:
            await self._clipboard(text)
        except Exception as exc:
            logger.warning("Clipboard write failed: %s", exc)
            self._apply(copy_failed(self._session))
        else:
            self._apply(copy_succeeded(self._session))
            self._track("copy_output", type=target_format)
        self._arm_reset()

    async def drop(self, file: Optional[DroppedFile]) -> None:
        """Ingest a dropped file into the input, or surface why it was refused."""
        self._apply(drop_started(self._session))
        if file is None:
            return

        self._generation += 1
        generation = self._generation
        try:
            text = await ingest(file, self._session.mode)
        except IngestError as exc:
            if generation == self._generation:
                self._apply(drop_failed(self._session, exc.message))
            return

        if generation != self._generation:
            logger.debug("Discarding stale read of %r", file.name)
            return
        self._apply(drop_succeeded(self._session, text))

    # ------------------------------------------------------------------
    # Copy feedback timer
    # ------------------------------------------------------------------

    def _arm_reset(self) -> None:
        self._cancel_reset()
        scheduler = self._scheduler or asyncio.get_running_loop()
        self._reset_handle = scheduler.call_later(self._reset_delay_s, self._on_reset)

    def _cancel_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

    def _on_reset(self) -> None:
        self._reset_handle = None
        self._apply(copy_reset(self._session))

    def close(self) -> None:
        """Cancel pending timers; call when the surface is torn down."""
        self._cancel_reset()
        self._listeners.clear()
