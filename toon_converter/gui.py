"""Tkinter desktop GUI for the JSON <> TOON converter.

WHY: Most users want to paste a document and look at the other format
side by side, with token counts, without touching a terminal. Everything
stays on the local machine.

HOW: A single ConverterApp builds a two-pane window: editable input on
the left, read-only output (or the parse error) on the right. All state
lives in a SessionController; the window only forwards user actions to
it and re-renders when it publishes a new Session. The window is driven
by one asyncio loop that pumps tkinter with ``root.update()``, so the
clipboard write, the file read, and the copy-feedback timer run on the
same thread as the widgets.

RULES:
- tkinter widgets are only touched from the event-loop thread
- Every edit re-runs the conversion; there is no Convert button
- "Open file..." is the drop surface: the chosen file goes through the
  same validation as a drag-and-drop and may be refused
- Programmatic input replacements (toggle, open) never echo back as edits
- Telemetry is initialised once here, in main()
"""

from __future__ import annotations

import asyncio
import logging
import tkinter as tk
import webbrowser
from pathlib import Path
from tkinter import filedialog, ttk
from typing import Any, Coroutine, Optional, Set

from toon_converter.config import (
    JSON_COMPARISON_URL,
    LOG_FORMAT,
    LOG_LEVEL,
    TOON_SPEC_URL,
)
from toon_converter.core.conversion import ConversionResult, Mode
from toon_converter.core.ingest import LocalFile, describe_accepted
from toon_converter.core.session import CopyState, Session, SessionController
from toon_converter.telemetry import Telemetry, create_telemetry

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_WINDOW_TITLE = "JSON <> TOON Converter"
_WINDOW_MIN_WIDTH = 900
_WINDOW_MIN_HEIGHT = 560
_PAD = 8
_FRAME_INTERVAL_S = 1 / 60
_EDITOR_FONT = ("Courier", 12)

_FILE_TYPES = {
    Mode.JSON_TO_TOON: [("JSON files", "*.json"), ("All files", "*")],
    Mode.TOON_TO_JSON: [
        ("TOON files", ("*.toon", "*.txt", "*.yaml", "*.yml")),
        ("All files", "*"),
    ],
}


def _format_delta(delta: int) -> str:
    return "+{}".format(delta) if delta > 0 else str(delta)


def copy_label(session: Session) -> str:
    """Text for the copy button in the given state."""
    if session.copy_state is CopyState.COPIED:
        return "Copied!"
    if session.copy_state is CopyState.ERROR:
        return "Copy failed"
    return "Copy {}".format(session.mode.target_format.upper())


def toggle_label(mode: Mode) -> str:
    if mode is Mode.JSON_TO_TOON:
        return "Switch to TOON → JSON"
    return "Switch to JSON → TOON"


def header_description(mode: Mode) -> str:
    if mode is Mode.JSON_TO_TOON:
        return ("Paste or open JSON on the left and get deterministic TOON "
                "output on the right. Everything stays on your machine.")
    return ("Paste or open TOON on the left and get formatted JSON output "
            "on the right. Everything stays on your machine.")


def stats_text(result: ConversionResult, mode: Mode) -> str:
    return "{} tokens: {}    {} tokens: {}    Token delta: {}".format(
        mode.source_format.upper(), result.source_tokens,
        mode.target_format.upper(), result.target_tokens,
        _format_delta(result.token_delta),
    )


# ---------------------------------------------------------------------------
# Main GUI Application
# ---------------------------------------------------------------------------


class ConverterApp:
    """Main tkinter window for the converter.

    HOW: Builds the widgets once, subscribes to the SessionController,
    and renders every published Session. Async work (copy, open) is
    scheduled as tasks on the running loop and tracked until done.
    """

    def __init__(self, root: tk.Tk, telemetry: Optional[Telemetry] = None) -> None:
        self._root = root
        self._root.title(_WINDOW_TITLE)
        self._root.minsize(_WINDOW_MIN_WIDTH, _WINDOW_MIN_HEIGHT)
        self._root.protocol("WM_DELETE_WINDOW", self._on_close)

        self._telemetry = telemetry
        self._controller = SessionController(
            clipboard=self._write_clipboard,
            telemetry=telemetry,
        )
        self._tasks: Set[asyncio.Task] = set()
        self._suppress_modified = False
        self._closed = False

        self._build_ui()
        self._controller.subscribe(lambda session: self._render())
        self._render()

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        main = ttk.Frame(self._root, padding=_PAD)
        main.pack(fill=tk.BOTH, expand=True)

        # --- Header ---
        header = ttk.Frame(main)
        header.pack(fill=tk.X, pady=(0, _PAD))

        title_group = ttk.Frame(header)
        title_group.pack(side=tk.LEFT, fill=tk.X, expand=True)
        ttk.Label(
            title_group, text=_WINDOW_TITLE, font=("TkDefaultFont", 16, "bold")
        ).pack(anchor=tk.W)
        self._description_label = ttk.Label(title_group, wraplength=520)
        self._description_label.pack(anchor=tk.W)

        actions = ttk.Frame(header)
        actions.pack(side=tk.RIGHT)
        self._toggle_btn = ttk.Button(
            actions, command=self._controller.toggle_mode
        )
        self._toggle_btn.pack(side=tk.TOP, fill=tk.X)
        self._make_link(
            actions, "TOON Specification", TOON_SPEC_URL, "click_documentation"
        ).pack(side=tk.TOP, anchor=tk.E)
        self._make_link(
            actions, "Try our JSON comparison tool!", JSON_COMPARISON_URL,
            "click_json_comparison",
        ).pack(side=tk.TOP, anchor=tk.E)

        # --- Workspace ---
        workspace = ttk.Panedwindow(main, orient=tk.HORIZONTAL)
        workspace.pack(fill=tk.BOTH, expand=True)

        # Input pane
        self._input_frame = ttk.LabelFrame(workspace, padding=_PAD)
        workspace.add(self._input_frame, weight=1)

        input_bar = ttk.Frame(self._input_frame)
        input_bar.pack(fill=tk.X, pady=(0, 4))
        self._hint_label = ttk.Label(input_bar, foreground="gray")
        self._hint_label.pack(side=tk.LEFT)
        self._open_btn = ttk.Button(
            input_bar, text="Open file...", command=self._open_file
        )
        self._open_btn.pack(side=tk.RIGHT)
        self._warning_label = ttk.Label(self._input_frame, foreground="#b26a00")
        self._warning_label.pack(fill=tk.X)

        self._input_text = tk.Text(
            self._input_frame, wrap=tk.WORD, undo=True, font=_EDITOR_FONT
        )
        self._input_text.pack(fill=tk.BOTH, expand=True)
        self._input_text.bind("<<Modified>>", self._on_input_modified)
        self._input_text.bind("<<Paste>>", lambda event: self._controller.record_paste())

        # Output pane
        self._output_frame = ttk.LabelFrame(workspace, padding=_PAD)
        workspace.add(self._output_frame, weight=1)

        output_bar = ttk.Frame(self._output_frame)
        output_bar.pack(fill=tk.X, pady=(0, 4))
        self._stats_label = ttk.Label(output_bar)
        self._stats_label.pack(side=tk.LEFT)
        self._copy_btn = ttk.Button(output_bar, command=self._copy_output)
        self._copy_btn.pack(side=tk.RIGHT)

        self._error_label = ttk.Label(
            self._output_frame, foreground="red", wraplength=420
        )
        self._output_text = tk.Text(
            self._output_frame, wrap=tk.WORD, font=_EDITOR_FONT, state=tk.DISABLED
        )
        self._output_text.pack(fill=tk.BOTH, expand=True)

    def _make_link(self, parent: tk.Widget, text: str, url: str, event: str) -> ttk.Label:
        label = ttk.Label(parent, text=text, foreground="#1a73e8", cursor="hand2")

        def _open(_event: Any) -> None:
            if self._telemetry is not None:
                self._telemetry.track(event)
            webbrowser.open_new_tab(url)

        label.bind("<Button-1>", _open)
        return label

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self) -> None:
        if self._closed:
            return
        session = self._controller.session
        conversion = self._controller.conversion
        mode = session.mode

        self._description_label.configure(text=header_description(mode))
        self._toggle_btn.configure(text=toggle_label(mode))
        self._input_frame.configure(text="{} Input".format(mode.source_format.upper()))
        self._output_frame.configure(text="{} Output".format(mode.target_format.upper()))
        self._hint_label.configure(text="Open supported {}".format(describe_accepted(mode)))
        self._warning_label.configure(text=session.drop_message or "")

        current = self._input_text.get("1.0", "end-1c")
        if current != session.input_text:
            self._suppress_modified = True
            self._input_text.delete("1.0", tk.END)
            self._input_text.insert("1.0", session.input_text)
            self._input_text.edit_modified(False)
            self._suppress_modified = False

        self._stats_label.configure(text=stats_text(conversion, mode))
        self._copy_btn.configure(
            text=copy_label(session),
            state=tk.NORMAL if conversion.converted_text else tk.DISABLED,
        )

        if conversion.error is not None:
            prefix = "Invalid {}".format(mode.source_format.upper())
            self._error_label.configure(text="{}: {}".format(prefix, conversion.error))
            self._error_label.pack(fill=tk.X, before=self._output_text)
        else:
            self._error_label.pack_forget()

        placeholder = "{} conversion will appear here.".format(mode.target_format.upper())
        self._output_text.configure(state=tk.NORMAL)
        self._output_text.delete("1.0", tk.END)
        if conversion.error is None:
            self._output_text.insert("1.0", conversion.converted_text or placeholder)
        self._output_text.configure(state=tk.DISABLED)

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_input_modified(self, _event: Any) -> None:
        if not self._input_text.edit_modified():
            return
        self._input_text.edit_modified(False)
        if self._suppress_modified:
            return
        self._controller.set_input_text(self._input_text.get("1.0", "end-1c"))

    def _copy_output(self) -> None:
        self._spawn(self._controller.request_copy())

    def _open_file(self) -> None:
        mode = self._controller.session.mode
        chosen = filedialog.askopenfilename(
            parent=self._root,
            title="Open {} file".format(mode.source_format.upper()),
            filetypes=_FILE_TYPES[mode],
        )
        if not chosen:
            return
        self._controller.drag_enter()
        self._spawn(self._controller.drop(LocalFile.from_path(Path(chosen))))

    async def _write_clipboard(self, text: str) -> None:
        self._root.clipboard_clear()
        self._root.clipboard_append(text)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _on_close(self) -> None:
        self._closed = True
        self._controller.close()

    # ------------------------------------------------------------------
    # Event loop
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Pump tkinter on the running asyncio loop until the window closes."""
        try:
            while not self._closed:
                self._root.update()
                await asyncio.sleep(_FRAME_INTERVAL_S)
        finally:
            for task in list(self._tasks):
                task.cancel()
            self._root.destroy()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def _run_app(telemetry: Telemetry) -> None:
    telemetry.init()
    root = tk.Tk()
    app = ConverterApp(root, telemetry=telemetry)
    try:
        await app.run()
    finally:
        await telemetry.aclose()


def main() -> None:
    """Launch the Tkinter GUI application.

    RULES:
    - This function blocks until the window is closed
    - Must be called from the main thread
    """
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    try:
        telemetry = create_telemetry()
    except ValueError as exc:
        logger.warning("%s Telemetry disabled.", exc)
        telemetry = create_telemetry("off")
    asyncio.run(_run_app(telemetry))


if __name__ == "__main__":
    main()
