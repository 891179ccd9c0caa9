"""Command-line interface for the JSON <> TOON converter.

WHY: Users need to convert files or piped text from the terminal and in
scripts, with the same rules and error messages as the desktop GUI.

HOW: argparse accepts an input path (or ``-`` for stdin), an optional
--mode, an --output path, and --stats. Files go through the same
ingest() path as a GUI drop, so a .pdf is refused in JSON mode exactly as
it would be on screen. The converted document goes to stdout (or
--output); status and token stats go to stderr.

RULES:
- Mode defaults to the input's extension (.json -> json-to-toon,
  .toon/.txt/.yaml/.yml -> toon-to-json), and to json-to-toon for stdin
- Ingestion and conversion errors print "Error: ..." and exit 1
- Whitespace-only input produces empty output and exit 0
- Output ends with exactly one trailing newline when non-empty
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from toon_converter import __version__
from toon_converter.config import (
    JSON_FILE_EXTENSIONS,
    LOG_FORMAT,
    LOG_LEVEL,
    TOON_FILE_EXTENSIONS,
)
from toon_converter.core.conversion import ConversionResult, Mode, convert
from toon_converter.core.ingest import IngestError, LocalFile, ingest


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def infer_mode(input_path: str) -> Mode:
    """Pick a conversion direction from the input file's extension."""
    suffix = Path(input_path).suffix.lower()
    if suffix in TOON_FILE_EXTENSIONS:
        return Mode.TOON_TO_JSON
    if suffix in JSON_FILE_EXTENSIONS:
        return Mode.JSON_TO_TOON
    return Mode.JSON_TO_TOON


def format_delta(delta: int) -> str:
    """Render a signed token delta, e.g. ``+3``, ``0``, ``-12``."""
    return "+{}".format(delta) if delta > 0 else str(delta)


def format_stats(result: ConversionResult, mode: Mode) -> List[str]:
    return [
        "{} tokens: {}".format(mode.source_format.upper(), result.source_tokens),
        "{} tokens: {}".format(mode.target_format.upper(), result.target_tokens),
        "Token delta: {}".format(format_delta(result.token_delta)),
    ]


def _read_input(input_path: str, mode: Mode) -> str:
    if input_path == "-":
        return sys.stdin.read()
    return asyncio.run(ingest(LocalFile.from_path(Path(input_path)), mode))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() lets tests inspect
    the parser without converting anything.
    """
    parser = argparse.ArgumentParser(
        prog="toon_converter",
        description="Convert between JSON and TOON (Token-Oriented Object "
                    "Notation) and compare approximate token counts.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the document to convert, or '-' to read from stdin.",
    )

    parser.add_argument(
        "--mode",
        choices=[m.value for m in Mode],
        default=None,
        help="Conversion direction (default: inferred from the file extension).",
    )

    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Write the converted document to this path instead of stdout.",
    )

    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print source/target token estimates and the token delta to stderr.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s {}".format(__version__),
    )

    return parser


def run(args: argparse.Namespace) -> int:
    """Convert according to parsed *args*; return the process exit code."""
    if args.mode:
        mode = Mode(args.mode)
    elif args.input_file == "-":
        mode = Mode.JSON_TO_TOON
    else:
        mode = infer_mode(args.input_file)

    try:
        source_text = _read_input(args.input_file, mode)
    except IngestError as exc:
        print("Error: {}".format(exc.message), file=sys.stderr)
        return 1

    result = convert(source_text, mode)
    if result.error is not None:
        print(
            "Error: Invalid {}: {}".format(mode.source_format.upper(), result.error),
            file=sys.stderr,
        )
        return 1

    output = result.converted_text
    if output and not output.endswith("\n"):
        output += "\n"

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        _status("Saved: {}".format(args.output))
    else:
        sys.stdout.write(output)
        sys.stdout.flush()

    if args.stats:
        for line in format_stats(result, mode):
            _status(line)
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m toon_converter`` and ``toon-converter``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
