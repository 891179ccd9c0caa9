"""Approximate token counting for side-by-side cost comparison.

WHY: The converter shows how many tokens each representation would cost
in an LLM prompt. The numbers are for comparison only, so a cheap and
deterministic heuristic beats pulling in a real tokenizer.

HOW: One token per CHARS_PER_TOKEN characters, rounded up.

RULES:
- Empty text is 0 tokens
- Counts characters (code points), never encoded bytes
- Never raises
"""

from __future__ import annotations

import math

from toon_converter.config import CHARS_PER_TOKEN


def estimate_tokens(text: str) -> int:
    """Estimate the token count of *text* as ``ceil(len(text) / 4)``."""
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)
