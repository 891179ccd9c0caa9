"""JSON <> TOON Converter: interactive two-way document conversion.

WHY: TOON (Token-Oriented Object Notation) carries the JSON data model in
noticeably fewer tokens, which matters when documents are pasted into LLM
prompts. Users want to paste or drop a document, see the other
representation immediately, and compare the approximate token cost.

HOW: A small core does the work: token estimation, conversion with error
capture, file ingestion, and a session state machine. Three surfaces sit on
top of it: a tkinter desktop GUI, a command-line converter, and an HTTP API.

RULES:
- The TOON grammar belongs to the external ``toon_format`` codec
- Conversion is a pure function of (text, mode); nothing is persisted
- Token counts are a character-based approximation, not a real tokenizer
"""

__version__ = "0.1.0"
