"""Core conversion, ingestion, and session modules.

WHY: The core package is the part of the converter with real behavioral
contracts. The GUI, CLI, and HTTP API are thin shells around it.

HOW: tokens.py estimates token cost, conversion.py converts between JSON
and TOON, ingest.py validates and reads dropped files, and session.py
holds the interaction state machine.
"""
