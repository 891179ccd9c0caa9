"""HTTP API for JSON <> TOON conversion.

WHY: Scripts and other tools want conversions without a window or a
subprocess. The API exposes the same core as the GUI and CLI.

HOW: app.py defines the FastAPI application; models.py holds the
Pydantic request/response schemas.
"""
