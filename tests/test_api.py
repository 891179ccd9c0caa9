"""Tests for the FastAPI conversion API.

WHY: The API is the scripted entry point to the converter. It must return
conversion errors as data, and map ingestion failures to distinct HTTP
status codes.

HOW: FastAPI TestClient, in-process. Uploads are built from in-memory
bytes; the upload size limit is patched per test where needed.

RULES:
- Malformed documents -> 200 with ``error`` set
- Wrong upload type -> 415; unreadable upload -> 400; too large -> 413
"""

from __future__ import annotations

import io
import json

import pytest
from fastapi.testclient import TestClient

from toon_converter import __version__
from toon_converter.core.conversion import Mode, convert
from toon_converter.core.ingest import (
    JSON_REJECTED_MESSAGE,
    READ_FAILED_MESSAGE,
    TOON_REJECTED_MESSAGE,
)
from toon_converter.server import app as app_module
from toon_converter.server.app import app

from conftest import ADA_JSON, ADA_TOON


@pytest.fixture
def client():
    return TestClient(app)


def _upload(name: str, content: bytes, media_type: str = "application/octet-stream"):
    return ("file", (name, io.BytesIO(content), media_type))


# ---------------------------------------------------------------------------
# POST /conversions
# ---------------------------------------------------------------------------


class TestCreateConversion:
    def test_json_to_toon(self, client):
        resp = client.post("/conversions", json={"text": ADA_JSON, "mode": "json-to-toon"})

        assert resp.status_code == 200
        body = resp.json()
        expected = convert(ADA_JSON, Mode.JSON_TO_TOON)
        assert body["mode"] == "json-to-toon"
        assert body["converted_text"].strip() == ADA_TOON
        assert body["source_tokens"] == expected.source_tokens
        assert body["target_tokens"] == expected.target_tokens
        assert body["saved_tokens"] == expected.saved_tokens
        assert body["token_delta"] == expected.token_delta
        assert body["error"] is None

    def test_mode_defaults_to_json_to_toon(self, client):
        resp = client.post("/conversions", json={"text": ADA_JSON})
        assert resp.json()["mode"] == "json-to-toon"

    def test_toon_to_json(self, client):
        resp = client.post("/conversions", json={"text": ADA_TOON, "mode": "toon-to-json"})

        assert resp.status_code == 200
        assert json.loads(resp.json()["converted_text"]) == {"name": "Ada", "role": "admin"}

    def test_malformed_document_is_reported_in_body(self, client):
        resp = client.post("/conversions", json={"text": '{ "oops"', "mode": "json-to-toon"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["converted_text"] == ""
        assert body["error"]
        assert body["saved_tokens"] == 0

    def test_blank_document(self, client):
        resp = client.post("/conversions", json={"text": "   ", "mode": "toon-to-json"})

        body = resp.json()
        assert body["converted_text"] == ""
        assert body["error"] is None
        assert body["source_tokens"] == 1

    def test_unpaired_surrogate_is_reported_in_body(self, client):
        resp = client.post("/conversions", json={"text": '"\\ud800"', "mode": "json-to-toon"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["converted_text"] == ""
        assert "surrogate" in body["error"]

    def test_unknown_mode_is_rejected(self, client):
        resp = client.post("/conversions", json={"text": "{}", "mode": "xml-to-json"})
        assert resp.status_code == 422

    def test_missing_text_is_rejected(self, client):
        resp = client.post("/conversions", json={"mode": "json-to-toon"})
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# POST /conversions/file
# ---------------------------------------------------------------------------


class TestCreateFileConversion:
    def test_json_upload(self, client):
        resp = client.post(
            "/conversions/file",
            files=[_upload("ada.json", ADA_JSON.encode("utf-8"), "application/json")],
            data={"mode": "json-to-toon"},
        )

        assert resp.status_code == 200
        assert resp.json()["converted_text"].strip() == ADA_TOON

    def test_toon_upload_by_extension(self, client):
        resp = client.post(
            "/conversions/file",
            files=[_upload("ada.toon", ADA_TOON.encode("utf-8"))],
            data={"mode": "toon-to-json"},
        )

        assert resp.status_code == 200
        assert json.loads(resp.json()["converted_text"]) == {"name": "Ada", "role": "admin"}

    def test_pdf_rejected_in_json_mode(self, client):
        resp = client.post(
            "/conversions/file",
            files=[_upload("report.pdf", b"%PDF-1.7", "application/pdf")],
            data={"mode": "json-to-toon"},
        )

        assert resp.status_code == 415
        assert resp.json()["detail"] == JSON_REJECTED_MESSAGE

    def test_image_rejected_in_toon_mode(self, client):
        resp = client.post(
            "/conversions/file",
            files=[_upload("photo.png", b"\x89PNG", "image/png")],
            data={"mode": "toon-to-json"},
        )

        assert resp.status_code == 415
        assert resp.json()["detail"] == TOON_REJECTED_MESSAGE

    def test_non_utf8_upload(self, client):
        resp = client.post(
            "/conversions/file",
            files=[_upload("data.json", b"\xff\xfe\x00", "application/json")],
            data={"mode": "json-to-toon"},
        )

        assert resp.status_code == 400
        assert resp.json()["detail"] == READ_FAILED_MESSAGE

    def test_oversized_upload(self, client, monkeypatch):
        monkeypatch.setattr(app_module, "MAX_UPLOAD_BYTES", 8)
        resp = client.post(
            "/conversions/file",
            files=[_upload("ada.json", ADA_JSON.encode("utf-8"), "application/json")],
            data={"mode": "json-to-toon"},
        )
        assert resp.status_code == 413

    def test_malformed_upload_is_reported_in_body(self, client):
        resp = client.post(
            "/conversions/file",
            files=[_upload("bad.json", b'{ "oops"', "application/json")],
            data={"mode": "json-to-toon"},
        )

        assert resp.status_code == 200
        assert resp.json()["error"]


# ---------------------------------------------------------------------------
# GET /modes, GET /health
# ---------------------------------------------------------------------------


class TestModes:
    def test_lists_both_directions(self, client):
        resp = client.get("/modes")

        assert resp.status_code == 200
        modes = {m["mode"]: m for m in resp.json()}
        assert set(modes) == {"json-to-toon", "toon-to-json"}
        assert modes["json-to-toon"]["accepted_extensions"] == [".json"]
        assert ".toon" in modes["toon-to-json"]["accepted_extensions"]
        assert modes["toon-to-json"]["source_format"] == "toon"


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": __version__}
