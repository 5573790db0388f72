"""Tests for the FastAPI translation API.

WHY: Validates the three endpoints: translation happy paths in both
dialects, 422 responses for scripts that cannot be converted, and the
translator listing and health check.

HOW: FastAPI TestClient runs the app in-process. The conversion
pipeline is real; nothing is mocked.

RULES:
- All tests use the FastAPI TestClient (synchronous)
- Conversion failures return 422 with the error message as detail
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from spss_converter import __version__
from spss_converter.server.app import app
from spss_converter.translators import TRANSLATORS


@pytest.fixture
def client():
    return TestClient(app)


# ---------------------------------------------------------------------------
# POST /translations
# ---------------------------------------------------------------------------


class TestCreateTranslation:
    """Tests for POST /translations endpoint."""

    def test_dplyr_translation(self, client, sample_script, expected_dplyr):
        resp = client.post("/translations", json={"script": "\n".join(sample_script)})
        assert resp.status_code == 200
        body = resp.json()
        assert body["lines"] == expected_dplyr
        assert body["text"] == "".join(line + "\n" for line in expected_dplyr)

    def test_data_table_translation(self, client, sample_script, expected_data_table):
        resp = client.post(
            "/translations",
            json={"script": "\n".join(sample_script), "dialect": "data.table"},
        )
        assert resp.status_code == 200
        assert resp.json()["lines"] == expected_data_table

    def test_nosave(self, client, sample_script):
        resp = client.post(
            "/translations",
            json={"script": "\n".join(sample_script), "nosave": True},
        )
        assert resp.status_code == 200
        assert not any("read_sav" in line for line in resp.json()["lines"])

    def test_unknown_command_returns_422(self, client):
        resp = client.post("/translations", json={"script": "COMPUTE a = 1.\nLIST."})
        assert resp.status_code == 422
        assert "Unrecognized SPSS command 'list'" in resp.json()["detail"]

    def test_unterminated_statement_returns_422(self, client):
        resp = client.post("/translations", json={"script": "COMPUTE a = 1"})
        assert resp.status_code == 422

    def test_unsupported_argument_returns_422(self, client):
        resp = client.post("/translations", json={"script": "GET DATA /TYPE=ODBC /FILE='x'."})
        assert resp.status_code == 422
        assert "ODBC" in resp.json()["detail"]

    def test_invalid_dialect_returns_422(self, client):
        resp = client.post("/translations", json={"script": "LIST.", "dialect": "base"})
        assert resp.status_code == 422

    def test_missing_script_returns_422(self, client):
        resp = client.post("/translations", json={})
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# GET /translators
# ---------------------------------------------------------------------------


class TestListTranslators:

    def test_lists_every_translator(self, client):
        resp = client.get("/translators")
        assert resp.status_code == 200
        body = resp.json()
        assert len(body) == len(TRANSLATORS)
        assert {"key": "recode", "name": "recode_to_r"} in body

    def test_sorted_by_name(self, client):
        names = [item["name"] for item in client.get("/translators").json()]
        assert names == sorted(names)


# ---------------------------------------------------------------------------
# GET /health
# ---------------------------------------------------------------------------


class TestHealth:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": __version__}
