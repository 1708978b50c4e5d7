from __future__ import annotations

import json

import pytest

from uae_catalog.config import settings
from uae_catalog.models import Program, University


TOKEN = "test-import-token"

ROWS = [
    {"University name": "Zayed University", "University city": "Dubai", "Name of Degree": "Bachelor of Arts in Media"},
    {"University name": "Zayed University", "Name of Degree": "Master of Education"},
]


@pytest.fixture()
def import_token(monkeypatch) -> str:
    monkeypatch.setattr(settings, "import_api_token", TOKEN)
    return TOKEN


def _upload(client, filename: str, content: bytes, token: str | None = None, **params):
    headers = {"X-Import-Token": token} if token else {}
    return client.post(
        "/api/admin/import",
        files={"file": (filename, content, "application/octet-stream")},
        headers=headers,
        params=params,
    )


def test_import_disabled_without_configured_token(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "import_api_token", None)
    resp = _upload(client, "rows.json", json.dumps(ROWS).encode(), token="anything")
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Import endpoint is disabled"


def test_import_rejects_wrong_token(client, import_token) -> None:
    resp = _upload(client, "rows.json", json.dumps(ROWS).encode(), token="wrong")
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Invalid import token"


def test_import_json_upload(client, db, import_token) -> None:
    resp = _upload(client, "rows.json", json.dumps(ROWS).encode(), token=import_token)

    assert resp.status_code == 200
    report = resp.json()
    assert report["universities_inserted"] == 1
    assert report["programs_inserted"] == 2
    assert report["reset"] is False
    assert db.query(Program).count() == 2
    assert db.query(University).one().location == "Dubai"


def test_import_upload_is_idempotent(client, db, import_token) -> None:
    _upload(client, "rows.json", json.dumps(ROWS).encode(), token=import_token)
    resp = _upload(client, "rows.json", json.dumps(ROWS).encode(), token=import_token)

    report = resp.json()
    assert report["programs_inserted"] == 0
    assert report["programs_skipped_duplicate"] == 2
    assert db.query(Program).count() == 2


def test_import_csv_with_reset(client, db, import_token) -> None:
    db.add(University(name="Stale University"))
    db.commit()
    csv_body = b"University name,Name of Degree\nAjman University,Doctor of Pharmacy\n"

    resp = _upload(client, "rows.csv", csv_body, token=import_token, reset="true")

    assert resp.status_code == 200
    assert resp.json()["reset"] is True
    assert [u.name for u in db.query(University).all()] == ["Ajman University"]


def test_import_without_deriving_reports_unmatched(client, import_token) -> None:
    resp = _upload(client, "rows.json", json.dumps(ROWS).encode(), token=import_token, derive_universities="false")

    report = resp.json()
    assert report["programs_inserted"] == 0
    assert report["unmatched_universities"] == ["Zayed University"]


def test_import_rejects_unknown_file_type(client, import_token) -> None:
    resp = _upload(client, "rows.txt", b"hello", token=import_token)
    assert resp.status_code == 400


def test_import_rejects_bad_json(client, import_token) -> None:
    resp = _upload(client, "rows.json", b"{not json", token=import_token)
    assert resp.status_code == 400
