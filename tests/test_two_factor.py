import pyotp
import pytest
from fastapi.testclient import TestClient

import app.api as api_module
from app.auth_utils import get_current_user
from app.routes import two_factor

USER = {"id": 1, "email": "user@example.com", "name": "Test User"}


@pytest.fixture
def client():
    api_module.app.dependency_overrides[get_current_user] = lambda: USER
    yield TestClient(api_module.app)
    api_module.app.dependency_overrides.clear()


@pytest.fixture
def store(monkeypatch):
    """In-memory stand-in for the two_factor_auth table."""
    records = {}

    def _save(user_id, secret, backup_codes):
        records[user_id] = {"secret": secret, "is_enabled": False, "backup_codes": list(backup_codes)}

    def _consume(user_id, code):
        record = records.get(user_id)
        if not record or code not in record["backup_codes"]:
            return False
        record["backup_codes"].remove(code)
        return True

    monkeypatch.setattr(two_factor, "save_two_factor_secret", _save)
    monkeypatch.setattr(two_factor, "get_two_factor", lambda user_id: records.get(user_id))
    monkeypatch.setattr(
        two_factor, "set_two_factor_enabled", lambda user_id, enabled: records[user_id].update(is_enabled=enabled)
    )
    monkeypatch.setattr(two_factor, "consume_backup_code", _consume)
    monkeypatch.setattr(
        two_factor, "get_backup_codes", lambda user_id: list(records.get(user_id, {}).get("backup_codes", []))
    )
    return records


def test_setup_returns_secret_qr_and_codes(client, store):
    resp = client.post("/api/2fa/setup")
    assert resp.status_code == 200
    body = resp.json()
    assert body["secret"] == store[1]["secret"]
    assert body["otpauth"].startswith("otpauth://totp/")
    assert body["qrCode"].startswith("data:image/png;base64,")
    assert len(body["backupCodes"]) == 10
    assert store[1]["is_enabled"] is False


def test_verify_enables_and_disable_turns_off(client, store):
    secret = client.post("/api/2fa/setup").json()["secret"]

    bad = client.post("/api/2fa/verify", json={"token": "abcdef"})
    assert bad.status_code == 400
    assert bad.json()["message"] == "Invalid token"
    assert store[1]["is_enabled"] is False

    ok = client.post("/api/2fa/verify", json={"token": pyotp.TOTP(secret).now()})
    assert ok.status_code == 200
    assert ok.json()["message"] == "2FA enabled successfully"
    assert store[1]["is_enabled"] is True

    off = client.post("/api/2fa/disable", json={"token": pyotp.TOTP(secret).now()})
    assert off.status_code == 200
    assert store[1]["is_enabled"] is False


def test_verify_requires_token(client, store):
    client.post("/api/2fa/setup")

    resp = client.post("/api/2fa/verify", json={})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Token is required"


def test_verify_without_setup_is_rejected(client, store):
    resp = client.post("/api/2fa/verify", json={"token": "123456"})
    assert resp.status_code == 400


def test_backup_code_is_single_use(client, store):
    codes = client.post("/api/2fa/setup").json()["backupCodes"]

    first = client.post("/api/2fa/verify-backup", json={"code": codes[0].lower()})
    assert first.status_code == 200
    assert first.json()["message"] == "Backup code verified successfully"

    again = client.post("/api/2fa/verify-backup", json={"code": codes[0]})
    assert again.status_code == 400
    assert again.json()["message"] == "Invalid backup code"

    remaining = client.get("/api/2fa/backup-codes").json()["backupCodes"]
    assert len(remaining) == 9
    assert codes[0] not in remaining


def test_verify_backup_requires_code(client, store):
    resp = client.post("/api/2fa/verify-backup", json={})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Backup code is required"


def test_setup_again_replaces_codes(client, store):
    first = client.post("/api/2fa/setup").json()
    second = client.post("/api/2fa/setup").json()
    assert first["secret"] != second["secret"]
    assert client.get("/api/2fa/backup-codes").json()["backupCodes"] == second["backupCodes"]
