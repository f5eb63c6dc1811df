# tests/test_internal_auth_dependency.py
from http import HTTPStatus

from app.api.dependencies import internal_auth as auth_module


class DummySettingsProd:
    APP_ENV = "prod"
    INTERNAL_API_KEY = "supersecret"


class DummySettingsProdNoKey:
    APP_ENV = "prod"
    INTERNAL_API_KEY = None


class DummySettingsLocalWithKey:
    APP_ENV = "local"
    INTERNAL_API_KEY = "localkey"


_USER = {"name": "Ada", "email": "ada@example.com"}


def test_internal_endpoint_401_when_key_missing_in_prod(monkeypatch, client):
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsProd())

    resp = client.post("/internal/users", json=_USER)
    assert resp.status_code == HTTPStatus.UNAUTHORIZED
    assert "invalid or missing" in resp.json()["message"].lower()


def test_internal_endpoint_401_when_key_wrong_in_prod(monkeypatch, client):
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsProd())

    resp = client.post(
        "/internal/users",
        json=_USER,
        headers={"X-Internal-Api-Key": "wrong-key"},
    )
    assert resp.status_code == HTTPStatus.UNAUTHORIZED


def test_internal_endpoint_201_when_key_correct_in_prod(monkeypatch, client):
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsProd())

    resp = client.post(
        "/internal/users",
        json=_USER,
        headers={"X-Internal-Api-Key": "supersecret"},
    )
    assert resp.status_code == HTTPStatus.CREATED
    assert resp.json()["email"] == "ada@example.com"


def test_internal_endpoint_500_when_key_not_configured_in_prod(monkeypatch, client):
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsProdNoKey())

    resp = client.post("/internal/users", json=_USER)
    assert resp.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert "not configured" in resp.json()["message"]


def test_internal_endpoint_enforces_key_locally_when_configured(monkeypatch, client):
    monkeypatch.setattr(auth_module, "get_settings", lambda: DummySettingsLocalWithKey())

    assert client.post("/internal/users", json=_USER).status_code == HTTPStatus.UNAUTHORIZED
    ok = client.post(
        "/internal/users", json=_USER, headers={"X-Internal-Api-Key": "localkey"}
    )
    assert ok.status_code == HTTPStatus.CREATED
