# tests/conftest.py
import os
import tempfile

# Settings are read once and cached, so the test database must be configured
# before anything from `app` is imported.
_DB_DIR = tempfile.mkdtemp(prefix="meetings-tests-")
os.environ["APP_ENV"] = "test"
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ.pop("INTERNAL_API_KEY", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.db.session import reset_schema  # noqa: E402
from app.main import create_app  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_db():
    """
    Every test starts from an empty schema.
    """
    reset_schema()


@pytest.fixture()
def app():
    return create_app()


@pytest.fixture()
def client(app) -> TestClient:
    """
    TestClient bound to a fresh application instance.
    """
    with TestClient(app) as test_client:
        yield test_client


def _register(client, name: str, email: str, picture: str | None = None) -> str:
    resp = client.post(
        "/internal/users",
        json={"name": name, "email": email, "profilePicture": picture},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


@pytest.fixture()
def seed(client) -> dict:
    """
    Two workspaces owned by the same user, plus an admin, a plain member,
    an outsider and two attendee-only users in the first workspace.
    """
    ids = {
        "owner": _register(client, "Olivia Owner", "owner@example.com"),
        "admin": _register(client, "Adam Admin", "admin@example.com"),
        "member": _register(client, "Mia Member", "member@example.com"),
        "outsider": _register(client, "Oscar Outsider", "outsider@example.com"),
        "ann": _register(client, "Ann Attendee", "ann@example.com", "https://cdn.example/ann.png"),
        "bob": _register(client, "Bob Attendee", "bob@example.com"),
    }

    for key, name in (("workspace", "Platform"), ("other_workspace", "Marketing")):
        resp = client.post(
            "/internal/workspaces", json={"name": name, "ownerId": ids["owner"]}
        )
        assert resp.status_code == 201, resp.text
        ids[key] = resp.json()["id"]

    for user_key, role in (("admin", "ADMIN"), ("member", "MEMBER")):
        resp = client.post(
            f"/internal/workspaces/{ids['workspace']}/members",
            json={"userId": ids[user_key], "role": role},
        )
        assert resp.status_code == 201, resp.text

    return ids
