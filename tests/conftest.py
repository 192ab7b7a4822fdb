"""Test fixtures: one app per test backed by a throwaway SQLite file.

The media host is replaced by FakeUploader so no test talks to Cloudinary.
The default client does not keep cookies; tests that exercise the cookie path
send the Cookie header explicitly, so a stale cookie never masks the token a
test means to send.
"""

import io
import os

import pytest

from api import create_app

REGISTER_URL = "/api/v1/users/register"
LOGIN_URL = "/api/v1/users/login"

SENSITIVE_KEYS = {"password", "passwordHash", "password_hash", "refreshToken", "refresh_token"}


class FakeUploader:
    def __init__(self):
        self.uploaded = []
        self.fail = False

    def upload(self, local_path):
        if not local_path or self.fail:
            return None
        self.uploaded.append(local_path)
        name = os.path.basename(local_path)
        return {"url": f"https://res.cloudinary.test/{name}", "public_id": name}


def image(name="avatar.png"):
    return (io.BytesIO(b"\x89PNG\r\n\x1a\nfake"), name)


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def uploader():
    return FakeUploader()


@pytest.fixture()
def app(tmp_path, uploader):
    app = create_app(
        "testing",
        uploader=uploader,
        test_config={
            "DATABASE_URL": f"sqlite:///{tmp_path / 'accounts.db'}",
            "UPLOAD_FOLDER": str(tmp_path / "uploads"),
        },
    )
    yield app
    app.extensions["storage"].dispose()


@pytest.fixture()
def client(app):
    return app.test_client(use_cookies=False)


@pytest.fixture()
def store(app):
    return app.extensions["account_store"]


@pytest.fixture()
def tokens(app):
    return app.extensions["token_service"]


@pytest.fixture()
def register(client):
    """POST a multipart registration; every field can be overridden or dropped (None)."""

    def _register(
        username="alice",
        email="alice@x.com",
        fullName="Alice A",
        password="p@ss1234",
        avatar=True,
        coverImage=False,
    ):
        data = {}
        for key, value in (
            ("username", username),
            ("email", email),
            ("fullName", fullName),
            ("password", password),
        ):
            if value is not None:
                data[key] = value
        if avatar:
            data["avatar"] = image("avatar.png")
        if coverImage:
            data["coverImage"] = image("cover.jpg")
        return client.post(REGISTER_URL, data=data, content_type="multipart/form-data")

    return _register


@pytest.fixture()
def login(client):
    def _login(password="p@ss1234", **identifier):
        body = {"password": password}
        body.update(identifier or {"username": "alice"})
        return client.post(LOGIN_URL, json=body)

    return _login


@pytest.fixture()
def session_tokens(register, login):
    """Register and log in as alice; returns the data of the login response."""
    assert register().status_code == 201
    resp = login()
    assert resp.status_code == 200
    return resp.get_json()["data"]


def assert_sanitized(user: dict):
    assert user
    assert not SENSITIVE_KEYS & set(user)
