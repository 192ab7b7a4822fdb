"""Session guard: token extraction order, verification and identity projection."""

from types import SimpleNamespace

import pytest

from services.session_guard import Identity, SessionGuard, extract_token
from utils.exceptions import InvalidTokenError, Unauthorized


def fake_request(cookies=None, headers=None):
    return SimpleNamespace(cookies=cookies or {}, headers=headers or {})


@pytest.fixture()
def guard(store, tokens):
    return SessionGuard(store, tokens)


@pytest.fixture()
def account(store):
    return store.create(
        username="carol",
        email="carol@x.com",
        full_name="Carol C",
        password="s3cretpass",
        avatar="https://res.cloudinary.test/carol.png",
    )


def test_extract_prefers_cookie_over_header():
    request = fake_request({"accessToken": "from-cookie"}, {"Authorization": "Bearer from-header"})
    assert extract_token(request) == "from-cookie"


def test_extract_falls_back_to_bearer_header():
    assert extract_token(fake_request(headers={"Authorization": "Bearer abc"})) == "abc"


@pytest.mark.parametrize("headers", [{}, {"Authorization": ""}, {"Authorization": "Basic abc"}, {"Authorization": "Bearer "}])
def test_extract_without_token_returns_none(headers):
    assert extract_token(fake_request(headers=headers)) is None


def test_missing_token_is_unauthorized(guard):
    with pytest.raises(Unauthorized) as exc:
        guard.authenticate(fake_request())
    assert exc.value.message == "Unauthorized request"


def test_authenticate_with_bearer_returns_identity(guard, tokens, account):
    token = tokens.issue_access_token(account)
    identity = guard.authenticate(fake_request(headers={"Authorization": f"Bearer {token}"}))
    assert isinstance(identity, Identity)
    assert identity.id == account.id
    assert identity.username == "carol"
    assert not hasattr(identity, "password_hash")
    assert not hasattr(identity, "refresh_token")


def test_identity_never_carries_secrets_even_when_logged_in(guard, tokens, account):
    pair = tokens.issue_and_persist_pair(account)
    identity = guard.authenticate(fake_request({"accessToken": pair.access_token}))
    values = [getattr(identity, name) for name in Identity.__slots__]
    assert pair.refresh_token not in values
    assert account.password_hash not in values


def test_cookie_token_takes_priority(guard, tokens, account):
    token = tokens.issue_access_token(account)
    request = fake_request({"accessToken": "garbage"}, {"Authorization": f"Bearer {token}"})
    with pytest.raises(InvalidTokenError):
        guard.authenticate(request)


def test_refresh_token_is_not_an_access_token(guard, tokens, account):
    token = tokens.issue_refresh_token(account)
    with pytest.raises(Unauthorized):
        guard.authenticate(fake_request({"accessToken": token}))


def test_deleted_account_is_unauthorized(guard, tokens, store, account):
    token = tokens.issue_access_token(account)
    storage = store.storage
    storage.delete(store.find_by_id(account.id))
    storage.save()
    with pytest.raises(Unauthorized) as exc:
        guard.authenticate(fake_request({"accessToken": token}))
    assert exc.value.message == "Invalid access token"
