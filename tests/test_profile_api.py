"""Password change and profile updates (details, avatar, cover image)."""

from conftest import assert_sanitized, bearer, image

ME_URL = "/api/v1/users/me"
CHANGE_PASSWORD_URL = "/api/v1/users/change-password"
AVATAR_URL = "/api/v1/users/avatar"
COVER_URL = "/api/v1/users/cover-image"


# ═══════════════════════════════════════════════════════════
# Change password
# ═══════════════════════════════════════════════════════════


def test_change_password(session_tokens, client, login):
    resp = client.post(
        CHANGE_PASSWORD_URL,
        json={"oldPassword": "p@ss1234", "newPassword": "n3w-passw0rd"},
        headers=bearer(session_tokens["accessToken"]),
    )
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True

    assert login(password="p@ss1234").status_code == 401
    assert login(password="n3w-passw0rd").status_code == 200


def test_change_password_stores_hash(session_tokens, client, store):
    client.post(
        CHANGE_PASSWORD_URL,
        json={"oldPassword": "p@ss1234", "newPassword": "n3w-passw0rd"},
        headers=bearer(session_tokens["accessToken"]),
    )
    user = store.find_by_username_or_email(username="alice")
    assert user.password_hash != "n3w-passw0rd"
    assert user.check_password("n3w-passw0rd")


def test_change_password_keeps_session(session_tokens, client, store):
    client.post(
        CHANGE_PASSWORD_URL,
        json={"oldPassword": "p@ss1234", "newPassword": "n3w-passw0rd"},
        headers=bearer(session_tokens["accessToken"]),
    )
    user = store.find_by_username_or_email(username="alice")
    assert user.refresh_token == session_tokens["refreshToken"]


def test_change_password_wrong_old_password(session_tokens, client, login):
    resp = client.post(
        CHANGE_PASSWORD_URL,
        json={"oldPassword": "wrong", "newPassword": "n3w-passw0rd"},
        headers=bearer(session_tokens["accessToken"]),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid old password"
    assert login(password="p@ss1234").status_code == 200


def test_change_password_requires_both_fields(session_tokens, client):
    resp = client.post(
        CHANGE_PASSWORD_URL,
        json={"oldPassword": "p@ss1234"},
        headers=bearer(session_tokens["accessToken"]),
    )
    assert resp.status_code == 400
    assert "newPassword" in resp.get_json()["details"]


def test_change_password_requires_authentication(client):
    resp = client.post(CHANGE_PASSWORD_URL, json={"oldPassword": "a", "newPassword": "b"})
    assert resp.status_code == 401


# ═══════════════════════════════════════════════════════════
# Account details
# ═══════════════════════════════════════════════════════════


def test_update_full_name(session_tokens, client):
    resp = client.patch(ME_URL, json={"fullName": "  Alice Liddell "}, headers=bearer(session_tokens["accessToken"]))
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["fullName"] == "Alice Liddell"
    assert data["email"] == "alice@x.com"
    assert_sanitized(data)


def test_update_email(session_tokens, client):
    resp = client.patch(ME_URL, json={"email": "Liddell@X.com"}, headers=bearer(session_tokens["accessToken"]))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["email"] == "liddell@x.com"


def test_update_email_taken_by_other_account(session_tokens, client, register):
    assert register(username="bob", email="bob@x.com").status_code == 201
    resp = client.patch(ME_URL, json={"email": "bob@x.com"}, headers=bearer(session_tokens["accessToken"]))
    assert resp.status_code == 409


def test_update_with_own_email_is_allowed(session_tokens, client):
    resp = client.patch(ME_URL, json={"email": "alice@x.com"}, headers=bearer(session_tokens["accessToken"]))
    assert resp.status_code == 200


def test_update_requires_a_field(session_tokens, client):
    resp = client.patch(ME_URL, json={"fullName": "  "}, headers=bearer(session_tokens["accessToken"]))
    assert resp.status_code == 400


def test_update_rejects_invalid_email(session_tokens, client):
    resp = client.patch(ME_URL, json={"email": "nope"}, headers=bearer(session_tokens["accessToken"]))
    assert resp.status_code == 400


# ═══════════════════════════════════════════════════════════
# Images
# ═══════════════════════════════════════════════════════════


def test_update_avatar(session_tokens, client):
    resp = client.patch(
        AVATAR_URL,
        data={"avatar": image("new-face.png")},
        content_type="multipart/form-data",
        headers=bearer(session_tokens["accessToken"]),
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["avatar"].endswith("new-face.png")
    assert_sanitized(data)


def test_update_avatar_requires_file(session_tokens, client):
    resp = client.patch(
        AVATAR_URL,
        data={},
        content_type="multipart/form-data",
        headers=bearer(session_tokens["accessToken"]),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Avatar file is missing"


def test_update_avatar_upload_failure(session_tokens, client, uploader, store):
    before = store.find_by_username_or_email(username="alice").avatar
    uploader.fail = True
    resp = client.patch(
        AVATAR_URL,
        data={"avatar": image("new-face.png")},
        content_type="multipart/form-data",
        headers=bearer(session_tokens["accessToken"]),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Error while uploading avatar"
    assert store.find_by_username_or_email(username="alice").avatar == before


def test_update_cover_image(session_tokens, client):
    resp = client.patch(
        COVER_URL,
        data={"coverImage": image("banner.jpg")},
        content_type="multipart/form-data",
        headers=bearer(session_tokens["accessToken"]),
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"]["coverImage"].endswith("banner.jpg")


def test_update_cover_image_requires_file(session_tokens, client):
    resp = client.patch(
        COVER_URL,
        data={"avatar": image("wrong-field.png")},
        content_type="multipart/form-data",
        headers=bearer(session_tokens["accessToken"]),
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Cover image file is missing"
