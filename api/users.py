"""
Users blueprint:
- POST  /users/register
- POST  /users/login
- POST  /users/logout
- POST  /users/refresh-token
- POST  /users/change-password
- GET   /users/me
- PATCH /users/me
- PATCH /users/avatar
- PATCH /users/cover-image

The handlers only translate HTTP to account operations: they parse bodies,
stash uploaded files in a temp folder, set or clear the token cookies and wrap
results in the success envelope. Failures are typed errors rendered by
api/errors.py.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, current_app

from models.schemas.user import UserOutSchema
from services.session_guard import ACCESS_COOKIE, REFRESH_COOKIE
from utils.decorators import login_required
from utils.media import discard, stash_upload

bp = Blueprint("users", __name__)

user_out_schema = UserOutSchema()


def _accounts():
    return current_app.extensions["accounts"]


def _payload() -> dict:
    """JSON body if there is one, otherwise form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def api_response(data, message: str, status: int = 200):
    return jsonify({"success": True, "data": data, "message": message}), status


def _set_token_cookies(resp, pair):
    cfg = current_app.config
    options = {
        "httponly": True,
        "secure": cfg.get("COOKIE_SECURE", True),
        "samesite": cfg.get("COOKIE_SAMESITE"),
        "path": "/",
    }
    resp.set_cookie(
        ACCESS_COOKIE,
        pair.access_token,
        max_age=int(cfg["ACCESS_TOKEN_EXPIRES"].total_seconds()),
        **options,
    )
    resp.set_cookie(
        REFRESH_COOKIE,
        pair.refresh_token,
        max_age=int(cfg["REFRESH_TOKEN_EXPIRES"].total_seconds()),
        **options,
    )
    return resp


def _clear_token_cookies(resp):
    cfg = current_app.config
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        resp.delete_cookie(
            name,
            path="/",
            httponly=True,
            secure=cfg.get("COOKIE_SECURE", True),
            samesite=cfg.get("COOKIE_SAMESITE"),
        )
    return resp


def _stash(field: str):
    return stash_upload(request.files.get(field), current_app.config["UPLOAD_FOLDER"])


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Users
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: username, type: string, required: true }
      - { in: formData, name: email, type: string, required: true }
      - { in: formData, name: fullName, type: string, required: true }
      - { in: formData, name: password, type: string, required: true }
      - { in: formData, name: avatar, type: file, required: true }
      - { in: formData, name: coverImage, type: file, required: false }
    responses:
      201:
        description: Created
      400:
        description: Missing field or avatar
      409:
        description: Username or email already taken
    """
    avatar_path = _stash("avatar")
    cover_image_path = _stash("coverImage")
    try:
        user = _accounts().register(_payload(), avatar_path, cover_image_path)
    finally:
        discard(avatar_path)
        discard(cover_image_path)
    return api_response(user_out_schema.dump(user), "User registered successfully", 201)


@bp.post("/login")
def login():
    """
    Login with username or email; sets token cookies and returns both tokens.
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             username: { type: string }
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns user and tokens)
      401:
        description: Invalid credentials
      404:
        description: User does not exist
    """
    user, pair = _accounts().login(_payload())
    resp, status = api_response(
        {
            "user": user_out_schema.dump(user),
            "accessToken": pair.access_token,
            "refreshToken": pair.refresh_token,
        },
        "User logged in successfully",
    )
    _set_token_cookies(resp, pair)
    return resp, status


@bp.post("/logout")
@login_required()
def logout(identity):
    """
    Logout: clears the stored refresh token and both cookies.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    _accounts().logout(identity)
    resp, status = api_response({}, "User logged out")
    _clear_token_cookies(resp)
    return resp, status


@bp.post("/refresh-token")
def refresh_token():
    """
    Exchange the current refresh token (cookie or body) for a new pair.
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: New tokens issued
      401:
        description: Missing, invalid, expired or already used refresh token
    """
    incoming = request.cookies.get(REFRESH_COOKIE) or _payload().get("refreshToken")
    pair = _accounts().refresh(incoming)
    resp, status = api_response(
        {"accessToken": pair.access_token, "refreshToken": pair.refresh_token},
        "Access token refreshed",
    )
    _set_token_cookies(resp, pair)
    return resp, status


@bp.post("/change-password")
@login_required()
def change_password(identity):
    """
    Change the caller's password.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             oldPassword: { type: string }
             newPassword: { type: string }
    responses:
      200:
        description: Password changed
      400:
        description: Invalid old password
    """
    _accounts().change_password(identity, _payload())
    return api_response({}, "Password changed successfully")


@bp.get("/me")
@login_required()
def me(identity):
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    user = _accounts().current_user(identity)
    return api_response(user_out_schema.dump(user), "Current user fetched successfully")


@bp.patch("/me")
@login_required()
def update_me(identity):
    """
    Update full name and/or email.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             fullName: { type: string }
             email: { type: string }
    responses:
      200:
        description: Updated
      400:
        description: Nothing to update or invalid input
      409:
        description: Email already in use
    """
    user = _accounts().update_account_details(identity, _payload())
    return api_response(user_out_schema.dump(user), "Account details updated successfully")


@bp.patch("/avatar")
@login_required()
def update_avatar(identity):
    """
    Replace the avatar image.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: avatar, type: file, required: true }
    responses:
      200:
        description: Updated
      400:
        description: File missing or upload failed
    """
    path = _stash("avatar")
    try:
        user = _accounts().update_avatar(identity, path)
    finally:
        discard(path)
    return api_response(user_out_schema.dump(user), "Avatar updated successfully")


@bp.patch("/cover-image")
@login_required()
def update_cover_image(identity):
    """
    Replace the cover image.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: coverImage, type: file, required: true }
    responses:
      200:
        description: Updated
      400:
        description: File missing or upload failed
    """
    path = _stash("coverImage")
    try:
        user = _accounts().update_cover_image(identity, path)
    finally:
        discard(path)
    return api_response(user_out_schema.dump(user), "Cover image updated successfully")
