"""
Account operations: register, login, logout, refresh, password and profile
changes. Each one composes the credential store, the token service and, for
images, the media uploader. Nothing here knows about Flask; the blueprint in
api/users.py handles request parsing, cookies and temp files.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from models.account_store import AccountStore
from models.schemas.user import (
    REGISTER_FIELDS,
    ChangePasswordSchema,
    UserLoginSchema,
    UserRegisterSchema,
    UserUpdateSchema,
)
from models.user import SENSITIVE_FIELDS
from services.session_guard import Identity
from services.tokens import TokenPair, TokenService
from utils.exceptions import (
    ApiError,
    BadRequest,
    Conflict,
    InternalError,
    NotFound,
    Unauthorized,
)

logger = logging.getLogger(__name__)

user_register_schema = UserRegisterSchema()
user_login_schema = UserLoginSchema()
change_password_schema = ChangePasswordSchema()
user_update_schema = UserUpdateSchema()

# Human-readable labels for the two image slots
IMAGE_LABELS = {"avatar": "Avatar", "cover_image": "Cover image"}


def _blank(value) -> bool:
    return value is None or not str(value).strip()


class AccountService:
    def __init__(self, store: AccountStore, tokens: TokenService, uploader):
        self.store = store
        self.tokens = tokens
        self.uploader = uploader

    def _sanitized(self, account_id: str) -> Optional[Dict[str, Any]]:
        return self.store.find_by_id(account_id, exclude=SENSITIVE_FIELDS)

    def _upload_url(self, local_path: Optional[str]) -> Optional[str]:
        if not local_path:
            return None
        result = self.uploader.upload(local_path)
        if not result:
            return None
        return result.get("url") or result.get("secure_url")

    def register(
        self,
        payload: Mapping[str, Any],
        avatar_path: Optional[str] = None,
        cover_image_path: Optional[str] = None,
    ) -> Dict[str, Any]:
        if any(_blank(payload.get(field)) for field in REGISTER_FIELDS):
            raise BadRequest("All fields are required")
        data = user_register_schema.load(payload)

        if self.store.find_by_username_or_email(username=data["username"], email=data["email"]):
            raise Conflict("User with this username or email already exists")

        avatar_url = self._upload_url(avatar_path)
        if not avatar_url:
            raise BadRequest("Avatar file is required")
        cover_image_url = self._upload_url(cover_image_path) or ""

        user = self.store.create(
            username=data["username"],
            email=data["email"],
            full_name=data["full_name"],
            password=data["password"],
            avatar=avatar_url,
            cover_image=cover_image_url,
        )
        created = self._sanitized(user.id)
        if created is None:
            raise InternalError("Something went wrong while registering the user")
        logger.info("Registered account %s", user.id)
        return created

    def login(self, payload: Mapping[str, Any]) -> Tuple[Dict[str, Any], TokenPair]:
        data = user_login_schema.load(payload)
        if not data.get("username") and not data.get("email"):
            raise BadRequest("Username or email is required")

        user = self.store.find_by_username_or_email(username=data.get("username"), email=data.get("email"))
        if user is None:
            raise NotFound("User does not exist")
        if not user.check_password(data.get("password") or ""):
            raise Unauthorized("Invalid user credentials")

        pair = self.tokens.issue_and_persist_pair(user)
        logger.info("Account %s logged in", user.id)
        return self._sanitized(user.id), pair

    def logout(self, identity: Identity) -> None:
        self.store.update_by_id(identity.id, {"refresh_token": None}, validate=False, new=False)
        logger.info("Account %s logged out", identity.id)

    def refresh(self, incoming_refresh_token: Optional[str]) -> TokenPair:
        if _blank(incoming_refresh_token):
            raise Unauthorized("Unauthorized request")
        try:
            return self.tokens.rotate(incoming_refresh_token)
        except ApiError as exc:
            raise Unauthorized(exc.message) from exc

    def change_password(self, identity: Identity, payload: Mapping[str, Any]) -> None:
        data = change_password_schema.load(payload)
        user = self.store.find_by_id(identity.id)
        if user is None:
            raise Unauthorized("Invalid access token")
        if not user.check_password(data["old_password"]):
            raise BadRequest("Invalid old password")
        # hashed by User.password on assignment
        self.store.update_by_id(user.id, {"password": data["new_password"]}, validate=False, new=False)
        logger.info("Account %s changed password", user.id)

    def current_user(self, identity: Identity) -> Identity:
        return identity

    def update_account_details(self, identity: Identity, payload: Mapping[str, Any]) -> Dict[str, Any]:
        if _blank(payload.get("fullName")) and _blank(payload.get("email")):
            raise BadRequest("At least one of fullName or email is required")
        changes = user_update_schema.load(
            {k: v for k, v in payload.items() if k in ("fullName", "email") and not _blank(v)}
        )
        email = changes.get("email")
        if email:
            other = self.store.find_by_username_or_email(email=email)
            if other is not None and other.id != identity.id:
                raise Conflict("Email is already in use")
        self.store.update_by_id(identity.id, changes)
        return self._sanitized(identity.id)

    def _update_image(self, identity: Identity, field: str, local_path: Optional[str]) -> Dict[str, Any]:
        label = IMAGE_LABELS[field]
        if not local_path:
            raise BadRequest(f"{label} file is missing")
        url = self._upload_url(local_path)
        if not url:
            raise BadRequest(f"Error while uploading {label.lower()}")
        self.store.update_by_id(identity.id, {field: url})
        return self._sanitized(identity.id)

    def update_avatar(self, identity: Identity, local_path: Optional[str]) -> Dict[str, Any]:
        return self._update_image(identity, "avatar", local_path)

    def update_cover_image(self, identity: Identity, local_path: Optional[str]) -> Dict[str, Any]:
        return self._update_image(identity, "cover_image", local_path)
