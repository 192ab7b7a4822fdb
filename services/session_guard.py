"""Resolve the caller of a request from its access token."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from models.account_store import AccountStore
from models.user import SENSITIVE_FIELDS
from services.tokens import TokenService
from utils.exceptions import Unauthorized

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


class Identity:
    """Sanitized, request-scoped view of the authenticated account.

    Built from a projection that excludes the password hash and the refresh
    token, so neither can reach a handler through this object.
    """

    __slots__ = (
        "id",
        "username",
        "email",
        "full_name",
        "avatar",
        "cover_image",
        "created_at",
        "updated_at",
    )

    def __init__(
        self,
        id: str,
        username: str,
        email: str,
        full_name: str,
        avatar: Optional[str] = None,
        cover_image: Optional[str] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.username = username
        self.email = email
        self.full_name = full_name
        self.avatar = avatar
        self.cover_image = cover_image
        self.created_at = created_at
        self.updated_at = updated_at

    @classmethod
    def from_row(cls, row: dict) -> "Identity":
        return cls(**{k: row.get(k) for k in cls.__slots__})

    def __repr__(self):
        return f"<Identity {self.username} ({self.id})>"


def extract_token(request) -> Optional[str]:
    """Cookie first, then `Authorization: Bearer <token>`; None when absent."""
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    auth = request.headers.get("Authorization") or ""
    if auth.startswith("Bearer "):
        return auth[len("Bearer "):].strip() or None
    return None


class SessionGuard:
    def __init__(self, store: AccountStore, tokens: TokenService):
        self.store = store
        self.tokens = tokens

    def authenticate(self, request) -> Identity:
        token = extract_token(request)
        if not token:
            raise Unauthorized("Unauthorized request")
        claims = self.tokens.verify_access(token)
        row = self.store.find_by_id(claims.get("sub"), exclude=SENSITIVE_FIELDS)
        if row is None:
            raise Unauthorized("Invalid access token")
        return Identity.from_row(row)
