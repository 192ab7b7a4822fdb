"""
Access/refresh token lifecycle.

- Access token: short-lived JWT signed with the access secret, sent per request.
- Refresh token: long-lived JWT signed with a distinct refresh secret. The
  latest one is stored verbatim on the account; issuing a new one overwrites
  it, so every earlier refresh token stops being accepted.
"""
from __future__ import annotations

import hmac
import logging
from datetime import timedelta
from typing import Any, Dict, NamedTuple

from sqlalchemy.exc import SQLAlchemyError

from models.account_store import AccountStore
from utils.exceptions import TokenIssuanceError, Unauthorized
from utils.security import decode_token, encode_token

logger = logging.getLogger(__name__)


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str


class TokenService:
    def __init__(
        self,
        store: AccountStore,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        algorithm: str = "HS256",
        issuer: str | None = None,
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("access and refresh secrets are required")
        if access_secret == refresh_secret:
            raise ValueError("access and refresh secrets must differ")
        self.store = store
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.algorithm = algorithm
        self.issuer = issuer

    @classmethod
    def from_config(cls, store: AccountStore, config) -> "TokenService":
        return cls(
            store,
            access_secret=config["ACCESS_TOKEN_SECRET"],
            refresh_secret=config["REFRESH_TOKEN_SECRET"],
            access_ttl=config["ACCESS_TOKEN_EXPIRES"],
            refresh_ttl=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER"),
        )

    def issue_access_token(self, account) -> str:
        return encode_token(
            account.id, "access", self.access_secret, self.access_ttl, self.algorithm, self.issuer
        )

    def issue_refresh_token(self, account) -> str:
        return encode_token(
            account.id, "refresh", self.refresh_secret, self.refresh_ttl, self.algorithm, self.issuer
        )

    def issue_and_persist_pair(self, account) -> TokenPair:
        """Mint a fresh pair and store its refresh half on the account."""
        access_token = self.issue_access_token(account)
        refresh_token = self.issue_refresh_token(account)
        try:
            updated = self.store.update_by_id(
                account.id, {"refresh_token": refresh_token}, validate=False
            )
        except SQLAlchemyError as exc:
            logger.exception("Persisting refresh token failed for account %s", account.id)
            raise TokenIssuanceError() from exc
        if updated is None:
            raise TokenIssuanceError()
        return TokenPair(access_token, refresh_token)

    def verify(self, token: str, secret: str) -> Dict[str, Any]:
        """Check signature and expiry; raises InvalidTokenError."""
        return decode_token(token, secret, self.algorithm, self.issuer)

    def verify_access(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.access_secret)

    def verify_refresh(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.refresh_secret)

    def rotate(self, incoming_refresh_token: str) -> TokenPair:
        """
        Exchange the account's current refresh token for a new pair.

        The incoming token must match the stored one exactly; a token that
        has been superseded by a later rotation or cleared by logout is
        rejected even if its signature and expiry are still valid.
        """
        claims = self.verify_refresh(incoming_refresh_token)
        account = self.store.find_by_id(claims.get("sub"))
        if account is None:
            raise Unauthorized("Invalid refresh token")
        stored = account.refresh_token
        if not stored or not hmac.compare_digest(
            stored.encode("utf-8"), incoming_refresh_token.encode("utf-8")
        ):
            logger.info("Rejected stale refresh token for account %s", account.id)
            raise Unauthorized("Refresh token is expired or used")
        pair = self.issue_and_persist_pair(account)
        logger.info("Rotated tokens for account %s", account.id)
        return pair
