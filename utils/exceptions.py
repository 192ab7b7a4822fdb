"""
Typed API errors.

Every failure an account operation or the session guard can raise is one of
these classes. The HTTP layer (api/errors.py) matches them explicitly and
renders the uniform error envelope with the class' status code.
"""
from __future__ import annotations


class ApiError(Exception):
    status_code = 500
    error = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(ApiError):
    status_code = 400
    error = "BAD_REQUEST"
    default_message = "Bad request"


class Unauthorized(ApiError):
    status_code = 401
    error = "UNAUTHORIZED"
    default_message = "Unauthorized request"


class InvalidTokenError(Unauthorized):
    """Signature, format or expiry check of a JWT failed."""

    def __init__(self, message: str | None = None, expired: bool = False):
        self.expired = expired
        super().__init__(message or ("Token expired" if expired else "Invalid token"))


class NotFound(ApiError):
    status_code = 404
    error = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(ApiError):
    status_code = 409
    error = "CONFLICT"
    default_message = "Conflict"


class PayloadTooLarge(ApiError):
    status_code = 413
    error = "PAYLOAD_TOO_LARGE"
    default_message = "Request body too large"


class InternalError(ApiError):
    pass


class TokenIssuanceError(InternalError):
    default_message = "Something went wrong while generating access and refresh tokens"
