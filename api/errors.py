from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
import logging

from utils.exceptions import ApiError, BadRequest, Conflict, InternalError

logger = logging.getLogger(__name__)

# Werkzeug status codes -> envelope error codes
HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    413: "PAYLOAD_TOO_LARGE",
    415: "UNSUPPORTED_MEDIA_TYPE",
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"success": False, "error": error, "message": message}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def _rollback():
    # A failed flush leaves the scoped session unusable until rolled back
    storage = current_app.extensions.get("storage")
    if storage is not None:
        storage.rollback()


def register_error_handlers(app):
    # Typed account-service errors carry their own status and message
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        if isinstance(err, InternalError):
            logger.error("%s: %s", err.__class__.__name__, err.message, exc_info=err.__cause__ or err)
        elif current_app and current_app.debug:
            logger.info("%s (%s): %s", err.__class__.__name__, err.status_code, err.message)
        return error_response(err.error, err.message, err.status_code)

    # Marshmallow validation errors are bad input
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        messages = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
        return error_response(BadRequest.error, "Invalid input", BadRequest.status_code, details=messages)

    # Integrity errors (unique constraints lost to a concurrent writer)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        _rollback()
        lower_msg = str(getattr(err, "orig", err)).lower()
        logger.warning("Integrity error: %s", lower_msg)
        if "unique" in lower_msg:
            return error_response(Conflict.error, "User with this username or email already exists", Conflict.status_code)
        return error_response(BadRequest.error, "Integrity error.", BadRequest.status_code)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        return error_response(HTTP_ERROR_CODES.get(status, "HTTP_ERROR"), err.description or err.name, status)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        _rollback()
        return error_response(InternalError.error, InternalError.default_message, InternalError.status_code)
