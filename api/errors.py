import logging

from flask import jsonify, current_app, request
from werkzeug.exceptions import HTTPException, NotFound
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError

from utils.exceptions import ApiError

logger = logging.getLogger(__name__)


def error_response(message: str, status: int, error: str | None = None, errors: list | None = None,
                   details: dict | None = None):
    payload = {"success": False, "message": message}
    if error:
        payload["error"] = error
    if errors:
        payload["errors"] = errors
    if details:
        payload["details"] = details
    return jsonify(payload), status


def _flatten_validation_messages(messages) -> list:
    """marshmallow nests messages by field; clients get a flat list."""
    out = []
    if isinstance(messages, dict):
        for field, msgs in messages.items():
            if isinstance(msgs, dict):
                out.extend(_flatten_validation_messages(msgs))
                continue
            for msg in msgs if isinstance(msgs, list) else [msgs]:
                out.append({"field": field, "message": msg})
    else:
        for msg in messages:
            out.append({"field": "unknown", "message": msg})
    return out


def register_error_handlers(app):
    # Auth core and controllers raise ApiError subclasses
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        if err.status_code >= 500:
            logger.error("%s %s failed: %s (%s)", request.method, request.path, err.message, err.detail)
        return error_response(err.message, err.status_code, error=err.error)

    # 404 Not Found
    @app.errorhandler(404)
    def not_found(e):
        message = getattr(e, "description", None)
        if not message or message == NotFound.description:
            message = f"Route {request.path} not found"
        return error_response(message, 404, error="NOT_FOUND")

    # 405 Method Not Allowed
    @app.errorhandler(405)
    def method_not_allowed(e):
        return error_response(f"Method {request.method} not allowed on {request.path}", 405,
                              error="METHOD_NOT_ALLOWED")

    # Marshmallow validation errors
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return error_response("Validation failed", 400, error="VALIDATION_ERROR",
                              errors=_flatten_validation_messages(err.messages))

    # Unique constraints lost to a concurrent insert
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        logger.warning("Integrity error on %s: %s", request.path, getattr(err, "orig", err))
        message = str(getattr(err, "orig", err)).lower()
        if "unique" in message:
            return error_response("Resource already exists", 409, error="DUPLICATE_FIELD")
        return error_response("Integrity error", 400, error="BAD_REQUEST")

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response(err.description, err.code or 400, error=err.name.upper().replace(" ", "_"))

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception on %s %s", request.method, request.path, exc_info=err)
        details = None
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("An unexpected error occurred", 500, error="INTERNAL_ERROR", details=details)
