"""
Error kinds raised by the authentication core.
Each carries an HTTP status and a machine-readable code; api.errors turns
them into the JSON envelope.
"""
from __future__ import annotations


class ApiError(Exception):
    status_code = 400
    error = "BAD_REQUEST"
    message = "Bad request"

    def __init__(self, message: str | None = None, status_code: int | None = None, error: str | None = None,
                 detail: str | None = None):
        super().__init__(message or self.message)
        # server-side only, never sent to the client
        self.detail = detail
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error is not None:
            self.error = error


class InvalidCredentials(ApiError):
    status_code = 401
    error = "INVALID_CREDENTIALS"
    message = "Invalid credentials"


class Conflict(ApiError):
    status_code = 409
    error = "CONFLICT"
    message = "Resource already exists"


class Unauthenticated(ApiError):
    status_code = 401
    error = "NO_TOKEN"
    message = "Access denied. No token provided."


class TokenExpired(ApiError):
    status_code = 401
    error = "TOKEN_EXPIRED"
    message = "Token expired. Please refresh your token."


class TokenInvalid(ApiError):
    status_code = 401
    error = "INVALID_TOKEN"
    message = "Invalid token."


class PrincipalNotFound(ApiError):
    status_code = 401
    error = "USER_NOT_FOUND"
    message = "Invalid token. User not found."


class InternalFailure(ApiError):
    status_code = 500
    error = "INTERNAL_ERROR"
    message = "Internal server error during authentication."
