"""Domain errors raised by the services and rendered as JSON by the app."""

from __future__ import annotations


class ApiError(Exception):
    """Base class for every error that crosses the HTTP boundary."""

    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# ── 400 ──────────────────────────────────────────────────

class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request"


class InvalidStatus(ApiError):
    status_code = 400
    default_message = "Invalid truck status"


# ── 401 ──────────────────────────────────────────────────

class AuthenticationError(ApiError):
    """Any failure that leaves the caller unauthenticated."""

    status_code = 401
    default_message = "Not authenticated"


class UnknownUser(AuthenticationError):
    default_message = "This email address is not registered. Contact your administrator."


class NoPendingCode(AuthenticationError):
    default_message = "No pending code for this email. Please start again."


class CodeExpired(AuthenticationError):
    default_message = "The code has expired. Please request a new one."


class CodeMismatch(AuthenticationError):
    default_message = "Incorrect code. Please try again."


class MissingCredential(AuthenticationError):
    default_message = "Not authenticated"


class InvalidSession(AuthenticationError):
    default_message = "Invalid session"


class SessionExpired(AuthenticationError):
    default_message = "Session expired"


class UserNotFound(AuthenticationError):
    default_message = "User not found"


# ── 403 / 404 / 409 ──────────────────────────────────────

class Forbidden(ApiError):
    status_code = 403
    default_message = "You are not allowed to perform this action"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Resource already exists"
