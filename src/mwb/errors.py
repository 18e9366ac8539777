"""API error taxonomy.

Services raise these directly; ``mwb.middleware.error_handler`` renders every
one of them as ``{"detail": ...}`` with the class's status code.
"""

from __future__ import annotations


class ApiError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(ApiError):
    status_code = 400
    default_detail = "Invalid request body"


class Unauthenticated(ApiError):
    status_code = 401
    default_detail = "Not authenticated"


class SessionNotFound(Unauthenticated):
    default_detail = "Session not found or expired"


class SessionExpired(Unauthenticated):
    default_detail = "Session not found or expired"


class UserNotFound(Unauthenticated):
    default_detail = "User cannot be found"


class ChallengeInvalid(Unauthenticated):
    """Any challenge failure. Subclasses exist for logging and tests only;
    the client always sees the same message."""

    default_detail = "Invalid or expired challenge"


class ChallengeNotFound(ChallengeInvalid):
    pass


class ChallengeExpired(ChallengeInvalid):
    pass


class ChallengeScopeMismatch(ChallengeInvalid):
    pass


class ChallengeAlreadyUsed(ChallengeInvalid):
    pass


class SignatureInvalid(ChallengeInvalid):
    pass


class Forbidden(ApiError):
    status_code = 403
    default_detail = "Cannot access other user information"


class NotFound(ApiError):
    status_code = 404
    default_detail = "Not found"


class MethodNotSupported(ApiError):
    status_code = 405
    default_detail = "Method not allowed"


class Conflict(ApiError):
    status_code = 409
    default_detail = "Resource already exists"


class InternalError(ApiError):
    status_code = 500
    default_detail = "Internal server error"
