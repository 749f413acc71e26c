# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error taxonomy shared by the domain services and the API layer.

Every domain operation converts its failures into one of these errors
before returning. The API layer renders them into the response envelope
with the matching HTTP status.

Status mapping:
    ValidationError      400  validation_error
    AuthenticationError  401  unauthorized
    AuthorizationError   403  forbidden
    NotFoundError        404  not_found
    ConflictError        409  conflict
    RateLimitedError     429  rate_limited
    UnexpectedError      500  server_error
"""


class LMSError(Exception):
    """Base class for errors mapped to HTTP responses.

    Attributes:
        message: Human-readable message returned to the caller.
        status_code: HTTP status code for the response.
        error_code: Stable machine-readable error code.
    """

    status_code: int = 400
    error_code: str = "validation_error"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error description.
            status_code: Optional override of the class status code.
        """
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(LMSError):
    """Malformed or missing input (400)."""

    status_code = 400
    error_code = "validation_error"


class AuthenticationError(LMSError):
    """Missing, invalid or expired credentials (401)."""

    status_code = 401
    error_code = "unauthorized"


class AuthorizationError(LMSError):
    """Authenticated but not permitted (403)."""

    status_code = 403
    error_code = "forbidden"


class NotFoundError(LMSError):
    """Resource absent or outside the caller's academy (404)."""

    status_code = 404
    error_code = "not_found"


class ConflictError(LMSError):
    """Duplicate email or a referential guard blocking a delete (409)."""

    status_code = 409
    error_code = "conflict"


class RateLimitedError(LMSError):
    """Rate limit exceeded (429)."""

    status_code = 429
    error_code = "rate_limited"


class UnexpectedError(LMSError):
    """Any other failure (500). The message is safe to show to callers."""

    status_code = 500
    error_code = "server_error"


__all__ = [
    "LMSError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitedError",
    "UnexpectedError",
]
