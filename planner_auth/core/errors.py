"""Error taxonomy for the auth subsystem and its translation to the client envelope.

Every failure that reaches the client is rendered as ``{"exception": "<Kind>"}``
with the status from ERROR_STATUS. Business-rule violations are 400,
authentication failures are 401. Nothing else about the failure (store
errors, signature internals, stack traces) is sent.
"""

import logging

from fastapi import status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

ERROR_ENVELOPE_FIELD = "exception"


class AuthServiceError(Exception):
    """Base exception for every error this service reports to clients."""

    kind = "InternalError"

    def __init__(self, message: str = "Internal error") -> None:
        self.message = message
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS[self.kind]


# Business-rule errors (400)


class DuplicateAccountError(AuthServiceError):
    """Raised when the username or email is already registered."""

    kind = "DuplicateAccount"

    def __init__(self, message: str = "User or email already exists") -> None:
        super().__init__(message)


class RoleNotFoundError(AuthServiceError):
    """Raised when the default role is missing from the store (deployment defect)."""

    kind = "RoleNotFound"

    def __init__(self, message: str = "Default role not found") -> None:
        super().__init__(message)


class ActivationNotFoundError(AuthServiceError):
    """Raised when no activation record matches the given token or account."""

    kind = "ActivationNotFound"

    def __init__(self, message: str = "Activation record not found") -> None:
        super().__init__(message)


class AlreadyActivatedError(AuthServiceError):
    """Raised when activating (or re-sending activation for) an active account."""

    kind = "AlreadyActivated"

    def __init__(self, message: str = "User already activated") -> None:
        super().__init__(message)


class AccountNotFoundError(AuthServiceError):
    """Raised when no account matches a username or email."""

    kind = "AccountNotFound"

    def __init__(self, message: str = "Account not found") -> None:
        super().__init__(message)


class InvalidRequestError(AuthServiceError):
    """Raised when a request body fails validation."""

    kind = "InvalidRequest"

    def __init__(self, message: str = "Invalid request") -> None:
        super().__init__(message)


# Authentication errors (401)


class BadCredentialsError(AuthServiceError):
    """Raised on login with an unknown identifier or a wrong password."""

    kind = "BadCredentials"

    def __init__(self, message: str = "Bad credentials") -> None:
        super().__init__(message)


class AccountDisabledError(AuthServiceError):
    """Raised on login with correct credentials for an account not yet activated."""

    kind = "AccountDisabled"

    def __init__(self, message: str = "User disabled") -> None:
        super().__init__(message)


class TokenMissingError(AuthServiceError):
    """Raised when a protected route is called without a token."""

    kind = "TokenMissing"

    def __init__(self, message: str = "Token not found") -> None:
        super().__init__(message)


class TokenInvalidError(AuthServiceError):
    """Raised when a token is malformed, expired, unsupported or tampered with."""

    kind = "TokenInvalid"

    def __init__(self, message: str = "Token validation failed") -> None:
        super().__init__(message)


# Authorization (403)


class AccessDeniedError(AuthServiceError):
    """Raised when an authenticated identity lacks the authority a route requires."""

    kind = "AccessDenied"

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


# Routing (404, 405)


class NotFoundError(AuthServiceError):
    """Raised when no route matches the request path."""

    kind = "NotFound"

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message)


class MethodNotAllowedError(AuthServiceError):
    """Raised when the path exists but not for the request method."""

    kind = "MethodNotAllowed"

    def __init__(self, message: str = "Method not allowed") -> None:
        super().__init__(message)


ERROR_STATUS: dict[str, int] = {
    DuplicateAccountError.kind: status.HTTP_400_BAD_REQUEST,
    RoleNotFoundError.kind: status.HTTP_400_BAD_REQUEST,
    ActivationNotFoundError.kind: status.HTTP_400_BAD_REQUEST,
    AlreadyActivatedError.kind: status.HTTP_400_BAD_REQUEST,
    AccountNotFoundError.kind: status.HTTP_400_BAD_REQUEST,
    InvalidRequestError.kind: status.HTTP_400_BAD_REQUEST,
    BadCredentialsError.kind: status.HTTP_401_UNAUTHORIZED,
    AccountDisabledError.kind: status.HTTP_401_UNAUTHORIZED,
    TokenMissingError.kind: status.HTTP_401_UNAUTHORIZED,
    TokenInvalidError.kind: status.HTTP_401_UNAUTHORIZED,
    AccessDeniedError.kind: status.HTTP_403_FORBIDDEN,
    NotFoundError.kind: status.HTTP_404_NOT_FOUND,
    MethodNotAllowedError.kind: status.HTTP_405_METHOD_NOT_ALLOWED,
    AuthServiceError.kind: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(kind: str) -> JSONResponse:
    """Build the uniform error envelope for an error kind."""
    return JSONResponse(
        status_code=ERROR_STATUS[kind],
        content={ERROR_ENVELOPE_FIELD: kind},
    )


def translate_error(exc: Exception) -> JSONResponse:
    """
    Convert any exception into the client envelope.
    Known errors keep their kind; anything else becomes InternalError and is logged with its traceback.
    """
    if isinstance(exc, AuthServiceError):
        if ERROR_STATUS[exc.kind] >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("Request failed: %s", exc.message)
        return error_response(exc.kind)
    logger.error("Unhandled error: %s", type(exc).__name__, exc_info=exc)
    return error_response(AuthServiceError.kind)
