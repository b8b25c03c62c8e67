"""
Application exceptions.

Every exception maps to one HTTP status and one machine-readable code,
rendered by core.handlers into the standard error envelope. Subclasses
mostly just override the class attributes.

Hierarchy:
    AppException (500)
    ├── AuthenticationError (401)
    │   ├── InvalidCredentialsError
    │   │   └── InactiveAccountError
    │   ├── SessionNotFoundError
    │   └── SessionExpiredError
    ├── AuthorizationError (403)
    │   ├── NoProfileError
    │   ├── NotPermittedError
    │   └── ForbiddenError
    ├── NotFoundError (404)
    ├── AlreadyExistsError (409)
    ├── ConflictError (409)
    ├── ValidationError (422)
    │   ├── WeakPasswordError
    │   └── InvalidInputError
    └── ServiceUnavailableError (503)

Authentication failures carry a ``reason`` (see models.enums.FailureReason)
for the audit trail. The reason never reaches the response body.
"""

from typing import Any


class AppException(Exception):
    """
    Base class for errors rendered to API clients.

    Attributes:
        status_code: HTTP status
        error_code: Machine-readable code
        message: Client-safe message
        details: Extra client-safe context
    """

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.error_code}, message={self.message!r})"


# -----------------------------------------------------------------------------
# 401
# -----------------------------------------------------------------------------


class AuthenticationError(AppException):
    status_code = 401
    error_code = "AUTHENTICATION_FAILED"
    default_message = "Authentication failed"
    default_reason: str | None = None

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.reason = reason or self.default_reason


class InvalidCredentialsError(AuthenticationError):
    """
    A credential/secret pair did not authenticate.

    The message is identical for unknown principals, wrong secrets,
    rejected provider tokens and inactive profiles.
    """

    error_code = "INVALID_CREDENTIALS"
    default_message = "Invalid credentials"
    default_reason = "invalid_credentials"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason=reason)


class InactiveAccountError(InvalidCredentialsError):
    default_reason = "inactive"

    def __init__(self) -> None:
        super().__init__()


class SessionNotFoundError(AuthenticationError):
    """Session token is missing, unknown or revoked."""

    error_code = "SESSION_NOT_FOUND"
    default_message = "Session not found"
    default_reason = "session_not_found"


class SessionExpiredError(AuthenticationError):
    error_code = "SESSION_EXPIRED"
    default_message = "Session has expired"
    default_reason = "session_expired"


# -----------------------------------------------------------------------------
# 403
# -----------------------------------------------------------------------------


class AuthorizationError(AppException):
    status_code = 403
    error_code = "AUTHORIZATION_FAILED"
    default_message = "Access forbidden"


class NoProfileError(AuthorizationError):
    """A verified federated identity has no provisioned profile."""

    error_code = "NO_PROFILE"
    default_message = "No profile is provisioned for this identity"
    reason = "no_profile"


class NotPermittedError(AuthorizationError):
    """The authorization engine denied an action."""

    error_code = "NOT_PERMITTED"
    default_message = "You are not permitted to perform this action"

    def __init__(self, reason: str = "not_permitted", action: str | None = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if action:
            details["action"] = action
        super().__init__(details=details)
        self.reason = reason


class ForbiddenError(AuthorizationError):
    """Permitted in principle, but blocked by a business rule (e.g. self-deletion)."""

    error_code = "FORBIDDEN"
    default_message = "This action is forbidden"


# -----------------------------------------------------------------------------
# 404 / 409
# -----------------------------------------------------------------------------


class NotFoundError(AppException):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(
        self,
        resource: str = "Resource",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message or f"{resource} not found", details)


class AlreadyExistsError(AppException):
    status_code = 409
    error_code = "ALREADY_EXISTS"

    def __init__(
        self,
        resource: str = "Resource",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message or f"{resource} already exists", details)


class ConflictError(AppException):
    """State conflict, including unique/foreign-key violations from the store."""

    status_code = 409
    error_code = "CONFLICT"
    default_message = "Resource conflict"


# -----------------------------------------------------------------------------
# 422
# -----------------------------------------------------------------------------


class ValidationError(AppException):
    status_code = 422
    error_code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class WeakPasswordError(ValidationError):
    error_code = "WEAK_PASSWORD"
    default_message = "Password does not meet security requirements"


class InvalidInputError(ValidationError):
    error_code = "INVALID_INPUT"
    default_message = "Invalid input"

    def __init__(
        self,
        field: str | None = None,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if message is None and field:
            message = f"Invalid input for field: {field}"
        super().__init__(message, details)


# -----------------------------------------------------------------------------
# 503
# -----------------------------------------------------------------------------


class ServiceUnavailableError(AppException):
    """The credential, profile or session store could not be reached."""

    status_code = 503
    error_code = "SERVICE_UNAVAILABLE"
    default_message = "The service is temporarily unavailable. Please try again later."
