"""Identity and authorization exceptions.

Every error raised by warden_identity derives from AuthError and carries a
stable machine-readable code plus an HTTP status hint. The boundary adapter
(presentation/api/exception_handlers.py) turns them into responses.

``details`` is part of the user-facing response; it must never contain
secrets (passwords, hashes, keys, tokens). The original cause of a wrapped
failure stays on ``__cause__`` for internal diagnostics only.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes for API clients.

    These codes are part of the public API contract. Should not be changed.
    """

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_ALREADY_EXISTS = "USER_ALREADY_EXISTS"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SOCIAL_AUTH_FAILED = "SOCIAL_AUTH_FAILED"
    PASSWORD_CHANGE_FAILED = "PASSWORD_CHANGE_FAILED"
    REGISTRATION_FAILED = "REGISTRATION_FAILED"
    LOGIN_FAILED = "LOGIN_FAILED"


class AuthError(Exception):
    """Base exception for all identity errors.

    Attributes
    ----------
    message
        Human-readable error message (safe for end users)
    code
        Stable error code for programmatic handling
    status_code
        HTTP status equivalent, used by the boundary adapter
    details
        Additional user-safe context
    """

    default_message = "Authentication error"
    code = ErrorCode.LOGIN_FAILED
    status_code = 400

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_response(self) -> dict[str, Any]:
        """Serialize into the error body returned to clients."""
        body: dict[str, Any] = {"detail": self.message, "code": self.code.value}
        if self.details:
            body["details"] = self.details
        return body

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code.value!r})"
        )


class InvalidCredentialsError(AuthError):
    """Raised when email or password is incorrect during login.

    The message is identical for unknown accounts and wrong passwords.
    """

    default_message = "Invalid email or password"
    code = ErrorCode.INVALID_CREDENTIALS
    status_code = 401


class UserNotFoundError(AuthError):
    """Raised when a user id does not resolve to a stored account."""

    default_message = "User not found"
    code = ErrorCode.USER_NOT_FOUND
    status_code = 404


class AlreadyExistsError(AuthError):
    """Raised when an email or phone number is already registered."""

    default_message = "User already exists"
    code = ErrorCode.USER_ALREADY_EXISTS
    status_code = 409


class WeakPasswordError(AuthError):
    """Raised when a password doesn't meet strength requirements."""

    default_message = "Password does not meet security requirements"
    code = ErrorCode.WEAK_PASSWORD
    status_code = 400

    def __init__(self, violations: list[str] | None = None):
        self.violations = list(violations or [])
        super().__init__(details={"errors": self.violations})


class InvalidTokenError(AuthError):
    """Raised when a token is malformed, badly signed, revoked or of the wrong type."""

    default_message = "Invalid token"
    code = ErrorCode.INVALID_TOKEN
    status_code = 401


class TokenExpiredError(AuthError):
    """Raised when a correctly signed token is past its expiry."""

    default_message = "Token has expired"
    code = ErrorCode.TOKEN_EXPIRED
    status_code = 401


class InsufficientPermissionsError(AuthError):
    """Raised when an authenticated principal is not allowed to act."""

    default_message = "Insufficient permissions"
    code = ErrorCode.INSUFFICIENT_PERMISSIONS
    status_code = 403


class ValidationFailedError(AuthError):
    """Raised with every field-level input problem collected together."""

    default_message = "Validation failed"
    code = ErrorCode.VALIDATION_ERROR
    status_code = 400

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(details={"errors": self.errors})


class SocialAuthFailedError(AuthError):
    """Raised for unsupported providers or failed profile lookups."""

    code = ErrorCode.SOCIAL_AUTH_FAILED
    status_code = 400

    def __init__(self, provider: str, message: str | None = None):
        self.provider = provider
        super().__init__(
            message or f"Social authentication failed for {provider}",
            details={"provider": provider},
        )


class PasswordChangeFailedError(AuthError):
    """Raised when a password change cannot be completed."""

    default_message = "Password change failed"
    code = ErrorCode.PASSWORD_CHANGE_FAILED
    status_code = 400


class RegistrationFailedError(AuthError):
    """Raised when registration fails for a reason outside the taxonomy."""

    default_message = "Registration failed"
    code = ErrorCode.REGISTRATION_FAILED
    status_code = 500


class LoginFailedError(AuthError):
    """Raised when login fails for a reason outside the taxonomy."""

    default_message = "Login failed"
    code = ErrorCode.LOGIN_FAILED
    status_code = 500
