"""Domain error kinds raised by the account flows.

Each kind carries the HTTP status it maps to; the API layer turns any
AccountServiceError into a JSON error envelope with that status.
"""


class AccountServiceError(Exception):
    """Base class for errors the account flows report to the caller."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        errors: list[str] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.errors = errors
        self.cause = cause
        super().__init__(message)


class ValidationError(AccountServiceError):
    """Missing or malformed input."""

    status_code = 400


class AuthenticationError(AccountServiceError):
    """Bad credentials or an unusable refresh token."""

    status_code = 400


class MissingTokenError(AccountServiceError):
    """No bearer token on a protected route."""

    status_code = 401


class InvalidTokenError(AccountServiceError):
    """Bearer token present but mis-signed, expired, or of the wrong type."""

    status_code = 403


class ConflictError(AccountServiceError):
    """Username already taken."""

    status_code = 409


class InternalError(AccountServiceError):
    """Unexpected store or library failure."""

    status_code = 500
