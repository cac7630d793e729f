"""Error taxonomy for the auth subsystem.

Every error carries the HTTP status it maps to; the exception handlers in
``src.main`` render them as ``{"error": message}``.
"""


class AuthError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AuthError):
    """Missing or malformed input."""

    status_code = 400


class ConflictError(AuthError):
    """A user with the given email already exists."""

    status_code = 400


class AuthenticationError(AuthError):
    """Bad credentials, or a missing, invalid or expired token."""

    status_code = 401


class SessionExpiredError(AuthError):
    """Token verified but no session entry exists for its user."""

    status_code = 401


class InternalError(AuthError):
    """Unexpected failure of a backing service."""

    status_code = 500


class CredentialStoreError(InternalError):
    """The user database could not be reached or failed a query."""


class SessionStoreUnavailableError(InternalError):
    """The configured session store could not be reached."""
