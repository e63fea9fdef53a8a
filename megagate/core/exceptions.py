"""
Exceptions raised by the gateway.

Every error that can reach a client derives from GatewayError and carries
the HTTP status it is rendered with.
"""
from typing import Optional


class GatewayError(Exception):
    """Base exception for all gateway errors."""

    status: int = 500

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message (sent to the client as-is)
            status: HTTP status override
        """
        self.message = message
        if status is not None:
            self.status = status
        super().__init__(message)


class ValidationError(GatewayError):
    """Missing or malformed input."""
    status = 400


class AuthError(GatewayError):
    """Missing, unknown or rejected token."""
    status = 401

    def __init__(self, message: str = "Unauthorized", status: Optional[int] = None) -> None:
        super().__init__(message, status)


class InvalidCredentials(AuthError):
    """Login credentials rejected by the storage backend."""

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class StorageConnectionError(AuthError):
    """
    Credentials bound to a token were rejected when opening a session.

    Rendered like any other auth failure since the account may have been
    changed upstream after the token was issued.
    """
    pass


class NotFoundError(GatewayError):
    """A node id could not be resolved."""
    status = 404


class NotAFolderError(GatewayError):
    """A node was used as a folder but is a file."""
    status = 400


class BackendError(GatewayError):
    """Any failure reported by the storage backend."""
    status = 500


class StagingError(GatewayError):
    """Local temp-file staging failed."""
    status = 500


# Raised by backend implementations, never rendered directly.

class BackendAuthError(Exception):
    """The backend rejected the supplied credentials."""
    pass


class BackendOperationError(Exception):
    """The backend failed to carry out an operation."""
    pass
