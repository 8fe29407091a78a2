"""Domain exceptions raised by the service layer.

Routes never build error responses themselves; these exceptions are mapped to
HTTP status codes by the handlers registered in ``src.api.errors``.
"""


class ServiceError(Exception):
    """Base class for all service-layer errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Raised when input is malformed, disallowed or violates a field constraint."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class AuthError(ServiceError):
    """Raised when a presented session token is malformed, orphaned or revoked.

    ``reason`` is one of ``"malformed"``, ``"unknown user"`` or ``"revoked"``.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class NotFoundError(ServiceError):
    """Raised when a referenced resource does not exist or is not visible to the caller."""


class StorageError(ServiceError):
    """Raised when the persistence layer fails. Never shown to clients in detail."""
