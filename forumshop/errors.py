"""
Error taxonomy shared by validation, services and the HTTP layer.
Every error carries a kind and a status code; the API renders it as {"error": message}.
"""

from collections.abc import Iterable
from enum import Enum


class ErrorKind(str, Enum):
    AUTH = "auth"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"
    INTERNAL = "internal"


class ServiceError(Exception):
    """Base class for errors that map to a client-visible response."""

    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthError(ServiceError):
    kind = ErrorKind.AUTH
    status_code = 403
    default_message = "Invalid API key"


class MethodNotAllowed(ServiceError):
    kind = ErrorKind.METHOD_NOT_ALLOWED
    status_code = 405
    default_message = "Method not allowed"


class ValidationError(ServiceError):
    kind = ErrorKind.VALIDATION
    status_code = 400
    default_message = "Invalid request data"


class MissingField(ValidationError):
    def __init__(self, fields: Iterable[str]):
        self.fields = list(fields)
        super().__init__(f"Missing required field(s): {', '.join(self.fields)}")


class InvalidFormat(ValidationError):
    pass


class InvalidRange(ValidationError):
    pass


class UnknownParameter(ValidationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid parameter: {name}")


class DuplicateEntry(ValidationError):
    pass


class NotFound(ServiceError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    default_message = "Not found"


class ConflictError(ServiceError):
    kind = ErrorKind.CONFLICT
    status_code = 400
    default_message = "Request conflicts with current state"


class AlreadyDeleted(ConflictError):
    pass


class CannotModifyDeleted(ConflictError):
    pass


class InsufficientCredits(ConflictError):
    default_message = "Insufficient credits"


class ItemUnavailable(ConflictError):
    pass


class InventoryInvariant(ConflictError):
    pass


class PriceMismatch(ConflictError):
    pass


class UpstreamError(ServiceError):
    kind = ErrorKind.UPSTREAM
    status_code = 502
    default_message = "Upstream service failed"


class InternalError(ServiceError):
    pass


class VerificationFailed(InternalError):
    """A row written inside a transaction could not be read back."""
