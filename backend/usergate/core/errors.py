# backend/usergate/core/errors.py

import enum
from typing import Any, Optional

# Client-facing messages. Auth failures stay coarse on purpose.
UNAUTHORIZED = "Unauthorized"
FORBIDDEN = "Forbidden - Admin access required"
INVALID_TOKEN = "Invalid or expired token"
USER_NOT_FOUND = "User not found"
EMAIL_EXISTS = "User with this email already exists"
INVALID_CREDENTIALS = "Invalid email or password"
INTERNAL_ERROR = "Internal server error"
VALIDATION_FAILED = "Validation failed"
DATABASE_UNAVAILABLE = "Database is unavailable. Please try again in a moment."
DATABASE_ERROR = "Database error occurred"


class AppError(Exception):
    status_code = 500
    default_message = INTERNAL_ERROR

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = VALIDATION_FAILED


class AuthenticationError(AppError):
    status_code = 401
    default_message = UNAUTHORIZED


class AuthorizationError(AppError):
    status_code = 403
    default_message = FORBIDDEN


class NotFoundError(AppError):
    status_code = 404
    default_message = USER_NOT_FOUND


class ConflictError(AppError):
    # the public API has always answered duplicates with a plain 400
    status_code = 400
    default_message = EMAIL_EXISTS


class InfrastructureError(AppError):
    status_code = 500
    default_message = INTERNAL_ERROR


class StoreErrorKind(str, enum.Enum):
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    NOT_FOUND = "NOT_FOUND"
    UNAVAILABLE = "DATABASE_UNAVAILABLE"
    DATABASE_ERROR = "DATABASE_ERROR"


class StoreError(Exception):
    """Raised by the persistence layer. `kind` is what callers branch on."""

    def __init__(self, kind: StoreErrorKind, message: str = ""):
        self.kind = kind
        super().__init__(message or kind.value)


def from_store_error(exc: StoreError) -> AppError:
    if exc.kind is StoreErrorKind.DUPLICATE_EMAIL:
        return ConflictError()
    if exc.kind is StoreErrorKind.NOT_FOUND:
        return NotFoundError()
    if exc.kind is StoreErrorKind.UNAVAILABLE:
        err = InfrastructureError(DATABASE_UNAVAILABLE, details={"code": exc.kind.value})
    else:
        err = InfrastructureError(DATABASE_ERROR, details={"code": exc.kind.value})
    err.__cause__ = exc
    return err
