from __future__ import annotations
from enum import Enum


class ErrorType(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    MAX_ITEMS = "MAX_ITEMS"
    WISHLIST_ALREADY_EXISTS = "WISHLIST_ALREADY_EXISTS"
    CONCURRENCY_CONFLICT = "CONCURRENCY_CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class OptimisticLockError(Exception):
    """Raised by the storage layer when a write carries a stale version."""
    pass


class WishlistError(Exception):
    """
    Base class for every error the wishlist service reports to its callers.
    Subclasses pin `error_type`; `message` is safe to show to an end user.
    """
    error_type: ErrorType = ErrorType.INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(WishlistError):
    error_type = ErrorType.NOT_FOUND


class AlreadyExistsError(WishlistError):
    error_type = ErrorType.WISHLIST_ALREADY_EXISTS


class CapacityExceededError(WishlistError):
    error_type = ErrorType.MAX_ITEMS


class ConcurrencyConflictError(WishlistError):
    error_type = ErrorType.CONCURRENCY_CONFLICT
