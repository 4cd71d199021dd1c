from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class UnauthenticatedError(DomainError):
    """Raised when a request carries no caller identity."""


class NotFoundError(DomainError):
    """Raised when an End* operation finds no matching open resource."""


class ConflictError(DomainError):
    """Raised when a second session or break would be opened for a user.

    ``resource_id`` is the id of the session/break that is already open, so the
    caller can reconcile instead of retrying blindly.
    """

    def __init__(self, message: str, *, resource_id: Optional[str] = None):
        super().__init__(message)
        self.resource_id = resource_id


class PersistenceError(DomainError):
    """Raised when the data layer fails (connection loss, unexpected constraint)."""
