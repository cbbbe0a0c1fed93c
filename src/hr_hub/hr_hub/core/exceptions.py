from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidTransitionError(DomainError):
    """Raised when a status guard rejects a state change."""

    def __init__(self, from_status: str, to_status: str, reason: Optional[str] = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        super().__init__(reason or f"Invalid transition from '{from_status}' to '{to_status}'")


class ConflictError(DomainError):
    """Raised when a uniqueness rule would be broken (duplicate pending request, email...)."""


class NotFoundError(DomainError):
    status_code = 404


class AuthenticationError(DomainError):
    """Raised when credentials or tokens are missing or invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403
