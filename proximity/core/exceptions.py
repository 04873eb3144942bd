"""Domain-level exception hierarchy for service and repository layers."""

from __future__ import annotations


class DomainError(Exception):
    """Base class for domain-specific failures."""


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""


class ConflictError(DomainError):
    """Raised when a state conflict occurs (e.g. duplicate entries)."""


class ValidationError(DomainError):
    """Raised when input validation fails at the domain/service layer."""


class PermissionDeniedError(DomainError):
    """Raised when the caller may not act on an entity it does not own."""


class InfrastructureError(DomainError):
    """Raised when infrastructure (DB or external service) is unavailable."""


class SlowmodeError(DomainError):
    """Raised when a channel send is rejected by the slowmode gate."""

    def __init__(self, cooldown_seconds: int) -> None:
        super().__init__("slowmode active")
        self.cooldown_seconds = cooldown_seconds
