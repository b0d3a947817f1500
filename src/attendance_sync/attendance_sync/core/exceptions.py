from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class StoreError(DomainError):
    """Base exception for storage-layer failures."""

    def __init__(self, message: str, *, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class DeserializationError(StoreError):
    """Stored blob exists but cannot be decoded into records."""


class StorageWriteError(StoreError):
    """Backend refused a write (quota exhausted, driver error, ...)."""


class NotFoundError(StoreError):
    """Mutation targeted an id that is not in the collection."""


class ConflictError(StoreError):
    """Stored record no longer matches the snapshot the caller expected."""


class SyncError(DomainError):
    """Base exception for broadcast fabric failures."""


class ChannelClosedError(SyncError):
    """Publish or subscribe on a fabric or channel that is not open."""
