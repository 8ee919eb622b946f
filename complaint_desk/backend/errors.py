"""
Errors raised by collection clients.

Service methods catch these at every remote call site and convert them
into ServiceResult failures.
"""
from __future__ import annotations

from typing import Any, Optional


class BackendError(Exception):
    """Base exception for all remote data-access failures."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class BackendAuthorizationError(BackendError):
    """Raised when the backend rejects a mutation for the current actor."""


class BackendUnavailableError(BackendError):
    """Raised on transient network or availability problems."""


class BackendConstraintError(BackendError):
    """Raised when a write violates a storage constraint."""


class UnknownCollectionError(BackendError):
    """Raised when a collection name is not served by the backend."""

    def __init__(self, collection: str) -> None:
        super().__init__(f"Unknown collection '{collection}'")
        self.collection = collection
