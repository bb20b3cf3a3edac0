from __future__ import annotations


class EcoTrackerError(Exception):
    """Base error for the eco tracker server."""


class ValidationError(EcoTrackerError):
    """Raised when user input is invalid."""


class AccessDeniedError(EcoTrackerError):
    """Raised when the settings API answers 401/403 for the user."""


class ExternalServiceError(EcoTrackerError):
    """Raised when an external service (OpenAQ/settings API) fails."""


class StorageError(EcoTrackerError):
    """Raised by persistence backends when an item cannot be read or written."""


class StorageQuotaError(StorageError):
    """Raised when a write would exceed the storage quota."""
