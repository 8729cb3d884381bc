"""
Custom exceptions for the vehicle store.

Storage, sync and identity code raise these so callers can handle
failures without knowing which layer produced them.
"""


class VehicleStoreError(Exception):
    """Base exception for all vehicle store errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class StorageConnectionError(VehicleStoreError):
    """Raised when the local database cannot be opened or created.

    Note: Named StorageConnectionError to avoid shadowing the builtin ConnectionError.
    """

    def __init__(self, location: str, cause: Exception | None = None):
        details = {"location": location}
        if cause:
            details["cause"] = str(cause)
        super().__init__(f"Could not open vehicle database at {location}", details)
        self.location = location
        self.cause = cause


class StorageIOError(VehicleStoreError):
    """Raised when a storage I/O operation fails."""

    def __init__(self, operation: str, path: str | None = None, cause: Exception | None = None):
        details = {"operation": operation}
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
        message = f"Storage I/O error during {operation}"
        if path:
            message += f": {path}"
        super().__init__(message, details)
        self.operation = operation
        self.path = path
        self.cause = cause


class SyncError(VehicleStoreError):
    """Raised when pulling remote changes fails."""

    def __init__(self, message: str, cause: Exception | None = None):
        details: dict = {}
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)
        self.cause = cause


class PushError(VehicleStoreError):
    """Raised by a transport when a single local edit could not be pushed."""

    def __init__(self, license_number: str, reason: str):
        super().__init__(
            f"Push failed for vehicle {license_number}: {reason}",
            {"license_number": license_number, "reason": reason},
        )
        self.license_number = license_number
        self.reason = reason


class AccountSerializationError(VehicleStoreError):
    """Raised when a stored account snapshot cannot be decoded."""

    def __init__(self, reason: str):
        super().__init__(f"Invalid account snapshot: {reason}", {"reason": reason})
        self.reason = reason
