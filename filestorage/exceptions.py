"""
File storage exceptions

This module defines the exception hierarchy for the file storage layer.
All storage-related errors inherit from StorageError base class.
"""

from typing import List, Tuple


class StorageError(Exception):
    """
    Base exception for all file storage errors.

    Catch this to handle any storage error generically.

    Args:
        message: Human-readable description of the error
        originalError: The original exception that caused this error (optional)
    """

    def __init__(self, message: str, originalError: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.originalError = originalError


class StorageBuildError(StorageError):
    """
    Exception raised when a storage backend cannot be constructed.

    This exception is raised by builders when:
    - Backend type is not recognized
    - Region or bucket is empty
    - Endpoint is not a valid URL
    - Backend client cannot be created or the endpoint is unreachable
    - Local root path exists but is not a directory

    It is fatal to the construction call and is never retried automatically.
    """

    pass


class StorageOperationError(StorageError):
    """
    Exception raised when a storage operation fails.

    This is the generic I/O failure kind of the storage contract. It wraps
    host OS errors and object-store service/transport errors. Subclasses
    carry a minimal classification which callers may use for retry decisions,
    but catching StorageOperationError alone is always enough.
    """

    pass


class StorageNotFoundError(StorageOperationError):
    """Raised when the target, source or bucket does not exist."""

    pass


class StoragePermissionError(StorageOperationError):
    """Raised when the backend denies access to the target."""

    pass


class StorageTransientError(StorageOperationError):
    """
    Raised for network, throttling and service-unavailable failures.

    These are the only failures for which a retry by the caller makes sense.
    """

    pass


class StoragePathError(StorageOperationError):
    """
    Raised when a path is rejected by path validation.

    Only raised by backends built with path validation enabled:
    - Path is empty
    - Path contains control characters or backslashes
    - Path is absolute or contains '..' segments
    - Path exceeds maximum length
    """

    pass


class StorageBatchDeleteError(StorageOperationError):
    """
    Raised when a recursive removal was only partially applied.

    Some keys may already be deleted when this error is raised.

    Args:
        message: Description of the failure
        deletedKeys: Keys which were confirmed deleted
        failedKeys: (key, reason) pairs for every key which was not deleted
        originalError: The first underlying exception, if any
    """

    def __init__(
        self,
        message: str,
        deletedKeys: List[str],
        failedKeys: List[Tuple[str, str]],
        originalError: Exception | None = None,
    ):
        super().__init__(message, originalError=originalError)
        self.deletedKeys = deletedKeys
        self.failedKeys = failedKeys
