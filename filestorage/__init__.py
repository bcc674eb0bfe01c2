"""
File storage package

This package provides one contract for file and directory operations
(AbstractFileStorage) across backend implementations (local filesystem, S3).
The backend is selected and configured at startup with buildStorage().
"""

from .builder import StorageType, buildStorage, buildStorageFromConfig
from .contract import AbstractFileStorage
from .exceptions import (
    StorageBatchDeleteError,
    StorageBuildError,
    StorageError,
    StorageNotFoundError,
    StorageOperationError,
    StoragePathError,
    StoragePermissionError,
    StorageTransientError,
)

__all__ = [
    "AbstractFileStorage",
    "StorageType",
    "buildStorage",
    "buildStorageFromConfig",
    "StorageError",
    "StorageBuildError",
    "StorageOperationError",
    "StorageNotFoundError",
    "StoragePermissionError",
    "StorageTransientError",
    "StoragePathError",
    "StorageBatchDeleteError",
]
