"""
Abstract file storage interface

This module defines the abstract base class that all file storage backends must implement.
It provides a consistent interface for file and directory operations across backend types.
"""

from abc import ABC, abstractmethod
from typing import List


class AbstractFileStorage(ABC):
    """
    Abstract base class for file storage backends.

    All backend implementations (local filesystem, S3) must inherit from this
    class and implement all abstract methods. Callers only ever hold an
    AbstractFileStorage and never distinguish backends again.

    All operations are blocking: none returns before its effect (or failure)
    is determined by the backend. Implementations must wrap backend-specific
    errors into StorageOperationError (or one of its subclasses).

    There is no atomicity guarantee across operations and no locking: concurrent
    writers to the same path race with last-writer-wins semantics.
    """

    @property
    @abstractmethod
    def backendName(self) -> str:
        """
        Return the backend identifier (e.g., "local", "s3").
        """
        pass

    # Files

    @abstractmethod
    def readFile(self, path: str) -> bytes:
        """
        Read the whole content of a file into memory.

        Args:
            path: Logical path of the file

        Returns:
            The file content

        Raises:
            StorageNotFoundError: If the file does not exist
            StorageOperationError: If the read fails
        """
        pass

    @abstractmethod
    def write(self, path: str, data: bytes) -> None:
        """
        Overwrite a file with the given data.

        Whether a missing target is created is backend-defined: the local backend
        fails, the S3 backend creates the object.

        Args:
            path: Logical path of the file
            data: Complete new content

        Raises:
            StorageOperationError: If the write fails
        """
        pass

    @abstractmethod
    def createFile(self, path: str) -> None:
        """
        Create an empty file.

        Idempotent on the local backend. A no-op on backends without
        a concept of empty placeholder objects.

        Raises:
            StorageOperationError: If the file cannot be created
        """
        pass

    @abstractmethod
    def removeFile(self, path: str) -> None:
        """
        Remove a file.

        Raises:
            StorageNotFoundError: If the file does not exist (local backend only)
            StorageOperationError: If the removal fails
        """
        pass

    @abstractmethod
    def copy(self, sourcePath: str, targetPath: str) -> None:
        """
        Copy a file within the same backend.

        Args:
            sourcePath: Path of the existing source file
            targetPath: Path of the copy

        Raises:
            StorageNotFoundError: If the source does not exist
            StorageOperationError: If the copy fails
        """
        pass

    # Directories

    @abstractmethod
    def readDir(self, path: str) -> List[str]:
        """
        List the entries under a directory (or key prefix).

        Order is backend-defined. Entries are full resolved paths on the local
        backend and full keys on the S3 backend, never bare names.

        Raises:
            StorageOperationError: If the listing fails
        """
        pass

    @abstractmethod
    def createDirAll(self, path: str) -> None:
        """
        Create a directory and all missing parents.

        Must be idempotent: calling it twice is not an error.

        Raises:
            StorageOperationError: If the directory cannot be created
        """
        pass

    @abstractmethod
    def removeDirAll(self, path: str) -> None:
        """
        Remove every entry addressed by the path.

        Removing a path which matches nothing is a no-op.

        Raises:
            StorageBatchDeleteError: If the removal was only partially applied
            StorageOperationError: If the removal fails
        """
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} backend={self.backendName}>"
