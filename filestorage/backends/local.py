"""
Local filesystem storage backend implementation

This module maps file storage operations onto a rooted subtree of the host
filesystem. Paths are joined to the root by plain string concatenation.
"""

import logging
import os
import shutil
from typing import List

from ..contract import AbstractFileStorage
from ..exceptions import StorageNotFoundError, StorageOperationError, StoragePermissionError
from ..utils import validatePath

logger = logging.getLogger(__name__)


def wrapOSError(error: OSError, message: str) -> StorageOperationError:
    """
    Convert a host OS error into the storage operation error hierarchy.

    Args:
        error: The original OS error
        message: Description of the failed operation

    Returns:
        StorageNotFoundError, StoragePermissionError or StorageOperationError
    """
    if isinstance(error, FileNotFoundError):
        return StorageNotFoundError(f"{message}: {error}", originalError=error)
    if isinstance(error, PermissionError):
        return StoragePermissionError(f"{message}: {error}", originalError=error)
    return StorageOperationError(f"{message}: {error}", originalError=error)


class LocalFileStorage(AbstractFileStorage):
    """
    Filesystem-based file storage backend.

    Every path is resolved as ``rootPath + "/" + path``. There is no sandboxing
    and no normalization unless the backend is built with path validation.

    Behaviour differences from the S3 backend:
    - write() does not create a missing file, use createFile() first
    - removeFile() fails for a missing file
    - readDir() returns full resolved paths of the entries

    Args:
        rootPath: Base directory, empty string means the current directory
        validatePaths: Reject paths with traversal sequences

    Example:
        >>> storage = LocalFileStorage("/tmp/storage")
        >>> storage.createFile("test.txt")
        >>> storage.write("test.txt", b"data")
        >>> storage.readFile("test.txt")
        b'data'
    """

    def __init__(self, rootPath: str = "", validatePaths: bool = False):
        self._rootPath = rootPath
        self.validatePaths = validatePaths

    @property
    def backendName(self) -> str:
        return "local"

    @property
    def rootPath(self) -> str:
        """Base directory, fixed at construction."""
        return self._rootPath

    def _resolvePath(self, path: str) -> str:
        """
        Get the full host path for a storage path.

        Raises:
            StoragePathError: If path validation is enabled and the path is unsafe
        """
        if self.validatePaths:
            validatePath(path)
        if not self._rootPath:
            # Empty root and empty path both mean the current directory
            return path or "."
        return f"{self._rootPath}/{path}"

    def readFile(self, path: str) -> bytes:
        fullPath = self._resolvePath(path)
        try:
            with open(fullPath, "rb") as f:
                data = f.read()
        except OSError as e:
            raise wrapOSError(e, f"Failed to read file '{path}'")
        logger.debug(f"Read {len(data)} bytes from {fullPath}")
        return data

    def write(self, path: str, data: bytes) -> None:
        """
        Overwrite an existing file.

        The file is opened without create semantics, so a missing target fails
        with StorageNotFoundError. The previous content is truncated.
        """
        fullPath = self._resolvePath(path)
        try:
            fd = os.open(fullPath, os.O_WRONLY | os.O_TRUNC)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError as e:
            raise wrapOSError(e, f"Failed to write file '{path}'")
        logger.debug(f"Wrote {len(data)} bytes to {fullPath}")

    def createFile(self, path: str) -> None:
        """Create an empty file, truncating an existing one."""
        fullPath = self._resolvePath(path)
        try:
            with open(fullPath, "wb"):
                pass
        except OSError as e:
            raise wrapOSError(e, f"Failed to create file '{path}'")
        logger.debug(f"Created file {fullPath}")

    def removeFile(self, path: str) -> None:
        fullPath = self._resolvePath(path)
        try:
            os.remove(fullPath)
        except OSError as e:
            raise wrapOSError(e, f"Failed to remove file '{path}'")
        logger.debug(f"Removed file {fullPath}")

    def copy(self, sourcePath: str, targetPath: str) -> None:
        """Copy file content and permission bits. Not atomic."""
        fullSource = self._resolvePath(sourcePath)
        fullTarget = self._resolvePath(targetPath)
        try:
            shutil.copyfile(fullSource, fullTarget)
            shutil.copymode(fullSource, fullTarget)
        except OSError as e:
            raise wrapOSError(e, f"Failed to copy '{sourcePath}' to '{targetPath}'")
        logger.debug(f"Copied {fullSource} to {fullTarget}")

    def readDir(self, path: str) -> List[str]:
        fullPath = self._resolvePath(path)
        try:
            with os.scandir(fullPath) as entries:
                return [entry.path for entry in entries]
        except OSError as e:
            raise wrapOSError(e, f"Failed to read directory '{path}'")

    def createDirAll(self, path: str) -> None:
        fullPath = self._resolvePath(path)
        try:
            os.makedirs(fullPath, exist_ok=True)
        except OSError as e:
            raise wrapOSError(e, f"Failed to create directory '{path}'")
        logger.debug(f"Created directory {fullPath}")

    def removeDirAll(self, path: str) -> None:
        """Remove a directory tree. A missing directory is a no-op."""
        fullPath = self._resolvePath(path)
        if not os.path.lexists(fullPath):
            logger.debug(f"Directory {fullPath} does not exist, nothing to remove")
            return
        try:
            shutil.rmtree(fullPath)
        except OSError as e:
            raise wrapOSError(e, f"Failed to remove directory '{path}'")
        logger.debug(f"Removed directory {fullPath}")
