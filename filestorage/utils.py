"""
File storage utility functions

This module provides utility functions for the storage backends:
path validation against traversal, list batching and a dotenv loader.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Iterator, List, Sequence, TypeVar

from .exceptions import StoragePathError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Maximum allowed path length
MAX_PATH_LENGTH = 1024


def validatePath(path: str) -> str:
    """
    Validate a storage path against traversal outside the root or bucket.

    Unlike key sanitization, nothing is rewritten: an unsafe path is rejected.
    The following checks are performed in order:
    1. Path is not empty or only whitespace
    2. No null bytes or control characters (ASCII 0-31 and 127)
    3. No backslashes (Windows path separators)
    4. Not absolute (leading '/' or '~', or a drive letter like 'C:')
    5. No '..' segments
    6. Length does not exceed MAX_PATH_LENGTH

    Args:
        path: The storage path to validate

    Returns:
        The path unchanged

    Raises:
        StoragePathError: If the path fails any of the checks

    Examples:
        >>> validatePath("docs/report.pdf")
        'docs/report.pdf'
        >>> validatePath("../../../etc/passwd")  # raises StoragePathError
    """
    if not path or not path.strip():
        raise StoragePathError("Storage path cannot be empty or only whitespace")

    if any(ord(char) <= 31 or ord(char) == 127 for char in path):
        raise StoragePathError(f"Path contains control characters: {path!r}")

    if "\\" in path:
        raise StoragePathError(f"Path contains backslash: '{path}'")

    if path.startswith("/") or path.startswith("~") or (len(path) >= 2 and path[1] == ":"):
        raise StoragePathError(f"Path must be relative: '{path}'")

    if any(segment == ".." for segment in path.split("/")):
        raise StoragePathError(f"Path contains '..' segment: '{path}'")

    if len(path) > MAX_PATH_LENGTH:
        raise StoragePathError(f"Path exceeds maximum length of {MAX_PATH_LENGTH} characters. Length: {len(path)}")

    return path


def batched(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """
    Split a sequence into consecutive lists of at most `size` items.

    An empty sequence yields nothing.

    Args:
        items: Items to split
        size: Maximum batch size, must be positive

    Raises:
        ValueError: If size is not positive
    """
    if size <= 0:
        raise ValueError(f"Batch size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


def loadDotEnv(path: str = ".env", populateEnv: bool = True) -> Dict[str, str]:
    """
    Simple dotenv file loader.
    Just read file line by line and put key-value pairs into dictionary.
    Missing file is not an error, empty dictionary is returned.

    Args:
        path: Path to .env file (default ".env")
        populateEnv: Whether to populate environment variables (default True)

    Returns:
        Dictionary of key-value pairs from .env file
    """
    ret: Dict[str, str] = {}
    if not Path(path).is_file():
        logger.debug(f"No dotenv file at {path}, skipping, dood!")
        return ret

    with open(path, "rt") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            key, sep, value = line.partition("=")
            if sep:
                ret[key.strip()] = value.strip().strip('"')

    if populateEnv:
        for k, v in ret.items():
            # Explicit environment wins over .env
            os.environ.setdefault(k, v)
    return ret
