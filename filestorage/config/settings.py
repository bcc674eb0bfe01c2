"""
Per-backend storage settings.

Every field is resolved once, in this order:
1. value from the TOML config source
2. environment variable
3. documented default

A missing or invalid value never fails resolution, it falls back to the default.
Configuration errors surface later as build or operation failures.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .manager import ConfigManager

logger = logging.getLogger(__name__)

ROOT_PATH_ENV = "ROOT_PATH"
BUCKET_ENV = "BUCKET"
REGION_ENV = "REGION"
ENDPOINT_ENV = "ENDPOINT"
KEY_ID_ENV = "AWS_ACCESS_KEY_ID"
KEY_SECRET_ENV = "AWS_SECRET_ACCESS_KEY"

DEFAULT_ROOT_PATH = ""
DEFAULT_BUCKET = "file-storage-bucket"
DEFAULT_REGION = "us-west-2"
DEFAULT_ENDPOINT = "http://localhost:4566"


def _resolveStr(section: Dict[str, Any], key: str, envName: Optional[str], default: Any) -> Any:
    value = section.get(key)
    if value is not None:
        return str(value)
    if envName is not None:
        envValue = os.environ.get(envName)
        if envValue is not None:
            return envValue
    return default


def _resolveBool(section: Dict[str, Any], key: str, default: bool) -> bool:
    value = section.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("1", "true", "yes", "on"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("0", "false", "no", "off"):
        return False
    logger.warning(f"Invalid boolean value '{value}' for '{key}', using default {default}, dood!")
    return default


@dataclass(frozen=True)
class LocalConfig:
    """
    Local backend settings.

    Attributes:
        rootPath: Base directory; empty means the current directory.
        validatePaths: Reject paths escaping the root.
    """

    rootPath: str = DEFAULT_ROOT_PATH
    validatePaths: bool = False

    @classmethod
    def fromConfigManager(cls, configManager: ConfigManager) -> "LocalConfig":
        section = configManager.getLocalConfig()
        return cls(
            rootPath=_resolveStr(section, "root-path", ROOT_PATH_ENV, DEFAULT_ROOT_PATH),
            validatePaths=_resolveBool(section, "validate-paths", False),
        )

    @classmethod
    def load(cls, configPath: str = "") -> "LocalConfig":
        """Resolve local settings from config file at configPath and the environment."""
        return cls.fromConfigManager(ConfigManager(configPath))


@dataclass(frozen=True)
class S3Config:
    """
    S3 backend settings.

    Attributes:
        bucket: Bucket holding every key of the backend.
        region: Region name (e.g. "us-west-2"), read from REGION.
        endpoint: Endpoint URL (e.g. "http://localhost:4566"), read from ENDPOINT.
            Empty means the default AWS endpoint for the region.
        keyId: Access key ID, None to use the boto3 credential chain.
        keySecret: Secret access key, None to use the boto3 credential chain.
        validatePaths: Reject traversal keys.
        checkConnection: Probe the bucket while building.
    """

    bucket: str = DEFAULT_BUCKET
    region: str = DEFAULT_REGION
    endpoint: str = DEFAULT_ENDPOINT
    keyId: Optional[str] = None
    keySecret: Optional[str] = None
    validatePaths: bool = False
    checkConnection: bool = False

    @classmethod
    def fromConfigManager(cls, configManager: ConfigManager) -> "S3Config":
        section = configManager.getS3Config()
        return cls(
            bucket=_resolveStr(section, "bucket", BUCKET_ENV, DEFAULT_BUCKET),
            region=_resolveStr(section, "region", REGION_ENV, DEFAULT_REGION),
            endpoint=_resolveStr(section, "endpoint", ENDPOINT_ENV, DEFAULT_ENDPOINT),
            keyId=_resolveStr(section, "key-id", KEY_ID_ENV, None),
            keySecret=_resolveStr(section, "key-secret", KEY_SECRET_ENV, None),
            validatePaths=_resolveBool(section, "validate-paths", False),
            checkConnection=_resolveBool(section, "check-connection", False),
        )

    @classmethod
    def load(cls, configPath: str = "") -> "S3Config":
        """Resolve S3 settings from config file at configPath and the environment."""
        return cls.fromConfigManager(ConfigManager(configPath))

    def __repr__(self) -> str:
        # Never print the secret
        secret = "***" if self.keySecret else None
        return (
            f"S3Config(bucket={self.bucket!r}, region={self.region!r}, endpoint={self.endpoint!r}, "
            f"keyId={self.keyId!r}, keySecret={secret!r}, validatePaths={self.validatePaths}, "
            f"checkConnection={self.checkConnection})"
        )
