"""
Storage backend builders and selector

This module constructs concrete storage backends from their settings,
validates them and hands back a handle typed only as AbstractFileStorage.
"""

import logging
import os
from abc import ABC, abstractmethod
from enum import Enum
from typing import Generic, TypeVar
from urllib.parse import urlparse

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .backends.local import LocalFileStorage
from .backends.s3 import NOT_FOUND_CODES, S3FileStorage, getErrorCode
from .config.manager import ConfigManager
from .config.settings import LocalConfig, S3Config
from .contract import AbstractFileStorage
from .exceptions import StorageBuildError

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT", LocalConfig, S3Config)


class StorageType(str, Enum):
    """Backend kind tag."""

    LOCAL = "local"
    OBJECT_STORE = "object-store"

    @classmethod
    def fromStr(cls, value: "str | StorageType") -> "StorageType":
        """
        Parse backend kind, accepting "s3" and "fs" aliases.

        Raises:
            StorageBuildError: If the backend kind is unknown
        """
        if isinstance(value, StorageType):
            return value
        normalized = str(value).strip().lower()
        match normalized:
            case "local" | "fs":
                return cls.LOCAL
            case "object-store" | "s3":
                return cls.OBJECT_STORE
            case _:
                raise StorageBuildError(f"Unknown storage type: {value}")


class Builder(ABC, Generic[ConfigT]):
    """
    Base builder: holds the settings record until build() is called.
    """

    def __init__(self, config: ConfigT):
        self.config = config

    @classmethod
    def withConfig(cls, config: ConfigT) -> "Builder[ConfigT]":
        return cls(config)

    @abstractmethod
    def build(self) -> AbstractFileStorage:
        """Validate the settings and construct the backend."""
        pass


class LocalFileStorageBuilder(Builder[LocalConfig]):
    """Builds LocalFileStorage, checking that the root path is usable."""

    def build(self) -> AbstractFileStorage:
        """
        Raises:
            StorageBuildError: If the root path exists but is not a directory
        """
        rootPath = self.config.rootPath
        if rootPath:
            if os.path.exists(rootPath) and not os.path.isdir(rootPath):
                raise StorageBuildError(f"Root path '{rootPath}' exists but is not a directory")
            if not os.path.exists(rootPath):
                logger.warning(f"Root path '{rootPath}' does not exist yet, operations will fail until created, dood!")

        storage = LocalFileStorage(rootPath=rootPath, validatePaths=self.config.validatePaths)
        logger.info(f"Initialized LocalFileStorage with root path: '{rootPath or '.'}', dood!")
        return storage


class S3FileStorageBuilder(Builder[S3Config]):
    """Builds S3FileStorage with a path-style boto3 client."""

    def _validateConfig(self) -> None:
        if not self.config.bucket:
            raise StorageBuildError("S3 bucket is not specified")
        if not self.config.region:
            raise StorageBuildError("region not found")

        # Empty endpoint means the default AWS endpoint for the region
        if not self.config.endpoint:
            return
        parsed = urlparse(self.config.endpoint)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise StorageBuildError(f"Invalid S3 endpoint URL: '{self.config.endpoint}'")

    def _createClient(self):
        try:
            return boto3.client(
                "s3",
                endpoint_url=self.config.endpoint or None,
                region_name=self.config.region,
                aws_access_key_id=self.config.keyId,
                aws_secret_access_key=self.config.keySecret,
                config=BotoConfig(s3={"addressing_style": "path"}),
            )
        except (BotoCoreError, ValueError) as e:
            raise StorageBuildError(f"Failed to initialize S3 client: {e}", originalError=e)

    def _checkConnection(self, client) -> None:
        """
        Probe the endpoint with HeadBucket.

        A missing bucket is accepted since createDirAll() creates it.
        """
        try:
            client.head_bucket(Bucket=self.config.bucket)
        except ClientError as e:
            if getErrorCode(e) in NOT_FOUND_CODES:
                logger.warning(f"Bucket '{self.config.bucket}' does not exist yet, dood!")
                return
            raise StorageBuildError(f"Failed to access bucket '{self.config.bucket}': {e}", originalError=e)
        except BotoCoreError as e:
            raise StorageBuildError(f"S3 endpoint '{self.config.endpoint}' is unreachable: {e}", originalError=e)

    def build(self) -> AbstractFileStorage:
        """
        Raises:
            StorageBuildError: If settings are invalid, the client cannot be
                created or the connection check fails
        """
        self._validateConfig()
        client = self._createClient()
        if self.config.checkConnection:
            self._checkConnection(client)

        storage = S3FileStorage(
            client=client,
            bucket=self.config.bucket,
            region=self.config.region,
            validatePaths=self.config.validatePaths,
        )
        logger.info(
            f"Initialized S3FileStorage with bucket: {self.config.bucket}, "
            f"region: {self.config.region}, endpoint: {self.config.endpoint or 'default'}, dood!"
        )
        return storage


def buildStorage(storageType: "str | StorageType", configPath: str = "") -> AbstractFileStorage:
    """
    Build a ready-to-use storage backend.

    Args:
        storageType: Backend kind ("local" or "object-store", "s3" and "fs" aliases accepted)
        configPath: Path to a TOML config file, empty to use environment only

    Returns:
        The backend, typed only as AbstractFileStorage

    Raises:
        StorageBuildError: If the kind is unknown or construction fails
    """
    kind = StorageType.fromStr(storageType)
    match kind:
        case StorageType.LOCAL:
            return LocalFileStorageBuilder.withConfig(LocalConfig.load(configPath)).build()
        case StorageType.OBJECT_STORE:
            return S3FileStorageBuilder.withConfig(S3Config.load(configPath)).build()


def buildStorageFromConfig(configManager: ConfigManager) -> AbstractFileStorage:
    """
    Build the backend named by the `type` key of the storage section.

    Raises:
        StorageBuildError: If the type is missing, unknown or construction fails
    """
    storageType = configManager.getStorageConfig().get("type")
    if not storageType:
        raise StorageBuildError("Storage type is not specified in configuration")

    kind = StorageType.fromStr(storageType)
    match kind:
        case StorageType.LOCAL:
            return LocalFileStorageBuilder.withConfig(LocalConfig.fromConfigManager(configManager)).build()
        case StorageType.OBJECT_STORE:
            return S3FileStorageBuilder.withConfig(S3Config.fromConfigManager(configManager)).build()
