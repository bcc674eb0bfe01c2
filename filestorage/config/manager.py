"""
Configuration management for file storage.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict

import tomli

from ..utils import loadDotEnv

logger = logging.getLogger(__name__)


def replaceMatchToEnv(match: re.Match[str]) -> str:
    """Replace environment variable placeholders with actual values.

    Args:
        match: A regex match object containing the environment variable name.

    Returns:
        str: The value of the environment variable or the original placeholder
             if the variable is not set.
    """
    key = match.group(1)
    return os.getenv(key, match.group(0))


def substituteEnvVars(value: Any) -> Any:
    """Recursively substitute environment variable placeholders in configuration values.

    Placeholders have the format ${VAR_NAME}. Strings, dictionaries and lists are
    processed recursively, any other value is returned unchanged.
    """
    if isinstance(value, str):
        return re.sub(r"\$\{([A-Za-z_][A-Za-z0-9_-]*)\}", replaceMatchToEnv, value)
    elif isinstance(value, dict):
        return {k: substituteEnvVars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substituteEnvVars(item) for item in value]
    return value


class ConfigManager:
    """
    Loads storage configuration from an optional TOML file.

    Unlike an application config, a missing or broken file is not fatal:
    the configuration is left empty and settings fall back to environment
    variables and defaults.
    """

    def __init__(self, configPath: str = "", dotEnvFile: str = ".env"):
        """Initialize ConfigManager with config file path and optional dotenv file."""
        self.configPath = configPath
        loadDotEnv(path=dotEnvFile)
        self.config: Dict[str, Any] = substituteEnvVars(self._loadConfig())

    def _loadConfig(self) -> Dict[str, Any]:
        """Load configuration from TOML file, empty dict if there is none."""
        if not self.configPath:
            logger.debug("No config file given, using environment only, dood!")
            return {}

        configFile = Path(self.configPath)
        if not configFile.is_file():
            logger.warning(f"Configuration file {self.configPath} not found, using environment and defaults, dood!")
            return {}

        try:
            with open(configFile, "rb") as f:
                config = tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            logger.warning(f"Failed to load configuration from {self.configPath}: {e}")
            return {}

        logger.info(f"Loaded config from {self.configPath}")
        return config

    def get(self, key: str, default=None) -> Any:
        """Get configuration value by key."""
        return self.config.get(key, default)

    def getLoggingConfig(self) -> Dict[str, Any]:
        """Get logging-specific configuration."""
        return self.get("logging", {})

    def getStorageConfig(self) -> Dict[str, Any]:
        """
        Get storage configuration.

        Returns a dictionary with the following structure:
        - type: Backend type ("local" or "object-store"/"s3")
        - local: Local backend configuration
            - root-path: Root directory, all paths are resolved under it
            - validate-paths: Reject traversal paths
        - s3: S3 backend configuration
            - bucket, region, endpoint, key-id, key-secret
            - validate-paths, check-connection

        Returns:
            Dict[str, Any]: Storage configuration dictionary.
                           Returns empty dict if storage section is not configured.
        """
        return self.get("storage", {})

    def getLocalConfig(self) -> Dict[str, Any]:
        """Get local backend section of the storage configuration."""
        return self.getStorageConfig().get("local", {})

    def getS3Config(self) -> Dict[str, Any]:
        """Get S3 backend section of the storage configuration."""
        return self.getStorageConfig().get("s3", {})
