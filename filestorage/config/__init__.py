"""
Storage configuration: TOML/env loading and per-backend settings records.
"""

from .manager import ConfigManager
from .settings import LocalConfig, S3Config

__all__ = ["ConfigManager", "LocalConfig", "S3Config"]
