"""
Logging utilities for file storage tools.
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty AWS SDK loggers, kept at WARNING unless configured explicitly
NOISY_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3")


def getLogLevelByStr(levelStr: str, default: Optional[int] = None) -> Optional[int]:
    """Get log level by string, default if the name is unknown."""
    level = getattr(logging, str(levelStr).upper(), None)
    if not isinstance(level, int):
        logger.error(f"Invalid log level '{levelStr}'")
        return default
    return level


def _makeHandler(config: Dict[str, Any], logLevel: int, formatter: logging.Formatter) -> Optional[logging.Handler]:
    """Create the file handler described by config, None if no file is configured."""
    if "file" not in config:
        return None

    logFile = config["file"]
    Path(logFile).parent.mkdir(parents=True, exist_ok=True)

    handler: logging.Handler
    if config.get("rotate", False):
        handler = TimedRotatingFileHandler(
            filename=logFile,
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
    else:
        handler = logging.FileHandler(logFile, encoding="utf-8")

    fileLogLevel = getLogLevelByStr(config.get("file-level", ""), logLevel) if "file-level" in config else logLevel
    handler.setLevel(fileLogLevel or logLevel)
    handler.setFormatter(formatter)
    return handler


def configureLogger(localLogger: logging.Logger, config: Dict[str, Any]) -> None:
    """
    Configure individual logger from config settings.

    Supported keys: level, format, propagate, console, console-level,
    file, file-level, rotate.
    """
    if "propagate" in config:
        localLogger.propagate = bool(config["propagate"])

    if "level" in config:
        logLevel = getLogLevelByStr(config["level"])
        if logLevel is not None:
            localLogger.setLevel(logLevel)

    logLevel = localLogger.getEffectiveLevel()
    formatter = logging.Formatter(config.get("format", DEFAULT_LOG_FORMAT))

    # Clear existing handlers to avoid duplicates
    for handler in localLogger.handlers[:]:
        localLogger.removeHandler(handler)

    if config.get("console", False):
        consoleLogLevel = logLevel
        if "console-level" in config:
            consoleLogLevel = getLogLevelByStr(config["console-level"], logLevel) or logLevel
        consoleHandler = logging.StreamHandler()
        consoleHandler.setLevel(consoleLogLevel)
        consoleHandler.setFormatter(formatter)
        localLogger.addHandler(consoleHandler)
        logger.debug(f"Logging {localLogger.name} to console, logLevel: {consoleLogLevel}")

    try:
        fileHandler = _makeHandler(config, logLevel, formatter)
    except OSError as e:
        logger.error(f"Failed to setup file logging for {localLogger.name}: {e}")
        fileHandler = None
    if fileHandler is not None:
        localLogger.addHandler(fileHandler)
        logger.debug(f"Logging {localLogger.name} to file: {config['file']}")


def initLogging(config: Dict[str, Any]) -> None:
    """Configure root and named loggers from the [logging] config section."""
    rootLogger = logging.getLogger()
    rootLogger.setLevel(logging.INFO)

    configureLogger(rootLogger, config)
    logLevel = rootLogger.getEffectiveLevel()

    # Prevent every HTTP request to S3 from being logged
    if logLevel < logging.WARNING:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logConfigs = config.get("logger", {})
    for loggerName, loggerConfig in logConfigs.items():
        logger.debug(f"Configuring logger '{loggerName}' with config {loggerConfig}")
        configureLogger(logging.getLogger(loggerName), loggerConfig)

    logger.info(f"Logging configured: root level={logLevel}")
