"""
filestorage - command line access to a local or S3 file storage backend.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from filestorage.builder import StorageType, buildStorageFromConfig
from filestorage.config.manager import ConfigManager
from filestorage.contract import AbstractFileStorage
from filestorage.exceptions import StorageError
from filestorage.logging_utils import initLogging

# Configure basic logging first
logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.WARNING)
logger = logging.getLogger(__name__)


def parseArguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="File storage over local filesystem or S3, dood!")
    parser.add_argument(
        "-c",
        "--config",
        default="",
        help="Path to TOML configuration file (default: environment only)",
    )
    parser.add_argument(
        "-t",
        "--type",
        choices=["local", "fs", "object-store", "s3"],
        help="Storage backend type (default: storage.type from config, or local)",
    )
    parser.add_argument("--dot-env", default=".env", help="Path to .env file (default: .env)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    catParser = subparsers.add_parser("cat", help="Print file content to stdout")
    catParser.add_argument("path")

    putParser = subparsers.add_parser("put", help="Write stdin (or --file) to a file")
    putParser.add_argument("path")
    putParser.add_argument("-f", "--file", help="Read content from this local file instead of stdin")
    putParser.add_argument("--create", action="store_true", help="Create the target before writing")

    touchParser = subparsers.add_parser("touch", help="Create an empty file")
    touchParser.add_argument("path")

    rmParser = subparsers.add_parser("rm", help="Remove a file")
    rmParser.add_argument("path")

    cpParser = subparsers.add_parser("cp", help="Copy a file")
    cpParser.add_argument("source")
    cpParser.add_argument("target")

    lsParser = subparsers.add_parser("ls", help="List a directory or key prefix")
    lsParser.add_argument("path", nargs="?", default="")

    mkdirParser = subparsers.add_parser("mkdir", help="Create a directory with parents (bucket on S3)")
    mkdirParser.add_argument("path", nargs="?", default="")

    rmdirParser = subparsers.add_parser("rmdir", help="Remove a directory tree or key prefix")
    rmdirParser.add_argument("path")

    args = parser.parse_args(argv)
    # Convert relative config path before anything can change working directory
    if args.config:
        args.config = os.path.abspath(args.config)
    return args


def runCommand(storage: AbstractFileStorage, args: argparse.Namespace) -> None:
    """Dispatch a parsed command to the storage contract."""
    match args.command:
        case "cat":
            sys.stdout.buffer.write(storage.readFile(args.path))
            sys.stdout.buffer.flush()
        case "put":
            if args.file:
                with open(args.file, "rb") as f:
                    data = f.read()
            else:
                data = sys.stdin.buffer.read()
            if args.create:
                storage.createFile(args.path)
            storage.write(args.path, data)
        case "touch":
            storage.createFile(args.path)
        case "rm":
            storage.removeFile(args.path)
        case "cp":
            storage.copy(args.source, args.target)
        case "ls":
            for entry in storage.readDir(args.path):
                print(entry)
        case "mkdir":
            storage.createDirAll(args.path)
        case "rmdir":
            storage.removeDirAll(args.path)
        case _:
            raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point, returns process exit status."""
    args = parseArguments(argv)

    configManager = ConfigManager(args.config, dotEnvFile=args.dot_env)
    loggingConfig = dict(configManager.getLoggingConfig())
    if args.verbose:
        loggingConfig["level"] = "DEBUG"
        loggingConfig.setdefault("console", True)
    initLogging(loggingConfig)

    storageConfig = configManager.config.setdefault("storage", {})
    if args.type:
        storageConfig["type"] = args.type
    storageConfig.setdefault("type", StorageType.LOCAL.value)

    try:
        storage = buildStorageFromConfig(configManager)
        runCommand(storage, args)
    except (StorageError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
