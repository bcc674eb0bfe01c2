"""
Pytest configuration and common fixtures for file storage tests.

All fixtures follow camelCase naming convention.
"""

import logging

import pytest


@pytest.fixture(autouse=True)
def resetNoisyLoggers():
    """
    Restore AWS SDK logger levels changed by initLogging().

    Yields:
        None
    """
    names = ("boto3", "botocore", "s3transfer", "urllib3")
    levels = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)
