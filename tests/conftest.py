"""Pytest configuration for the envreport test suite."""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_envreport_logger():
    """Drop handlers installed by cli.main() so they don't outlive a test's captured stderr."""
    yield
    logger = logging.getLogger("envreport")
    logger.handlers = []
    logger.setLevel(logging.NOTSET)
