"""
Shared fixtures for imgsync tests.
"""

import logging

import pytest

from imgsync.log import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_imgsync_logger():
    """Undo the handlers installed by the CLI between tests."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers = []
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
