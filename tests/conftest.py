"""
Test configuration and fixtures for the jtoq project.

This file is the root pytest configuration file that sets up pytest
markers and imports fixtures from the fixtures modules to make them
available to all tests.
"""

import logging

import pytest

from tests.fixtures.base import (
    base_test_env,
    mock_env_vars,
    temp_dir,
    mock_response,
)
from tests.fixtures.pipeline import (
    codec,
    valid_configuration,
    junit_report_xml,
    workspace,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark a test as a unit test")
    config.addinivalue_line("markers", "integration: mark a test as an integration test")
    config.addinivalue_line("markers", "cli: mark a test that tests CLI functionality")


@pytest.fixture(autouse=True)
def reset_jtoq_logging():
    """Undo CLI logging setup so caplog sees records from the jtoq loggers."""
    yield
    logger = logging.getLogger("jtoq")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
