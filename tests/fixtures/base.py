"""
Base fixtures for the jtoq testing framework.

This module provides foundational fixtures that can be used across all test types
to ensure consistent test setup and teardown.
"""

import os
import sys
import tempfile
from pathlib import Path
from typing import Dict, Generator
from unittest.mock import MagicMock

import pytest

PROJECT_ROOT = Path(__file__).parent.parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def base_test_env() -> Dict[str, str]:
    """
    Provide a standardized set of environment variables for testing.

    Returns:
        Dict[str, str]: Dictionary of environment variables
    """
    return {
        "JTOQ_LOG_LEVEL": "DEBUG",
        "JTOQ_QTEST_URL": "https://qtest.example.com",
        "JTOQ_QTEST_API_KEY": "test-refresh-token",
        "JTOQ_PROJECT_ID": "12345",
        "JTOQ_CONTAINER_ID": "678",
        "JTOQ_CONTAINER_TYPE": "test_cycle",
        "JTOQ_ENVIRONMENT_ID": "9",
        "JTOQ_RESULTS_PATTERN": "**/TEST-*.xml",
        "JTOQ_SUBMIT_TO_EXISTING_CONTAINER": "true",
    }


@pytest.fixture
def mock_env_vars(base_test_env: Dict[str, str]) -> Generator[Dict[str, str], None, None]:
    """
    Set and restore environment variables for tests.

    Args:
        base_test_env: The base testing environment variables

    Yields:
        Dict[str, str]: The applied environment variables
    """
    original_environ = os.environ.copy()

    os.environ.update(base_test_env)

    yield base_test_env

    os.environ.clear()
    os.environ.update(original_environ)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory that is removed after the test.

    Yields:
        Path: Path to the temporary directory
    """
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def mock_response() -> MagicMock:
    """
    Create a mock HTTP response object for testing.

    Returns:
        MagicMock: A mock response object
    """
    mock = MagicMock()
    mock.status_code = 200
    mock.text = '{"id": 4321, "state": "IN_WAITING"}'
    mock.headers = {"Content-Type": "application/json"}
    return mock
