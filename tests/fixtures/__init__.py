"""
Fixtures package for the jtoq testing framework.

This package provides reusable fixtures and sample data
to standardize the approach to testing throughout the project.
"""

from tests.fixtures.base import (
    base_test_env,
    mock_env_vars,
    temp_dir,
    mock_response,
)

from tests.fixtures.pipeline import (
    SAMPLE_JUNIT_XML,
    codec,
    make_configuration,
    valid_configuration,
    junit_report_xml,
    workspace,
)
