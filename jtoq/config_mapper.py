"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of JTOQ, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Mapping of a pipeline configuration to qTest request and setting objects.

The mapping functions do not validate their input. Callers check
``validate(config)`` first; a configuration that fails validation still maps,
e.g. to a request with ``container_id=0``.
"""

import logging

from jtoq.pipeline_models import (
    Container,
    CurrentSetting,
    JUnitSubmitRequest,
    LegacySetting,
    PipelineConfiguration,
    Setting,
)

logger = logging.getLogger(__name__)


def _is_positive(value: int | None) -> bool:
    return value is not None and value > 0


def validate(config: PipelineConfiguration) -> bool:
    """
    Check that a configuration carries everything a submission needs.

    The URL, API key and container type must be non-empty, and the project and
    container IDs must be positive. Environment and module IDs are not checked.
    """
    return (
        bool(config.qtest_url)
        and bool(config.api_key)
        and _is_positive(config.project_id)
        and _is_positive(config.container_id)
        and bool(config.container_type)
    )


is_valid = validate


def normalize_container_type(raw: str | None) -> str | None:
    """Upper-case a container type; ``None`` is passed through."""
    if raw is None:
        return None
    return raw.upper()


def to_submission_request(config: PipelineConfiguration) -> JUnitSubmitRequest:
    """
    Build the JUnit submit request for a configuration.

    ``create_new_test_runs_every_build_date`` only applies when submitting to an
    existing container and is ``None`` otherwise. The configuration ID and the
    build-time fields are left for the running build to fill in.
    """
    return JUnitSubmitRequest(
        qtest_url=config.qtest_url,
        api_key=config.api_key,
        configuration_id=None,
        submit_to_existing_container=config.submit_to_existing_container,
        container_id=config.container_id,
        container_type=config.container_type,
        create_new_test_runs_every_build_date=(
            config.create_new_test_runs_every_build_date
            if config.submit_to_existing_container
            else None
        ),
        environment_id=config.environment_id,
        project_id=config.project_id,
    )


def to_container_info(config: PipelineConfiguration) -> Container:
    """Describe the existing container; the type is lower-cased for the settings API."""
    return Container(
        id=config.container_id,
        type=config.container_type.lower() if config.container_type is not None else None,
        create_new_test_suite_every_build=config.create_new_test_runs_every_build_date,
    )


def to_persisted_setting(
    config: PipelineConfiguration,
    save_old_setting: bool,
    server_url: str,
    project_name: str,
) -> Setting:
    """
    Build the qTest setting persisted for a Jenkins project.

    Args:
        config: The pipeline configuration
        save_old_setting: Produce the legacy shape for older qTest versions
        server_url: Jenkins server URL
        project_name: Jenkins project name

    Returns:
        A ``LegacySetting`` when ``save_old_setting`` is set, otherwise a
        ``CurrentSetting`` carrying either the container info or a release ID.
    """
    base = {
        "id": 0,
        "jenkins_server": server_url,
        "jenkins_project_name": project_name,
        "project_id": config.project_id,
        "module_id": 0,
        "environment_id": config.environment_id,
        "test_suite_id": 0,
    }

    if save_old_setting:
        logger.debug(f"Building legacy setting for project {config.project_id}")
        return LegacySetting(**base, release_id=config.container_id)

    if config.submit_to_existing_container:
        return CurrentSetting(
            **base,
            overwrite_existing_test_steps=config.overwrite_existing_test_steps,
            container=to_container_info(config),
        )

    return CurrentSetting(
        **base,
        overwrite_existing_test_steps=config.overwrite_existing_test_steps,
        release_id=config.container_id,
    )
