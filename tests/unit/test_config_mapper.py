"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of JTOQ, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Unit tests for mapping a pipeline configuration to qTest request and setting objects.
"""

import pytest

from jtoq.config_mapper import (
    is_valid,
    normalize_container_type,
    to_persisted_setting,
    to_submission_request,
    validate,
)
from jtoq.pipeline_models import Container, CurrentSetting, LegacySetting
from tests.fixtures.pipeline import make_configuration


@pytest.mark.unit
class TestValidate:
    def test_complete_configuration_is_valid(self):
        config = make_configuration(
            qtest_url="x", api_key="y", project_id=5, container_id=5, container_type="RELEASE"
        )
        assert validate(config) is True
        assert is_valid(config) is True
        assert config.is_valid() is True

    @pytest.mark.parametrize(
        "overrides",
        [
            {"qtest_url": ""},
            {"api_key": ""},
            {"container_type": ""},
            {"container_type": None},
            {"project_id": 0},
            {"project_id": -1},
            {"project_id": None},
            {"container_id": 0},
            {"container_id": -7},
            {"container_id": None},
        ],
    )
    def test_missing_required_field_is_invalid(self, overrides):
        assert validate(make_configuration(**overrides)) is False

    def test_zero_project_with_positive_container_is_invalid(self):
        assert validate(make_configuration(project_id=0, container_id=5)) is False

    def test_environment_and_module_are_not_checked(self):
        config = make_configuration(environment_id=0, module_id=0)
        assert validate(config) is True
        assert validate(make_configuration(environment_id=None)) is True

    def test_new_instance_is_invalid(self):
        from jtoq.pipeline_models import PipelineConfiguration

        assert PipelineConfiguration.new_instance().is_valid() is False


@pytest.mark.unit
class TestNormalizeContainerType:
    def test_upper_cases(self):
        assert normalize_container_type("release") == "RELEASE"
        assert normalize_container_type("Test_Cycle") == "TEST_CYCLE"

    def test_none_passes_through(self):
        assert normalize_container_type(None) is None

    def test_empty_string_stays_empty(self):
        assert normalize_container_type("") == ""

    def test_idempotent(self):
        once = normalize_container_type("test_suite")
        assert normalize_container_type(once) == once


@pytest.mark.unit
class TestToSubmissionRequest:
    def test_copies_configuration_fields(self):
        config = make_configuration(container_type="test_cycle")
        request = to_submission_request(config)

        assert request.qtest_url == "https://qtest.example.com"
        assert request.api_key == "test-refresh-token"
        assert request.project_id == 12345
        assert request.container_id == 678
        assert request.container_type == "TEST_CYCLE"
        assert request.environment_id == 9
        assert request.configuration_id is None

    def test_build_time_fields_are_left_empty(self):
        request = to_submission_request(make_configuration())
        assert request.module_id is None
        assert request.jenkins_server_url is None
        assert request.jenkins_project_name is None
        assert request.environment_parent_id is None

    @pytest.mark.parametrize("flag", [True, False])
    def test_new_runs_flag_dropped_when_not_submitting_to_existing_container(self, flag):
        config = make_configuration(
            submit_to_existing_container=False, create_new_test_runs_every_build_date=flag
        )
        request = to_submission_request(config)
        assert request.submit_to_existing_container is False
        assert request.create_new_test_runs_every_build_date is None

    @pytest.mark.parametrize("flag", [True, False])
    def test_new_runs_flag_kept_when_submitting_to_existing_container(self, flag):
        config = make_configuration(
            submit_to_existing_container=True, create_new_test_runs_every_build_date=flag
        )
        request = to_submission_request(config)
        assert request.create_new_test_runs_every_build_date is flag

    def test_invalid_configuration_still_maps(self):
        # Mapping does not validate; callers must check validate() first.
        config = make_configuration(container_id=0, api_key="")
        request = to_submission_request(config)
        assert request.container_id == 0
        assert request.api_key == ""

    def test_serialized_request_uses_aliases(self, codec):
        request = make_configuration().create_junit_submit_request()
        node = codec.parse(codec.serialize(request))
        assert node["qTestURL"] == "https://qtest.example.com"
        assert node["containerType"] == "RELEASE"
        assert node["createNewTestRunsEveryBuildDate"] is None
        assert node["configurationID"] is None


@pytest.mark.unit
class TestToPersistedSetting:
    def test_old_shape(self):
        config = make_configuration(
            submit_to_existing_container=True, overwrite_existing_test_steps=True
        )
        setting = to_persisted_setting(config, True, "https://jenkins.example.com", "my-job")

        assert isinstance(setting, LegacySetting)
        assert setting.id == 0
        assert setting.jenkins_server == "https://jenkins.example.com"
        assert setting.jenkins_project_name == "my-job"
        assert setting.project_id == 12345
        assert setting.module_id == 0
        assert setting.environment_id == 9
        assert setting.test_suite_id == 0
        assert setting.release_id == 678
        assert not hasattr(setting, "overwrite_existing_test_steps")
        assert not hasattr(setting, "container")

    @pytest.mark.parametrize("submit_to_existing", [True, False])
    def test_old_shape_release_id_is_container_id(self, submit_to_existing):
        config = make_configuration(container_id=42, submit_to_existing_container=submit_to_existing)
        setting = to_persisted_setting(config, True, "", "")
        assert setting.release_id == 42

    def test_new_shape_with_existing_container(self):
        config = make_configuration(
            container_type="Test_Suite",
            submit_to_existing_container=True,
            create_new_test_runs_every_build_date=True,
            overwrite_existing_test_steps=True,
        )
        setting = to_persisted_setting(config, False, "https://jenkins.example.com", "my-job")

        assert isinstance(setting, CurrentSetting)
        assert setting.overwrite_existing_test_steps is True
        assert setting.release_id is None
        assert setting.container == Container(
            id=678, type="test_suite", create_new_test_suite_every_build=True
        )

    def test_new_shape_lowercases_only_the_container_info(self):
        config = make_configuration(container_type="test_cycle", submit_to_existing_container=True)
        setting = to_persisted_setting(config, False, "", "")
        request = to_submission_request(config)

        assert setting.container.type == "test_cycle"
        assert request.container_type == "TEST_CYCLE"

    def test_new_shape_without_existing_container(self):
        config = make_configuration(
            submit_to_existing_container=False, overwrite_existing_test_steps=False
        )
        setting = to_persisted_setting(config, False, "", "")

        assert isinstance(setting, CurrentSetting)
        assert setting.container is None
        assert setting.release_id == 678
        assert setting.overwrite_existing_test_steps is False

    def test_to_setting_delegates(self, valid_configuration):
        setting = valid_configuration.to_setting(True, "server", "project")
        assert isinstance(setting, LegacySetting)
        assert setting.jenkins_server == "server"

    def test_legacy_setting_serialization_has_no_current_fields(self, codec):
        setting = make_configuration().to_setting(True, "server", "project")
        node = codec.parse(codec.serialize(setting))
        assert node["release_id"] == 678
        assert "overwrite_existing_test_steps" not in node
        assert "container" not in node
        assert "kind" not in node
