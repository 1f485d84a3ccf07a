"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of JTOQ, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Pipeline models module.

This module provides Pydantic models for:
- the pipeline configuration a user attaches to a build step
- the JUnit submit request sent to qTest
- the persisted qTest settings, in the legacy and the current shape
- parsed JUnit results and the qTest automation test logs built from them
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator

from jtoq.core.config import BaseConfig, env_flag


class ContainerType(str, Enum):
    """Kinds of qTest container that test runs are organised under."""

    RELEASE = "RELEASE"
    TEST_CYCLE = "TEST_CYCLE"
    TEST_SUITE = "TEST_SUITE"


class PipelineConfiguration(BaseModel):
    """
    Configuration of a JUnit submission step.

    Field aliases match the parameter names stored with the build step, so a
    stored step can be loaded with ``PipelineConfiguration.model_validate(data)``.
    Assignments are validated, which keeps ``container_type`` upper-cased when
    it is set after construction. The container type is only upper-cased; it is
    not checked against ``ContainerType``, so any non-empty value is kept.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    qtest_url: str = Field("", alias="qtestURL", description="Base URL of the qTest site")
    api_key: str = Field("", alias="apiKey", description="qTest API key (refresh token)")
    project_id: int | None = Field(0, alias="projectID", description="qTest project ID")
    container_id: int | None = Field(0, alias="containerID", description="ID of the target container")
    container_type: str | None = Field(
        "",
        alias="containerType",
        description="release, test cycle or test suite (any value is accepted)",
    )
    environment_id: int | None = Field(0, alias="environmentID", description="Environment field value ID")
    parse_test_results_pattern: str = Field(
        "", alias="parseTestResultsPattern", description="Glob pattern of JUnit result files"
    )
    # Reserved; test cases are created under a module chosen at build time.
    module_id: int = Field(0, alias="moduleID")
    overwrite_existing_test_steps: bool = Field(False, alias="overwriteExistingTestSteps")
    create_new_test_runs_every_build_date: bool = Field(False, alias="createNewTestRunsEveryBuildDate")
    parse_test_results_from_testing_tools: bool = Field(False, alias="parseTestResultsFromTestingTools")
    create_test_case_for_each_junit_test_class: bool = Field(
        False, alias="createTestCaseForEachJUnitTestClass"
    )
    submit_to_existing_container: bool = Field(False, alias="submitToExistingContainer")

    @field_validator("container_type")
    @classmethod
    def validate_container_type(cls, value):
        """Store the container type upper-cased."""
        from jtoq.config_mapper import normalize_container_type

        return normalize_container_type(value)

    @classmethod
    def new_instance(cls) -> "PipelineConfiguration":
        """Create an empty configuration, as used for a freshly added build step."""
        return cls(
            qtest_url="",
            api_key="",
            project_id=0,
            container_id=0,
            container_type="",
            environment_id=0,
            parse_test_results_pattern="",
        )

    @classmethod
    def from_env(cls, **overrides) -> "PipelineConfiguration":
        """
        Create a configuration from ``JTOQ_`` environment variables.

        Args:
        ----
            **overrides: Field values that take precedence over the environment

        """
        env = BaseConfig.get_env_var

        def flag(key: str) -> bool:
            return env_flag(env(key, "false"))

        config = {
            "qtest_url": env("QTEST_URL", ""),
            "api_key": env("QTEST_API_KEY", ""),
            "project_id": int(env("PROJECT_ID", "0")),
            "container_id": int(env("CONTAINER_ID", "0")),
            "container_type": env("CONTAINER_TYPE", ""),
            "environment_id": int(env("ENVIRONMENT_ID", "0")),
            "parse_test_results_pattern": env("RESULTS_PATTERN", ""),
            "overwrite_existing_test_steps": flag("OVERWRITE_EXISTING_TEST_STEPS"),
            "create_new_test_runs_every_build_date": flag("CREATE_NEW_TEST_RUNS_EVERY_BUILD_DATE"),
            "parse_test_results_from_testing_tools": flag("PARSE_TEST_RESULTS_FROM_TESTING_TOOLS"),
            "create_test_case_for_each_junit_test_class": flag(
                "CREATE_TEST_CASE_FOR_EACH_JUNIT_TEST_CLASS"
            ),
            "submit_to_existing_container": flag("SUBMIT_TO_EXISTING_CONTAINER"),
        }
        config.update(overrides)
        return cls(**config)

    def is_valid(self) -> bool:
        """Check that the fields required for a submission are present."""
        from jtoq.config_mapper import validate

        return validate(self)

    def create_junit_submit_request(self) -> "JUnitSubmitRequest":
        from jtoq.config_mapper import to_submission_request

        return to_submission_request(self)

    def to_setting(
        self, save_old_setting: bool, jenkins_server_url: str, jenkins_project_name: str
    ) -> "Setting":
        from jtoq.config_mapper import to_persisted_setting

        return to_persisted_setting(self, save_old_setting, jenkins_server_url, jenkins_project_name)

    def __str__(self) -> str:
        masked_key = f"{self.api_key[:4]}****" if self.api_key else ""
        return (
            f"PipelineConfiguration(qtest_url='{self.qtest_url}', api_key='{masked_key}', "
            f"project_id={self.project_id}, container_id={self.container_id}, "
            f"container_type={self.container_type}, environment_id={self.environment_id}, "
            f"parse_test_results_pattern={self.parse_test_results_pattern}, "
            f"module_id={self.module_id}, "
            f"overwrite_existing_test_steps={self.overwrite_existing_test_steps}, "
            f"create_new_test_runs_every_build_date={self.create_new_test_runs_every_build_date}, "
            f"submit_to_existing_container={self.submit_to_existing_container}, "
            f"parse_test_results_from_testing_tools={self.parse_test_results_from_testing_tools}, "
            f"create_test_case_for_each_junit_test_class="
            f"{self.create_test_case_for_each_junit_test_class})"
        )


class JUnitSubmitRequest(BaseModel):
    """
    Request describing where and how JUnit results are submitted.

    The configuration fills in what is statically known. ``module_id``,
    ``environment_parent_id``, the Jenkins server URL, the Jenkins project name
    and the build details are filled in by the build that runs the submission.
    """

    model_config = ConfigDict(populate_by_name=True)

    qtest_url: str = Field("", alias="qTestURL")
    api_key: str = Field("", alias="apiKey")
    configuration_id: int | None = Field(None, alias="configurationID")
    submit_to_existing_container: bool = Field(False, alias="submitToExistingContainer")
    container_id: int | None = Field(None, alias="containerID")
    container_type: str | None = Field(None, alias="containerType")
    create_new_test_runs_every_build_date: bool | None = Field(
        None, alias="createNewTestRunsEveryBuildDate"
    )
    environment_id: int | None = Field(None, alias="environmentID")
    environment_parent_id: int | None = Field(None, alias="environmentParentID")
    project_id: int | None = Field(None, alias="projectID")
    module_id: int | None = Field(None, alias="moduleID")
    jenkins_server_url: str | None = Field(None, alias="jenkinsServerURL")
    jenkins_project_name: str | None = Field(None, alias="jenkinsProjectName")
    build_number: str | None = Field(None, alias="buildNumber")
    build_path: str | None = Field(None, alias="buildPath")


class Container(BaseModel):
    """Existing qTest container a setting submits into."""

    id: int | None = None
    type: str | None = Field(None, description="Container type in lower case")
    create_new_test_suite_every_build: bool | None = None


class LegacySetting(BaseModel):
    """
    Setting shape understood by older qTest versions.

    The container is always stored as ``release_id``.
    """

    kind: Literal["legacy"] = Field("legacy", exclude=True)

    id: int = 0
    jenkins_server: str | None = None
    jenkins_project_name: str | None = None
    project_id: int | None = None
    module_id: int = 0
    environment_id: int | None = None
    test_suite_id: int = 0
    release_id: int | None = None


class CurrentSetting(BaseModel):
    """
    Setting shape for current qTest versions.

    Exactly one of ``container`` and ``release_id`` is populated.
    """

    kind: Literal["current"] = Field("current", exclude=True)

    id: int = 0
    jenkins_server: str | None = None
    jenkins_project_name: str | None = None
    project_id: int | None = None
    module_id: int = 0
    environment_id: int | None = None
    test_suite_id: int = 0
    overwrite_existing_test_steps: bool = False
    container: Container | None = None
    release_id: int | None = None


def _setting_kind(value: Any) -> str:
    if isinstance(value, dict):
        if value.get("kind"):
            return value["kind"]
        return "current" if "overwrite_existing_test_steps" in value else "legacy"
    return getattr(value, "kind", "legacy")


Setting = Annotated[
    Union[
        Annotated[LegacySetting, Tag("legacy")],
        Annotated[CurrentSetting, Tag("current")],
    ],
    Discriminator(_setting_kind),
]


class TestStatus(str, Enum):
    """Execution status reported to qTest."""

    __test__ = False

    PASS = "PASS"
    FAIL = "FAIL"
    SKIP = "SKIP"


class JUnitTestCase(BaseModel):
    """A single ``<testcase>`` element."""

    name: str
    classname: str = ""
    status: TestStatus = TestStatus.PASS
    duration: float = 0.0
    message: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None


class JUnitTestSuite(BaseModel):
    """A ``<testsuite>`` element and its test cases."""

    name: str = ""
    source: str | None = None
    timestamp: datetime | None = None
    cases: list[JUnitTestCase] = Field(default_factory=list)

    @property
    def failures(self) -> int:
        return sum(1 for case in self.cases if case.status == TestStatus.FAIL)

    @property
    def skipped(self) -> int:
        return sum(1 for case in self.cases if case.status == TestStatus.SKIP)


class AutomationTestStepLog(BaseModel):
    """Step-level result inside an automation test log."""

    order: int
    description: str
    expected_result: str
    status: TestStatus


class AutomationTestLog(BaseModel):
    """Test log item accepted by qTest's automation test-log endpoint."""

    name: str
    automation_content: str
    status: TestStatus
    exe_start_date: datetime
    exe_end_date: datetime
    module_names: list[str] = Field(default_factory=list)
    note: str | None = None
    test_step_logs: list[AutomationTestStepLog] = Field(default_factory=list)
