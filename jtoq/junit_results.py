"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of JTOQ, licensed under the MIT License.
See LICENSE file for details.
"""

"""
JUnit result collection.

This module finds JUnit XML report files in a build workspace, parses them into
``JUnitTestSuite`` models and turns the parsed cases into qTest automation test
logs, either one log per test method or one log per test class.
"""

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from pathlib import Path

from jtoq.core.exceptions import ResultParseError
from jtoq.json_codec import JsonCodec
from jtoq.pipeline_models import (
    AutomationTestLog,
    AutomationTestStepLog,
    JUnitTestCase,
    JUnitTestSuite,
    TestStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_RESULTS_PATTERN = "**/*.xml"


def collect_result_files(base_dir: Path, pattern: str | None = None) -> list[Path]:
    """
    Find result files under ``base_dir``.

    Args:
        base_dir: Workspace directory the pattern is relative to
        pattern: Glob pattern, or several separated by commas

    Returns:
        Matching files, sorted and without duplicates
    """
    patterns = [p.strip() for p in (pattern or DEFAULT_RESULTS_PATTERN).split(",") if p.strip()]
    files: set[Path] = set()
    for glob_pattern in patterns:
        matched = [path for path in base_dir.glob(glob_pattern) if path.is_file()]
        logger.debug(f"Pattern '{glob_pattern}' matched {len(matched)} file(s) in {base_dir}")
        files.update(matched)
    return sorted(files)


class JUnitResultParser:
    """Parser for JUnit XML report files.

    Handles both ``<testsuites>`` and ``<testsuite>`` roots, as written by
    Maven Surefire, Gradle, pytest and most other JUnit-style reporters.
    """

    def __init__(self, codec: JsonCodec | None = None):
        self.codec = codec or JsonCodec()

    def parse(self, content: str, source: str | None = None) -> list[JUnitTestSuite]:
        """
        Parse JUnit XML content.

        Raises:
            ResultParseError: If the content is not well-formed JUnit XML
        """
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise ResultParseError(f"Malformed XML: {e}", source) from e

        if root.tag == "testsuite":
            suite_elements = [root]
        elif root.tag == "testsuites":
            suite_elements = root.findall(".//testsuite")
        else:
            raise ResultParseError(f"Unexpected root element <{root.tag}>", source)

        return [self._parse_suite(element, source) for element in suite_elements]

    def parse_file(self, path: Path) -> list[JUnitTestSuite]:
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ResultParseError(f"Cannot read file: {e}", str(path)) from e
        return self.parse(content, str(path))

    def parse_files(self, paths: Iterable[Path]) -> list[JUnitTestSuite]:
        suites: list[JUnitTestSuite] = []
        for path in paths:
            parsed = self.parse_file(path)
            logger.info(f"Parsed {sum(len(s.cases) for s in parsed)} test case(s) from {path}")
            suites.extend(parsed)
        return suites

    def _parse_suite(self, element: ET.Element, source: str | None) -> JUnitTestSuite:
        timestamp = self.codec.parse_timestamp(element.get("timestamp"))
        cursor = timestamp
        cases: list[JUnitTestCase] = []

        for testcase in element.findall("testcase"):
            duration = _parse_duration(testcase.get("time"))
            status, message = _case_outcome(testcase)
            started_at = cursor
            finished_at = started_at + timedelta(seconds=duration) if started_at else None
            cases.append(
                JUnitTestCase(
                    name=testcase.get("name", ""),
                    classname=testcase.get("classname", "") or element.get("name", ""),
                    status=status,
                    duration=duration,
                    message=message,
                    started_at=started_at,
                    finished_at=finished_at,
                )
            )
            cursor = finished_at

        return JUnitTestSuite(
            name=element.get("name", ""),
            source=source,
            timestamp=timestamp,
            cases=cases,
        )


def _parse_duration(value: str | None) -> float:
    try:
        return max(float((value or "0").replace(",", "")), 0.0)
    except ValueError:
        return 0.0


def _case_outcome(testcase: ET.Element) -> tuple[TestStatus, str | None]:
    for tag in ("failure", "error"):
        child = testcase.find(tag)
        if child is not None:
            return TestStatus.FAIL, child.get("message") or (child.text or "").strip() or None
    skipped = testcase.find("skipped")
    if skipped is not None:
        return TestStatus.SKIP, skipped.get("message")
    return TestStatus.PASS, None


def _module_names(classname: str) -> list[str]:
    return classname.split(".")[:-1]


def _case_times(case: JUnitTestCase, now: datetime) -> tuple[datetime, datetime]:
    start = case.started_at or now
    end = case.finished_at or start + timedelta(seconds=case.duration)
    return start, end


def _method_log(case: JUnitTestCase, now: datetime) -> AutomationTestLog:
    start, end = _case_times(case, now)
    return AutomationTestLog(
        name=case.name,
        automation_content=f"{case.classname}#{case.name}" if case.classname else case.name,
        status=case.status,
        exe_start_date=start,
        exe_end_date=end,
        module_names=_module_names(case.classname),
        note=case.message,
    )


def _class_log(classname: str, cases: list[JUnitTestCase], now: datetime) -> AutomationTestLog:
    if any(case.status == TestStatus.FAIL for case in cases):
        status = TestStatus.FAIL
    elif all(case.status == TestStatus.SKIP for case in cases):
        status = TestStatus.SKIP
    else:
        status = TestStatus.PASS

    times = [_case_times(case, now) for case in cases]
    notes = [f"{case.name}: {case.message}" for case in cases if case.message]
    return AutomationTestLog(
        name=classname,
        automation_content=classname,
        status=status,
        exe_start_date=min(start for start, _ in times),
        exe_end_date=max(end for _, end in times),
        module_names=_module_names(classname),
        note="\n".join(notes) or None,
        test_step_logs=[
            AutomationTestStepLog(
                order=index,
                description=case.name,
                expected_result=case.name,
                status=case.status,
            )
            for index, case in enumerate(cases, start=1)
        ],
    )


def to_automation_logs(
    suites: Iterable[JUnitTestSuite],
    create_test_case_for_each_class: bool = False,
    now: datetime | None = None,
) -> list[AutomationTestLog]:
    """
    Build qTest automation test logs from parsed suites.

    Args:
        suites: Parsed JUnit suites
        create_test_case_for_each_class: One log per test class, with each test
            method as a step, instead of one log per test method
        now: Execution time used for cases without a suite timestamp

    """
    now = now or datetime.now(UTC)
    cases = [case for suite in suites for case in suite.cases]

    if not create_test_case_for_each_class:
        return [_method_log(case, now) for case in cases]

    by_class: dict[str, list[JUnitTestCase]] = {}
    for case in cases:
        by_class.setdefault(case.classname, []).append(case)
    return [_class_log(classname, grouped, now) for classname, grouped in by_class.items()]
