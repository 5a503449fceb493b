from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from junitparser import Failure, JUnitXml, TestCase, TestSuite

from testsupport.failures import FailureRecord

SUITE_NAME = "testsupport"


def write_junit(
    path: Path,
    records_by_test: dict[str, list[FailureRecord]],
    durations: dict[str, float] | None = None,
) -> Path:
    """Write junit.xml with one test case per test and one failure per record."""
    durations = durations or {}
    xml = JUnitXml()
    suite = TestSuite(SUITE_NAME)

    for test_id, records in records_by_test.items():
        module, _, name = test_id.rpartition("::")
        case = TestCase(name or test_id)
        case.classname = module
        if records:
            case.result = [
                Failure(f"{record.description} ({record.location})", record.kind.value)
                for record in records
            ]
        case.time = float(durations.get(test_id, 0.0))
        suite.add_testcase(case)

    suite.update_statistics()
    suite.add_property("failure_records", str(sum(len(r) for r in records_by_test.values())))
    xml.append(suite)

    path.parent.mkdir(parents=True, exist_ok=True)
    xml.write(str(path), pretty=True)
    return path


@dataclass
class JUnitSummary:
    tests: int
    failed_tests: int
    failures: list[tuple[str, str]]


def summarize_junit(path: Path) -> JUnitSummary:
    """Read a junit.xml back into (test, message) failure pairs."""
    xml = JUnitXml.fromfile(str(path))
    # pytest writes a bare <testsuite> root on some versions
    suites = [xml] if isinstance(xml, TestSuite) else list(xml)
    tests = 0
    failed_tests = 0
    failures: list[tuple[str, str]] = []
    for suite in suites:
        for case in suite:
            tests += 1
            results = [r for r in case.result if isinstance(r, Failure)]
            if results:
                failed_tests += 1
            for result in results:
                failures.append((f"{case.classname}::{case.name}", result.message or ""))
    return JUnitSummary(tests=tests, failed_tests=failed_tests, failures=failures)
