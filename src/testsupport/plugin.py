"""pytest plugin: the ``expect`` fixture and JUnit export of recorded failures."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest
import yaml

from testsupport.config import SupportConfig, find_config, load_config
from testsupport.expect import Expect
from testsupport.failures import CollectingRecorder, FailureRecord
from testsupport.verbose import setup_logger

logger = logging.getLogger("testsupport.plugin")

_CONFIG_KEY = pytest.StashKey[SupportConfig]()
_RESULTS_KEY = pytest.StashKey[dict[str, list[FailureRecord]]]()
_DURATIONS_KEY = pytest.StashKey[dict[str, float]]()
_RECORDER_KEY = pytest.StashKey[CollectingRecorder]()
_SURFACED_KEY = pytest.StashKey[int]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("testsupport", "recording assertions")
    group.addoption(
        "--testsupport-config",
        default=None,
        help="Path to testsupport.yaml (defaults to <rootdir>/testsupport.yaml)",
    )
    group.addoption(
        "--testsupport-junit",
        default=None,
        help="Write failures recorded through the expect fixture to this JUnit XML file",
    )


def pytest_configure(config: pytest.Config) -> None:
    option = config.getoption("testsupport_config", default=None)
    config_path = Path(option) if option else find_config(config.rootpath)
    if config_path is not None:
        try:
            support_config = load_config(config_path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise pytest.UsageError(f"testsupport: invalid config {config_path}: {e}") from e
    else:
        support_config = SupportConfig()

    junit_option = config.getoption("testsupport_junit", default=None)
    if junit_option:
        support_config.junit.path = junit_option

    log_cfg = support_config.logging
    if log_cfg.debug_file or log_cfg.verbose:
        debug_file = Path(log_cfg.debug_file) if log_cfg.debug_file else None
        setup_logger(debug_file, verbose=log_cfg.verbose)

    config.stash[_CONFIG_KEY] = support_config
    config.stash[_RESULTS_KEY] = {}
    config.stash[_DURATIONS_KEY] = {}
    logger.debug(f"Loaded config from {config_path or 'defaults'}")


@pytest.fixture
def expect(request: pytest.FixtureRequest) -> Iterator[Expect]:
    """Expect bound to a per-test recorder; recorded failures fail the test.

    Failures recorded during the test body are reported on the test itself.
    Anything recorded afterwards, by fixtures tearing down, fails the
    teardown of the test.
    """
    item = request.node
    recorder = CollectingRecorder()
    item.stash[_RECORDER_KEY] = recorder
    yield Expect(recorder, request.config.stash[_CONFIG_KEY])

    records = recorder.records
    late = records[item.stash.get(_SURFACED_KEY, 0):]
    if not late:
        return
    item.config.stash[_RESULTS_KEY][item.nodeid] = records
    item.stash[_SURFACED_KEY] = len(records)
    pytest.fail(format_failures(late), pytrace=False)


def format_failures(records: list[FailureRecord]) -> str:
    lines = [f"{len(records)} expectation(s) failed:"]
    for record in records:
        lines.append(f"  {record.location}: [{record.kind.value}] {record.description}")
    return "\n".join(lines)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo) -> Iterator[None]:
    outcome = yield
    report: pytest.TestReport = outcome.get_result()
    if call.when != "call":
        return
    recorder = item.stash.get(_RECORDER_KEY, None)
    if recorder is None:
        return

    records = recorder.records
    item.stash[_SURFACED_KEY] = len(records)
    item.config.stash[_RESULTS_KEY][item.nodeid] = records
    item.config.stash[_DURATIONS_KEY][item.nodeid] = report.duration
    if not records:
        return

    text = format_failures(records)
    # An expected failure (xfail) is left as reported.
    if report.passed or (report.skipped and not hasattr(report, "wasxfail")):
        report.outcome = "failed"
        report.longrepr = text
    else:
        report.sections.append(("testsupport failures", text))


def pytest_sessionfinish(session: pytest.Session) -> None:
    config = session.config
    if _CONFIG_KEY not in config.stash:
        return
    junit_path = config.stash[_CONFIG_KEY].junit.path
    results = config.stash[_RESULTS_KEY]
    if not junit_path or not results:
        return

    from testsupport.reporting.junit import write_junit

    path = write_junit(Path(junit_path), results, config.stash[_DURATIONS_KEY])
    logger.info(f"Wrote {len(results)} test result(s) to {path}")
