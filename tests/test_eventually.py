"""Tests for the polling expectation helpers."""

import inspect
import threading
import time

from testsupport import Expect, FailureKind, Outcome, SupportConfig, Waiter
from testsupport.failures import CollectingRecorder, SourceLocation
from testsupport.waiter import WaitResult


class CountingWaiter(Waiter):
    """Waiter that counts how often it is engaged."""

    def __init__(self, poll_interval=0.01):
        super().__init__(poll_interval)
        self.calls = 0

    def wait(self, expectations, timeout):
        self.calls += 1
        return super().wait(expectations, timeout)


class FixedResultWaiter(Waiter):
    def __init__(self, result):
        super().__init__()
        self.result = result

    def wait(self, expectations, timeout):
        return self.result


# --- generic primitive ---


def test_already_true_records_nothing(expect, recorder):
    assert expect.eventually(lambda: True, timeout=0.1) == Outcome.SATISFIED
    assert recorder.records == []


def test_becomes_true_before_timeout(expect, recorder):
    flag = threading.Event()
    threading.Timer(0.05, flag.set).start()
    assert expect.eventually(flag.is_set, timeout=2) == Outcome.SATISFIED
    assert len(recorder) == 0


def test_never_true_records_one_timeout(expect, recorder):
    start = time.monotonic()
    outcome = expect.eventually(lambda: False, timeout=0.1)
    elapsed = time.monotonic() - start

    assert outcome == Outcome.TIMED_OUT
    assert elapsed >= 0.1
    assert elapsed < 0.1 + 0.01 + 0.2
    [record] = recorder.records
    assert record.kind == FailureKind.TIMED_OUT
    assert "Timed out after 0.1s" in record.description
    assert record.description == "Expected this to eventually be satisfied. Timed out after 0.1s."


def test_failure_points_at_call_site(expect, recorder):
    line = inspect.currentframe().f_lineno + 1
    expect.eventually(lambda: False, timeout=0.02)
    [record] = recorder.records
    assert record.location.file == __file__
    assert record.location.line == line


def test_explicit_location_is_used(expect, recorder):
    where = SourceLocation("steps/login.py", 42)
    expect.eventually(lambda: False, timeout=0.02, location=where)
    assert recorder.records[0].location == where


def test_repeated_calls_are_independent(expect, recorder):
    expect.eventually(lambda: True, timeout=0.05)
    expect.eventually(lambda: True, timeout=0.05)
    assert len(recorder) == 0

    expect.eventually(lambda: False, timeout=0.05)
    assert len(recorder) == 1
    expect.eventually(lambda: False, timeout=0.05)
    assert len(recorder) == 2
    assert all(r.kind == FailureKind.TIMED_OUT for r in recorder.records)


def test_counter_mutated_by_concurrent_actor(expect, recorder):
    state = {"counter": 0}

    def bump():
        time.sleep(0.2)
        state["counter"] = 5

    threading.Thread(target=bump).start()
    start = time.monotonic()
    outcome = expect.eventually(lambda: state["counter"] == 5, subject="counter", timeout=5)
    elapsed = time.monotonic() - start

    assert outcome == Outcome.SATISFIED
    assert recorder.records == []
    assert 0.2 <= elapsed < 1.0


def test_default_timeout_comes_from_config(recorder):
    config = SupportConfig(eventually={"timeout": 0.05, "poll_interval": 0.01})
    expect = Expect(recorder, config)
    expect.eventually(lambda: False)
    assert "Timed out after 0.05s" in recorder.records[0].description


def test_default_subject_comes_from_config(recorder):
    config = SupportConfig(subject="the widget")
    expect = Expect(recorder, config, waiter=Waiter(0.01))
    expect.eventually_true(lambda: False, timeout=0.02)
    assert recorder.records[0].description.startswith("Expected the widget to eventually be true.")


def test_interrupted_wait_reports_error():
    recorder = CollectingRecorder()
    expect = Expect(recorder, waiter=FixedResultWaiter(WaitResult.INTERRUPTED))
    outcome = expect.eventually_none(lambda: 1, subject="token", timeout=1)

    assert outcome == Outcome.ERROR
    [record] = recorder.records
    assert record.kind == FailureKind.UNMATCHED_EXPECTED_FAILURE
    assert record.description == (
        "Unexpected result while waiting for token to eventually be None: interrupted"
    )


def test_predicate_exception_reports_error_without_raising(expect, recorder):
    def broken():
        raise KeyError("missing")

    outcome = expect.eventually_not_none(broken, subject="session")
    assert outcome == Outcome.ERROR
    [record] = recorder.records
    assert record.kind == FailureKind.UNMATCHED_EXPECTED_FAILURE
    assert "session to eventually not be None: errored (KeyError('missing'))" in record.description


# --- value variants ---


def test_eventually_none(expect, recorder):
    box = {"value": "x"}
    threading.Timer(0.03, box.update, kwargs={"value": None}).start()
    assert expect.eventually_none(lambda: box["value"]) == Outcome.SATISFIED
    expect.eventually_none(lambda: "still here", subject="cache", timeout=0.02)
    assert recorder.records[0].description == (
        "Expected cache to eventually be None. Timed out after 0.02s."
    )


def test_eventually_not_none(expect, recorder):
    expect.eventually_not_none(lambda: 0)
    expect.eventually_not_none(lambda: None, timeout=0.02)
    [record] = recorder.records
    assert "Expected this to eventually not be None." in record.description


def test_eventually_true_and_false(expect, recorder):
    expect.eventually_true(lambda: True)
    expect.eventually_false(lambda: False)
    assert len(recorder) == 0

    expect.eventually_true(lambda: False, subject="ready", timeout=0.02)
    expect.eventually_false(lambda: True, subject="busy", timeout=0.02)
    descriptions = [r.description for r in recorder.records]
    assert descriptions == [
        "Expected ready to eventually be true. Timed out after 0.02s.",
        "Expected busy to eventually be false. Timed out after 0.02s.",
    ]


# --- equality variants ---


def test_equal_fast_path_skips_waiter(recorder):
    waiter = CountingWaiter()
    expect = Expect(recorder, waiter=waiter)
    assert expect.eventually_equal(lambda: 5, lambda: 5) == Outcome.SATISFIED
    assert waiter.calls == 0
    assert len(recorder) == 0


def test_equal_reevaluates_both_sides(recorder):
    waiter = CountingWaiter()
    expect = Expect(recorder, waiter=waiter)
    state = {"actual": 1, "expected": 3}

    def move():
        time.sleep(0.03)
        state["expected"] = 2
        time.sleep(0.03)
        state["actual"] = 2

    threading.Thread(target=move).start()
    assert expect.eventually_equal(lambda: state["actual"], lambda: state["expected"], timeout=2) == Outcome.SATISFIED
    assert waiter.calls == 1
    assert len(recorder) == 0


def test_equal_timeout_quotes_values(expect, recorder):
    expect.eventually_equal(lambda: "a", lambda: "b", timeout=0.02)
    [record] = recorder.records
    assert record.description == "Expected 'a' to eventually equal 'b'. Timed out after 0.02s."
    assert record.kind == FailureKind.TIMED_OUT


def test_optional_equal_none_actual_skips_fast_path(recorder):
    waiter = CountingWaiter()
    expect = Expect(recorder, waiter=waiter)
    box = {"value": None}
    threading.Timer(0.03, box.update, kwargs={"value": 7}).start()

    outcome = expect.eventually_optional_equal(lambda: box["value"], lambda: 7, timeout=2)
    assert outcome == Outcome.SATISFIED
    assert waiter.calls == 1


def test_optional_equal_present_match_returns_immediately(recorder):
    waiter = CountingWaiter()
    expect = Expect(recorder, waiter=waiter)
    assert expect.eventually_optional_equal(lambda: 7, lambda: 7) == Outcome.SATISFIED
    assert waiter.calls == 0


def test_optional_equal_none_never_matches_none(expect, recorder):
    expect.eventually_optional_equal(lambda: None, lambda: None, subject="count", timeout=0.02)
    [record] = recorder.records
    assert record.description == (
        "Expected count 'None' to eventually equal 'None'. Timed out after 0.02s."
    )


# --- UI element variants ---


def test_eventually_exists(expect, recorder, make_element):
    button = make_element("Button 'Save'")
    threading.Timer(0.03, setattr, args=(button, "present", True)).start()
    assert expect.eventually_exists(button, timeout=2) == Outcome.SATISFIED
    assert button.queries > 1


def test_eventually_exists_never(recorder, make_element):
    expect = Expect(recorder, waiter=Waiter(0.01))
    ghost = make_element("StaticText 'Welcome'")
    expect.eventually_exists(ghost, timeout=0.05)
    [record] = recorder.records
    assert record.kind == FailureKind.TIMED_OUT
    assert "StaticText 'Welcome'" in record.description
    assert record.description == (
        "Expected element StaticText 'Welcome' to eventually exist. Timed out after 0.05s."
    )


def test_eventually_does_not_exist(expect, recorder, make_element):
    spinner = make_element("ActivityIndicator", present=True)
    threading.Timer(0.03, setattr, args=(spinner, "present", False)).start()
    expect.eventually_does_not_exist(spinner, timeout=2)
    assert len(recorder) == 0

    expect.eventually_does_not_exist(make_element("Alert", present=True), timeout=0.02)
    assert recorder.records[0].description == (
        "Expected Alert to eventually not exist. Timed out after 0.02s."
    )


def test_eventually_has_content(expect, recorder, make_element):
    label = make_element("StaticText", present=True)
    threading.Timer(0.03, setattr, args=(label, "label", "Done")).start()
    expect.eventually_has_content(label, timeout=2)
    assert len(recorder) == 0

    expect.eventually_has_content(make_element("Empty"), subject="label", timeout=0.02)
    assert recorder.records[0].description == (
        "Expected label Empty to eventually have content. Timed out after 0.02s."
    )


# --- callbacks ---


def test_wait_for_checks_completes(expect, recorder):
    def block(done):
        threading.Timer(0.03, done).start()

    assert expect.wait_for_checks(block, timeout=2) == Outcome.SATISFIED
    assert len(recorder) == 0


def test_wait_for_checks_done_called_synchronously(expect, recorder):
    assert expect.wait_for_checks(lambda done: done()) == Outcome.SATISFIED


def test_wait_for_checks_times_out(expect, recorder):
    expect.wait_for_checks(lambda done: None, description="Upload", timeout=0.02)
    assert recorder.records[0].description == (
        "Expected Upload to eventually complete. Timed out after 0.02s."
    )


def test_wait_for_checks_records_error_from_block(expect, recorder):
    def block(done):
        raise ConnectionError("offline")

    outcome = expect.wait_for_checks(block, description="Sync")
    assert outcome == Outcome.ERROR
    [record] = recorder.records
    assert record.kind == FailureKind.THROWN_ERROR
    assert record.description == "Sync threw ConnectionError('offline')"
