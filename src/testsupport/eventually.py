"""Polling expectations that wait for a condition to become true."""

from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Callable, Sequence, TypeVar

from testsupport.base import ExpectBase, describe
from testsupport.failures import FailureKind, SourceLocation, caller_location
from testsupport.ui import UIElement
from testsupport.waiter import PredicateExpectation, WaitResult

T = TypeVar("T")


class Outcome(str, Enum):
    SATISFIED = "satisfied"
    TIMED_OUT = "timed_out"
    ERROR = "error"


def _describe_result(result: WaitResult, expectations: Sequence[PredicateExpectation]) -> str:
    errors = [e.error for e in expectations if e.error is not None]
    if errors:
        return f"{result.value} ({errors[0]!r})"
    return result.value


class AsyncMatchers(ExpectBase):
    def eventually(
        self,
        predicate: Callable[[], bool],
        subject: str | None = None,
        outcome: str = "be satisfied",
        timeout: float | None = None,
        *,
        location: SourceLocation | None = None,
    ) -> Outcome:
        """Block until ``predicate()`` is truthy or ``timeout`` seconds pass.

        Every other ``eventually_*`` helper is this call with its own
        predicate and message. At most one failure is recorded; nothing is
        raised for a condition that never holds.

        Args:
            predicate: Zero-argument callable, re-evaluated on every poll.
            subject: What is being checked, used in the failure message.
            outcome: What the subject should eventually do ("be None").
            timeout: Seconds to wait. Defaults to the configured timeout.
            location: Call site to report. Captured from the stack if omitted.

        Returns:
            The terminal outcome of the wait.
        """
        location = location or caller_location()
        expectation = PredicateExpectation(predicate, description=outcome)
        return self._wait(
            [expectation], self._subject(subject), outcome, timeout, location
        )

    def _wait(
        self,
        expectations: Sequence[PredicateExpectation],
        subject: str | Callable[[], str],
        outcome: str | Callable[[], str],
        timeout: float | None,
        location: SourceLocation,
    ) -> Outcome:
        timeout = self.default_timeout if timeout is None else timeout
        result = self.waiter.wait(expectations, timeout)

        if result == WaitResult.COMPLETED:
            return Outcome.SATISFIED

        subject_text = subject() if callable(subject) else subject
        outcome_text = outcome() if callable(outcome) else outcome

        if result == WaitResult.TIMED_OUT:
            self.record_failure(
                f"Expected {subject_text} to eventually {outcome_text}. Timed out after {timeout}s.",
                FailureKind.TIMED_OUT,
                location,
            )
            return Outcome.TIMED_OUT

        self.record_failure(
            f"Unexpected result while waiting for {subject_text} to eventually "
            f"{outcome_text}: {_describe_result(result, expectations)}",
            FailureKind.UNMATCHED_EXPECTED_FAILURE,
            location,
        )
        return Outcome.ERROR

    # --- Values ---

    def eventually_none(
        self,
        expression: Callable[[], Any],
        subject: str | None = None,
        timeout: float | None = None,
        *,
        location: SourceLocation | None = None,
    ) -> Outcome:
        return self.eventually(
            lambda: expression() is None,
            subject,
            "be None",
            timeout,
            location=location or caller_location(),
        )

    def eventually_not_none(
        self,
        expression: Callable[[], Any],
        subject: str | None = None,
        timeout: float | None = None,
        *,
        location: SourceLocation | None = None,
    ) -> Outcome:
        return self.eventually(
            lambda: expression() is not None,
            subject,
            "not be None",
            timeout,
            location=location or caller_location(),
        )

    def eventually_true(
        self,
        expression: Callable[[], bool],
        subject: str | None = None,
        timeout: float | None = None,
        *,
        location: SourceLocation | None = None,
    ) -> Outcome:
        return self.eventually(
            lambda: expression() == True,  # noqa: E712
            subject,
            "be true",
            timeout,
            location=location or caller_location(),
        )

    def eventually_false(
        self,
        expression: Callable[[], bool],
        subject: str | None = None,
        timeout: float | None = None,
        *,
        location: SourceLocation | None = None,
    ) -> Outcome:
        return self.eventually(
            lambda: expression() == False,  # noqa: E712
            subject,
            "be false",
            timeout,
            location=location or caller_location(),
        )

    def eventually_equal(
        self,
        actual: Callable[[], T],
        expected: Callable[[], T],
        timeout: float | None = None,
        *,
        location: SourceLocation | None = None,
    ) -> Outcome:
        """Wait until ``actual()`` equals ``expected()``.

        Both sides are captured once up front and the wait is skipped when
        they already match. Otherwise both are re-evaluated on every poll and
        a failure message quotes the last values seen.
        """
        location = location or caller_location()
        last = [actual(), expected()]
        if last[0] == last[1]:
            return Outcome.SATISFIED

        def matches() -> bool:
            last[0] = actual()
            last[1] = expected()
            return last[0] == last[1]

        return self._wait(
            [PredicateExpectation(matches, description="equal")],
            lambda: f"'{last[0]}'",
            lambda: f"equal '{last[1]}'",
            timeout,
            location,
        )

    def eventually_optional_equal(
        self,
        actual: Callable[[], T | None],
        expected: Callable[[], T],
        subject: str = "value",
        timeout: float | None = None,
        *,
        location: SourceLocation | None = None,
    ) -> Outcome:
        """Wait until an optional ``actual()`` is present and equals ``expected()``.

        A None actual never matches, so the wait is only skipped when a
        present value already equals the expected one.
        """
        location = location or caller_location()
        last = [actual(), expected()]
        if last[0] is not None and last[0] == last[1]:
            return Outcome.SATISFIED

        def matches() -> bool:
            last[0] = actual()
            last[1] = expected()
            return last[0] is not None and last[0] == last[1]

        return self._wait(
            [PredicateExpectation(matches, description="equal")],
            lambda: f"{subject} '{describe(last[0])}'",
            lambda: f"equal '{last[1]}'",
            timeout,
            location,
        )

    # --- UI elements ---

    def _element_subject(self, subject: str, element: UIElement) -> str:
        return f"{subject} {element.description}".strip()

    def eventually_exists(
        self,
        element: UIElement,
        subject: str = "element",
        timeout: float | None = None,
        *,
        location: SourceLocation | None = None,
    ) -> Outcome:
        return self.eventually(
            lambda: element.exists,
            self._element_subject(subject, element),
            "exist",
            timeout,
            location=location or caller_location(),
        )

    def eventually_does_not_exist(
        self,
        element: UIElement,
        subject: str = "",
        timeout: float | None = None,
        *,
        location: SourceLocation | None = None,
    ) -> Outcome:
        return self.eventually(
            lambda: not element.exists,
            self._element_subject(subject, element),
            "not exist",
            timeout,
            location=location or caller_location(),
        )

    def eventually_has_content(
        self,
        element: UIElement,
        subject: str = "",
        timeout: float | None = None,
        *,
        location: SourceLocation | None = None,
    ) -> Outcome:
        return self.eventually(
            lambda: bool(element.label),
            self._element_subject(subject, element),
            "have content",
            timeout,
            location=location or caller_location(),
        )

    # --- Callbacks ---

    def wait_for_checks(
        self,
        block: Callable[[Callable[[], None]], None],
        description: str = "Waiting",
        timeout: float | None = None,
        *,
        location: SourceLocation | None = None,
    ) -> Outcome:
        """Run ``block(done)`` and wait until it calls ``done``.

        ``done`` may be called from any thread, before or after ``block``
        returns. If ``block`` raises, a ``thrown_error`` failure is recorded
        and nothing is waited for.
        """
        location = location or caller_location()
        finished = threading.Event()
        expectation = PredicateExpectation(finished.is_set, description=description)
        try:
            block(finished.set)
        except Exception as e:
            self.record_failure(f"{description} threw {e!r}", FailureKind.THROWN_ERROR, location)
            return Outcome.ERROR
        return self._wait([expectation], description, "complete", timeout, location)
