"""One-shot assertion helpers."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, TypeVar

from testsupport.base import ExpectBase, describe
from testsupport.failures import FailureKind, SourceLocation, caller_location

T = TypeVar("T")


class UnwrapError(AssertionError):
    """Raised by ``unwrap`` to abort the current test when a value is missing."""


class DateGranularity(str, Enum):
    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    HOUR = "hour"
    MINUTE = "minute"
    SECOND = "second"


_TRUNCATE = {
    DateGranularity.YEAR: dict(month=1, day=1, hour=0, minute=0, second=0, microsecond=0),
    DateGranularity.MONTH: dict(day=1, hour=0, minute=0, second=0, microsecond=0),
    DateGranularity.DAY: dict(hour=0, minute=0, second=0, microsecond=0),
    DateGranularity.HOUR: dict(minute=0, second=0, microsecond=0),
    DateGranularity.MINUTE: dict(second=0, microsecond=0),
    DateGranularity.SECOND: dict(microsecond=0),
}


def _equals(lhs: Any, rhs: Any) -> bool:
    if lhs is None and rhs is None:
        return True
    if lhs is None or rhs is None:
        return False
    return lhs == rhs


def _less_than(lhs: Any, rhs: Any) -> bool:
    if lhs is None or rhs is None:
        return False
    return lhs < rhs


def _greater_than(lhs: Any, rhs: Any) -> bool:
    if lhs is None or rhs is None:
        return False
    return lhs > rhs


def _approx_equals(lhs: float | None, rhs: float | None, within: float) -> bool:
    if lhs is None and rhs is None:
        return True
    if lhs is None or rhs is None:
        return False
    return abs(lhs - rhs) <= within


class SyncMatchers(ExpectBase):
    # --- Throws ---

    @contextmanager
    def should_not_throw(
        self, subject: str = "Block", *, location: SourceLocation | None = None
    ) -> Iterator[None]:
        """Record a ``thrown_error`` failure if the block raises."""
        location = location or caller_location()
        try:
            yield
        except Exception as e:
            self.record_failure(f"{subject} threw {e!r}", FailureKind.THROWN_ERROR, location)

    @contextmanager
    def should_throw(
        self,
        subject: str = "Block",
        expected: type[BaseException] | tuple[type[BaseException], ...] = Exception,
        *,
        location: SourceLocation | None = None,
    ) -> Iterator[None]:
        """Record an ``unmatched_expected_failure`` if the block does not raise.

        Exceptions that are not instances of ``expected`` propagate.
        """
        location = location or caller_location()
        try:
            yield
        except expected:
            return
        self.record_failure(
            f"{subject} should have thrown!",
            FailureKind.UNMATCHED_EXPECTED_FAILURE,
            location,
        )

    # --- Fail ---

    def fail(self, message: str, *, location: SourceLocation | None = None) -> None:
        self.record_failure(f"Failure: {message}", FailureKind.SYSTEM, location)

    # --- None ---

    def none(
        self, value: Any, subject: str | None = None, *, location: SourceLocation | None = None
    ) -> None:
        if value is not None:
            self.record_failure(
                f"Expected {self._subject(subject)} '{value}' to be None.", location=location
            )

    def not_none(
        self, value: Any, subject: str | None = None, *, location: SourceLocation | None = None
    ) -> None:
        if value is None:
            self.record_failure(
                f"Expected {self._subject(subject)} not to be None.", location=location
            )

    def unwrap(self, value: T | None, subject: str = "value") -> T:
        if value is None:
            raise UnwrapError(f"Expected {subject} to be non-None.")
        return value

    # --- Booleans ---

    def true(
        self, value: bool | None, subject: str | None = None, *, location: SourceLocation | None = None
    ) -> None:
        self._bool(value, True, subject, location)

    def false(
        self, value: bool | None, subject: str | None = None, *, location: SourceLocation | None = None
    ) -> None:
        self._bool(value, False, subject, location)

    def _bool(
        self,
        value: bool | None,
        wanted: bool,
        subject: str | None,
        location: SourceLocation | None,
    ) -> None:
        name = "true" if wanted else "false"
        subject = self._subject(subject)
        if value is None:
            self.record_failure(
                f"Expected {subject} to be {name}, but it was None.", location=location
            )
        elif value != wanted:
            self.record_failure(f"Expected {subject} to be {name}.", location=location)

    # --- Floating point ---

    def approx_equal(
        self,
        actual: float | None,
        expected: float | None,
        within: float = 0.0001,
        subject: str = "floating point",
        *,
        location: SourceLocation | None = None,
    ) -> None:
        if not _approx_equals(actual, expected, within):
            self.record_failure(
                f"Expected {subject} '{describe(actual)}' to equal '{describe(expected)}' within {within}",
                location=location,
            )

    def not_approx_equal(
        self,
        actual: float | None,
        expected: float | None,
        within: float = 0.0001,
        subject: str = "floating point",
        *,
        location: SourceLocation | None = None,
    ) -> None:
        if _approx_equals(actual, expected, within):
            self.record_failure(
                f"Expected {subject} '{describe(actual)}' not to equal '{describe(expected)}' within {within}",
                location=location,
            )

    # --- Strings ---

    def has_prefix(
        self, actual: str, prefix: str, subject: str = "string", *, location: SourceLocation | None = None
    ) -> None:
        if not actual.startswith(prefix):
            self.record_failure(
                f"Expected {subject} '{actual}' to have prefix '{prefix}'", location=location
            )

    def has_suffix(
        self, actual: str, suffix: str, subject: str = "string", *, location: SourceLocation | None = None
    ) -> None:
        if not actual.endswith(suffix):
            self.record_failure(
                f"Expected {subject} '{actual}' to have suffix '{suffix}'", location=location
            )

    def contains(
        self,
        actual: str | None,
        *parts: str,
        subject: str = "string",
        location: SourceLocation | None = None,
    ) -> None:
        if actual is None:
            self.record_failure(
                f"Expected {subject} 'None' to contain {list(parts)!r}", location=location
            )
            return
        missing = next((p for p in parts if p not in actual), None)
        if missing is not None:
            self.record_failure(
                f"Expected {subject} '{actual}' to contain '{missing}'", location=location
            )

    def does_not_contain(
        self,
        actual: str | None,
        *parts: str,
        subject: str = "string",
        location: SourceLocation | None = None,
    ) -> None:
        if actual is None:
            self.record_failure(
                f"Expected {subject} 'None' not to contain {list(parts)!r}", location=location
            )
            return
        found = next((p for p in parts if p in actual), None)
        if found is not None:
            self.record_failure(
                f"Expected {subject} '{actual}' to not contain '{found}'", location=location
            )

    # --- Equality and ordering ---

    def equal(
        self, actual: Any, expected: Any, subject: str = "value", *, location: SourceLocation | None = None
    ) -> None:
        if not _equals(actual, expected):
            self.record_failure(
                f"Expected {subject} '{describe(actual)}' to equal '{describe(expected)}'",
                location=location,
            )

    def not_equal(
        self, actual: Any, expected: Any, subject: str = "value", *, location: SourceLocation | None = None
    ) -> None:
        if _equals(actual, expected):
            self.record_failure(
                f"Expected {subject} '{describe(actual)}' to not equal '{describe(expected)}'",
                location=location,
            )

    def less_than(
        self, actual: Any, expected: Any, subject: str = "value", *, location: SourceLocation | None = None
    ) -> None:
        if not _less_than(actual, expected):
            self.record_failure(
                f"Expected {subject} '{describe(actual)}' to be less than '{describe(expected)}'",
                location=location,
            )

    def less_equal(
        self, actual: Any, expected: Any, subject: str = "value", *, location: SourceLocation | None = None
    ) -> None:
        if not _equals(actual, expected) and not _less_than(actual, expected):
            self.record_failure(
                f"Expected {subject} '{describe(actual)}' to be less than or equal to '{describe(expected)}'",
                location=location,
            )

    def greater_than(
        self, actual: Any, expected: Any, subject: str = "value", *, location: SourceLocation | None = None
    ) -> None:
        if not _greater_than(actual, expected):
            self.record_failure(
                f"Expected {subject} '{describe(actual)}' to be greater than '{describe(expected)}'",
                location=location,
            )

    def greater_equal(
        self, actual: Any, expected: Any, subject: str = "value", *, location: SourceLocation | None = None
    ) -> None:
        if not _equals(actual, expected) and not _greater_than(actual, expected):
            self.record_failure(
                f"Expected {subject} '{describe(actual)}' to be greater than or equal to '{describe(expected)}'",
                location=location,
            )

    # --- Dates ---

    def same_date(
        self,
        actual: datetime | None,
        expected: datetime | None,
        granularity: DateGranularity = DateGranularity.SECOND,
        subject: str = "date",
        *,
        location: SourceLocation | None = None,
    ) -> None:
        """Compare two datetimes, ignoring fields finer than ``granularity``."""
        if actual is None or expected is None:
            self.record_failure("Expected dates not to be None", location=location)
            return
        fields = _TRUNCATE[DateGranularity(granularity)]
        if actual.replace(**fields) != expected.replace(**fields):
            self.record_failure(
                f"Expected {subject} {actual} to equal {expected} down to the {DateGranularity(granularity).value}",
                location=location,
            )

    def date_within(
        self,
        actual: datetime | None,
        span: timedelta,
        expected: datetime | None,
        subject: str = "date",
        *,
        location: SourceLocation | None = None,
    ) -> None:
        if actual is None or expected is None:
            self.record_failure("Expected dates not to be None", location=location)
            return
        if abs(actual - expected) > span:
            self.record_failure(
                f"Expected {subject} {actual} to be within {span} of {expected}",
                location=location,
            )
