"""Shared state for the expectation helpers."""

from __future__ import annotations

import logging
from typing import Any

from testsupport.config import SupportConfig
from testsupport.failures import (
    FailureKind,
    FailureRecorder,
    SourceLocation,
    caller_location,
)
from testsupport.waiter import Waiter


def describe(value: Any) -> str:
    """Plain description of a possibly-None value."""
    return "None" if value is None else str(value)


class ExpectBase:
    """Holds the recorder, waiter and defaults every helper reports through.

    Attributes:
        recorder: Collaborator that receives each failure.
        config: Timeouts and default subject text.
        waiter: Wait primitive used by the eventually helpers. Built from
            ``config.eventually.poll_interval`` when not given.
        app: Optional application handle. When it exposes
            ``debug_description``, that text is logged for failed UI checks.
    """

    def __init__(
        self,
        recorder: FailureRecorder,
        config: SupportConfig | None = None,
        *,
        waiter: Waiter | None = None,
        app: Any = None,
        logger: logging.Logger | None = None,
    ):
        self.recorder = recorder
        self.config = config or SupportConfig()
        self.waiter = waiter or Waiter(self.config.eventually.poll_interval)
        self.app = app
        self.logger = logger or logging.getLogger("testsupport.expect")

    @property
    def default_timeout(self) -> float:
        return self.config.eventually.timeout

    def _subject(self, subject: str | None) -> str:
        return self.config.subject if subject is None else subject

    def record_failure(
        self,
        description: str,
        kind: FailureKind = FailureKind.ASSERTION_FAILURE,
        location: SourceLocation | None = None,
    ) -> None:
        location = location or caller_location()
        self.logger.info(f"{kind.value} at {location}: {description}")
        self.recorder.record(description, location, kind)
