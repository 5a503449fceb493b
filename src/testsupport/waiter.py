"""Blocking wait primitive that polls pending expectations."""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable, Iterable

logger = logging.getLogger("testsupport.waiter")

DEFAULT_POLL_INTERVAL = 0.05


class WaitResult(str, Enum):
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    INTERRUPTED = "interrupted"
    ERRORED = "errored"


class PredicateExpectation:
    """A predicate that is fulfilled once it returns a truthy value."""

    def __init__(self, predicate: Callable[[], bool], description: str = "") -> None:
        if not callable(predicate):
            raise TypeError(f"predicate must be callable, got {type(predicate).__name__}")
        self.predicate = predicate
        self.description = description
        self.fulfilled = False
        self.error: Exception | None = None

    def evaluate(self) -> bool:
        if not self.fulfilled:
            self.fulfilled = bool(self.predicate())
        return self.fulfilled

    def fulfill(self) -> None:
        self.fulfilled = True


class Waiter:
    """Blocks the calling thread until every expectation is fulfilled.

    Expectations are evaluated immediately and then once per
    ``poll_interval``. The deadline is fixed when ``wait`` is entered and
    sleeps are clipped to it, so a timed out wait returns no later than one
    interval past the deadline.
    """

    def __init__(self, poll_interval: float = DEFAULT_POLL_INTERVAL) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self.poll_interval = poll_interval
        self._lock = threading.Lock()
        self._active: set[threading.Event] = set()

    def interrupt(self) -> None:
        """End every wait in progress on this waiter with ``WaitResult.INTERRUPTED``.

        Waits started after this call are not affected.
        """
        with self._lock:
            for interrupted in self._active:
                interrupted.set()

    def wait(
        self, expectations: Iterable[PredicateExpectation], timeout: float
    ) -> WaitResult:
        interrupted = threading.Event()
        with self._lock:
            self._active.add(interrupted)
        try:
            return self._poll(list(expectations), timeout, interrupted)
        finally:
            with self._lock:
                self._active.discard(interrupted)

    def _poll(
        self,
        pending: list[PredicateExpectation],
        timeout: float,
        interrupted: threading.Event,
    ) -> WaitResult:
        deadline = time.monotonic() + timeout
        polls = 0

        while True:
            polls += 1
            for expectation in pending:
                try:
                    expectation.evaluate()
                except Exception as e:
                    expectation.error = e
                    logger.debug(
                        f"Predicate '{expectation.description}' raised {e!r} on poll {polls}"
                    )
                    return WaitResult.ERRORED

            if all(e.fulfilled for e in pending):
                logger.debug(f"Wait completed after {polls} poll(s)")
                return WaitResult.COMPLETED

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.debug(f"Wait timed out after {timeout}s ({polls} poll(s))")
                return WaitResult.TIMED_OUT

            if interrupted.wait(min(self.poll_interval, remaining)):
                logger.debug(f"Wait interrupted after {polls} poll(s)")
                return WaitResult.INTERRUPTED
