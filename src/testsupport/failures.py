"""Failure records and the recorder collaborator."""

from __future__ import annotations

import contextlib
import inspect
import threading
from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

_PACKAGE_DIR = Path(__file__).resolve().parent
_CONTEXTLIB_FILE = contextlib.__file__


class FailureKind(str, Enum):
    ASSERTION_FAILURE = "assertion_failure"
    TIMED_OUT = "timed_out"
    THROWN_ERROR = "thrown_error"
    UNMATCHED_EXPECTED_FAILURE = "unmatched_expected_failure"
    SYSTEM = "system"


@dataclass(frozen=True)
class SourceLocation:
    file: str
    line: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass
class FailureRecord:
    """A single recorded test failure.

    Attributes:
        description: Human-readable failure message.
        location: Call site of the assertion that failed.
        kind: Category of the failure.
    """

    description: str
    location: SourceLocation
    kind: FailureKind = FailureKind.ASSERTION_FAILURE

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


class FailureRecorder(Protocol):
    def record(
        self, description: str, location: SourceLocation, kind: FailureKind
    ) -> None: ...


class CollectingRecorder:
    """Accumulates failures in memory without interrupting the caller."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[FailureRecord] = []

    def record(
        self, description: str, location: SourceLocation, kind: FailureKind
    ) -> None:
        with self._lock:
            self._records.append(FailureRecord(description, location, kind))

    @property
    def records(self) -> list[FailureRecord]:
        with self._lock:
            return list(self._records)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def _is_internal(filename: str) -> bool:
    if filename == _CONTEXTLIB_FILE:
        return True
    try:
        return Path(filename).resolve().is_relative_to(_PACKAGE_DIR)
    except (OSError, ValueError):
        return False


def caller_location() -> SourceLocation:
    """Return the first stack frame outside this package."""
    frame = inspect.currentframe()
    try:
        while frame is not None and _is_internal(frame.f_code.co_filename):
            frame = frame.f_back
        if frame is None:
            return SourceLocation("<unknown>", 0)
        return SourceLocation(frame.f_code.co_filename, frame.f_lineno)
    finally:
        del frame
