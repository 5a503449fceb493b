"""Recording assertions and polling expectations for tests."""

from testsupport.config import SupportConfig, load_config
from testsupport.eventually import Outcome
from testsupport.expect import Expect
from testsupport.failures import (
    CollectingRecorder,
    FailureKind,
    FailureRecord,
    FailureRecorder,
    SourceLocation,
)
from testsupport.matchers import DateGranularity, UnwrapError
from testsupport.ui import TestPage, UIElement
from testsupport.waiter import PredicateExpectation, Waiter, WaitResult

__all__ = [
    "CollectingRecorder",
    "DateGranularity",
    "Expect",
    "FailureKind",
    "FailureRecord",
    "FailureRecorder",
    "Outcome",
    "PredicateExpectation",
    "SourceLocation",
    "SupportConfig",
    "TestPage",
    "UIElement",
    "UnwrapError",
    "WaitResult",
    "Waiter",
    "load_config",
]
