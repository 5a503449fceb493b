"""Pytest configuration and fixtures."""

import logging

import pytest

from testsupport import CollectingRecorder, Expect, SupportConfig, Waiter


@pytest.fixture(autouse=True)
def cleanup_loggers():
    """Reset testsupport loggers after each test so handlers do not leak."""
    yield

    for name in list(logging.Logger.manager.loggerDict.keys()):
        if name.startswith("testsupport"):
            logger = logging.getLogger(name)
            for handler in logger.handlers:
                handler.close()
            logger.handlers.clear()
            logger.setLevel(logging.NOTSET)


@pytest.fixture
def recorder():
    return CollectingRecorder()


@pytest.fixture
def expect(recorder):
    """Expect with a short poll interval; failures stay in ``recorder``."""
    config = SupportConfig(eventually={"timeout": 1.0, "poll_interval": 0.01})
    return Expect(recorder, config, waiter=Waiter(poll_interval=0.01))


class FakeElement:
    """UI element whose state the test flips through ``present``."""

    def __init__(self, description: str, present: bool = False, label: str = ""):
        self.description = description
        self.present = present
        self.label = label
        self.queries = 0

    @property
    def exists(self) -> bool:
        self.queries += 1
        return self.present


@pytest.fixture
def make_element():
    return FakeElement
