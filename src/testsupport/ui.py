"""UI element protocol and one-shot existence checks."""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

from testsupport.base import ExpectBase
from testsupport.failures import SourceLocation


@runtime_checkable
class UIElement(Protocol):
    """Anything the accessibility layer can be asked about on demand.

    Each attribute access is expected to re-query the live UI.
    """

    @property
    def exists(self) -> bool: ...

    @property
    def label(self) -> str: ...

    @property
    def description(self) -> str: ...


class UIMatchers(ExpectBase):
    def _log_app_tree(self) -> None:
        tree = getattr(self.app, "debug_description", None)
        if tree:
            self.logger.info(f"Application tree:\n{tree}")

    def exists(
        self,
        element: UIElement,
        subject: str = "element",
        *,
        location: SourceLocation | None = None,
    ) -> None:
        if not element.exists:
            self._log_app_tree()
            self.record_failure(
                f"Expected {subject} {element.description} to exist.", location=location
            )

    def does_not_exist(
        self,
        element: UIElement,
        subject: str = "element",
        *,
        location: SourceLocation | None = None,
    ) -> None:
        if element.exists:
            self.record_failure(
                f"Expected {subject} {element.description} to not exist.", location=location
            )

    def one_exists(
        self,
        elements: Sequence[UIElement],
        subject: str = "elements",
        *,
        location: SourceLocation | None = None,
    ) -> UIElement | None:
        """Return the first existing element, recording a failure if none do."""
        for element in elements:
            if element.exists:
                return element
        self._log_app_tree()
        descriptions = ", ".join(e.description for e in elements)
        self.record_failure(
            f"Expected one of {subject} [{descriptions}] to exist.", location=location
        )
        return None


class TestPage:
    """Base class for page objects that wrap one screen of an application.

    Subclasses expose the screen's elements and use ``self.expect`` for
    checks, so failures are attributed to the calling test.
    """

    __test__ = False

    def __init__(self, expect: ExpectBase, app: Any = None):
        self.expect = expect
        self.app = app if app is not None else expect.app
