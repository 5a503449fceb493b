from __future__ import annotations

from testsupport.eventually import AsyncMatchers
from testsupport.matchers import SyncMatchers
from testsupport.ui import UIMatchers


class Expect(SyncMatchers, UIMatchers, AsyncMatchers):
    """Assertion helpers that record failures instead of raising.

    Example::

        expect = Expect(CollectingRecorder())
        expect.equal(total, 5, subject="total")
        expect.eventually_true(lambda: job.done, subject="job")
    """
