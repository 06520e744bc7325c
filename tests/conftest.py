"""
Shared pytest fixtures and configuration for PushFlow tests.
"""

import pytest

from pushflow import JobQueue


@pytest.fixture(autouse=True)
def reset_job_queue():
    """Start and finish every test with an empty job queue."""
    JobQueue.reset()
    yield
    JobQueue.reset()


class Recorder:
    """Observer that records every callback it receives, in order."""

    def __init__(self):
        self.events = []

    def next(self, value):
        self.events.append(("next", value))

    def error(self, error):
        self.events.append(("error", error))

    def complete(self, *args):
        self.events.append(("complete",) + args)

    @property
    def values(self):
        return [event[1] for event in self.events if event[0] == "next"]

    @property
    def errors(self):
        return [event[1] for event in self.events if event[0] == "error"]


class ManualSource:
    """
    Subscriber routine that hands its entry points to the test.

    Deliveries happen whenever the test calls `push`, `error` or `complete`,
    which is always after `subscribe()` has returned.
    """

    def __init__(self):
        self.starts = 0
        self.cleanups = 0
        self.push = None
        self.error = None
        self.complete = None

    def __call__(self, push, error, complete):
        self.starts += 1
        self.push, self.error, self.complete = push, error, complete
        return self.cleanup

    def cleanup(self):
        self.cleanups += 1


@pytest.fixture
def recorder():
    """Provide a fresh Recorder."""
    return Recorder()


@pytest.fixture
def manual_source():
    """Provide a fresh ManualSource."""
    return ManualSource()
