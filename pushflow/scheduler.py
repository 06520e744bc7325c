"""
PushFlow Scheduler - Process-Wide Job Queue
===========================================

A FIFO of zero-argument jobs that always run later, never inside the call
that scheduled them. `Observable.from_` and `Observable.of` use it so that a
synchronous source cannot deliver values before `subscribe` has returned a
Subscription to its caller.

Draining:
- Inside a running asyncio event loop, scheduling into an idle queue arms a
  drain with `loop.call_soon`, so queued jobs run on the next loop iteration.
- Without a loop, jobs wait until the host calls `JobQueue.flush()`.

Jobs run one at a time in submission order. A job scheduled while the queue
is draining runs in the same drain after everything already queued.
"""

import asyncio
import logging
from collections import deque
from typing import Callable, Deque, Optional

from .exceptions import UsageError

Job = Callable[[], None]


class JobQueue:
    """Process-wide job queue with a single re-entrancy-guarded consumer."""

    _jobs: Deque[Job] = deque()
    _is_draining = False
    _armed_loop: Optional[asyncio.AbstractEventLoop] = None

    @classmethod
    def schedule(cls, job: Job) -> None:
        """Append `job` to the queue. It will not run before this call returns."""
        if not callable(job):
            raise UsageError(f"{job!r} is not callable")

        cls._jobs.append(job)
        if not cls._is_draining:
            cls._arm()

    @classmethod
    def flush(cls) -> None:
        """
        Run queued jobs until the queue is empty.

        A job that raises is dropped and its exception propagates to the
        caller of `flush`. Jobs behind it stay queued. Calling `flush` from
        inside a job does nothing.
        """
        if cls._is_draining:
            return

        cls._armed_loop = None
        cls._is_draining = True
        try:
            while cls._jobs:
                job = cls._jobs.popleft()
                try:
                    job()
                except Exception:
                    logging.debug(
                        f"Scheduled job {job!r} failed, {len(cls._jobs)} job(s) remain queued"
                    )
                    raise
        finally:
            cls._is_draining = False
            if cls._jobs:
                cls._arm()

    @classmethod
    def pending(cls) -> int:
        """Number of jobs waiting to run."""
        return len(cls._jobs)

    @classmethod
    def reset(cls) -> None:
        """Discard every queued job. Intended for test isolation."""
        cls._jobs.clear()
        cls._is_draining = False
        cls._armed_loop = None

    @classmethod
    def _arm(cls) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: the host drains with flush()
            return

        if cls._armed_loop is loop:
            return
        cls._armed_loop = loop
        loop.call_soon(cls.flush)


def schedule(job: Job) -> None:
    """Schedule `job` on the process-wide queue."""
    JobQueue.schedule(job)


def flush() -> None:
    """Drain the process-wide queue now."""
    JobQueue.flush()
