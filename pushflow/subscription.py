"""
PushFlow Subscription - One Producer-to-Consumer Delivery Channel
=================================================================

A Subscription is created once per `Observable.subscribe` call and is the
only handle for cancelling that delivery. It owns the user's three callbacks
and the single cleanup action returned by the subscriber routine.

Lifecycle:

    INITIALIZING --(subscribe wired up)--> READY --(complete/error/unsubscribe)--> COMPLETED

- INITIALIZING: any delivery is a `UsageError`. The subscriber routine may not
  deliver before `subscribe` has finished.
- READY: deliveries are accepted.
- COMPLETED: terminal. `next` is ignored, `complete` and `unsubscribe` are
  no-ops, and `error` escalates its value because no handler is left to take
  it. On entry every callback and the cleanup are released, and the cleanup
  runs exactly once.

The state machine takes no locks. Deliveries to one Subscription must not be
made concurrently.
"""

import logging
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from .exceptions import UsageError, escalate
from .protocols import Cleanup, OnComplete, OnError, OnNext

T = TypeVar("T")

_NO_VALUE = object()


class SubscriptionState(Enum):
    INITIALIZING = "initializing"
    READY = "ready"
    COMPLETED = "completed"


def _check_callback(name: str, callback: Any) -> None:
    if callback is not None and not callable(callback):
        raise UsageError(f"{name} must be callable or None, got {callback!r}")


class Subscription(Generic[T]):
    """
    Live handle to a single delivery from a producer to a consumer.

    The producer never sees this object directly. It receives the bound entry
    points `_next`, `_error` and `_complete`, which route every call through
    the state machine.

    Example:
        ```python
        subscription = Observable.of(1, 2, 3).subscribe(print)
        subscription.unsubscribe()   # nothing is printed; delivery was still queued
        subscription.unsubscribe()   # no-op
        ```
    """

    def __init__(
        self,
        on_next: Optional[OnNext] = None,
        on_error: Optional[OnError] = None,
        on_complete: Optional[OnComplete] = None,
    ) -> None:
        _check_callback("on_next", on_next)
        _check_callback("on_error", on_error)
        _check_callback("on_complete", on_complete)

        self._state = SubscriptionState.INITIALIZING
        self._on_next = on_next
        self._on_error = on_error
        self._on_complete = on_complete
        self._cleanup: Optional[Cleanup] = None

    @property
    def state(self) -> SubscriptionState:
        return self._state

    @property
    def closed(self) -> bool:
        """True once the subscription has completed, errored or been cancelled."""
        return self._state is SubscriptionState.COMPLETED

    def unsubscribe(self) -> None:
        """
        Cancel the delivery and run the cleanup.

        Safe to call any number of times; only the first call while the
        subscription is still open has an effect. No user handler is invoked.
        """
        if self._state is SubscriptionState.COMPLETED:
            return
        self._state = SubscriptionState.COMPLETED
        self._release()

    # Producer-facing entry points

    def _next(self, value: T) -> None:
        self._check_started("next")
        if self._state is SubscriptionState.COMPLETED:
            return

        handler = self._on_next
        if handler is not None:
            handler(value)

    def _error(self, value: Any) -> None:
        self._check_started("error")
        if self._state is SubscriptionState.COMPLETED:
            logging.debug(f"Error delivered to a closed subscription: {value!r}")
            raise escalate(value)

        self._state = SubscriptionState.COMPLETED
        handler = self._on_error
        try:
            if handler is None:
                logging.debug(f"No error handler, escalating {value!r}")
                raise escalate(value)
            handler(value)
        finally:
            self._release()

    def _complete(self, value: Any = _NO_VALUE) -> None:
        self._check_started("complete")
        if self._state is SubscriptionState.COMPLETED:
            return

        self._state = SubscriptionState.COMPLETED
        handler = self._on_complete
        try:
            if handler is not None:
                if value is _NO_VALUE:
                    handler()
                else:
                    handler(value)
        finally:
            self._release()

    # Wiring used by Observable.subscribe

    def _start(self, cleanup: Optional[Cleanup]) -> None:
        """Record the cleanup and open the subscription for delivery."""
        if self._state is SubscriptionState.COMPLETED:
            # Terminated before the cleanup was known; nothing else will call it
            if cleanup is not None:
                cleanup()
            return

        self._cleanup = cleanup
        self._state = SubscriptionState.READY

    def _check_started(self, entry_point: str) -> None:
        if self._state is SubscriptionState.INITIALIZING:
            raise UsageError(
                f"{entry_point}() called before subscribe() returned; "
                "deliver from a scheduled job or a later callback instead"
            )

    def _release(self) -> None:
        cleanup = self._cleanup
        self._cleanup = None
        self._on_next = None
        self._on_error = None
        self._on_complete = None

        if cleanup is not None:
            cleanup()

    def __repr__(self) -> str:
        return f"Subscription({self._state.value})"
