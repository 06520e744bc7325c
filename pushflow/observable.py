"""
PushFlow Observable - Lazy Push-Based Producer
==============================================

An `Observable` wraps a subscriber routine: a function taking three
callables `(next, error, complete)` that starts producing values when the
observable is subscribed. It holds no per-subscription state, so every
`subscribe()` call runs the routine again, independently.

The routine may return:
- None - nothing to clean up
- a zero-argument callable - run once when the subscription terminates
- an object with `unsubscribe()` - e.g. a Subscription to an upstream source

Anything else is a `UsageError`.

Example:
    ```python
    def ticker(push, error, complete):
        handle = clock.every(1.0, lambda: push(clock.now()))
        return handle.cancel

    subscription = Observable(ticker).subscribe(print)
    ...
    subscription.unsubscribe()   # handle.cancel() runs exactly once
    ```
"""

from typing import Any, Generic, Optional, TypeVar

from .exceptions import UsageError
from .interop import forwarding_subscriber, iterating_subscriber, observable_view
from .operators import OperatorMixin
from .protocols import (
    Cleanup,
    OnComplete,
    OnError,
    OnNext,
    SubscriberRoutine,
    SubscriptionLike,
)
from .scheduler import schedule
from .subscription import Subscription

T = TypeVar("T")


def _as_cleanup(result: Any) -> Optional[Cleanup]:
    """Normalize a subscriber routine's return value into a cleanup action."""
    if result is None:
        return None
    if callable(result):
        return result
    if isinstance(result, SubscriptionLike) and callable(result.unsubscribe):
        return result.unsubscribe
    raise UsageError(
        f"Subscriber returned {result!r}; expected None, a callable, "
        "or an object with unsubscribe()"
    )


class Observable(Generic[T], OperatorMixin):
    """
    Immutable wrapper around a subscriber routine.

    Class-level policy:
        deferred_start: when True, the subscriber routine is started from a
            scheduled job instead of inside `subscribe()`. A subscription
            cancelled before the job runs never starts the routine.
    """

    deferred_start = False

    def __init__(self, subscriber: SubscriberRoutine) -> None:
        if not callable(subscriber):
            raise UsageError(f"Observable subscriber must be callable, got {subscriber!r}")
        self._subscriber = subscriber

    @classmethod
    def species(cls) -> type:
        """Constructor operators use for derived observables."""
        return cls

    def __observable__(self) -> "Observable[T]":
        return self

    def subscribe(
        self,
        on_next: Optional[OnNext] = None,
        on_error: Optional[OnError] = None,
        on_complete: Optional[OnComplete] = None,
    ) -> Subscription[T]:
        """
        Start a new, independent delivery to the given callbacks.

        Returns the Subscription, the only handle for cancelling it. If the
        subscriber routine raises, the exception is delivered to `on_error`
        (or escalated if there is none) and then raised from here.
        """
        subscription: Subscription[T] = Subscription(on_next, on_error, on_complete)

        if self.deferred_start:

            def start():
                if subscription.closed:
                    return
                self._start(subscription, reraise=False)

            schedule(start)
        else:
            self._start(subscription, reraise=True)

        return subscription

    def _start(self, subscription: Subscription[T], reraise: bool) -> None:
        try:
            cleanup = _as_cleanup(
                self._subscriber(
                    subscription._next, subscription._error, subscription._complete
                )
            )
        except Exception as exc:
            subscription._start(None)
            try:
                subscription._error(exc)
            except Exception as escalated:
                # Without an error handler the startup failure comes straight back
                if escalated is not exc or not reraise:
                    raise
            if reraise:
                raise
            return

        subscription._start(cleanup)

    @classmethod
    def from_(cls, source: Any) -> "Observable[Any]":
        """
        Convert a stream source or an iterable into an observable of this class.

        A stream source whose observable view is already exactly this class is
        returned unchanged. Iterables are walked from a scheduled job, so
        nothing is delivered before `subscribe()` returns.

        Raises:
            NotObservableError: `source` is neither observable nor iterable
        """
        view = observable_view(source)
        if view is not None:
            if type(view) is cls:
                return view
            return cls(forwarding_subscriber(view))

        return cls(iterating_subscriber(source))

    @classmethod
    def of(cls, *items: T) -> "Observable[T]":
        """Observable of the given items, delivered in order, then completed."""
        return cls.from_(items)

    def __repr__(self) -> str:
        name = getattr(self._subscriber, "__qualname__", repr(self._subscriber))
        return f"{type(self).__name__}({name})"
