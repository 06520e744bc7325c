"""
PushFlow Operators - Derived Observables
========================================

Operators are thin consumers of the core contract. Each one builds a new
observable of the source's species that subscribes to the source when the
derived observable is itself subscribed.

- `map(fn)` - deliver `fn(value)` for every value
- `filter(predicate)` - deliver only values for which `predicate` is truthy
- `for_each(fn)` - call `fn` for every value; returns an asyncio future that
  resolves on completion

Error policy: an exception raised by `fn` or `predicate` is delivered to the
derived observable's `error` entry point. That terminates the derived
subscription, and its cleanup unsubscribes from the source, so no further
values flow after the failure.
"""

import asyncio
from typing import TYPE_CHECKING, Any, Callable, List, TypeVar

from .exceptions import UsageError, escalate

if TYPE_CHECKING:
    from .observable import Observable
    from .subscription import Subscription

T = TypeVar("T")
U = TypeVar("U")


def _require_callable(fn: Any) -> None:
    if not callable(fn):
        raise UsageError(f"{fn!r} is not callable")


class OperatorMixin:
    """
    Mixin providing the stream operators.

    Relies on the host class for `subscribe()` and the `species()` classmethod.
    """

    def map(self, fn: Callable[[T], U]) -> "Observable[U]":
        """
        Transform every delivered value with `fn`.

        Example:
            ```python
            doubled = Observable.of(1, 2, 3).map(lambda x: x * 2)
            doubled.subscribe(print)   # 2, 4, 6 once the scheduler drains
            ```
        """
        _require_callable(fn)
        source = self

        def subscriber(push, error, complete):
            def on_next(value):
                try:
                    value = fn(value)
                except Exception as exc:
                    error(exc)
                    return
                push(value)

            return source.subscribe(on_next, error, complete)

        return type(self).species()(subscriber)

    def filter(self, predicate: Callable[[T], Any]) -> "Observable[T]":
        """Deliver only the values for which `predicate` returns something truthy."""
        _require_callable(predicate)
        source = self

        def subscriber(push, error, complete):
            def on_next(value):
                try:
                    keep = predicate(value)
                except Exception as exc:
                    error(exc)
                    return
                if keep:
                    push(value)

            return source.subscribe(on_next, error, complete)

        return type(self).species()(subscriber)

    def for_each(self, fn: Callable[[T], Any]) -> "asyncio.Future[None]":
        """
        Call `fn` for every value and collapse the stream into one future.

        The future resolves with None when the source completes and fails
        with the delivered error, or with whatever `fn` raised (the source is
        unsubscribed in that case). A subscriber routine that raises while
        starting fails the future instead of raising from here. Cancelling the
        future unsubscribes from the source. Must be called from a running event loop.

        Example:
            ```python
            async def main():
                await Observable.of(1, 2, 3).for_each(print)
            ```
        """
        _require_callable(fn)
        future = asyncio.get_running_loop().create_future()
        holder: List["Subscription"] = []

        def on_next(value):
            if future.done():
                return
            try:
                fn(value)
            except Exception as exc:
                future.set_exception(exc)
                if holder:
                    holder[0].unsubscribe()

        def on_error(value):
            if not future.done():
                future.set_exception(escalate(value))

        def on_complete(*_):
            if not future.done():
                future.set_result(None)

        try:
            subscription = self.subscribe(on_next, on_error, on_complete)
        except Exception as exc:
            # Startup failure: reported through the future, like any other error
            if not future.done():
                future.set_exception(exc)
            return future
        holder.append(subscription)

        def on_done(fut):
            if fut.cancelled():
                subscription.unsubscribe()

        future.add_done_callback(on_done)
        return future
