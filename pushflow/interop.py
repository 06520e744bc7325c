"""
PushFlow Interop - Converting Foreign Sources
=============================================

Building blocks for `Observable.from_` and `Observable.of`. A source is either:

- a stream source, exposing `__observable__()` that returns something with
  `subscribe()` (see `protocols.SupportsObservable`), or
- an iterable source, anything `iter()` accepts.

Stream sources take priority when an object is both.
"""

from collections.abc import Iterable
from typing import Any, Optional

from .exceptions import NotObservableError
from .protocols import Subscribable, SubscriberRoutine
from .scheduler import schedule


def observable_view(source: Any) -> Optional[Subscribable]:
    """
    Return the observable view of a stream source, or None if `source` does
    not implement the stream protocol.
    """
    if source is None:
        raise NotObservableError("None is not observable")

    # Looked up on the type, like other special methods, so classes themselves
    # are not mistaken for stream sources
    method = getattr(type(source), "__observable__", None)
    if method is None:
        return None
    if not callable(method):
        raise NotObservableError(f"{type(source).__name__}.__observable__ is not callable")

    view = method(source)
    if view is None or not callable(getattr(view, "subscribe", None)):
        raise NotObservableError(
            f"{type(source).__name__}.__observable__() returned {view!r}, "
            "which has no subscribe()"
        )
    return view


def forwarding_subscriber(view: Subscribable) -> SubscriberRoutine:
    """Subscriber routine that hands every subscription over to `view`."""

    def subscriber(push, error, complete):
        return view.subscribe(push, error, complete)

    return subscriber


def iterating_subscriber(source: Iterable) -> SubscriberRoutine:
    """
    Subscriber routine that walks `source` from a scheduled job.

    The walk starts a fresh iterator for every subscription and stops as soon
    as the subscription is cancelled. Errors raised by the iterator are
    delivered through `error`.
    """
    if not (isinstance(source, Iterable) or hasattr(type(source), "__getitem__")):
        raise NotObservableError(f"{type(source).__name__} is not observable or iterable")

    def subscriber(push, error, complete):
        stopped = False

        def walk():
            if stopped:
                return
            try:
                iterator = iter(source)
            except Exception as exc:
                error(exc)
                return

            while not stopped:
                try:
                    item = next(iterator)
                except StopIteration:
                    complete()
                    return
                except Exception as exc:
                    error(exc)
                    return
                push(item)

        def stop():
            nonlocal stopped
            stopped = True

        schedule(walk)
        return stop

    return subscriber
