"""
PushFlow Protocols - Capability Interfaces
==========================================

Structural interfaces that decide how foreign objects interoperate with
PushFlow. Nothing here imports the concrete implementations.

- `Subscribable` - anything with `subscribe(on_next, on_error, on_complete)`
- `SupportsObservable` - stream sources: `__observable__()` returns a `Subscribable`
- `SubscriptionLike` - anything with `unsubscribe()`; a subscriber routine may
  return one as its cleanup

Iterable sources need no protocol of their own: `collections.abc.Iterable`
already covers them.
"""

from typing import Any, Callable, Optional, Protocol, TypeVar, runtime_checkable

T_co = TypeVar("T_co", covariant=True)

OnNext = Callable[[Any], Any]
OnError = Callable[[Any], Any]
OnComplete = Callable[..., Any]
Cleanup = Callable[[], Any]

# (next, error, complete) -> None | Cleanup | SubscriptionLike
SubscriberRoutine = Callable[[OnNext, OnError, OnComplete], Any]


@runtime_checkable
class SubscriptionLike(Protocol):
    """Something that can be cancelled."""

    def unsubscribe(self) -> None: ...


@runtime_checkable
class Subscribable(Protocol[T_co]):
    """
    Protocol for push sources.

    Example:
        ```python
        def watch(source: Subscribable[int]) -> SubscriptionLike:
            return source.subscribe(print, None, lambda *_: print("done"))
        ```
    """

    def subscribe(
        self,
        on_next: Optional[OnNext] = None,
        on_error: Optional[OnError] = None,
        on_complete: Optional[OnComplete] = None,
    ) -> SubscriptionLike: ...


@runtime_checkable
class SupportsObservable(Protocol[T_co]):
    """
    Protocol for objects that can hand out an observable view of themselves.

    Every `pushflow.Observable` implements this by returning itself, which is
    what lets `Observable.from_` accept observables from other libraries.
    """

    def __observable__(self) -> Subscribable[T_co]: ...
