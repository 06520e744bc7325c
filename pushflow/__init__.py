"""
PushFlow - Minimal Push-Based Streams
=====================================

A lazy `Observable` that pushes values to a subscriber, and a `Subscription`
handle that guarantees exactly-once termination and cleanup.
"""

from .exceptions import NotObservableError, UnhandledError, UsageError
from .observable import Observable
from .protocols import Subscribable, SubscriptionLike, SupportsObservable
from .scheduler import JobQueue, flush, schedule
from .subscription import Subscription, SubscriptionState

__all__ = [
    # Core
    "Observable",
    "Subscription",
    "SubscriptionState",
    # Scheduling
    "JobQueue",
    "schedule",
    "flush",
    # Capability protocols
    "Subscribable",
    "SupportsObservable",
    "SubscriptionLike",
    # Exceptions
    "UsageError",
    "NotObservableError",
    "UnhandledError",
]
