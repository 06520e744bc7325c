"""
PushFlow Exceptions
===================

Error types raised by the PushFlow core.

- `UsageError` - programmer misuse, raised synchronously at the point of misuse
- `NotObservableError` - `Observable.from_` was given something it cannot convert
- `UnhandledError` - an error value that reached no handler and is not itself
  an exception
"""

from typing import Any


class UsageError(TypeError):
    """A callback, subscriber routine or cleanup value was used incorrectly."""

    pass


class NotObservableError(TypeError):
    """Source is neither observable nor iterable."""

    pass


class UnhandledError(Exception):
    """
    Escalation wrapper for error values that are not exceptions.

    Producers may deliver any value through `error`. When that value has no
    handler to go to it has to be raised, and only exceptions can be raised,
    so anything else is carried here.
    """

    def __init__(self, value: Any) -> None:
        super().__init__(f"Unhandled error value: {value!r}")
        self.value = value


def escalate(value: Any) -> BaseException:
    """Return the exception to raise for an error value with no handler."""
    if isinstance(value, BaseException):
        return value
    return UnhandledError(value)
