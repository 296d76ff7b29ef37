"""Errors raised by the notifier."""

from __future__ import annotations


class NotifierError(RuntimeError):
    """Base class for notifier errors."""


class ReentrantNotificationError(NotifierError):
    """Raised when the subscriber list is modified from inside its own dispatch.

    The notifier holds its lock for the whole of a synchronous dispatch, so a
    callback that tries to subscribe or unsubscribe on the same notifier from
    the dispatching thread would otherwise mutate the list mid-iteration.
    """

    def __init__(
        self, message: str = "Attempt to modify notification list from notification thread"
    ) -> None:
        super().__init__(message)
