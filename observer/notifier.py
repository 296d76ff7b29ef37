"""Thread-safe subscribers notifier.

An owner object keeps a ``Notifier`` as a named attribute and broadcasts
payloads through it; other objects subscribe callbacks::

    class Scanner:
        def __init__(self) -> None:
            self.device_found: Notifier[Device] = Notifier()

    scanner.device_found.subscribe(on_device_found)
    ...
    self.device_found.send_notification(self, device)
"""

from __future__ import annotations

import itertools
import logging
import threading
from contextlib import contextmanager
from typing import Any, Generic, Iterator, TypeVar

from observer.callbacks import Subscriber, invoke, same_callback
from observer.errors import ReentrantNotificationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ALL = object()
_thread_ids = itertools.count(1)


class Notifier(Generic[T]):
    """Ordered, deduplicated set of callbacks plus sync and async dispatch.

    One reentrant lock guards both the subscriber list and the whole of a
    synchronous dispatch, callbacks included. Concurrent sends are therefore
    serialised, and a subscribe/unsubscribe from another thread waits for an
    in-flight dispatch to finish. The same call from a thread that already
    holds the lock raises ``ReentrantNotificationError`` instead.
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber[T]] = []
        self._lock = threading.RLock()
        self._owner: int | None = None
        self._depth = 0

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber[T] | None) -> None:
        """Append *callback* unless it is already subscribed.

        ``None`` is accepted and ignored.
        """
        self._ensure_not_held()
        if callback is None:
            return
        with self._held():
            if any(same_callback(s, callback) for s in self._subscribers):
                return
            self._subscribers.append(callback)
            total = len(self._subscribers)
        logger.debug("Subscribed %r (%d total)", callback, total)

    def unsubscribe(self, callback: Any = _ALL) -> None:
        """Remove *callback*, or every subscriber when called without arguments.

        Removing a callback that is not subscribed is a no-op.
        """
        self._ensure_not_held()
        if callback is _ALL:
            with self._held():
                self._subscribers.clear()
            logger.debug("Cleared all subscribers")
            return
        with self._held():
            before = len(self._subscribers)
            self._subscribers = [
                s for s in self._subscribers if not same_callback(s, callback)
            ]
            left = len(self._subscribers)
        if left != before:
            logger.debug("Unsubscribed %r (%d left)", callback, left)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def send_notification(self, sender: Any, payload: T) -> None:
        """Call every subscriber in order on the current thread.

        The first exception raised by a subscriber propagates and the
        remaining subscribers are not called.
        """
        with self._held():
            for subscriber in self._subscribers:
                if subscriber is None:
                    continue
                invoke(subscriber, sender, payload)

    def send_notification_async(self, sender: Any, payload: T) -> None:
        """Dispatch on a new background thread and return immediately.

        Anything raised by subscribers is discarded, ``BaseException``
        subclasses included.
        """
        thread = threading.Thread(
            target=self._send_quietly,
            args=(sender, payload),
            name=f"notifier-dispatch-{next(_thread_ids)}",
        )
        thread.start()

    def _send_quietly(self, sender: Any, payload: T) -> None:
        try:
            self.send_notification(sender, payload)
        except BaseException:
            pass

    # ------------------------------------------------------------------
    # Lock ownership
    # ------------------------------------------------------------------

    @contextmanager
    def _held(self) -> Iterator[None]:
        # every hold records its owner, not only dispatch
        with self._lock:
            self._owner = threading.get_ident()
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
                if self._depth == 0:
                    self._owner = None

    def _held_by_current_thread(self) -> bool:
        return self._owner == threading.get_ident()

    def _ensure_not_held(self) -> None:
        if self._held_by_current_thread():
            raise ReentrantNotificationError()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        with self._held():
            return len(self._subscribers)

    def __contains__(self, callback: object) -> bool:
        with self._held():
            return any(same_callback(s, callback) for s in self._subscribers)

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"<Notifier subscribers={len(self)}>"
