"""Subscriber callback contract and the helpers the notifier uses to match and call them."""

from __future__ import annotations

import types
from typing import Any, Callable, Protocol, TypeVar, Union

T_contra = TypeVar("T_contra", contravariant=True)


class NotificationCallback(Protocol[T_contra]):
    """Anything with an ``on_notify(sender, payload)`` method can subscribe."""

    def on_notify(self, sender: Any, payload: T_contra) -> None: ...


Subscriber = Union[NotificationCallback[T_contra], Callable[[Any, T_contra], None]]


def same_callback(a: object, b: object) -> bool:
    """Return True when *a* and *b* are the same subscriber.

    Identity, not equality. Bound methods are re-created on every attribute
    access, so two of them count as the same callback when they bind the same
    function to the same instance. Methods of built-in types (``d.setdefault``,
    ``queue.append``) have no ``__func__`` and are matched by instance and name.
    """
    if a is b:
        return True
    if isinstance(a, types.MethodType) and isinstance(b, types.MethodType):
        return a.__self__ is b.__self__ and a.__func__ is b.__func__
    if isinstance(a, types.BuiltinMethodType) and isinstance(b, types.BuiltinMethodType):
        return a.__self__ is b.__self__ and a.__name__ == b.__name__
    return False


def invoke(callback: Subscriber[Any], sender: Any, payload: Any) -> None:
    """Deliver one notification to *callback*.

    Objects exposing ``on_notify`` are always called through it, even if they
    are also callable.
    """
    on_notify = getattr(callback, "on_notify", None)
    if on_notify is not None:
        on_notify(sender, payload)
    elif callable(callback):
        callback(sender, payload)
    else:
        raise TypeError(
            f"{type(callback).__name__} is not a notification callback: "
            "expected an on_notify(sender, payload) method or a callable"
        )
