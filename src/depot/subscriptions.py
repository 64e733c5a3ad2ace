"""Ordered callback lists."""

from __future__ import annotations

from typing import Callable

Unsubscribe = Callable[[], None]


def add_subscription(subscriptions: list[Callable], callback: Callable) -> Unsubscribe:
    """Append callback. Returns a function that removes exactly that callback."""
    subscriptions.append(callback)

    def _remove() -> None:
        # identity, not equality: two equal callbacks are still two entries
        for index, entry in enumerate(subscriptions):
            if entry is callback:
                del subscriptions[index]
                return

    return _remove


def trigger_subscriptions(subscriptions: list[Callable], *args) -> None:
    """Call every callback in registration order.

    Iterates a snapshot, so callbacks added or removed while triggering only
    affect later triggers.
    """
    for callback in list(subscriptions):
        callback(*args)
