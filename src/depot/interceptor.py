"""Action interception — before/after/error hooks around store actions.

Each call of a wrapped action notifies the store's action subscribers before
running, then reports the outcome to the per-call ``after`` and ``on_error``
callbacks those subscribers registered:

    def log_actions(ctx):
        print("start", ctx.name, ctx.args)
        ctx.after(lambda result: print("done", ctx.name, result))
        ctx.on_error(lambda exc: print("failed", ctx.name, exc))

    store.on_action(log_actions)
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from depot._tracking import transaction
from depot.config import RegistryOptions
from depot.subscriptions import trigger_subscriptions

if TYPE_CHECKING:
    from depot.store import Store

logger = logging.getLogger("depot.interceptor")

_DEFAULT_OPTIONS = RegistryOptions()


@dataclass
class ActionContext:
    """What an action subscriber receives for one call."""

    name: str
    store: Store
    args: tuple
    after: Callable[[Callable[[Any], None]], None] = field(repr=False)
    on_error: Callable[[Callable[[BaseException], None]], None] = field(repr=False)
    kwargs: dict = field(default_factory=dict)


def wrap_action(
    name: str,
    action: Callable,
    store: Store,
    subscriptions: list[Callable],
    options: RegistryOptions = _DEFAULT_OPTIONS,
) -> Callable:
    """Return ``action`` wrapped so every call goes through ``subscriptions``.

    Synchronous failures are reported to ``on_error`` callbacks and then
    swallowed (the call returns None) unless ``options.sync_errors`` is
    ``"raise"``. Awaitable results are watched: once settled, ``after`` or
    ``on_error`` callbacks fire and a failure still reaches whoever awaits.
    """

    @functools.wraps(action)
    def wrapped(*args, **kwargs):
        after_callbacks: list[Callable] = []
        error_callbacks: list[Callable] = []

        trigger_subscriptions(
            subscriptions,
            ActionContext(
                name=name,
                store=store,
                args=args,
                kwargs=kwargs,
                after=after_callbacks.append,
                on_error=error_callbacks.append,
            ),
        )

        failure = None
        with transaction():
            try:
                result = action(*args, **kwargs)
            except Exception as exc:
                failure = exc

        if failure is not None:
            trigger_subscriptions(error_callbacks, failure)
            if options.sync_errors == "raise":
                raise failure
            logger.debug("Action %s.%s raised %r, swallowed", store.id, name, failure)
            return None

        if inspect.isawaitable(result):
            result = _watch_settlement(result, after_callbacks, error_callbacks)
            if options.async_after == "settled":
                return result

        trigger_subscriptions(after_callbacks, result)
        return result

    wrapped.__wrapped_action__ = action
    return wrapped


def _watch_settlement(
    awaitable: Awaitable, after_callbacks: list, error_callbacks: list
) -> Awaitable:
    if asyncio.isfuture(awaitable):
        awaitable.add_done_callback(
            functools.partial(_on_future_done, after_callbacks, error_callbacks)
        )
        return awaitable
    return _settle(awaitable, after_callbacks, error_callbacks)


def _on_future_done(after_callbacks: list, error_callbacks: list, future) -> None:
    if future.cancelled():
        trigger_subscriptions(error_callbacks, asyncio.CancelledError())
    elif future.exception() is not None:
        trigger_subscriptions(error_callbacks, future.exception())
    else:
        trigger_subscriptions(after_callbacks, future.result())


async def _settle(awaitable: Awaitable, after_callbacks: list, error_callbacks: list):
    try:
        value = await awaitable
    except Exception as exc:
        trigger_subscriptions(error_callbacks, exc)
        raise
    trigger_subscriptions(after_callbacks, value)
    return value
