"""Registry options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

SyncErrors = Literal["swallow", "raise"]
AsyncAfter = Literal["both", "settled"]

_SYNC_ERRORS = ("swallow", "raise")
_ASYNC_AFTER = ("both", "settled")


@dataclass(frozen=True)
class RegistryOptions:
    """Policies applied to every store built by a registry.

    sync_errors: what a wrapped action does after reporting a synchronous
        exception to its ``on_error`` callbacks. ``"swallow"`` returns None,
        ``"raise"`` re-raises.
    async_after: when ``after`` callbacks run for an action that returns an
        awaitable. ``"both"`` calls them right away with the awaitable and
        again with the result once it settles; ``"settled"`` only calls them
        once it settles.
    warn_on_shadowing: log a warning when a store member has the same name
        as a Store method or property.
    """

    sync_errors: SyncErrors = "swallow"
    async_after: AsyncAfter = "both"
    warn_on_shadowing: bool = True

    def __post_init__(self) -> None:
        if self.sync_errors not in _SYNC_ERRORS:
            raise ValueError(
                f"sync_errors must be one of {_SYNC_ERRORS}, got {self.sync_errors!r}"
            )
        if self.async_after not in _ASYNC_AFTER:
            raise ValueError(
                f"async_after must be one of {_ASYNC_AFTER}, got {self.async_after!r}"
            )
