"""Dependency tracking engine.

Uses contextvars to track which cells are read while a computed, reaction or
watcher evaluates, building the dependency graph automatically, and which
scope is collecting newly created effects.

Batching: mutations inside an action, a ``transaction()`` or a store patch
accumulate invalidations and flush them once when the outermost batch exits,
so a watcher sees one notification per batch.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from depot.computed import Computed
    from depot.reaction import Reaction
    from depot.scope import Scope

    Derivation = Computed | Reaction

# The currently-evaluating derivation. When set, any cell read registers
# itself as a dependency.
current_derivation: contextvars.ContextVar[Derivation | None] = contextvars.ContextVar(
    "current_derivation", default=None
)

# The scope collecting effects created right now (see Scope.run).
current_scope: contextvars.ContextVar[Scope | None] = contextvars.ContextVar(
    "current_scope", default=None
)

_batch_depth: int = 0

# Derivations invalidated during a batch, awaiting flush.
_pending: set[Derivation] = set()


def begin_batch() -> None:
    """Enter a batching scope. Nested batches are supported."""
    global _batch_depth
    _batch_depth += 1


def end_batch() -> None:
    """Exit a batching scope. The outermost exit flushes pending derivations."""
    global _batch_depth
    _batch_depth -= 1
    if _batch_depth == 0:
        _flush_pending()


def in_batch() -> bool:
    return _batch_depth > 0


@contextmanager
def transaction():
    """Batch every mutation made inside the block.

        with transaction():
            state["a"] = 1
            state["b"] = 2
        # watchers run here, once
    """
    begin_batch()
    try:
        yield
    finally:
        end_batch()


def schedule(derivation: Derivation) -> None:
    """Schedule a derivation for re-evaluation.

    Inside a batch the run is deferred; otherwise it happens immediately.
    """
    if _batch_depth > 0:
        _pending.add(derivation)
    else:
        derivation._run()


def notify(observers) -> None:
    """Schedule every observer of a changed cell as one batch."""
    begin_batch()
    try:
        for observer in list(observers):
            schedule(observer)
    finally:
        end_batch()


def _flush_pending() -> None:
    """Run pending derivations; ones scheduled during the flush run too.

    Each round runs in creation order, so watchers fire in the order they
    were registered. The flush itself is a batch, so a derivation
    invalidated twice while flushing still runs once per round.
    """
    global _batch_depth
    while _pending:
        batch = sorted(_pending, key=lambda d: d._id)
        _pending.clear()
        _batch_depth += 1
        try:
            for derivation in batch:
                derivation._run()
        finally:
            _batch_depth -= 1


def register_effect(effect) -> None:
    """Hand a freshly created disposable to the active scope, if any."""
    scope = current_scope.get()
    if scope is not None:
        scope._collect(effect)


def get_pending_count() -> int:
    """Number of derivations waiting to run. Useful for testing."""
    return len(_pending)
