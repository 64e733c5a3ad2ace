"""Scopes — disposable groupings of reactive effects.

Every Computed and Reaction created while ``scope.run()`` is executing is
collected by that scope; so is every Scope created there, as a child.
``scope.stop()`` disposes the children first, then the collected effects, so
stopping a parent tears down the whole tree beneath it.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from depot._tracking import current_scope
from depot import _anchor

R = TypeVar("R")


class Scope:
    """A disposable group of effects and child scopes."""

    __slots__ = ("_id", "_parent", "__weakref__")

    def __init__(self, *, detached: bool = False) -> None:
        self._id = _anchor.new_id(self)
        _anchor.scope_effects[self._id] = []
        _anchor.scope_children[self._id] = []
        _anchor.scope_active[self._id] = True
        self._parent = None if detached else current_scope.get()
        if self._parent is not None:
            _anchor.scope_children[self._parent._id].append(self)

    @property
    def active(self) -> bool:
        return _anchor.scope_active[self._id]

    @property
    def parent(self) -> Scope | None:
        return self._parent

    def run(self, fn: Callable[..., R], *args, **kwargs) -> R:
        """Call fn with this scope collecting the effects it creates."""
        if not self.active:
            raise RuntimeError("cannot run inside a stopped scope")
        token = current_scope.set(self)
        try:
            return fn(*args, **kwargs)
        finally:
            current_scope.reset(token)

    def _collect(self, effect) -> None:
        if self.active:
            _anchor.scope_effects[self._id].append(effect)
        else:
            effect.dispose()

    def stop(self) -> None:
        """Dispose every child scope and effect. Stopping twice is a no-op."""
        if not self.active:
            return
        _anchor.scope_active[self._id] = False
        for child in list(_anchor.scope_children[self._id]):
            child.stop()
        for effect in _anchor.scope_effects[self._id]:
            effect.dispose()
        if self._parent is not None and self._parent.active:
            children = _anchor.scope_children[self._parent._id]
            if self in children:
                children.remove(self)
        _anchor.scope_effects[self._id].clear()
        _anchor.scope_children[self._id].clear()

    # Effects owned by a scope are disposed through it
    dispose = stop

    def __repr__(self) -> str:
        state = "active" if self.active else "stopped"
        count = len(_anchor.scope_effects.get(self._id, ()))
        return f"Scope({count} effects, {state})"


def scope(fn: Callable[[], R] | None = None, *, detached: bool = False) -> Scope:
    """Create a Scope, optionally running fn inside it straight away.

    Usage:
        counter = Observable(0)
        s = scope(lambda: autorun(lambda: print(counter.get())))
        s.stop()  # the autorun is disposed
    """
    s = Scope(detached=detached)
    if fn is not None:
        s.run(fn)
    return s
