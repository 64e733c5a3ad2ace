"""Reactions — side effects triggered by observable state changes.

Unlike Computed (which is lazy and only evaluates on read), a Reaction
eagerly re-runs its side effect whenever its tracked dependencies change.

Two flavors:
- autorun(fn): runs fn immediately, re-runs when any cell it read changes.
- reaction(data_fn, effect_fn): tracks data_fn, calls effect_fn with the new
  value only when data_fn's result changes. With ``deep=True`` the result is
  walked in full, so a change anywhere inside a nested observable structure
  counts as a change of the result.

Reactions created while a Scope is running belong to that scope.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

from typing import TypeVar, Callable
from depot._tracking import current_derivation, register_effect
from depot.observable import to_plain
from depot import _anchor

T = TypeVar("T")


class Reaction:
    """A reactive side effect that re-runs when its dependencies change.

    Reactions run eagerly (unlike Computed which is lazy).
    """

    __slots__ = ("_id", "__weakref__")

    def __init__(self, fn: Callable[[], None]) -> None:
        self._id = _anchor.new_id(self)
        _anchor.derivation_fns[self._id] = fn
        _anchor.dependencies[self._id] = set()
        _anchor.disposed[self._id] = False
        register_effect(self)

    @property
    def _fn(self) -> Callable[[], None]:
        return _anchor.derivation_fns[self._id]

    @property
    def _dependencies(self) -> set:
        return _anchor.dependencies[self._id]

    @property
    def disposed(self) -> bool:
        return _anchor.disposed[self._id]

    def _run(self) -> None:
        """Re-evaluate the reaction function, re-tracking dependencies."""
        if _anchor.disposed[self._id]:
            return

        _clear_dependencies(self)

        token = current_derivation.set(self)
        try:
            self._fn()
        finally:
            current_derivation.reset(token)

    def dispose(self) -> None:
        """Stop this reaction. Disconnects from all dependencies."""
        _dispose(self)

    def __repr__(self) -> str:
        state = "disposed" if _anchor.disposed[self._id] else "active"
        return f"Reaction({_fn_name(self)}, {state})"


class _DataReaction:
    """Internal: reaction(data_fn, effect_fn) implementation.

    Tracks data_fn's dependencies. When they change, re-runs data_fn.
    If the result differs from last time, calls effect_fn with the new value.
    A deep reaction compares plain snapshots of the result instead.
    """

    __slots__ = ("_id", "_effect_fn", "_last_value", "_initialized", "_deep", "__weakref__")

    def __init__(self, data_fn: Callable, effect_fn: Callable, deep: bool = False) -> None:
        self._id = _anchor.new_id(self)
        _anchor.derivation_fns[self._id] = data_fn
        _anchor.dependencies[self._id] = set()
        _anchor.disposed[self._id] = False
        self._effect_fn = effect_fn
        self._last_value = None
        self._initialized = False
        self._deep = deep
        register_effect(self)

    @property
    def _data_fn(self) -> Callable:
        return _anchor.derivation_fns[self._id]

    @property
    def _dependencies(self) -> set:
        return _anchor.dependencies[self._id]

    @property
    def disposed(self) -> bool:
        return _anchor.disposed[self._id]

    def _evaluate(self):
        """Run data_fn under tracking. Returns (value, comparable)."""
        _clear_dependencies(self)

        token = current_derivation.set(self)
        try:
            value = self._data_fn()
            comparable = to_plain(value) if self._deep else value
        finally:
            current_derivation.reset(token)
        return value, comparable

    def _run(self) -> None:
        if _anchor.disposed[self._id]:
            return

        new_value, comparable = self._evaluate()

        if not self._initialized or comparable != self._last_value:
            self._last_value = comparable
            self._initialized = True
            self._effect_fn(new_value)

    def dispose(self) -> None:
        _dispose(self)

    def __repr__(self) -> str:
        state = "disposed" if _anchor.disposed[self._id] else "active"
        return f"_DataReaction({_fn_name(self)}, {state})"


def _clear_dependencies(derivation) -> None:
    for dep in _anchor.dependencies[derivation._id]:
        dep._remove_observer(derivation)
    _anchor.dependencies[derivation._id].clear()


def _dispose(derivation) -> None:
    if _anchor.disposed[derivation._id]:
        return
    _anchor.disposed[derivation._id] = True
    _clear_dependencies(derivation)
    # A disposed reaction never runs again; its function can go.
    _anchor.derivation_fns.pop(derivation._id, None)


def _fn_name(derivation) -> str:
    return getattr(_anchor.derivation_fns.get(derivation._id), "__name__", "fn")


def autorun(fn: Callable[[], None]) -> Reaction:
    """Run fn immediately, then re-run whenever any cell it reads changes.

    Returns the Reaction (call .dispose() to stop).

    Usage:
        counter = Observable(0)
        log = []

        r = autorun(lambda: log.append(counter.get()))
        # log == [0] — ran immediately

        counter.set(1)
        # log == [0, 1] — re-ran because counter changed

        r.dispose()
        counter.set(2)
        # log == [0, 1] — stopped
    """
    r = Reaction(fn)
    r._run()  # Initial run to establish dependencies
    return r


def reaction(
    data_fn: Callable[[], T],
    effect_fn: Callable[[T], None],
    *,
    fire_immediately: bool = False,
    deep: bool = False,
) -> _DataReaction:
    """Track data_fn's cells; call effect_fn when the result changes.

    Unlike autorun, effect_fn only fires when data_fn's *return value* changes,
    not on every dependency notification. With ``deep=True`` the return value
    is walked recursively (tracking every nested cell) and compared by its
    plain snapshot, so in-place mutations of a nested structure fire too.

    Returns the reaction (call .dispose() to stop).

    Usage:
        state = ObservableDict({"user": {"name": "Alice"}})

        effects = []
        r = reaction(lambda: state, lambda s: effects.append(s["user"]["name"]), deep=True)
        # effects == [] — data_fn ran to establish deps, but effect doesn't fire yet

        state["user"]["name"] = "Bob"
        # effects == ["Bob"]

        r.dispose()
    """
    r = _DataReaction(data_fn, effect_fn, deep=deep)
    if fire_immediately:
        r._run()
    else:
        # Establish deps, but suppress the initial effect
        _, r._last_value = r._evaluate()
        r._initialized = True
    return r
