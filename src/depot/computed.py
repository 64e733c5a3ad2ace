"""Computed values — cached derivations, used for store getters.

A Computed reruns its function on the first read after any cell it read last
time has changed, and serves the cached result otherwise. Invalidation is
pushed to its own readers straight away so a store watcher reading a getter
still fires in the same flush.

A Computed created inside ``Scope.run`` is disposed with the scope. A disposed
Computed no longer caches: reads call the function directly.
"""

from __future__ import annotations

from typing import TypeVar, Generic, Callable
from depot._tracking import current_derivation, notify, register_effect
from depot import _anchor

T = TypeVar("T")

_UNSET = object()


class Computed(Generic[T]):
    """A cached derived value with automatic dependency tracking."""

    __slots__ = ("_id", "_name", "_released_fn", "__weakref__")

    def __init__(self, fn: Callable[[], T], *, name: str | None = None) -> None:
        self._id = _anchor.new_id(self)
        self._name = name or getattr(fn, "__name__", "computed")
        self._released_fn = None
        _anchor.derivation_fns[self._id] = fn
        _anchor.cached_values[self._id] = _UNSET
        _anchor.dirty_flags[self._id] = True
        _anchor.dependencies[self._id] = set()
        _anchor.observers[self._id] = set()
        _anchor.disposed[self._id] = False
        register_effect(self)

    @property
    def name(self) -> str:
        return self._name

    @property
    def _dependencies(self) -> set:
        return _anchor.dependencies[self._id]

    @property
    def disposed(self) -> bool:
        return _anchor.disposed[self._id]

    def get(self) -> T:
        if _anchor.disposed[self._id]:
            return self._released_fn()

        derivation = current_derivation.get()
        if derivation is not None:
            _anchor.observers[self._id].add(derivation)
            derivation._dependencies.add(self)

        if _anchor.dirty_flags[self._id]:
            self._clear_dependencies()
            token = current_derivation.set(self)
            try:
                _anchor.cached_values[self._id] = _anchor.derivation_fns[self._id]()
            finally:
                current_derivation.reset(token)
            _anchor.dirty_flags[self._id] = False

        return _anchor.cached_values[self._id]

    def _run(self) -> None:
        # A dependency changed: drop the cache once and pass it on.
        if not _anchor.dirty_flags[self._id]:
            _anchor.dirty_flags[self._id] = True
            notify(_anchor.observers[self._id])

    def _clear_dependencies(self) -> None:
        for dep in _anchor.dependencies[self._id]:
            dep._remove_observer(self)
        _anchor.dependencies[self._id].clear()

    def _remove_observer(self, observer) -> None:
        _anchor.observers[self._id].discard(observer)

    def dispose(self) -> None:
        """Disconnect from all cells and readers. Disposing twice is a no-op.

        The function moves off the engine tables onto the handle, so a getter
        closing over its store is freed together with the store.
        """
        if _anchor.disposed[self._id]:
            return
        _anchor.disposed[self._id] = True
        self._clear_dependencies()
        _anchor.observers[self._id].clear()
        _anchor.cached_values[self._id] = _UNSET
        self._released_fn = _anchor.derivation_fns.pop(self._id)

    def __repr__(self) -> str:
        if _anchor.disposed[self._id]:
            state = "disposed"
        elif _anchor.dirty_flags[self._id]:
            state = "dirty"
        else:
            state = f"cached={_anchor.cached_values[self._id]!r}"
        return f"Computed({self._name}, {state})"


def computed(fn: Callable[[], T]) -> Computed[T]:
    """Decorator form of Computed.

        @computed
        def total():
            return sum(item["price"] for item in cart)
    """
    return Computed(fn)
