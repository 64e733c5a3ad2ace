"""Observable cells — state that tracks its readers.

When a cell is read inside a Computed or a Reaction, the dependency is
registered automatically. When the cell changes, every dependent is scheduled
for re-evaluation.

``ObservableDict`` and ``ObservableList`` are deep: plain dicts and lists put
into them are converted to observable ones, so a watcher that walks the whole
tree (see ``to_plain``) sees a change at any depth. An ``ObservableDict`` can
also hold an ``Observable`` as a value: reads unwrap it and plain writes go
through it, which is how a store links its cells into its state slice.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

from typing import TypeVar, Generic, Iterator
from depot._tracking import begin_batch, current_derivation, end_batch, notify
from depot import _anchor

T = TypeVar("T")
KT = TypeVar("KT")
VT = TypeVar("VT")

_MISSING = object()


def _track(cell) -> None:
    derivation = current_derivation.get()
    if derivation is not None:
        _anchor.observers[cell._id].add(derivation)
        derivation._dependencies.add(cell)


def _reactive(value):
    """Convert plain containers to their observable counterparts."""
    if isinstance(value, dict):
        return ObservableDict(value)
    if isinstance(value, list):
        return ObservableList(value)
    return value


class Observable(Generic[T]):
    """A single observable value with automatic dependency tracking.

    The cell is shallow: mutating a container held inside it does not notify.
    """

    __slots__ = ("_id", "__weakref__")

    def __init__(self, value: T) -> None:
        self._id = _anchor.new_id(self)
        _anchor.values[self._id] = value
        _anchor.observers[self._id] = set()

    def get(self) -> T:
        """Read the value. If inside a derivation, registers the dependency."""
        _track(self)
        return _anchor.values[self._id]

    def set(self, value: T) -> None:
        """Write a new value; observers are notified only on a real change."""
        old = _anchor.values[self._id]
        if old is not value and old != value:
            _anchor.values[self._id] = value
            self._notify()

    def _notify(self) -> None:
        notify(_anchor.observers[self._id])

    def _remove_observer(self, observer) -> None:
        """Remove an observer. Called during dependency cleanup."""
        _anchor.observers[self._id].discard(observer)

    def __repr__(self) -> str:
        return f"Observable({_anchor.values[self._id]!r})"


class ObservableList(Generic[T]):
    """An observable list that tracks reads and notifies on mutation.

    Any read operation (iteration, indexing, len) registers a dependency.
    Any mutation (append, extend, __setitem__, etc.) notifies observers.
    """

    __slots__ = ("_id", "__weakref__")

    def __init__(self, items: list[T] | None = None) -> None:
        self._id = _anchor.new_id(self)
        _anchor.values[self._id] = [_reactive(item) for item in items] if items else []
        _anchor.observers[self._id] = set()

    @property
    def _items(self) -> list[T]:
        return _anchor.values[self._id]

    def _notify(self) -> None:
        notify(_anchor.observers[self._id])

    def _remove_observer(self, observer) -> None:
        _anchor.observers[self._id].discard(observer)

    # --- Read operations (track) ---

    def __getitem__(self, index: int) -> T:
        _track(self)
        return self._items[index]

    def __len__(self) -> int:
        _track(self)
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        _track(self)
        return iter(list(self._items))

    def __contains__(self, item: T) -> bool:
        _track(self)
        return item in self._items

    def __bool__(self) -> bool:
        _track(self)
        return bool(self._items)

    # --- Write operations (notify) ---

    def append(self, item: T) -> None:
        self._items.append(_reactive(item))
        self._notify()

    def extend(self, items) -> None:
        self._items.extend(_reactive(item) for item in items)
        self._notify()

    def insert(self, index: int, item: T) -> None:
        self._items.insert(index, _reactive(item))
        self._notify()

    def pop(self, index: int = -1) -> T:
        result = self._items.pop(index)
        self._notify()
        return result

    def remove(self, item: T) -> None:
        self._items.remove(item)
        self._notify()

    def clear(self) -> None:
        self._items.clear()
        self._notify()

    def __setitem__(self, index: int, value: T) -> None:
        self._items[index] = _reactive(value)
        self._notify()

    def __delitem__(self, index: int) -> None:
        del self._items[index]
        self._notify()

    def __repr__(self) -> str:
        return f"ObservableList({self._items!r})"


class ObservableDict(Generic[KT, VT]):
    """An observable dict that tracks reads and notifies on mutation.

    Values that are ``Observable`` cells are linked, not copied: reading the
    key reads the cell and assigning a plain value to the key sets the cell.
    Assigning another cell replaces the link.
    """

    __slots__ = ("_id", "__weakref__")

    def __init__(self, data: dict[KT, VT] | None = None) -> None:
        self._id = _anchor.new_id(self)
        _anchor.values[self._id] = (
            {key: _reactive(value) for key, value in data.items()} if data else {}
        )
        _anchor.observers[self._id] = set()

    @property
    def _data(self) -> dict[KT, VT]:
        return _anchor.values[self._id]

    def _notify(self) -> None:
        notify(_anchor.observers[self._id])

    def _remove_observer(self, observer) -> None:
        _anchor.observers[self._id].discard(observer)

    @staticmethod
    def _unwrap(value):
        if isinstance(value, Observable):
            return value.get()
        return value

    def raw(self, key: KT, default=None):
        """The stored value for ``key`` without unwrapping linked cells."""
        _track(self)
        return self._data.get(key, default)

    # --- Read operations (track) ---

    def __getitem__(self, key: KT) -> VT:
        _track(self)
        return self._unwrap(self._data[key])

    def get(self, key: KT, default: VT | None = None) -> VT | None:
        _track(self)
        if key in self._data:
            return self._unwrap(self._data[key])
        return default

    def __contains__(self, key: KT) -> bool:
        _track(self)
        return key in self._data

    def __len__(self) -> int:
        _track(self)
        return len(self._data)

    def __iter__(self) -> Iterator[KT]:
        _track(self)
        return iter(list(self._data))

    def keys(self) -> list[KT]:
        _track(self)
        return list(self._data)

    def values(self) -> list[VT]:
        _track(self)
        return [self._unwrap(value) for value in self._data.values()]

    def items(self) -> list[tuple[KT, VT]]:
        _track(self)
        return [(key, self._unwrap(value)) for key, value in self._data.items()]

    def __bool__(self) -> bool:
        _track(self)
        return bool(self._data)

    # --- Write operations (notify) ---

    def __setitem__(self, key: KT, value: VT) -> None:
        current = self._data.get(key, _MISSING)
        if isinstance(current, Observable) and not isinstance(value, Observable):
            current.set(value)
            return
        value = _reactive(value)
        if current is not _MISSING and (current is value or current == value):
            return
        self._data[key] = value
        self._notify()

    def __delitem__(self, key: KT) -> None:
        del self._data[key]
        self._notify()

    def pop(self, key: KT, *args) -> VT:
        result = self._data.pop(key, *args)
        self._notify()
        return self._unwrap(result)

    def update(self, other=None, **kwargs) -> None:
        """Assign key by key, so linked cells are written through."""
        begin_batch()
        try:
            if other:
                pairs = other.items() if hasattr(other, "items") else other
                for key, value in pairs:
                    self[key] = value
            for key, value in kwargs.items():
                self[key] = value
        finally:
            end_batch()

    def clear(self) -> None:
        self._data.clear()
        self._notify()

    def setdefault(self, key: KT, default: VT | None = None) -> VT:
        if key not in self._data:
            self._data[key] = _reactive(default)
            self._notify()
        return self[key]

    def __repr__(self) -> str:
        return f"ObservableDict({self._data!r})"


class FieldRef(Generic[VT]):
    """A cell view onto one key of an ObservableDict.

    Reads and writes go through the mapping, so a FieldRef stays in sync with
    the mapping even when the key's value is replaced.
    """

    __slots__ = ("_target", "_key")

    def __init__(self, target: ObservableDict, key) -> None:
        self._target = target
        self._key = key

    @property
    def key(self):
        return self._key

    def get(self) -> VT:
        return self._target[self._key]

    def set(self, value: VT) -> None:
        self._target[self._key] = value

    def __repr__(self) -> str:
        return f"FieldRef({self._key!r}, {self._target._data.get(self._key)!r})"


def is_cell(value) -> bool:
    """True for single-value cells (Observable, FieldRef)."""
    return isinstance(value, (Observable, FieldRef))


def is_reactive(value) -> bool:
    """True for observable containers."""
    return isinstance(value, (ObservableDict, ObservableList))


def to_plain(value):
    """Deep, tracked read of ``value`` into plain dicts and lists.

    Called inside a derivation it subscribes to every cell it walks over,
    which is what a deep watcher needs.
    """
    if isinstance(value, (Observable, FieldRef)):
        return to_plain(value.get())
    if isinstance(value, (ObservableDict, dict)):
        return {key: to_plain(item) for key, item in value.items()}
    if isinstance(value, (ObservableList, list, tuple)):
        return [to_plain(item) for item in value]
    return value
