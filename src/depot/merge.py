"""Structural patching of state trees.

``patch`` mutates the target in place and never replaces it, so anything
observing the target's existing leaves stays wired up.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Callable, Union

from depot._tracking import transaction
from depot.observable import Observable, ObservableDict

Mutator = Callable[[MutableMapping], object]
Partial = Union[Mapping, Mutator]


def _is_mapping(value) -> bool:
    return isinstance(value, (Mapping, ObservableDict))


def _copy_tree(value):
    if isinstance(value, Mapping):
        return {key: _copy_tree(item) for key, item in value.items()}
    return value


def merge_into(target, partial: Mapping) -> None:
    """Copy values from partial onto the keys target already has.

    Keys only present in partial are ignored; keys missing from partial are
    left alone. Two mappings at the same key are merged recursively; any
    other pair is resolved by overwriting the target's value. A plain
    mapping held by a linked cell is merged into a copy which is then set on
    the cell, so the cell's readers are notified.
    """
    for key in list(target.keys()):
        if key not in partial:
            continue
        old_value = target[key]
        new_value = partial[key]
        if not (_is_mapping(old_value) and _is_mapping(new_value)):
            target[key] = new_value
            continue
        cell = target.raw(key) if isinstance(target, ObservableDict) else None
        if isinstance(cell, Observable) and isinstance(old_value, Mapping):
            merged = _copy_tree(old_value)
            merge_into(merged, new_value)
            cell.set(merged)
        else:
            merge_into(old_value, new_value)


def patch(target, partial: Partial) -> None:
    """Apply a partial mapping or a mutator function to target.

    Both forms run in a single transaction, so watchers of target are
    notified once per call however many leaves change.
    """
    with transaction():
        if _is_mapping(partial):
            merge_into(target, partial)
        elif callable(partial):
            partial(target)
        else:
            raise TypeError(
                f"patch expects a mapping or a callable, got {type(partial).__name__}"
            )
