"""define_store — turn a store definition into a lazy accessor.

Three call shapes are accepted:

    use_counter = define_store("counter", {
        "state": lambda: {"count": 0},
        "getters": {"double": lambda self: self.count * 2},
        "actions": {"increment": increment},
    })
    use_counter = define_store({"id": "counter", "state": ..., ...})
    use_counter = define_store("counter", setup)   # setup() -> mapping

The first two are declarative; the last is a setup (procedural) store whose
setup function returns Observable cells, Computed values, functions and plain
values. Calling the accessor with a registry builds the store the first time
and returns the same object on every later call.
"""

from __future__ import annotations

import types
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable

from depot.computed import Computed
from depot.errors import StoreDefinitionError
from depot.merge import patch
from depot.observable import FieldRef, ObservableDict
from depot.registry import Registry, resolve_registry
from depot.store import Store, build_store

_DECLARATIVE_KEYS = frozenset({"id", "state", "getters", "actions"})


@dataclass(frozen=True)
class StoreDefinition:
    """A normalized store definition.

    For declarative definitions ``setup`` takes the store being built, so
    actions and getters can use it as their receiver.
    """

    id: str
    setup: Callable
    is_declarative: bool


def declarative_setup(store_id: str, options: Mapping) -> Callable[[Store], dict]:
    """Adapt ``{"state", "getters", "actions"}`` into a setup function.

    The state factory runs once per build and its result becomes the slice;
    each field is exposed as a FieldRef into it. Actions are bound to the
    store, getters become Computed values evaluated with the store as their
    only argument. The store also gets a ``reset()`` that re-runs the state
    factory and assigns the result onto the existing slice.
    """
    state_factory = options.get("state")
    getters = options.get("getters") or {}
    actions = options.get("actions") or {}

    def _initial_state() -> dict:
        return dict(state_factory()) if state_factory is not None else {}

    def setup(store: Store) -> dict:
        tree = store._registry.state
        tree[store_id] = _initial_state()
        slice_: ObservableDict = tree[store_id]

        members: dict = {key: FieldRef(slice_, key) for key in slice_.keys()}
        for name, fn in actions.items():
            members[name] = types.MethodType(fn, store)
        for name, fn in getters.items():
            members[name] = Computed(_bind_getter(fn, store), name=name)

        def _reset() -> None:
            new_state = _initial_state()
            patch(slice_, lambda state: state.update(new_state))

        store._reset_state = _reset
        return members

    return setup


def _bind_getter(fn: Callable, store: Store) -> Callable[[], object]:
    def getter():
        return fn(store)

    return getter


def normalize_definition(id_or_options, setup=None) -> StoreDefinition:
    """Reduce the accepted call shapes of define_store to a StoreDefinition."""
    if isinstance(id_or_options, str):
        store_id = id_or_options
        if callable(setup):
            return StoreDefinition(store_id, setup, is_declarative=False)
        if setup is None:
            setup = {}
        if not isinstance(setup, Mapping):
            raise StoreDefinitionError(
                f"store {store_id!r}: expected an options mapping or a setup "
                f"function, got {type(setup).__name__}"
            )
        options = setup
    elif isinstance(id_or_options, Mapping):
        if setup is not None:
            raise StoreDefinitionError(
                "define_store(options) takes no second argument; "
                "put the id inside the options or pass it first"
            )
        options = id_or_options
        store_id = options.get("id")
        if not isinstance(store_id, str):
            raise StoreDefinitionError("store options must contain a string 'id'")
    else:
        raise StoreDefinitionError(
            f"define_store expects an id or an options mapping, got {type(id_or_options).__name__}"
        )

    unknown = set(options) - _DECLARATIVE_KEYS
    if unknown:
        raise StoreDefinitionError(
            f"store {store_id!r}: unknown option(s) {', '.join(sorted(unknown))}"
        )
    if options.get("state") is not None and not callable(options["state"]):
        raise StoreDefinitionError(f"store {store_id!r}: 'state' must be a factory function")
    return StoreDefinition(store_id, declarative_setup(store_id, options), is_declarative=True)


class StoreAccessor:
    """Returned by define_store. Call it to get the store from a registry."""

    def __init__(self, definition: StoreDefinition) -> None:
        self.definition = definition

    @property
    def id(self) -> str:
        return self.definition.id

    def __call__(self, registry: Registry | None = None) -> Store:
        registry = resolve_registry(registry)
        store = registry.get(self.definition.id)
        if store is None:
            store = build_store(self.definition, registry)
        return store

    def __repr__(self) -> str:
        kind = "declarative" if self.definition.is_declarative else "setup"
        return f"<StoreAccessor {self.definition.id!r} ({kind})>"


def define_store(id_or_options, setup=None) -> StoreAccessor:
    """Define a store; see the module docstring for the accepted shapes."""
    return StoreAccessor(normalize_definition(id_or_options, setup))
