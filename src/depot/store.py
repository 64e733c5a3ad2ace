"""Store instances and the routine that assembles them.

A Store is one constructed store: the members returned by its setup (state
cells linked into the registry's state tree, computed values, wrapped
actions, plain values) plus a fixed set of methods defined on the class:
``id``, ``state``, ``patch``, ``subscribe``, ``on_action``, ``dispose`` and
``reset``. The methods are found by normal attribute lookup before any
member, so a member can never hide them.

    store.count          # reads the state cell (tracked)
    store.count = 3      # writes through the cell into registry.state[id]
    store.double         # reads the computed value
    store.increment()    # runs the action through its subscribers
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, NamedTuple

from depot.computed import Computed
from depot.errors import ResetUnavailableError, StoreDefinitionError, StoreDisposedError
from depot.interceptor import wrap_action
from depot.merge import Partial, patch as patch_state
from depot.observable import (
    FieldRef,
    Observable,
    ObservableDict,
    ObservableList,
    is_cell,
)
from depot.reaction import reaction
from depot.scope import Scope
from depot.subscriptions import Unsubscribe, add_subscription

if TYPE_CHECKING:
    from depot.config import RegistryOptions
    from depot.define import StoreDefinition
    from depot.registry import Registry

logger = logging.getLogger("depot.store")

# Cells a procedural setup hands over to the state tree.
_LINKABLE = (Observable, ObservableDict, ObservableList)


class MemberKind(enum.Enum):
    ACTION = "action"
    STATE = "state"
    COMPUTED = "computed"
    PLAIN = "plain"


class Member(NamedTuple):
    kind: MemberKind
    value: Any


def classify(value) -> MemberKind:
    """Decide how a setup member is exposed on the store."""
    if isinstance(value, Computed):
        return MemberKind.COMPUTED
    if isinstance(value, (Observable, FieldRef, ObservableDict, ObservableList)):
        return MemberKind.STATE
    if callable(value):
        return MemberKind.ACTION
    return MemberKind.PLAIN


@dataclass(frozen=True)
class StateChange:
    """Passed to ``Store.subscribe`` callbacks."""

    store_id: str
    state: ObservableDict


@dataclass(frozen=True)
class PluginContext:
    """Passed to every plugin when a store is built."""

    store: Store
    registry: Registry
    options: RegistryOptions


class Store:
    """One constructed store. Build it with an accessor from ``define_store``."""

    def __init__(self, store_id: str, registry: Registry) -> None:
        self._id = store_id
        self._registry = registry
        self._scope: Scope | None = None
        self._members: dict[str, Member] = {}
        self._action_subscriptions: list[Callable] = []
        self._reset_state: Callable[[], None] | None = None
        self._disposed = False

    @property
    def id(self) -> str:
        return self._id

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def state(self) -> ObservableDict:
        """The store's slice of ``registry.state``.

        Assigning a mapping copies its keys onto the slice in one patch; the
        slice object itself is kept.
        """
        self._check_alive()
        return self._registry.state[self._id]

    @state.setter
    def state(self, new_state: Mapping) -> None:
        self.patch(lambda state: state.update(new_state))

    def patch(self, partial: Partial) -> None:
        """Merge a partial mapping into the state, or run a mutator on it.

        With a mapping, only keys the state already has are touched and nested
        mappings are merged rather than replaced. With a callable, it is called
        with the state to mutate freely. Either way subscribers see one change.
        """
        patch_state(self.state, partial)

    def subscribe(
        self,
        callback: Callable[[StateChange], None],
        *,
        immediate: bool = False,
    ) -> Unsubscribe:
        """Call ``callback`` whenever anything in the state changes.

        The watcher belongs to the store and stops when it is disposed, or
        earlier through the returned function. ``immediate`` fires the
        callback once right away.
        """
        self._check_alive()
        store_id = self._id
        tree = self._registry.state

        def _effect(state) -> None:
            callback(StateChange(store_id=store_id, state=state))

        def _watch():
            return reaction(
                lambda: tree.get(store_id),
                _effect,
                fire_immediately=immediate,
                deep=True,
            )

        return self._scope.run(_watch).dispose

    def on_action(self, callback: Callable) -> Unsubscribe:
        """Register ``callback`` for every action call; returns its remover."""
        return add_subscription(self._action_subscriptions, callback)

    def reset(self) -> None:
        """Put the state back to the declared initial values."""
        if self._reset_state is None:
            raise ResetUnavailableError(
                f"store {self._id!r} was defined with a setup function; "
                "reset() needs a declarative state factory"
            )
        self._reset_state()

    def dispose(self) -> None:
        """Stop every watcher and computed of the store and unregister it.

        The next accessor call on the registry builds a fresh store.
        """
        if self._disposed:
            return
        self._disposed = True
        if self._scope is not None:
            self._scope.stop()
        self._registry._forget(self)
        self._action_subscriptions.clear()
        logger.debug("Disposed store %r", self._id)

    def _check_alive(self) -> None:
        if self._disposed:
            raise StoreDisposedError(self._id)

    # --- member access ---

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(f"store {self._id!r} has no member {name!r}") from None

    def __setattr__(self, name: str, value) -> None:
        if name.startswith("_") or name in CONTRACT_NAMES:
            object.__setattr__(self, name, value)
            return
        self[name] = value

    def __getitem__(self, name: str):
        value = self._members[name].value
        if is_cell(value) or isinstance(value, Computed):
            return value.get()
        return value

    def __setitem__(self, name: str, value) -> None:
        member = self._members.get(name)
        if member is not None and is_cell(member.value):
            member.value.set(value)
        elif member is not None and member.kind is MemberKind.COMPUTED:
            raise AttributeError(f"computed member {name!r} of store {self._id!r} is read-only")
        else:
            self._members[name] = Member(MemberKind.PLAIN, value)

    def __contains__(self, name: str) -> bool:
        return name in self._members

    def __dir__(self):
        return sorted(set(super().__dir__()) | set(self._members))

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"{len(self._members)} members"
        return f"<Store {self._id!r} ({state})>"


CONTRACT_NAMES = frozenset(
    name for name in vars(Store) if not name.startswith("_")
)


def _install_members(store: Store, members: Mapping, *, link: bool) -> None:
    """Classify each member once and put it on the store.

    Actions are wrapped with the store's interceptor. With ``link``, state
    cells move into the store's slice and the store keeps a FieldRef to
    the slice key instead.
    """
    registry = store._registry
    slice_ = registry.state[store._id]
    for name, value in members.items():
        kind = classify(value)
        if kind is MemberKind.ACTION:
            value = wrap_action(
                name, value, store, store._action_subscriptions, registry.options
            )
        elif kind is MemberKind.STATE and link and isinstance(value, _LINKABLE):
            slice_[name] = value
            value = FieldRef(slice_, name)

        if name in CONTRACT_NAMES and registry.options.warn_on_shadowing:
            logger.warning(
                "Store %r member %r has the name of a Store method; "
                "reach it with store[%r]",
                store._id, name, name,
            )
        store._members[name] = Member(kind, value)


def build_store(definition: StoreDefinition, registry: Registry) -> Store:
    """Assemble the store described by ``definition`` inside ``registry``.

    The store's scope is a child of the registry's scope, so disposing the
    registry disposes the store. Plugins run after the setup members are in
    place and may add members of their own; a setup member wins over a
    plugin member of the same name.
    """
    store_id = definition.id
    store = Store(store_id, registry)
    scope = registry.scope.run(Scope)
    store._scope = scope

    try:
        if definition.is_declarative:
            members = scope.run(definition.setup, store)
        else:
            members = scope.run(definition.setup)
        if members is None:
            members = {}
        if not isinstance(members, Mapping):
            raise StoreDefinitionError(
                f"setup of store {store_id!r} must return a mapping, "
                f"got {type(members).__name__}"
            )
        if store_id not in registry.state:
            registry.state[store_id] = {}
        _install_members(store, members, link=not definition.is_declarative)
    except Exception:
        scope.stop()
        registry.state.pop(store_id, None)
        raise

    registry._remember(store)
    logger.debug(
        "Built %s store %r with %d members",
        "declarative" if definition.is_declarative else "setup",
        store_id,
        len(members),
    )

    for plugin in registry.plugins:
        try:
            extension = scope.run(plugin, PluginContext(store, registry, registry.options))
        except Exception:
            store.dispose()
            raise
        if extension is not None and not isinstance(extension, Mapping):
            store.dispose()
            raise StoreDefinitionError(
                f"plugin {plugin!r} returned {type(extension).__name__}, expected a mapping"
            )
        if extension:
            extension = {
                name: value for name, value in extension.items() if name not in members
            }
            _install_members(store, extension, link=True)
        logger.debug(
            "Applied plugin %s to store %r",
            getattr(plugin, "__name__", plugin),
            store_id,
        )

    return store
