"""Registry — the container every store lives in.

A Registry owns the central state tree (store id -> state slice), the map of
built stores, the plugin list and a root Scope that parents every store's
scope. Accessors take the registry explicitly:

    registry = create_registry().use(persist_plugin(storage))
    counter = use_counter(registry)

Code that cannot thread a registry through may opt in to an active one with
``set_active_registry()`` or ``with registry.activate():``; accessors called
without an argument then use it.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable, Iterator, Mapping

from depot.config import RegistryOptions
from depot.errors import NoActiveRegistryError
from depot.observable import ObservableDict
from depot.scope import Scope

if TYPE_CHECKING:
    from depot.store import PluginContext, Store

    Plugin = Callable[[PluginContext], Mapping | None]

logger = logging.getLogger("depot.registry")

# Key a host receives the registry under in Registry.install().
REGISTRY_KEY = "depot.registry"

_active_registry: contextvars.ContextVar[Registry | None] = contextvars.ContextVar(
    "active_registry", default=None
)


class Registry:
    """State tree, built stores, plugins and the root scope."""

    def __init__(self, options: RegistryOptions | None = None) -> None:
        self.options = options if options is not None else RegistryOptions()
        self.scope = Scope(detached=True)
        self.state: ObservableDict = ObservableDict()
        self._stores: dict[str, Store] = {}
        self._plugins: list[Plugin] = []

    @property
    def plugins(self) -> tuple:
        return tuple(self._plugins)

    @property
    def stores(self) -> Mapping[str, Store]:
        """Read-only view of the built stores by id."""
        return MappingProxyType(self._stores)

    @property
    def disposed(self) -> bool:
        return not self.scope.active

    def use(self, plugin: Plugin) -> Registry:
        """Add a plugin for stores built from now on. Chainable."""
        self._plugins.append(plugin)
        return self

    def install(self, host) -> None:
        """Expose the registry to a host application.

        Hosts with a ``provide(key, value)`` method receive the registry under
        ``REGISTRY_KEY``. The registry also becomes the active one.
        """
        provide = getattr(host, "provide", None)
        if callable(provide):
            provide(REGISTRY_KEY, self)
        set_active_registry(self)

    @contextmanager
    def activate(self) -> Iterator[Registry]:
        """Make this the active registry for the duration of the block."""
        token = _active_registry.set(self)
        try:
            yield self
        finally:
            _active_registry.reset(token)

    def get(self, store_id: str) -> Store | None:
        return self._stores.get(store_id)

    def __contains__(self, store_id: str) -> bool:
        return store_id in self._stores

    def _remember(self, store: Store) -> None:
        self._stores[store.id] = store

    def _forget(self, store: Store) -> None:
        if self._stores.get(store.id) is store:
            del self._stores[store.id]
            self.state.pop(store.id, None)

    def dispose(self) -> None:
        """Dispose every store, then stop the root scope."""
        for store in list(self._stores.values()):
            store.dispose()
        self.scope.stop()
        logger.debug("Disposed registry")

    def __repr__(self) -> str:
        return f"<Registry stores={sorted(self._stores)!r} plugins={len(self._plugins)}>"


def create_registry(options: RegistryOptions | None = None) -> Registry:
    return Registry(options)


def set_active_registry(registry: Registry | None) -> None:
    """Set (or with None, clear) the registry accessors fall back to."""
    _active_registry.set(registry)


def get_active_registry() -> Registry | None:
    return _active_registry.get()


def resolve_registry(registry: Registry | None = None) -> Registry:
    """The given registry, else the active one."""
    if registry is not None:
        return registry
    active = _active_registry.get()
    if active is None:
        raise NoActiveRegistryError(
            "no registry given and none is active; pass one to the accessor "
            "or call set_active_registry()"
        )
    return active
