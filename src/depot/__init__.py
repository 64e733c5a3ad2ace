"""depot: lazily built reactive stores in a registry, with patch, subscribe,
action hooks and plugins."""

from importlib.metadata import version as _version

__version__ = _version("depot")

from depot._tracking import get_pending_count, transaction
from depot.observable import (
    FieldRef,
    Observable,
    ObservableDict,
    ObservableList,
    to_plain,
)
from depot.computed import Computed, computed
from depot.reaction import Reaction, autorun, reaction
from depot.scope import Scope, scope
from depot.config import RegistryOptions
from depot.errors import (
    DepotError,
    NoActiveRegistryError,
    ResetUnavailableError,
    StoreDefinitionError,
    StoreDisposedError,
)
from depot.merge import patch
from depot.interceptor import ActionContext
from depot.registry import (
    REGISTRY_KEY,
    Registry,
    create_registry,
    get_active_registry,
    set_active_registry,
)
from depot.store import MemberKind, PluginContext, StateChange, Store
from depot.define import StoreAccessor, define_store
from depot.refs import store_to_refs
from depot.persist import persist_plugin
# textual NOT auto-imported — opt-in only

__all__ = [
    "Observable",
    "ObservableList",
    "ObservableDict",
    "FieldRef",
    "to_plain",
    "Computed",
    "computed",
    "Reaction",
    "autorun",
    "reaction",
    "transaction",
    "Scope",
    "scope",
    "get_pending_count",
    "patch",
    "RegistryOptions",
    "DepotError",
    "NoActiveRegistryError",
    "ResetUnavailableError",
    "StoreDefinitionError",
    "StoreDisposedError",
    "REGISTRY_KEY",
    "Registry",
    "create_registry",
    "get_active_registry",
    "set_active_registry",
    "ActionContext",
    "MemberKind",
    "PluginContext",
    "StateChange",
    "Store",
    "StoreAccessor",
    "define_store",
    "store_to_refs",
    "persist_plugin",
]
