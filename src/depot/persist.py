"""Persistence plugin — keep each store's state in a key-value byte store.

    storage = shelve.open("state.db")        # or any MutableMapping[str, bytes]
    registry = create_registry().use(persist_plugin(storage))

When a store is built the plugin loads ``storage[store.id]`` into
``store.state``, then saves the serialized state after every change.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, MutableMapping
from typing import Callable, Collection

from depot.observable import to_plain
from depot.store import PluginContext, StateChange

logger = logging.getLogger("depot.persist")


def persist_plugin(
    storage: MutableMapping[str, bytes],
    *,
    key: Callable[[str], str] | None = None,
    only: Collection[str] | None = None,
    dumps: Callable[[object], str] = json.dumps,
    loads: Callable[[str], object] = json.loads,
) -> Callable[[PluginContext], None]:
    """Build a plugin that persists store state into ``storage``.

    ``key`` maps a store id to its storage key (the id itself by default).
    ``only`` limits persistence to the given store ids. ``dumps``/``loads``
    convert between plain data and text; the text is stored UTF-8 encoded.
    A saved value that cannot be decoded is logged and ignored.
    """
    key_for = key if key is not None else (lambda store_id: store_id)

    def plugin(ctx: PluginContext) -> None:
        store = ctx.store
        if only is not None and store.id not in only:
            return None
        storage_key = key_for(store.id)

        saved = storage.get(storage_key)
        if saved is not None:
            try:
                snapshot = loads(saved.decode("utf-8"))
            except (UnicodeDecodeError, ValueError) as exc:
                logger.warning("Ignoring unreadable snapshot for store %r: %s", store.id, exc)
            else:
                if isinstance(snapshot, Mapping):
                    store.state = snapshot
                    logger.debug("Restored store %r from %r", store.id, storage_key)
                else:
                    logger.warning(
                        "Ignoring snapshot for store %r: expected an object, got %s",
                        store.id, type(snapshot).__name__,
                    )

        def _save(change: StateChange) -> None:
            storage[storage_key] = dumps(to_plain(change.state)).encode("utf-8")

        store.subscribe(_save)
        return None

    plugin.__name__ = "persist_plugin"
    return plugin
