"""Data anchor — plain Python structures that hold the engine's raw state.

Cells, derivations and scopes are thin handles holding an ``_id``; the data
they point at lives in the dicts below. A handle's entries are released when
the handle itself is garbage collected, so a disposed store leaves nothing
behind once the last reference to it is gone.
"""

import itertools
import weakref

# Cell state (Observable, ObservableDict, ObservableList)
values: dict[int, object] = {}
observers: dict[int, set] = {}  # cell_id -> set of derivations

# Derivation state (Computed, Reaction, Watcher)
dependencies: dict[int, set] = {}  # deriv_id -> set of cells/computeds read
dirty_flags: dict[int, bool] = {}
cached_values: dict[int, object] = {}
derivation_fns: dict[int, object] = {}
disposed: dict[int, bool] = {}

# Scope state
scope_effects: dict[int, list] = {}  # scope_id -> disposables, creation order
scope_children: dict[int, list] = {}  # scope_id -> child scopes
scope_active: dict[int, bool] = {}

_TABLES = (
    values,
    observers,
    dependencies,
    dirty_flags,
    cached_values,
    derivation_fns,
    disposed,
    scope_effects,
    scope_children,
    scope_active,
)

_id_counter = itertools.count(1)


def new_id(handle) -> int:
    """Allocate an id for ``handle``; its entries go away with the handle."""
    handle_id = next(_id_counter)
    finalizer = weakref.finalize(handle, release, handle_id)
    finalizer.atexit = False
    return handle_id


def release(handle_id: int) -> None:
    """Forget everything stored for ``handle_id``."""
    for table in _TABLES:
        table.pop(handle_id, None)
