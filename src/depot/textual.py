"""Textual integration for depot. Opt-in — requires textual.

Bridges store state changes to widget updates. Everything Textual-specific
lives here; the core stays agnostic of the host UI.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from depot.errors import NoActiveRegistryError
from depot.registry import Registry

# Attribute the registry is stored under on the app.
REGISTRY_ATTR = "depot_registry"

# Module-owned pause state — keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend guarded subscriptions during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def install(app, registry: Registry) -> None:
    """Attach the registry to the app and make it the active one."""
    setattr(app, REGISTRY_ATTR, registry)
    registry.install(app)


def registry_for(app) -> Registry:
    """The registry attached to ``app`` by install()."""
    registry = getattr(app, REGISTRY_ATTR, None)
    if registry is None:
        raise NoActiveRegistryError(f"no registry installed on {app!r}")
    return registry


def subscribe(app, store, effect, *, immediate=False):
    """store.subscribe() that safely bridges to Textual widgets.

    Skips changes while the app is paused or not running, swallows NoMatches
    from widget queries, and marshals cross-thread calls via
    call_from_thread. Returns the unsubscribe function.
    """
    _main = threading.get_ident()

    def _guarded(change):
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe, change)
        else:
            _safe(change)

    def _safe(change):
        try:
            effect(change)
        except NoMatches:
            pass

    return store.subscribe(_guarded, immediate=immediate)
