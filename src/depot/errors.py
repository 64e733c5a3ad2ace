"""Exceptions raised by depot."""


class DepotError(Exception):
    """Base class for depot errors."""


class StoreDefinitionError(DepotError, TypeError):
    """define_store() was called with arguments it cannot normalize."""


class NoActiveRegistryError(DepotError, RuntimeError):
    """A store accessor was called without a registry and none is active."""


class StoreDisposedError(DepotError, RuntimeError):
    """A disposed store was asked to do something that needs its scope."""

    def __init__(self, store_id: str) -> None:
        super().__init__(f"store {store_id!r} has been disposed")
        self.store_id = store_id


class ResetUnavailableError(DepotError, AttributeError):
    """reset() was called on a store defined with a setup function."""
