"""Services package."""

from bizbalance.services.storage import (
    BusinessDataRepository,
    CorruptStateError,
    InMemoryStore,
    JsonFileStore,
    KeyValueStore,
    StorageError,
)

__all__ = [
    # Storage services
    "BusinessDataRepository",
    "CorruptStateError",
    "InMemoryStore",
    "JsonFileStore",
    "KeyValueStore",
    "StorageError",
]
