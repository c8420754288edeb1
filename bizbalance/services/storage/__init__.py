"""
Storage Services Package

Provides an abstract key-value interface and concrete implementations
for local storage. The JSON file store plays the role browser local
storage plays for a web page: one small blob per key, on this machine.
"""

from bizbalance.services.storage.interface import (
    CorruptStateError,
    KeyValueStore,
    StorageError,
)
from bizbalance.services.storage.local_file import InMemoryStore, JsonFileStore
from bizbalance.services.storage.repository import BusinessDataRepository

__all__ = [
    # Interfaces
    "KeyValueStore",
    # Exceptions
    "CorruptStateError",
    "StorageError",
    # Implementations
    "BusinessDataRepository",
    "InMemoryStore",
    "JsonFileStore",
]
