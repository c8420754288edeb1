"""
Abstract Storage Interface

DESIGN DECISION: Persistence is a plain string key-value store.
This allows us to:
1. Keep the on-disk format a single JSON blob per key
2. Use in-memory storage for testing
3. Swap the backend without touching the dashboard logic

The interface is intentionally tiny - it mirrors what a browser's
local storage offers and nothing more.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStore(ABC):
    """
    Abstract interface for local key-value storage.

    Keys and values are strings. Implementations must make a
    successful set_item visible to the next get_item.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: The storage key

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """
        Delete a key. Removing an absent key is not an error.

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptStateError(StorageError):
    """Stored data exists but cannot be parsed or validated."""
    pass
