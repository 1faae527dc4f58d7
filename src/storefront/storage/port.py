"""Key/value storage port (abstract interface).

Mirrors the browser's local storage: string keys mapped to string values.
Adapters decide where the values live; the collection store above decides
what they mean.
"""

from abc import ABC, abstractmethod


class StoragePort(ABC):
    """Abstract durable key/value storage."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the raw stored value, or None when the key is absent."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a raw value, replacing any previous one."""
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete a key. Deleting an absent key is a no-op."""
        ...
