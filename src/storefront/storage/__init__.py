"""Storage factory.

Provides get_storage() / set_storage() to swap implementations:
- MemoryStorage for development and testing
- JsonFileStorage for a durable local profile
"""

from storefront.storage.memory_adapter import MemoryStorage
from storefront.storage.port import StoragePort

_current_storage: StoragePort | None = None


def get_storage() -> StoragePort:
    """Return the current storage adapter. Defaults to MemoryStorage."""
    global _current_storage
    if _current_storage is None:
        _current_storage = MemoryStorage()
    return _current_storage


def set_storage(storage: StoragePort) -> None:
    """Override the active storage adapter (useful for tests)."""
    global _current_storage
    _current_storage = storage


def reset_storage() -> None:
    """Reset to default storage."""
    global _current_storage
    _current_storage = None
