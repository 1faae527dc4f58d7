"""In-memory storage adapter for development and testing."""

from storefront.storage.port import StoragePort


class MemoryStorage(StoragePort):
    """Storage adapter that keeps values in a dict."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(initial or {})
        self.writes: list[str] = []

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value
        self.writes.append(key)

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    def reset(self) -> None:
        """Clear stored values and recorded writes (useful between tests)."""
        self.items.clear()
        self.writes.clear()
