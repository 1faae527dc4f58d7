"""In-memory document store for development and testing."""

import copy

from storefront.documents.port import DocumentStore
from storefront.exceptions import DocumentExists, DocumentNotFound, DocumentStoreError, VersionConflict


class InMemoryDocumentStore(DocumentStore):
    """Document store that keeps records in nested dicts.

    ``fail_next`` makes the next writes raise, to exercise retry paths.
    """

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict]] = {}
        self.writes: list[tuple[str, str, str]] = []
        self._failures: list[Exception] = []

    def fail_next(self, times: int = 1, error: Exception | None = None) -> None:
        for _ in range(times):
            self._failures.append(error or DocumentStoreError("Document store unavailable"))

    def _maybe_fail(self) -> None:
        if self._failures:
            raise self._failures.pop(0)

    def get(self, collection: str, key: str) -> dict | None:
        record = self.collections.get(collection, {}).get(key)
        return copy.deepcopy(record) if record is not None else None

    def create(self, collection: str, key: str, record: dict) -> dict:
        self._maybe_fail()
        records = self.collections.setdefault(collection, {})
        if key in records:
            raise DocumentExists(collection, key)

        stored = {**copy.deepcopy(record), "version": 1}
        records[key] = stored
        self.writes.append(("create", collection, key))
        return copy.deepcopy(stored)

    def update(self, collection: str, key: str, patch: dict, expected_version: int | None = None) -> dict:
        self._maybe_fail()
        current = self.collections.get(collection, {}).get(key)
        if current is None:
            raise DocumentNotFound(collection, key)
        if expected_version is not None and current["version"] != expected_version:
            raise VersionConflict(collection, key, expected_version, current["version"])

        patch = {name: value for name, value in patch.items() if name != "version"}
        stored = {**current, **copy.deepcopy(patch), "version": current["version"] + 1}
        self.collections[collection][key] = stored
        self.writes.append(("update", collection, key))
        return copy.deepcopy(stored)

    def reset(self) -> None:
        self.collections.clear()
        self.writes.clear()
        self._failures.clear()
