"""Document store port (abstract interface).

Records are JSON-like dicts grouped in named collections and addressed by
key. Every stored record carries a ``version`` that the store increments
on each write; passing ``expected_version`` to ``update`` turns it into a
compare-and-swap.
"""

from abc import ABC, abstractmethod


class DocumentStore(ABC):
    """Abstract document store interface."""

    @abstractmethod
    def get(self, collection: str, key: str) -> dict | None:
        """Return the record (including its ``version``), or None when absent."""
        ...

    @abstractmethod
    def create(self, collection: str, key: str, record: dict) -> dict:
        """Store a new record at version 1.

        Raises DocumentExists when the key is already taken.
        """
        ...

    @abstractmethod
    def update(self, collection: str, key: str, patch: dict, expected_version: int | None = None) -> dict:
        """Merge ``patch`` into the record's top-level fields and bump its version.

        Raises DocumentNotFound for an absent record and VersionConflict when
        ``expected_version`` is given and no longer current.
        """
        ...
