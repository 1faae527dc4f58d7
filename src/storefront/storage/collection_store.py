"""Persistent collection store — named ordered lists kept in durable storage.

Every collection is one JSON array under its own storage key. Reads are
forgiving: a missing key, unparseable content or a non-list value all load
as an empty collection. Writes replace the whole array.

There is no cross-writer coordination. Two processes (or browser tabs)
writing the same collection resolve last-write-wins.
"""

import json
from collections.abc import Callable
from typing import Any

import structlog

from storefront.storage.notifier import ChangeNotifier, Listener
from storefront.storage.port import StoragePort

logger = structlog.get_logger(__name__)


class CollectionStore:
    """Load, save and announce changes to named collections."""

    def __init__(self, storage: StoragePort, notifier: ChangeNotifier | None = None) -> None:
        self.storage = storage
        self.notifier = notifier or ChangeNotifier()

    def load(self, name: str) -> list[Any]:
        raw = self.storage.get_item(name)
        if raw is None:
            return []
        try:
            items = json.loads(raw)
        except ValueError:
            logger.warning("Discarding unparseable collection", collection=name)
            return []
        if not isinstance(items, list):
            logger.warning("Discarding non-list collection", collection=name, found=type(items).__name__)
            return []
        return items

    def save(self, name: str, items: list[Any]) -> None:
        self.storage.set_item(name, json.dumps(list(items)))
        logger.debug("Collection saved", collection=name, size=len(items))

    def notify(self, event_name: str, payload: dict[str, Any] | None = None) -> None:
        self.notifier.publish(event_name, payload)

    def subscribe(self, event_name: str, listener: Listener) -> Callable[[], None]:
        return self.notifier.subscribe(event_name, listener)
