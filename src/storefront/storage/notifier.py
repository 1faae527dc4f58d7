"""Named change notifications for observers of the persisted collections.

Navigation chrome subscribes to ``cartUpdate`` and ``wishlistUpdate`` to
refresh its badge counts without knowing anything about the managers.
"""

from collections import defaultdict
from collections.abc import Callable
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

CART_UPDATE = "cartUpdate"
WISHLIST_UPDATE = "wishlistUpdate"

Listener = Callable[[dict[str, Any] | None], None]


class ChangeNotifier:
    """Publish/subscribe channel keyed by event name."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, event_name: str, listener: Listener) -> Callable[[], None]:
        """Register a listener and return a function that removes it again."""
        self._listeners[event_name].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[event_name]:
                self._listeners[event_name].remove(listener)

        return unsubscribe

    def publish(self, event_name: str, payload: dict[str, Any] | None = None) -> None:
        for listener in list(self._listeners[event_name]):
            try:
                listener(payload)
            except Exception as exc:
                logger.warning(
                    "Change listener failed",
                    event_name=event_name,
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    error=str(exc),
                )
