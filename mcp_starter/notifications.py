"""List-changed notifications for registry growth."""

import logging
from collections import Counter
from typing import Callable, List

from mcp_starter.registry import Category

logger = logging.getLogger(__name__)

Listener = Callable[[Category], None]


class ChangeNotifier:
    """Fan out "refresh your list" events to subscribed listeners.

    Delivery is fire-and-forget: a failing listener is logged and skipped.
    Observers that miss an event still see the right state on their next
    listing, since the registry is the source of truth.
    """

    def __init__(self):
        self._listeners: List[Listener] = []
        self._sent: Counter = Counter()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Add a listener; returns a callable that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify_list_changed(self, category: Category) -> None:
        self._sent[category] += 1
        logger.info("%s list changed", category.value.capitalize())
        for listener in list(self._listeners):
            try:
                listener(category)
            except Exception:
                logger.exception("List-changed listener failed for %s", category.value)

    def sent(self, category: Category) -> int:
        """Number of notifications emitted for a category so far."""
        return self._sent[category]
