"""Deferred registration: functionality that only appears once loaded."""

import logging
import threading
from typing import Callable, Dict, Set, Tuple

from mcp_starter.errors import NotFound
from mcp_starter.registry import Annotations, Category, HandlerDescriptor, Registry

logger = logging.getLogger(__name__)

BONUS_TOOL = "bonus_calculator"


class DeferredLoader:
    """Registers deferred descriptors on demand, at most once each.

    Each deferred entry is an explicit factory. The first ``load`` builds
    and registers the descriptor, which makes the registry emit a
    list-changed notification; later calls report it is already loaded.
    """

    def __init__(self, registry: Registry):
        self.registry = registry
        self._factories: Dict[Tuple[Category, str], Callable[[], HandlerDescriptor]] = {}
        self._loaded: Set[Tuple[Category, str]] = set()
        self._lock = threading.Lock()

    def defer(self, category: Category, identifier: str,
              factory: Callable[[], HandlerDescriptor]) -> None:
        self._factories[(category, identifier)] = factory

    def is_loaded(self, category: Category, identifier: str) -> bool:
        return (category, identifier) in self._loaded

    def load(self, category: Category, identifier: str) -> bool:
        """Load a deferred descriptor. Returns False if it was already loaded."""
        key = (category, identifier)
        factory = self._factories.get(key)
        if factory is None:
            raise NotFound(category, identifier)

        with self._lock:
            if key in self._loaded:
                logger.debug("%s '%s' already loaded", category.value, identifier)
                return False
            self.registry.register(factory())
            self._loaded.add(key)

        logger.info("Loaded deferred %s '%s'", category.value, identifier)
        return True


def build_load_bonus_tool(loader: DeferredLoader) -> HandlerDescriptor:
    """Build the load_bonus_tool descriptor bound to a loader."""

    async def load_bonus_tool(ctx) -> str:
        if not loader.load(Category.TOOL, BONUS_TOOL):
            return f"Bonus tool is already loaded! Try calling '{BONUS_TOOL}'."
        return f"Bonus tool '{BONUS_TOOL}' has been loaded! The tools list has been updated."

    return HandlerDescriptor(
        identifier="load_bonus_tool",
        category=Category.TOOL,
        title="Load Bonus Tool",
        description="Dynamically register a new bonus tool",
        # Modifies server state, but calling it again is harmless.
        annotations=Annotations(read_only=False, idempotent=True),
        invoke=load_bonus_tool,
    )
