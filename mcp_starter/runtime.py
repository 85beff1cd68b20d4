"""Wires the registry, notifier, dispatcher and handler groups together."""

import logging
from dataclasses import dataclass
from typing import Optional

from mcp_starter.config import Settings
from mcp_starter.dispatcher import Dispatcher
from mcp_starter.notifications import ChangeNotifier
from mcp_starter.prompts import PROMPTS
from mcp_starter.registry import Category, Registry
from mcp_starter.resources import RESOURCES
from mcp_starter.tools import BONUS_TOOL, DeferredLoader, bonus_calculator_descriptor, build_tools

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    settings: Settings
    registry: Registry
    notifier: ChangeNotifier
    dispatcher: Dispatcher
    loader: DeferredLoader


def create_runtime(settings: Optional[Settings] = None) -> Runtime:
    """Build a runtime with every static handler registered and startup closed."""
    settings = settings or Settings()
    notifier = ChangeNotifier()
    registry = Registry(notifier)
    loader = DeferredLoader(registry)
    loader.defer(Category.TOOL, BONUS_TOOL, bonus_calculator_descriptor)

    for descriptor in build_tools(loader, settings.long_task_step_seconds):
        registry.register(descriptor)
    for descriptor in RESOURCES:
        registry.register(descriptor)
    for descriptor in PROMPTS:
        registry.register(descriptor)
    registry.mark_started()

    logger.debug(
        "Registered %d tools, %d resources, %d prompts",
        len(registry.identifiers(Category.TOOL)),
        len(registry.identifiers(Category.RESOURCE)),
        len(registry.identifiers(Category.PROMPT)),
    )
    return Runtime(
        settings=settings,
        registry=registry,
        notifier=notifier,
        dispatcher=Dispatcher(registry),
        loader=loader,
    )
