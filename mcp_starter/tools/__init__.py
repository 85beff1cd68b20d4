"""Tools package."""

from typing import List

from .calculator import bonus_calculator_descriptor, calculate
from .dynamic import BONUS_TOOL, DeferredLoader, build_load_bonus_tool
from .elicitation import CONFIRM_ACTION, GET_FEEDBACK
from .greeting import HELLO
from .progress import build_long_task
from .sampling import ASK_LLM
from .weather import GET_WEATHER, get_weather


def build_tools(loader: DeferredLoader, long_task_step_seconds: float = 1.0) -> List:
    """Descriptors for the tools available at startup, in listing order."""
    return [
        HELLO,
        GET_WEATHER,
        ASK_LLM,
        build_long_task(long_task_step_seconds),
        build_load_bonus_tool(loader),
        CONFIRM_ACTION,
        GET_FEEDBACK,
    ]


__all__ = [
    "BONUS_TOOL",
    "DeferredLoader",
    "bonus_calculator_descriptor",
    "build_tools",
    "calculate",
    "get_weather",
]
