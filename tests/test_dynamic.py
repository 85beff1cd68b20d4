import anyio
import pytest

from mcp_starter.errors import ErrorKind, NotFound
from mcp_starter.registry import Category
from mcp_starter.tools import BONUS_TOOL

pytestmark = pytest.mark.anyio


async def call(runtime, name, arguments=None):
    return await runtime.dispatcher.invoke(Category.TOOL, name, arguments or {})


async def test_bonus_tool_hidden_until_loaded(runtime):
    assert BONUS_TOOL not in runtime.registry.identifiers(Category.TOOL)
    result = await call(runtime, BONUS_TOOL, {"a": 1, "b": 2, "operation": "add"})
    assert result.kind is ErrorKind.NOT_FOUND


async def test_load_bonus_tool_registers_once_and_notifies_once(runtime):
    events = []
    runtime.notifier.subscribe(events.append)
    before = runtime.registry.identifiers(Category.TOOL)

    first = await call(runtime, "load_bonus_tool")
    second = await call(runtime, "load_bonus_tool")

    assert first.text == "Bonus tool 'bonus_calculator' has been loaded! The tools list has been updated."
    assert second.text == "Bonus tool is already loaded! Try calling 'bonus_calculator'."

    after = runtime.registry.identifiers(Category.TOOL)
    assert after == before + [BONUS_TOOL]
    assert runtime.notifier.sent(Category.TOOL) == 1
    assert events == [Category.TOOL]
    assert runtime.loader.is_loaded(Category.TOOL, BONUS_TOOL)


async def test_concurrent_loads_register_one_descriptor(runtime):
    results = []

    async def load():
        results.append(await call(runtime, "load_bonus_tool"))

    async with anyio.create_task_group() as tg:
        for _ in range(5):
            tg.start_soon(load)

    assert runtime.registry.identifiers(Category.TOOL).count(BONUS_TOOL) == 1
    assert sum("has been loaded" in r.text for r in results) == 1
    assert runtime.notifier.sent(Category.TOOL) == 1


def test_loading_unknown_deferred_identifier(runtime):
    with pytest.raises(NotFound):
        runtime.loader.load(Category.TOOL, "gold_calculator")


def test_loader_returns_false_when_already_loaded(runtime):
    assert runtime.loader.load(Category.TOOL, BONUS_TOOL) is True
    assert runtime.loader.load(Category.TOOL, BONUS_TOOL) is False


def test_failing_listener_does_not_block_others(runtime):
    seen = []

    def broken(category):
        raise RuntimeError("listener down")

    runtime.notifier.subscribe(broken)
    runtime.notifier.subscribe(seen.append)
    runtime.loader.load(Category.TOOL, BONUS_TOOL)
    assert seen == [Category.TOOL]


def test_unsubscribed_listener_is_not_called(runtime):
    seen = []
    unsubscribe = runtime.notifier.subscribe(seen.append)
    unsubscribe()
    runtime.loader.load(Category.TOOL, BONUS_TOOL)
    assert seen == []
    assert runtime.notifier.sent(Category.TOOL) == 1
