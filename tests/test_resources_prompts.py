import json

import pytest

from mcp_starter import SERVER_NAME, __version__
from mcp_starter.errors import ErrorKind
from mcp_starter.prompts import complete_argument
from mcp_starter.registry import Category

pytestmark = pytest.mark.anyio


async def test_about_resource(runtime):
    result = await runtime.dispatcher.read_resource("about://server")
    assert SERVER_NAME in result.text
    assert f"Version: {__version__}" in result.text


async def test_example_document(runtime):
    result = await runtime.dispatcher.read_resource("doc://example")
    assert result.text.startswith("# Example Document")


async def test_greeting_template(runtime):
    result = await runtime.dispatcher.read_resource("greeting://Ada")
    assert result.text == "Hello, Ada! This greeting was generated from a resource template."


async def test_item_template_is_json(runtime):
    result = await runtime.dispatcher.read_resource("item://42")
    item = json.loads(result.text)
    assert item["id"] == "42"
    assert item["name"] == "Item 42"
    assert "createdAt" in item


async def test_unknown_resource(runtime):
    result = await runtime.dispatcher.read_resource("nothing://here")
    assert result.kind is ErrorKind.NOT_FOUND


def test_static_and_templated_resources(runtime):
    resources = list(runtime.registry.list_all(Category.RESOURCE))
    assert [r.identifier for r in resources if not r.is_template] == ["about://server", "doc://example"]
    assert [r.identifier for r in resources if r.is_template] == ["greeting://{name}", "item://{id}"]
    assert runtime.registry.lookup(Category.RESOURCE, "item://{id}").mime_type == "application/json"


async def get_prompt(runtime, name, arguments):
    return await runtime.dispatcher.invoke(Category.PROMPT, name, arguments)


async def test_greet_styles(runtime):
    formal = await get_prompt(runtime, "greet", {"name": "Ada", "style": "formal"})
    assert formal.payload == [
        {"role": "user", "content": "Please compose a formal, professional greeting for Ada."}
    ]
    default = await get_prompt(runtime, "greet", {"name": "Ada"})
    assert default.payload[0]["content"] == "Write a casual, friendly hello to Ada."
    unknown = await get_prompt(runtime, "greet", {"name": "Ada", "style": "pirate"})
    assert unknown.payload == default.payload


async def test_code_review(runtime):
    result = await get_prompt(runtime, "code_review", {
        "code": "print('hi')",
        "language": "python",
        "focus": "security",
    })
    text = result.payload[0]["content"]
    assert text.startswith("Please review the following python code. Focus on security")
    assert "```python\nprint('hi')\n```" in text


async def test_code_review_requires_code(runtime):
    result = await get_prompt(runtime, "code_review", {"language": "go"})
    assert result.kind is ErrorKind.INVALID_ARGUMENT
    assert "'code'" in result.message


def test_complete_argument():
    assert complete_argument("greet", "style", "f") == ["formal"]
    assert complete_argument("greet", "style", "") == ["formal", "casual", "enthusiastic"]
    assert complete_argument("code_review", "focus", "Per") == ["performance"]
    assert complete_argument("greet", "name", "A") == []
