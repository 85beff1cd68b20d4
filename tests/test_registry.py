import pytest

from mcp_starter.errors import DuplicateIdentifier, NotFound
from mcp_starter.notifications import ChangeNotifier
from mcp_starter.registry import Category, HandlerDescriptor, ParameterSpec, Registry


async def _noop(ctx, **kwargs):
    return "ok"


def tool(identifier, *parameters):
    return HandlerDescriptor(identifier=identifier, category=Category.TOOL,
                             parameters=tuple(parameters), invoke=_noop)


def resource(uri, *parameters):
    return HandlerDescriptor(identifier=uri, category=Category.RESOURCE,
                             parameters=tuple(parameters), invoke=_noop)


def test_lookup_returns_registered_descriptor():
    registry = Registry()
    descriptor = registry.register(tool("hello"))
    assert registry.lookup(Category.TOOL, "hello") is descriptor


def test_duplicate_registration_is_rejected():
    registry = Registry()
    registry.register(tool("hello"))
    with pytest.raises(DuplicateIdentifier):
        registry.register(tool("hello"))
    assert registry.identifiers(Category.TOOL) == ["hello"]


def test_same_identifier_in_other_category_is_allowed():
    registry = Registry()
    registry.register(tool("greet"))
    registry.register(HandlerDescriptor(identifier="greet", category=Category.PROMPT, invoke=_noop))
    assert registry.contains(Category.PROMPT, "greet")


def test_lookup_unknown_raises_not_found():
    with pytest.raises(NotFound) as excinfo:
        Registry().lookup(Category.TOOL, "missing")
    assert "missing" in excinfo.value.message


def test_list_all_keeps_registration_order():
    registry = Registry()
    for name in ["b", "a", "c"]:
        registry.register(tool(name))
    assert [d.identifier for d in registry.list_all(Category.TOOL)] == ["b", "a", "c"]


def test_listing_in_progress_is_not_affected_by_registration():
    registry = Registry()
    registry.register(tool("a"))
    listing = registry.list_all(Category.TOOL)
    assert next(listing).identifier == "a"
    registry.register(tool("b"))
    assert list(listing) == []
    assert registry.identifiers(Category.TOOL) == ["a", "b"]


def test_notifications_only_after_startup():
    notifier = ChangeNotifier()
    registry = Registry(notifier)
    registry.register(tool("static"))
    assert notifier.sent(Category.TOOL) == 0

    registry.mark_started()
    registry.register(tool("late"))
    assert notifier.sent(Category.TOOL) == 1
    assert notifier.sent(Category.PROMPT) == 0


def test_required_parameter_cannot_have_default():
    with pytest.raises(ValueError):
        ParameterSpec("steps", type="integer", required=True, default=5)


def test_default_must_match_type():
    with pytest.raises(ValueError):
        ParameterSpec("steps", type="integer", required=False, default="five")
    with pytest.raises(ValueError):
        ParameterSpec("flag", type="boolean", required=False, default=0)
    with pytest.raises(ValueError):
        ParameterSpec("op", type="enum", choices=("add",), required=False, default="divide")


def test_enum_needs_choices():
    with pytest.raises(ValueError):
        ParameterSpec("op", type="enum")


def test_input_schema():
    descriptor = tool(
        "long_task",
        ParameterSpec("task_name", description="Name for this task"),
        ParameterSpec("steps", type="integer", required=False, default=5),
        ParameterSpec("operation", type="enum", choices=("add", "divide")),
    )
    schema = descriptor.input_schema()
    assert schema["type"] == "object"
    assert schema["required"] == ["task_name", "operation"]
    assert schema["properties"]["task_name"] == {"type": "string", "description": "Name for this task"}
    assert schema["properties"]["steps"] == {"type": "integer", "default": 5}
    assert schema["properties"]["operation"] == {"type": "string", "enum": ["add", "divide"]}


def test_input_schema_without_parameters_has_no_required():
    assert tool("load").input_schema() == {"type": "object", "properties": {}}


def test_match_resource_exact_and_template():
    registry = Registry()
    about = registry.register(resource("about://server"))
    greeting = registry.register(resource("greeting://{name}", ParameterSpec("name")))

    assert registry.match_resource("about://server") == (about, {})
    assert registry.match_resource("greeting://Ada") == (greeting, {"name": "Ada"})
    assert greeting.is_template and not about.is_template


def test_match_resource_variables_do_not_cross_slashes():
    registry = Registry()
    registry.register(resource("greeting://{name}", ParameterSpec("name")))
    with pytest.raises(NotFound):
        registry.match_resource("greeting://a/b")
    with pytest.raises(NotFound):
        registry.match_resource("item://1")
