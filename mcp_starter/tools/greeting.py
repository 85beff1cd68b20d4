"""Greeting tool."""

from mcp_starter.registry import Annotations, Category, HandlerDescriptor, ParameterSpec


async def hello(ctx, name: str) -> str:
    """Say hello to a person."""
    return f"Hello, {name}! Welcome to MCP."


HELLO = HandlerDescriptor(
    identifier="hello",
    category=Category.TOOL,
    title="Say Hello",
    description="Say hello to a person",
    parameters=(
        ParameterSpec("name", description="Name of the person to greet"),
    ),
    annotations=Annotations(read_only=True, idempotent=True),
    invoke=hello,
)
