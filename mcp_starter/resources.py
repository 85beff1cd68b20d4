"""Resources: read-only data addressed by URI or URI template."""

from datetime import datetime, timezone

from mcp_starter import SERVER_NAME, __version__
from mcp_starter.registry import Category, HandlerDescriptor, ParameterSpec

ABOUT_TEXT = f"""MCP Python Starter Server
==========================

This is a sample Model Context Protocol server implemented in Python.
It demonstrates:
- Tool registration and execution
- Resource handling
- Prompt templates
- Server configuration

Server: {SERVER_NAME}
Version: {__version__}
SDK: mcp (Python)
"""

EXAMPLE_DOC = """# Example Document

This is an example markdown document served as an MCP resource.

## Features

- **Bold text** and *italic text*
- Lists and formatting
- Code blocks

```python
print("Hello, MCP!")
```

## Links

- [MCP Documentation](https://modelcontextprotocol.io/)
"""


async def about(ctx) -> str:
    return ABOUT_TEXT


async def example_doc(ctx) -> str:
    return EXAMPLE_DOC


async def greeting(ctx, name: str) -> str:
    return f"Hello, {name}! This greeting was generated from a resource template."


async def item(ctx, id: str) -> dict:
    return {
        "id": id,
        "name": f"Item {id}",
        "description": f"This is item number {id}",
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }


RESOURCES = [
    HandlerDescriptor(
        identifier="about://server",
        category=Category.RESOURCE,
        name="about",
        title="About this Server",
        description="Information about this MCP server",
        mime_type="text/plain",
        invoke=about,
    ),
    HandlerDescriptor(
        identifier="doc://example",
        category=Category.RESOURCE,
        name="example-doc",
        title="Example Document",
        description="A sample markdown document",
        mime_type="text/markdown",
        invoke=example_doc,
    ),
    HandlerDescriptor(
        identifier="greeting://{name}",
        category=Category.RESOURCE,
        name="greeting",
        title="Personalized Greeting",
        description="A personalized greeting for the given name",
        parameters=(ParameterSpec("name", description="Name to greet"),),
        mime_type="text/plain",
        invoke=greeting,
    ),
    HandlerDescriptor(
        identifier="item://{id}",
        category=Category.RESOURCE,
        name="item",
        title="Item Data",
        description="Item data by ID",
        parameters=(ParameterSpec("id", description="Item identifier"),),
        mime_type="application/json",
        invoke=item,
    ),
]
