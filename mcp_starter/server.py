"""MCP server: binds the dispatcher to the SDK's low-level Server."""

import logging
import math
import sys
import weakref
from typing import Any, Dict, Iterable, List, Optional, Tuple

import anyio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError

from mcp_starter import SERVER_NAME, __version__
from mcp_starter.config import configure_logging, load_settings
from mcp_starter.dispatcher import ElicitationResponse, Failure, InvocationResult, Peer
from mcp_starter.errors import ErrorKind, Unsupported
from mcp_starter.prompts import complete_argument
from mcp_starter.registry import Category, HandlerDescriptor
from mcp_starter.runtime import Runtime, create_runtime

logger = logging.getLogger(__name__)

SERVER_INSTRUCTIONS = """\
# MCP Python Starter Server

A demonstration MCP server showcasing the Python SDK.

## Available Tools

### Greeting & Demos
- **hello**: Simple greeting - use to test connectivity
- **get_weather**: Returns simulated weather data
- **long_task**: Demonstrates progress reporting (takes ~5 seconds)

### LLM Interaction
- **ask_llm**: Invoke LLM sampling to ask questions (requires client support)

### Dynamic Features
- **load_bonus_tool**: Dynamically adds a calculator tool at runtime
- **bonus_calculator**: Available after calling load_bonus_tool

### Elicitation (User Input)
- **confirm_action**: Demonstrates schema elicitation - requests user confirmation
- **get_feedback**: Demonstrates URL elicitation - opens feedback form in browser

## Available Resources

- **about://server**: Server information
- **doc://example**: Sample markdown document
- **greeting://{name}**: Personalized greeting template
- **item://{id}**: Item data by ID

## Available Prompts

- **greet**: Generates a personalized greeting
- **code_review**: Structured code review prompt

## Recommended Workflows

1. **Testing Connection**: Call `hello` with your name to verify the server is responding
2. **Weather Demo**: Call `get_weather` with a location to see structured output
3. **Progress Demo**: Call `long_task` to see progress notifications
4. **Dynamic Loading**: Call `load_bonus_tool`, then refresh tools to see `bonus_calculator`
5. **Elicitation Demo**: Call `confirm_action` to see user confirmation flow
6. **URL Elicitation**: Call `get_feedback` to open a feedback form

## Tool Annotations

All tools include annotations indicating:
- Whether they modify state (readOnlyHint)
- If they're safe to retry (idempotentHint)
- Whether they access external systems (openWorldHint)
"""

NOTIFICATION_OPTIONS = NotificationOptions(
    prompts_changed=True,
    resources_changed=True,
    tools_changed=True,
)

# Failure kinds that mean the request itself was wrong.
_CLIENT_ERRORS = {ErrorKind.NOT_FOUND, ErrorKind.INVALID_ARGUMENT}


# --- Calling side ---------------------------------------------------------

class SessionPeer(Peer):
    """Peer backed by a live SDK ServerSession.

    Nested requests are tied to the originating request id so HTTP
    clients receive them on the right stream. A client that answers a
    nested request with an error is treated as not supporting it.
    """

    def __init__(self, session, request_id=None, progress_token=None):
        self.session = session
        self.request_id = request_id
        self.progress_token = progress_token

    def supports_sampling(self) -> bool:
        return self.session.check_client_capability(
            types.ClientCapabilities(sampling=types.SamplingCapability())
        )

    def supports_elicitation(self, mode: str = "form") -> bool:
        params = self.session.client_params
        if params is None or params.capabilities.elicitation is None:
            return False
        if mode == "url":
            return getattr(params.capabilities.elicitation, "url", None) is not None
        return True

    async def sample(self, prompt: str, max_tokens: int) -> Optional[str]:
        try:
            result = await self.session.create_message(
                messages=[
                    types.SamplingMessage(
                        role="user",
                        content=types.TextContent(type="text", text=prompt),
                    )
                ],
                max_tokens=max_tokens,
                related_request_id=self.request_id,
            )
        except McpError as e:
            raise Unsupported("sampling", e.error.message) from e

        content = result.content
        blocks = content if isinstance(content, list) else [content]
        for block in blocks:
            if isinstance(block, types.TextContent):
                return block.text
        return None

    async def elicit_form(self, message: str, schema: dict) -> ElicitationResponse:
        try:
            result = await self.session.elicit_form(
                message=message,
                requestedSchema=schema,
                related_request_id=self.request_id,
            )
        except McpError as e:
            raise Unsupported("elicitation", e.error.message) from e
        return ElicitationResponse(action=result.action, content=result.content)

    async def elicit_url(self, message: str, url: str, elicitation_id: str) -> ElicitationResponse:
        try:
            result = await self.session.elicit_url(
                message=message,
                url=url,
                elicitation_id=elicitation_id,
                related_request_id=self.request_id,
            )
        except McpError as e:
            raise Unsupported("URL elicitation", e.error.message) from e
        return ElicitationResponse(action=result.action, content=result.content)

    async def report_progress(self, progress: float, total: Optional[float], message: Optional[str]) -> None:
        if self.progress_token is None:
            return
        await self.session.send_progress_notification(
            self.progress_token,
            progress,
            total=total,
            message=message,
            related_request_id=self.request_id,
        )


# --- List-changed delivery ------------------------------------------------

_LIST_CHANGED = {
    Category.TOOL: lambda session: session.send_tool_list_changed(),
    Category.RESOURCE: lambda session: session.send_resource_list_changed(),
    Category.PROMPT: lambda session: session.send_prompt_list_changed(),
}


class ListChangedForwarder:
    """Forward registry growth to every session that has talked to us.

    Subscribed to the ChangeNotifier as a plain callable; events are
    queued and sent by ``run``, which lives next to the server loop.
    """

    def __init__(self):
        self._sessions = weakref.WeakSet()
        self._send, self._receive = anyio.create_memory_object_stream(math.inf)

    def track(self, session) -> None:
        self._sessions.add(session)

    def __call__(self, category: Category) -> None:
        self._send.send_nowait(category)

    async def run(self) -> None:
        async for category in self._receive:
            for session in list(self._sessions):
                try:
                    await _LIST_CHANGED[category](session)
                except Exception as e:
                    logger.warning("Could not send %s list_changed: %s", category.value, e)


# --- Conversions ----------------------------------------------------------

def to_tool(descriptor: HandlerDescriptor) -> types.Tool:
    flags = descriptor.annotations
    return types.Tool(
        name=descriptor.identifier,
        title=descriptor.title or None,
        description=descriptor.description,
        inputSchema=descriptor.input_schema(),
        outputSchema=descriptor.output_schema,
        annotations=types.ToolAnnotations(
            title=descriptor.title or None,
            readOnlyHint=flags.read_only,
            destructiveHint=flags.destructive,
            idempotentHint=flags.idempotent,
            openWorldHint=flags.open_world,
        ),
    )


def to_call_tool_result(result: InvocationResult) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=result.text)],
        structuredContent=result.structured,
        isError=not result.ok,
    )


def to_prompt(descriptor: HandlerDescriptor) -> types.Prompt:
    return types.Prompt(
        name=descriptor.identifier,
        title=descriptor.title or None,
        description=descriptor.description,
        arguments=[
            types.PromptArgument(name=p.name, description=p.description, required=p.required)
            for p in descriptor.parameters
        ],
    )


def to_mcp_error(failure: Failure) -> McpError:
    code = types.INVALID_PARAMS if failure.kind in _CLIENT_ERRORS else types.INTERNAL_ERROR
    return McpError(types.ErrorData(code=code, message=failure.message))


def initialization_options(app: Server) -> InitializationOptions:
    return app.create_initialization_options(notification_options=NOTIFICATION_OPTIONS)


# --- Server ---------------------------------------------------------------

def create_server(runtime: Runtime) -> Tuple[Server, ListChangedForwarder]:
    """Create the SDK server and the forwarder that must run alongside it."""
    registry = runtime.registry
    dispatcher = runtime.dispatcher
    forwarder = ListChangedForwarder()
    runtime.notifier.subscribe(forwarder)

    app = Server(SERVER_NAME, version=__version__, instructions=SERVER_INSTRUCTIONS)

    def _track():
        forwarder.track(app.request_context.session)

    def _context():
        request = app.request_context
        forwarder.track(request.session)
        progress_token = request.meta.progressToken if request.meta else None
        peer = SessionPeer(request.session, request.request_id, progress_token)
        return dispatcher.new_context(peer=peer)

    @app.list_tools()
    async def list_tools() -> list[types.Tool]:
        """List available tools."""
        _track()
        return [to_tool(d) for d in registry.list_all(Category.TOOL)]

    # The dispatcher validates arguments itself.
    @app.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict) -> types.CallToolResult:
        """Handle tool calls."""
        context = _context()
        try:
            result = await dispatcher.invoke(Category.TOOL, name, arguments, context)
        except anyio.get_cancelled_exc_class():
            context.cancel_token.cancel()
            logger.info("[%s] tool '%s' cancelled by client", context.call_id, name)
            raise
        return to_call_tool_result(result)

    @app.list_resources()
    async def list_resources() -> list[types.Resource]:
        _track()
        return [
            types.Resource(
                uri=d.identifier,
                name=d.name or d.identifier,
                title=d.title or None,
                description=d.description,
                mimeType=d.mime_type,
            )
            for d in registry.list_all(Category.RESOURCE)
            if not d.is_template
        ]

    @app.list_resource_templates()
    async def list_resource_templates() -> list[types.ResourceTemplate]:
        _track()
        return [
            types.ResourceTemplate(
                uriTemplate=d.identifier,
                name=d.name or d.identifier,
                title=d.title or None,
                description=d.description,
                mimeType=d.mime_type,
            )
            for d in registry.list_all(Category.RESOURCE)
            if d.is_template
        ]

    @app.read_resource()
    async def read_resource(uri) -> Iterable[ReadResourceContents]:
        result = await dispatcher.read_resource(str(uri), _context())
        if not result.ok:
            raise to_mcp_error(result)
        descriptor, _ = registry.match_resource(str(uri))
        return [ReadResourceContents(content=result.text, mime_type=descriptor.mime_type)]

    @app.list_prompts()
    async def list_prompts() -> list[types.Prompt]:
        _track()
        return [to_prompt(d) for d in registry.list_all(Category.PROMPT)]

    @app.get_prompt()
    async def get_prompt(name: str, arguments: Optional[Dict[str, str]]) -> types.GetPromptResult:
        result = await dispatcher.invoke(Category.PROMPT, name, arguments, _context())
        if not result.ok:
            raise to_mcp_error(result)
        messages: List[types.PromptMessage] = [
            types.PromptMessage(
                role=message["role"],
                content=types.TextContent(type="text", text=message["content"]),
            )
            for message in result.payload
        ]
        description = registry.lookup(Category.PROMPT, name).description
        return types.GetPromptResult(description=description, messages=messages)

    @app.completion()
    async def complete(ref: Any, argument: types.CompletionArgument,
                       context: Optional[types.CompletionContext]) -> Optional[types.Completion]:
        if not isinstance(ref, types.PromptReference):
            return None
        values = complete_argument(ref.name, argument.name, argument.value)
        return types.Completion(values=values, total=len(values), hasMore=False)

    return app, forwarder


async def run_stdio(runtime: Runtime) -> None:
    """Run the MCP server over stdin/stdout."""
    app, forwarder = create_server(runtime)
    logger.info("MCP Python Starter running on stdio")

    async with anyio.create_task_group() as tg:
        tg.start_soon(forwarder.run)
        async with stdio_server() as (read_stream, write_stream):
            await app.run(read_stream, write_stream, initialization_options(app))
        tg.cancel_scope.cancel()


def run_http(runtime: Runtime) -> None:
    import uvicorn

    from mcp_starter.http_app import create_app

    settings = runtime.settings
    base = f"http://{settings.host}:{settings.port}"
    logger.info("MCP Python Starter running on %s", base)
    logger.info("  MCP endpoint: %s/mcp", base)
    logger.info("  Health check: %s/health", base)
    uvicorn.run(create_app(runtime), host=settings.host, port=settings.port,
                log_level=settings.log_level.lower())


def main(argv=None):
    """Entry point for the server."""
    settings = load_settings(argv)
    configure_logging(settings.log_level)
    runtime = create_runtime(settings)

    try:
        if settings.use_http:
            run_http(runtime)
        else:
            anyio.run(run_stdio, runtime)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
