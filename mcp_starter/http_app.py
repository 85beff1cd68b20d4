"""HTTP-based MCP server (streamable HTTP transport).

Runs as an ASGI app (Starlette). The MCP endpoint lives at ``/mcp`` and a
small health check at ``/health``.
"""

import contextlib

import anyio
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from mcp_starter import SERVER_NAME, __version__
from mcp_starter.runtime import Runtime
from mcp_starter.server import create_server


class MCPEndpoint:
    """ASGI endpoint handing requests to the session manager."""

    def __init__(self, session_manager: StreamableHTTPSessionManager):
        self.session_manager = session_manager

    async def __call__(self, scope, receive, send):
        await self.session_manager.handle_request(scope, receive, send)


async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", "server": SERVER_NAME, "version": __version__})


def create_app(runtime: Runtime) -> Starlette:
    app, forwarder = create_server(runtime)

    # Streamable HTTP session manager wraps the MCP server into an ASGI app
    session_manager = StreamableHTTPSessionManager(
        app=app,
        json_response=False,  # SSE streaming responses, needed for nested requests
        stateless=False,      # sessions are kept so list_changed can reach them
    )

    @contextlib.asynccontextmanager
    async def lifespan(_):
        async with anyio.create_task_group() as tg:
            tg.start_soon(forwarder.run)
            async with session_manager.run():
                yield
            tg.cancel_scope.cancel()

    return Starlette(
        routes=[
            Route("/health", health, methods=["GET"]),
            Route("/mcp", MCPEndpoint(session_manager), methods=["GET", "POST", "DELETE"]),
        ],
        lifespan=lifespan,
    )
