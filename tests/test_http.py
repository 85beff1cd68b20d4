from starlette.testclient import TestClient

from mcp_starter import SERVER_NAME, __version__
from mcp_starter.http_app import create_app


def test_health(runtime):
    client = TestClient(create_app(runtime))
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "server": SERVER_NAME, "version": __version__}


def test_routes(runtime):
    app = create_app(runtime)
    assert {route.path for route in app.routes} == {"/health", "/mcp"}
