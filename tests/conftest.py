"""Shared fixtures for wpmcp tests."""

import json

import httpx
import pytest


class FakeBackend:
    """
    Canned WordPress/WooCommerce responses served through httpx.MockTransport.

    Routes are keyed by (method, full URL path), e.g.
    ("GET", "/wp-json/wp/v2/posts").
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, body=None, status=200, headers=None):
        self.routes[(method, path)] = (status, body, headers or {})

    def fail(self, method, path, exc_type):
        self.routes[(method, path)] = exc_type

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(
                404,
                json={"code": "rest_no_route", "message": "No route was found matching the URL and request method."},
            )
        if isinstance(route, type) and issubclass(route, Exception):
            raise route("backend unavailable", request=request)
        status, body, headers = route
        return httpx.Response(status, json=body, headers=headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)


@pytest.fixture
def tmp_wpmcp_dir(tmp_path, monkeypatch):
    """Point the data dir, config path and logs at a temp directory."""
    data_dir = tmp_path / ".wpmcp"
    data_dir.mkdir()
    (data_dir / "logs").mkdir()
    monkeypatch.setenv("WPMCP_DATA_DIR", str(data_dir))

    from wpmcp import config
    monkeypatch.setattr(config.Config, "DATA_DIR", data_dir)
    monkeypatch.setattr(config.Config, "LOG_DIR", data_dir / "logs")
    monkeypatch.setattr(config.Config, "CONFIG_PATH", data_dir / "config.json")
    monkeypatch.setattr(config.Config, "LOG_FILE", data_dir / "logs" / "wpmcp.log")
    monkeypatch.setattr(config.Config, "ERROR_LOG", data_dir / "logs" / "wpmcp-errors.log")

    yield data_dir


@pytest.fixture
def store(tmp_wpmcp_dir):
    from wpmcp.sites import SiteStore
    return SiteStore(tmp_wpmcp_dir / "config.json")


@pytest.fixture
def registry(store):
    from wpmcp.sites import SiteRegistry
    return SiteRegistry(store)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def server(registry, backend):
    """A fully registered server whose backend calls hit FakeBackend."""
    from wpmcp.server.server import MCPServer
    from wpmcp.tools import register_all

    srv = MCPServer(registry, backend_transport=httpx.MockTransport(backend.handler))
    register_all(srv)
    return srv


@pytest.fixture
async def shop(registry):
    """An active site with both WordPress and WooCommerce credentials."""
    site = await registry.add({
        "name": "Shop",
        "url": "https://shop.example.com",
        "username": "admin",
        "applicationPassword": "abcd efgh ijkl",
        "consumerKey": "ck_test",
        "consumerSecret": "cs_test",
    })
    await registry.set_active(site.id)
    return site


async def call_tool(server, name, arguments=None, request_id=1, router=None):
    """Send tools/call through the server and return the JSON-RPC response."""
    return await server.handle_message(
        {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": "tools/call",
            "params": {"name": name, "arguments": arguments or {}},
        },
        router,
    )


def payload(response):
    """Decoded tool envelope payload of a tools/call response."""
    from wpmcp.server.protocol import envelope_payload
    return envelope_payload(response["result"])
