"""Tests for the HTTP/SSE transport."""

import asyncio

import pytest
from starlette.testclient import TestClient
from wpmcp.server.server import MCPServer
from wpmcp.server.sse import SessionManager, create_app, event_stream, format_event
from wpmcp.sites import SiteRegistry
from wpmcp.sites.store import default_document
from wpmcp.tools import register_all


async def _next_frame(stream):
    """Next non-keepalive frame from an event stream."""
    while True:
        frame = await asyncio.wait_for(stream.__anext__(), timeout=5)
        if not frame.startswith(":"):
            return frame


class TestSessions:
    async def test_endpoint_then_message(self, server, shop):
        manager = SessionManager(server)
        session = manager.open(shop.id)
        stream = event_stream(manager, session, ping_interval=0.05)

        first = await _next_frame(stream)
        assert first == format_event("endpoint", f"/message?sessionId={session.session_id}")

        session.deliver({"jsonrpc": "2.0", "id": 7, "method": "ping"})
        frame = await _next_frame(stream)
        assert frame == 'event: message\ndata: {"jsonrpc":"2.0","id":7,"result":{}}\n\n'

        await stream.aclose()
        assert manager.get(session.session_id) is None
        assert len(manager) == 0
        await asyncio.wait_for(session.worker, timeout=5)

    async def test_session_joins_map_when_stream_starts(self, server, shop):
        manager = SessionManager(server)
        session = manager.create(shop.id)
        stream = event_stream(manager, session, ping_interval=0.05)
        assert len(manager) == 0
        assert session.worker is None

        await _next_frame(stream)
        assert manager.get(session.session_id) is session

        await stream.aclose()
        assert len(manager) == 0
        await asyncio.wait_for(session.worker, timeout=5)

    async def test_messages_answered_in_order(self, server, shop):
        manager = SessionManager(server)
        session = manager.open(shop.id)
        stream = event_stream(manager, session, ping_interval=0.05)
        await _next_frame(stream)

        for request_id in (1, 2, 3):
            session.deliver({"jsonrpc": "2.0", "id": request_id, "method": "ping"})
        frames = [await _next_frame(stream) for _ in range(3)]
        assert [f'"id":{i}' in frame for i, frame in zip((1, 2, 3), frames)] == [True, True, True]
        await stream.aclose()
        await asyncio.wait_for(session.worker, timeout=5)

    async def test_response_after_close_is_dropped(self, server):
        manager = SessionManager(server)
        session = manager.open("nobody")
        session.deliver({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
        manager.close(session.session_id)

        await asyncio.wait_for(session.pump(server), timeout=5)
        assert session.outbox.empty()

    async def test_account_key_pins_site(self, server, registry, shop):
        other = await registry.add({"name": "Other", "url": "https://other.example.com"})
        manager = SessionManager(server)
        assert manager.open(other.id).router.clients.default_site_id == other.id
        assert manager.open("unknown-key").router.clients.default_site_id is None


class TestRoutes:
    @pytest.fixture
    def app(self, server):
        return create_app(server, ping_interval=0.05)

    def test_health(self, app):
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["server"] == "wordpress-mcp-server"
        assert body["sessions"] == 0
        assert body["tools"] == 31

    def test_message_unknown_session(self, app):
        with TestClient(app) as client:
            resp = client.post("/message?sessionId=nope", json={"jsonrpc": "2.0", "id": 1, "method": "ping"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid or expired session"}

    def test_message_accepted(self, app):
        session = app.state.sessions.open("key")
        with TestClient(app) as client:
            resp = client.post(
                f"/message?sessionId={session.session_id}",
                json={"jsonrpc": "2.0", "id": 1, "method": "ping"},
            )
        assert resp.status_code == 202
        assert resp.text == "Accepted"

    def test_message_invalid_json(self, app):
        session = app.state.sessions.open("key")
        with TestClient(app) as client:
            resp = client.post(
                f"/message?sessionId={session.session_id}",
                content=b"{broken",
                headers={"content-type": "application/json"},
            )
        assert resp.status_code == 400

    def test_connect_account(self, app, registry):
        with TestClient(app) as client:
            resp = client.post("/connect-account", json={
                "site_url": "https://shop.example.com",
                "username": "admin",
                "password": "pw",
                "c_key": "ck",
                "c_secret": "cs",
            })
            assert resp.status_code == 200
            body = resp.json()
            assert body["status"] == "success"
            assert body["message"] == "Account connected successfully"

            site = registry.get_by_id(body["account_key"])
            assert site.name == "WordPress site - https://shop.example.com"
            assert site.consumer_secret == "cs"

            again = client.post("/connect-account", json={"site_url": "https://shop.example.com/"})
        assert again.status_code == 409

    def test_connect_account_requires_url(self, app):
        with TestClient(app) as client:
            resp = client.post("/connect-account", json={"username": "admin"})
        assert resp.status_code == 400
        assert resp.json()["status"] == "error"


    def test_connect_account_non_string_url(self, app, registry):
        with TestClient(app) as client:
            resp = client.post("/connect-account", json={"site_url": 123, "name": "x"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "url must be a string"
        assert registry.all() == []

class TestAuthToken:
    @pytest.fixture
    def app(self, store):
        document = default_document()
        document["server"]["http"]["authToken"] = "s3cret"
        store.save(document)
        srv = MCPServer(SiteRegistry(store))
        register_all(srv)
        return create_app(srv)

    def test_missing_token(self, app):
        with TestClient(app) as client:
            resp = client.post("/connect-account", json={"site_url": "https://shop.example.com"})
        assert resp.status_code == 401

    def test_valid_token(self, app):
        with TestClient(app) as client:
            resp = client.post(
                "/connect-account",
                json={"site_url": "https://shop.example.com"},
                headers={"Authorization": "Bearer s3cret"},
            )
        assert resp.status_code == 200
