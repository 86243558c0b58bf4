"""
SSE Transport — MCP over HTTP + Server-Sent Events

Protocol:
  1. Client connects to GET /<account_key>/sse
  2. Server sends: event: endpoint / data: /message?sessionId=<id>
  3. Client POSTs JSON-RPC messages to /message?sessionId=<id> (202 Accepted)
  4. Responses are streamed back on the SSE connection as "message" events

Each session owns a Router (so it can pin the site named by account_key)
and a worker task that drains its inbox in arrival order. A session joins
the session map when its stream starts. On disconnect it leaves the map;
the worker finishes the message in flight, drops its response and exits.
"""

import asyncio
import contextlib
import json
import uuid
from typing import Any, AsyncIterator, Dict, Optional

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response, StreamingResponse
from starlette.routing import Route

from wpmcp.config import Config
from wpmcp.errors import ConflictError, WPMCPError
from wpmcp.server.logger import get_logger
from wpmcp.server.router import Router

log = get_logger("sse")

_CLOSE = object()

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_event(event: str, data: str) -> str:
    return f"event: {event}\ndata: {data}\n\n"


class SseSession:
    """One SSE connection: a router plus inbound/outbound queues."""

    def __init__(self, session_id: str, router: Router, account_key: str):
        self.session_id = session_id
        self.router = router
        self.account_key = account_key
        self.inbox: asyncio.Queue = asyncio.Queue()
        self.outbox: asyncio.Queue = asyncio.Queue()
        self.closed = False
        self.worker: Optional[asyncio.Task] = None

    @property
    def endpoint(self) -> str:
        return f"/message?sessionId={self.session_id}"

    def deliver(self, message: Any):
        """Queue a client->server message for the worker."""
        self.inbox.put_nowait(message)

    async def pump(self, server):
        """Handle inbox messages one at a time until the session closes."""
        while True:
            message = await self.inbox.get()
            if message is _CLOSE:
                break
            response = await server.handle_message(message, self.router)
            if response is not None and not self.closed:
                await self.outbox.put(response)
        log.debug(f"Worker for session {self.session_id} stopped")

    def close(self):
        if self.closed:
            return
        self.closed = True
        self.inbox.put_nowait(_CLOSE)


class SessionManager:
    """Session map keyed by session id."""

    def __init__(self, server):
        self.server = server
        self._sessions: Dict[str, SseSession] = {}

    def create(self, account_key: str) -> SseSession:
        """A session for account_key; it joins the map once add() is called."""
        site = self.server.sites.get_by_id(account_key)
        if site is None:
            log.warning(f"No site for account key {account_key}; session uses the active site")

        session_id = uuid.uuid4().hex
        router = self.server.create_router(default_site_id=site.id if site else None)
        return SseSession(session_id, router, account_key)

    def add(self, session: SseSession):
        if session.session_id not in self._sessions:
            self._sessions[session.session_id] = session
            log.info(f"Opened session {session.session_id} (account_key={session.account_key})")

    def open(self, account_key: str) -> SseSession:
        session = self.create(account_key)
        self.add(session)
        return session

    def get(self, session_id: str) -> Optional[SseSession]:
        return self._sessions.get(session_id)

    def close(self, session_id: str):
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.close()
            log.info(f"Closed session {session_id}")

    def close_all(self):
        for session_id in list(self._sessions):
            self.close(session_id)

    def __len__(self) -> int:
        return len(self._sessions)


async def event_stream(
    manager: SessionManager,
    session: SseSession,
    ping_interval: Optional[float] = None,
) -> AsyncIterator[str]:
    """SSE body for one session: endpoint event, then responses and pings."""
    ping_interval = ping_interval or Config.SSE_PING_INTERVAL
    manager.add(session)
    session.worker = asyncio.create_task(session.pump(manager.server))
    try:
        yield format_event("endpoint", session.endpoint)
        while True:
            try:
                response = await asyncio.wait_for(session.outbox.get(), timeout=ping_interval)
            except asyncio.TimeoutError:
                yield ": ping\n\n"
                continue
            yield format_event("message", json.dumps(response, separators=(",", ":")))
    finally:
        log.info(f"Client disconnected: {session.session_id}")
        manager.close(session.session_id)


def create_app(server, manager: Optional[SessionManager] = None, ping_interval: Optional[float] = None) -> Starlette:
    """Build the Starlette app serving the SSE endpoints for server."""
    manager = manager or SessionManager(server)

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({
            "status": "ok",
            "server": Config.SERVER_NAME,
            "version": Config.SERVER_VERSION,
            "sessions": len(manager),
            "tools": len(server.tools),
        })

    async def connect(request: Request) -> Response:
        account_key = request.path_params["account_key"]
        session = manager.create(account_key)
        return StreamingResponse(
            event_stream(manager, session, ping_interval),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    async def message(request: Request) -> Response:
        raw_session_id = request.query_params.get("sessionId", "")
        session_id = raw_session_id.split("?")[0].split("&")[0]

        session = manager.get(session_id)
        if session is None:
            log.warning(f"Session ID not found: {session_id}")
            return JSONResponse({"error": "Invalid or expired session"}, status_code=400)

        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"error": "Invalid JSON in request body"}, status_code=400)

        session.deliver(body)
        return Response("Accepted", status_code=202)

    async def connect_account(request: Request) -> JSONResponse:
        token = (server.sites.server_settings.get("http") or {}).get("authToken")
        if token and request.headers.get("authorization") != f"Bearer {token}":
            return JSONResponse({"status": "error", "message": "Unauthorized"}, status_code=401)

        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"status": "error", "message": "Invalid JSON in request body"}, status_code=400)
        if not isinstance(body, dict):
            return JSONResponse({"status": "error", "message": "Request body must be an object"}, status_code=400)

        site_url = body.get("site_url")
        try:
            site = await server.sites.add({
                "name": body.get("name") or f"WordPress site - {site_url}",
                "url": site_url,
                "username": body.get("username"),
                "applicationPassword": body.get("password"),
                "consumerKey": body.get("c_key"),
                "consumerSecret": body.get("c_secret"),
            })
        except WPMCPError as exc:
            status_code = 409 if isinstance(exc, ConflictError) else 400
            return JSONResponse(
                {"status": "error", "error": "Error adding new site", "message": exc.message},
                status_code=status_code,
            )

        return JSONResponse({
            "status": "success",
            "message": "Account connected successfully",
            "account_key": site.id,
        })

    @contextlib.asynccontextmanager
    async def lifespan(app):
        yield
        manager.close_all()

    app = Starlette(
        routes=[
            Route("/health", health, methods=["GET"]),
            Route("/connect-account", connect_account, methods=["POST"]),
            Route("/message", message, methods=["POST"]),
            Route("/{account_key}/sse", connect, methods=["GET"]),
        ],
        lifespan=lifespan,
    )
    app.state.sessions = manager
    return app


async def serve_sse(server, host: str = "0.0.0.0", port: Optional[int] = None):
    """Run the SSE app under uvicorn until interrupted."""
    port = port or Config.DEFAULT_PORT
    app = create_app(server)
    log.info(f"SSE server listening on {host}:{port}")
    config = uvicorn.Config(app, host=host, port=port, log_level=Config.LOG_LEVEL.lower())
    await uvicorn.Server(config).serve()
