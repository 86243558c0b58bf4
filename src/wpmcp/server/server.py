"""
MCP Server — Main Orchestrator

Ties together:
  Transport -> Protocol -> Router -> ToolRegistry/DispatchTable -> Backend

Flow:
  1. Transport reads one JSON-RPC message
  2. Protocol validates JSON-RPC 2.0
  3. Router dispatches to the correct handler
  4. tools/call resolves a site client through the ClientFactory
  5. Transport writes the response

Tool modules register against the server at startup:

    server.register_tool_definitions(TOOLS)
    server.register_tool_handler("list_posts", list_posts, backend=WORDPRESS)
"""

import asyncio
import signal
from typing import Any, Dict, List, Optional

import httpx

from wpmcp.backends.factory import ClientFactory
from wpmcp.config import Config
from wpmcp.server.logger import get_logger
from wpmcp.server.protocol import (
    validate_message,
    make_response,
    make_error,
    ProtocolError,
    INTERNAL_ERROR,
)
from wpmcp.server.registry import DispatchTable, ToolHandler, ToolRegistry
from wpmcp.server.router import Router
from wpmcp.sites.registry import SiteRegistry

log = get_logger("server")


class MCPServer:
    """
    Main server orchestrator.

    Usage:
        server = MCPServer(SiteRegistry(SiteStore(path)))
        register_all(server)
        await server.run(StdioTransport())
    """

    def __init__(
        self,
        sites: SiteRegistry,
        backend_transport: Optional[httpx.AsyncBaseTransport] = None,
        request_timeout: Optional[float] = None,
    ):
        self.sites = sites
        self.tools = ToolRegistry()
        self.handlers = DispatchTable()
        self._backend_transport = backend_transport
        self._request_timeout = request_timeout
        self.clients = self.create_client_factory()
        self._router = Router(self.tools, self.handlers, self.clients)
        self._running = False
        self._transport = None

    # -- tool registration (call before run) --

    def register_tool_definition(self, descriptor: Dict[str, Any]):
        self.tools.register(descriptor)

    def register_tool_definitions(self, descriptors: List[Dict[str, Any]]):
        self.tools.register_many(descriptors)
        log.info(f"Registered {len(descriptors)} tools: {[t['name'] for t in descriptors]}")

    def register_tool_handler(self, name: str, handler: ToolHandler, backend: Optional[str] = None):
        self.handlers.bind(name, handler, backend)

    def check_registrations(self):
        """Every advertised tool must be callable and vice versa."""
        advertised = {t["name"] for t in self.tools.list()}
        bound = set(self.handlers.names())
        if advertised != bound:
            missing = sorted(advertised - bound)
            extra = sorted(bound - advertised)
            raise RuntimeError(f"Tool registration mismatch: no handler for {missing}, no definition for {extra}")

    # -- per-session plumbing --

    def create_client_factory(self, default_site_id: Optional[str] = None) -> ClientFactory:
        return ClientFactory(
            self.sites,
            default_site_id=default_site_id,
            transport=self._backend_transport,
            timeout=self._request_timeout,
        )

    def create_router(self, default_site_id: Optional[str] = None) -> Router:
        """A router for one session; shares this server's tool tables."""
        return Router(self.tools, self.handlers, self.create_client_factory(default_site_id))

    @property
    def router(self) -> Router:
        return self._router

    async def handle_message(self, msg: Any, router: Optional[Router] = None) -> Optional[Dict[str, Any]]:
        """
        Process a single JSON-RPC message.
        Returns the response to send, or None for notifications.
        """
        router = router or self._router
        request_id = msg.get("id") if isinstance(msg, dict) else None

        try:
            msg_type = validate_message(msg)
            if msg_type in ("response", "error"):
                return None

            result = await router.route(msg_type, msg)

            if result is None or msg_type == "notification":
                return None
            return make_response(request_id, result)

        except ProtocolError as exc:
            log.warning(f"Protocol error: {exc.message} (code={exc.code})")
            return make_error(request_id, exc.code, exc.message, exc.data)

        except Exception as exc:
            log.error(f"Unhandled error: {exc}", exc_info=True)
            return make_error(request_id, INTERNAL_ERROR, str(exc))

    # -- stdio main loop --

    async def run(self, transport):
        """Serve one transport until EOF or signal."""
        log.info(f"Starting {Config.SERVER_NAME} v{Config.SERVER_VERSION}")
        self._transport = transport
        await transport.start()

        loop = asyncio.get_running_loop()
        main_task = asyncio.current_task()
        installed = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, main_task.cancel)
                installed.append(sig)
            except (NotImplementedError, RuntimeError, ValueError):
                pass

        self._running = True
        log.info(f"Server ready — tools={self._router.tool_count} sites={len(self.sites.all())}")

        try:
            while self._running:
                try:
                    msg = await transport.read_message()
                except ProtocolError as exc:
                    await transport.write_message(make_error(None, exc.code, exc.message))
                    continue

                if msg is None:
                    log.info("EOF on stdin — shutting down")
                    break

                response = await self.handle_message(msg)
                if response is not None:
                    await transport.write_message(response)

        except asyncio.CancelledError:
            log.info("Server cancelled")
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)
            await self.shutdown()

    async def shutdown(self):
        if self._transport is None:
            return
        self._running = False
        transport, self._transport = self._transport, None
        await transport.close()
        log.info("Server stopped")
