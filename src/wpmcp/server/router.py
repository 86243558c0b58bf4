"""
Method Router — Dispatch MCP methods to handlers

Routes:
  initialize       -> server capabilities handshake
  initialized      -> notification (no response)
  tools/list       -> registered tool definitions
  tools/call       -> resolve site client, dispatch to tool handler
  ping             -> pong

One Router exists per session (stdio has exactly one, every SSE connection
gets its own). Routers share the ToolRegistry/DispatchTable; only the
ClientFactory, and therefore the session's pinned site, differs.
"""

from typing import Any, Dict, Optional

from wpmcp.backends.factory import ClientFactory
from wpmcp.config import Config
from wpmcp.errors import ValidationError, WPMCPError
from wpmcp.server.logger import get_logger
from wpmcp.server.protocol import (
    initialize_result,
    tools_list_result,
    error_result,
    ProtocolError,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
)
from wpmcp.server.registry import DispatchTable, ToolRegistry

log = get_logger("router")


class Router:
    """MCP method dispatcher."""

    def __init__(self, tools: ToolRegistry, handlers: DispatchTable, clients: ClientFactory):
        self._tools = tools
        self._handlers = handlers
        self._clients = clients
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def clients(self) -> ClientFactory:
        return self._clients

    async def route(self, msg_type: str, msg: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Route a validated message to the appropriate handler.
        Returns the result payload or None for notifications.
        """
        method = msg.get("method", "")
        params = msg.get("params") or {}

        if method == "initialize":
            return self._handle_initialize(params)

        if method in ("initialized", "notifications/initialized"):
            self._initialized = True
            return None

        if method == "notifications/cancelled":
            return None

        if method == "ping":
            return {}

        if method == "tools/list":
            return self._handle_tools_list()

        if method == "tools/call":
            return await self._handle_tools_call(params)

        if msg_type == "notification":
            log.debug(f"Ignoring notification: {method}")
            return None

        raise ProtocolError(METHOD_NOT_FOUND, f"Unknown method: {method}")

    def _handle_initialize(self, params: Dict) -> Dict[str, Any]:
        log.info(
            f"Client initialize: {params.get('clientInfo', {}).get('name', '?')} "
            f"protocol={params.get('protocolVersion', '?')}"
        )
        return initialize_result(
            server_name=Config.SERVER_NAME,
            server_version=Config.SERVER_VERSION,
            protocol_version=Config.PROTOCOL_VERSION,
        )

    def _handle_tools_list(self) -> Dict[str, Any]:
        return tools_list_result(self._tools.list())

    async def _handle_tools_call(self, params: Dict) -> Dict[str, Any]:
        name = params.get("name", "")
        args = params.get("arguments") or {}

        if not name:
            raise ProtocolError(INVALID_PARAMS, "Missing tool name")
        if not isinstance(args, dict):
            raise ProtocolError(INVALID_PARAMS, "Tool arguments must be an object")

        binding = self._handlers.resolve(name)
        if binding is None:
            log.warning(f"Unknown tool: {name}")
            return error_result(f"Unknown tool: {name}")

        log.info(f"Calling tool {name}")
        try:
            self._check_required(name, args)
            if binding.backend is None:
                return await self._handlers.invoke(name, None, args)

            client = self._clients.resolve(args.get("site_id"), binding.backend)
            async with client:
                return await self._handlers.invoke(name, client, args)

        except WPMCPError as exc:
            log.warning(f"Tool {name} rejected: {exc.message}")
            return error_result(exc.message)
        except Exception as exc:
            log.error(f"Tool {name} error: {exc}", exc_info=True)
            return error_result(str(exc))

    def _check_required(self, name: str, args: Dict[str, Any]):
        descriptor = self._tools.get(name) or {}
        required = descriptor.get("inputSchema", {}).get("required", [])
        missing = [key for key in required if args.get(key) is None]
        if missing:
            raise ValidationError(f"Missing required argument(s) for {name}: {', '.join(missing)}")

    @property
    def tool_count(self) -> int:
        return len(self._tools)
