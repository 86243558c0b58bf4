"""
Tool registries — the single source of truth for tools/list and tools/call

ToolRegistry    ordered tool descriptors, returned verbatim by tools/list
DispatchTable   tool name -> ToolBinding (handler + backend it needs)

Both reject a second registration under an existing name; a duplicate is a
startup error, not something to paper over at request time.
"""

from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from wpmcp.backends.factory import BACKENDS
from wpmcp.errors import ConflictError, ValidationError, WPMCPError
from wpmcp.server.logger import get_logger
from wpmcp.server.protocol import error_result

log = get_logger("registry")

ToolHandler = Callable[[Any, Dict[str, Any]], Awaitable[Dict[str, Any]]]


class ToolRegistry:
    """Ordered, append-only collection of tool descriptors."""

    def __init__(self):
        self._tools: List[Dict[str, Any]] = []
        self._names: Dict[str, Dict[str, Any]] = {}

    def register(self, descriptor: Dict[str, Any]):
        name = descriptor.get("name")
        if not name:
            raise ValidationError("Tool descriptor is missing a name")
        if name in self._names:
            raise ConflictError(f"Tool already registered: {name}")
        descriptor.setdefault("inputSchema", {"type": "object", "properties": {}})
        self._tools.append(descriptor)
        self._names[name] = descriptor

    def register_many(self, descriptors: Iterable[Dict[str, Any]]):
        for descriptor in descriptors:
            self.register(descriptor)

    def get(self, name: str) -> Optional[Dict[str, Any]]:
        return self._names.get(name)

    def list(self) -> List[Dict[str, Any]]:
        return list(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._tools)


class ToolBinding:
    """A handler plus the backend family its client must talk to (None = no client)."""

    __slots__ = ("name", "handler", "backend")

    def __init__(self, name: str, handler: ToolHandler, backend: Optional[str] = None):
        if backend is not None and backend not in BACKENDS:
            raise ValidationError(f"Unknown backend for {name}: {backend}")
        self.name = name
        self.handler = handler
        self.backend = backend


class DispatchTable:
    """Tool name -> ToolBinding."""

    def __init__(self):
        self._bindings: Dict[str, ToolBinding] = {}

    def bind(self, name: str, handler: ToolHandler, backend: Optional[str] = None) -> ToolBinding:
        if name in self._bindings:
            raise ConflictError(f"Tool handler already registered: {name}")
        binding = ToolBinding(name, handler, backend)
        self._bindings[name] = binding
        return binding

    def resolve(self, name: str) -> Optional[ToolBinding]:
        return self._bindings.get(name)

    async def invoke(self, name: str, client: Any, args: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run the handler for name. Whatever it raises comes back as an
        error envelope carrying the exception message.
        """
        binding = self._bindings.get(name)
        if binding is None:
            return error_result(f"Unknown tool: {name}")
        try:
            return await binding.handler(client, args)
        except WPMCPError as exc:
            log.warning(f"Tool {name} failed: {exc.message}")
            return error_result(exc.message)
        except Exception as exc:
            log.error(f"Tool {name} failed: {exc}", exc_info=True)
            return error_result(str(exc))

    def names(self) -> List[str]:
        return list(self._bindings)

    def __contains__(self, name: str) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)
