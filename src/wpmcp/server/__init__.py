"""wpmcp MCP server: protocol, router, tool registries and transports."""
