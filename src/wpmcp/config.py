"""
wpmcp Configuration — Unified settings for the MCP server

Load order: env vars > ~/.wpmcp/config.env > defaults

Site records are not configured here; they live in the JSON document at
Config.CONFIG_PATH (see wpmcp.sites.store).
"""

import os
from pathlib import Path


def _load_config_env():
    """Load key=value pairs from ~/.wpmcp/config.env if it exists."""
    config_file = Path.home() / ".wpmcp" / "config.env"
    if not config_file.exists():
        return
    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" in line:
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


# Load config.env before reading env vars
_load_config_env()


class Config:
    # Server identity
    SERVER_NAME = "wordpress-mcp-server"
    SERVER_VERSION = "0.1.0"
    PROTOCOL_VERSION = "2024-11-05"

    # Paths
    DATA_DIR = Path(os.environ.get("WPMCP_DATA_DIR", str(Path.home() / ".wpmcp")))
    LOG_DIR = DATA_DIR / "logs"
    CONFIG_PATH = Path(os.environ.get("WPMCP_CONFIG", str(DATA_DIR / "config.json")))

    # Logging (NEVER to stdout: it carries the stdio protocol)
    LOG_LEVEL = os.environ.get("WPMCP_LOG_LEVEL", "INFO")
    LOG_FILE = LOG_DIR / "wpmcp.log"
    ERROR_LOG = LOG_DIR / "wpmcp-errors.log"

    # Backend HTTP calls
    REQUEST_TIMEOUT = float(os.environ.get("WPMCP_REQUEST_TIMEOUT", "30"))

    # SSE transport
    DEFAULT_PORT = int(os.environ.get("WPMCP_PORT", "3000"))
    SSE_PING_INTERVAL = 15.0

    TRANSPORTS = ("stdio", "sse")

    @classmethod
    def ensure_dirs(cls):
        """Create required directories."""
        cls.DATA_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)
