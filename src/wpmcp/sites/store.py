"""
Site Store — JSON document persistence for site records

Document shape:
    {
      "server": {"transport": "stdio", "http": {"port": 3000, "authToken": null}},
      "sites": [SiteRecord, ...],
      "activeSiteId": "..."
    }

The whole document is rewritten on every save. Writes go to a temp file in
the same directory and are swapped in with os.replace, so a reader never
sees a half-written document.
"""

import json
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

from wpmcp.errors import ConfigError
from wpmcp.server.logger import get_logger

log = get_logger("sites.store")


def default_document() -> Dict[str, Any]:
    """The document used when no config file exists yet."""
    return {
        "server": {
            "transport": "stdio",
            "http": {
                "port": 3000,
                "authToken": None,
            },
        },
        "sites": [],
    }


class SiteStore:
    """Reads and writes the site document at a single path."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Dict[str, Any]:
        """
        Load the document, falling back to defaults when the file is absent.
        Raises ConfigError when the file exists but is not a JSON object.
        """
        if not self.path.exists():
            log.info(f"No config at {self.path}, using defaults")
            return default_document()

        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Failed to load configuration {self.path}: {exc}") from exc

        if not isinstance(document, dict):
            raise ConfigError(f"Configuration {self.path} must be a JSON object")
        if not isinstance(document.get("sites", []), list):
            raise ConfigError(f"Configuration {self.path}: 'sites' must be a list")

        document.setdefault("server", default_document()["server"])
        document.setdefault("sites", [])
        log.info(f"Loaded {len(document['sites'])} sites from {self.path}")
        return document

    def save(self, document: Dict[str, Any]):
        """Atomically replace the document on disk (owner read/write only)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, indent=2)
                fh.write("\n")
            os.chmod(tmp_name, stat.S_IRUSR | stat.S_IWUSR)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ConfigError(f"Failed to save configuration {self.path}: {exc}") from exc
        log.debug(f"Configuration saved to {self.path}")
