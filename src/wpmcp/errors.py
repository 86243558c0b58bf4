"""
Error taxonomy shared by the site registry, backend clients and tool handlers.

Every one of these is converted to an error envelope at the dispatch
boundary; none of them is allowed to reach a transport.
"""

from typing import Optional


class WPMCPError(Exception):
    """Base class for all wpmcp errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(WPMCPError):
    """A required field or argument is missing or malformed."""


class NotFoundError(WPMCPError):
    """A site, tool or remote resource does not exist."""


class NoActiveSiteError(NotFoundError):
    """A call omitted site_id and no active site is selected."""

    def __init__(self, message: str = "No active site set"):
        super().__init__(message)


class ConflictError(WPMCPError):
    """A site name/url or tool name is already taken."""


class UpstreamError(WPMCPError):
    """The WordPress/WooCommerce backend answered with a failure."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class BackendTimeoutError(UpstreamError):
    """A backend request exceeded the configured deadline."""


class ConfigError(WPMCPError):
    """The persisted configuration document cannot be loaded."""
