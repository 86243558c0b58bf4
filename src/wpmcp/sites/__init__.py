"""Site records: persistence and the registry that owns them."""

from wpmcp.sites.registry import SiteRecord, SiteRegistry, normalize_url
from wpmcp.sites.store import SiteStore

__all__ = ["SiteRecord", "SiteRegistry", "SiteStore", "normalize_url"]
