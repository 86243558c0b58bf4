"""
Site Registry — owner of every site record and the active-site pointer

Records are held in memory. Mutations are serialized behind one asyncio.Lock
and each one rewrites the backing document before the new state becomes
visible, so concurrent sessions cannot interleave read-modify-write cycles.
Lookups never take the lock.
"""

import asyncio
import dataclasses
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit, urlunsplit

from wpmcp.errors import ConflictError, NotFoundError, ValidationError
from wpmcp.server.logger import get_logger
from wpmcp.sites.store import SiteStore

log = get_logger("sites.registry")

# camelCase document key -> SiteRecord attribute
_FIELD_KEYS = {
    "id": "id",
    "name": "name",
    "url": "url",
    "username": "username",
    "applicationPassword": "application_password",
    "consumerKey": "consumer_key",
    "consumerSecret": "consumer_secret",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

_MUTABLE_KEYS = ("name", "url", "username", "applicationPassword", "consumerKey", "consumerSecret")
_SECRET_KEYS = ("applicationPassword", "consumerSecret")


def normalize_url(url: str) -> str:
    """Lower-case scheme and host, drop one trailing slash."""
    url = url.strip()
    parts = urlsplit(url)
    path = parts.path[:-1] if parts.path.endswith("/") else parts.path
    if parts.scheme and parts.netloc:
        return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, parts.fragment))
    return url[:-1] if url.endswith("/") else url


def _text(fields: Dict[str, Any], key: str) -> str:
    """fields[key] as a string; missing or None reads as ""."""
    value = fields.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclasses.dataclass(frozen=True)
class SiteRecord:
    """Stored endpoint and credentials for one WordPress/WooCommerce site."""

    id: str
    name: str
    url: str
    username: Optional[str] = None
    application_password: Optional[str] = None
    consumer_key: Optional[str] = None
    consumer_secret: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def has_wordpress_credentials(self) -> bool:
        return bool(self.username and self.application_password)

    @property
    def has_woocommerce_credentials(self) -> bool:
        return bool(self.consumer_key and self.consumer_secret)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SiteRecord":
        kwargs = {attr: data.get(key) for key, attr in _FIELD_KEYS.items()}
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """camelCase form used on disk and in tool responses."""
        out = {}
        for key, attr in _FIELD_KEYS.items():
            value = getattr(self, attr)
            if value is not None:
                out[key] = value
        return out

    def public_dict(self, include_credentials: bool = False) -> Dict[str, Any]:
        """to_dict() with secrets removed unless explicitly requested."""
        out = self.to_dict()
        if not include_credentials:
            for key in _SECRET_KEYS:
                out.pop(key, None)
        return out


class SiteRegistry:
    """
    Usage:
        registry = SiteRegistry(SiteStore(path))
        site = await registry.add({"name": "Blog", "url": "https://blog.test"})
        await registry.set_active(site.id)
    """

    def __init__(self, store: SiteStore):
        self._store = store
        document = store.load()
        self._server_settings: Dict[str, Any] = document.get("server") or {}
        self._sites: List[SiteRecord] = [SiteRecord.from_dict(s) for s in document.get("sites", [])]
        self._active_site_id: Optional[str] = document.get("activeSiteId")
        self._lock = asyncio.Lock()
        log.info(f"Site registry initialized with {len(self._sites)} sites")

    # -- lookups --

    @property
    def server_settings(self) -> Dict[str, Any]:
        return self._server_settings

    def all(self) -> List[SiteRecord]:
        return list(self._sites)

    def get_by_id(self, site_id: str) -> Optional[SiteRecord]:
        for site in self._sites:
            if site.id == site_id:
                return site
        return None

    def get_by_name(self, name: str) -> Optional[SiteRecord]:
        for site in self._sites:
            if site.name == name:
                return site
        return None

    def get_by_url(self, url: str) -> Optional[SiteRecord]:
        target = normalize_url(url)
        for site in self._sites:
            if normalize_url(site.url) == target:
                return site
        return None

    def get_active(self) -> Optional[SiteRecord]:
        if not self._active_site_id:
            return None
        return self.get_by_id(self._active_site_id)

    # -- mutations --

    async def add(self, site: Dict[str, Any]) -> SiteRecord:
        """
        Add a site. Requires non-empty name and url.
        Raises ConflictError if the name or normalized url is taken.
        """
        name = _text(site, "name").strip()
        url = _text(site, "url").strip()
        for key in _MUTABLE_KEYS[2:]:
            _text(site, key)
        if not name:
            raise ValidationError("Missing required field: name")
        if not url:
            raise ValidationError("Missing required field: url")

        async with self._lock:
            if self.get_by_name(name):
                raise ConflictError(f'A site with the name "{name}" already exists')
            if self.get_by_url(url):
                raise ConflictError(f'A site with the URL "{url}" already exists')

            site_id = site.get("id") or str(uuid.uuid4())
            if self.get_by_id(site_id):
                raise ConflictError(f'A site with the id "{site_id}" already exists')

            stamp = _now()
            record = SiteRecord(
                id=site_id,
                name=name,
                url=normalize_url(url),
                username=site.get("username"),
                application_password=site.get("applicationPassword"),
                consumer_key=site.get("consumerKey"),
                consumer_secret=site.get("consumerSecret"),
                created_at=stamp,
                updated_at=stamp,
            )
            await self._commit(self._sites + [record], self._active_site_id)

        log.info(f"Added site: {record.name} ({record.id})")
        return record

    async def update(self, site_id: str, patch: Dict[str, Any]) -> SiteRecord:
        """
        Merge patch over an existing record. Unknown keys and None values
        are ignored; name/url uniqueness is checked against the other records.
        """
        changes = {key: patch[key] for key in _MUTABLE_KEYS if patch.get(key) is not None}
        for key in changes:
            _text(changes, key)

        async with self._lock:
            current = self.get_by_id(site_id)
            if current is None:
                raise NotFoundError(f"Site not found: {site_id}")

            if "name" in changes:
                changes["name"] = changes["name"].strip()
                if not changes["name"]:
                    raise ValidationError("Site name cannot be empty")
                other = self.get_by_name(changes["name"])
                if other and other.id != site_id:
                    raise ConflictError(f'A site with the name "{changes["name"]}" already exists')

            if "url" in changes:
                if not changes["url"].strip():
                    raise ValidationError("Site URL cannot be empty")
                other = self.get_by_url(changes["url"])
                if other and other.id != site_id:
                    raise ConflictError(f'A site with the URL "{changes["url"]}" already exists')
                changes["url"] = normalize_url(changes["url"])

            updated = dataclasses.replace(
                current,
                **{_FIELD_KEYS[key]: value for key, value in changes.items()},
                updated_at=_now(),
            )
            sites = [updated if s.id == site_id else s for s in self._sites]
            await self._commit(sites, self._active_site_id)

        log.info(f"Updated site: {updated.name} ({updated.id})")
        return updated

    async def remove(self, site_id: str) -> bool:
        """Remove a site. Returns False when it was not there."""
        async with self._lock:
            current = self.get_by_id(site_id)
            if current is None:
                return False
            active = None if self._active_site_id == site_id else self._active_site_id
            await self._commit([s for s in self._sites if s.id != site_id], active)

        log.info(f"Removed site: {current.name} ({site_id})")
        return True

    async def set_active(self, site_id: str) -> SiteRecord:
        async with self._lock:
            site = self.get_by_id(site_id)
            if site is None:
                raise NotFoundError(f"Site not found: {site_id}")
            await self._commit(self._sites, site_id)

        log.info(f"Set active site: {site.name} ({site.id})")
        return site

    async def _commit(self, sites: List[SiteRecord], active_site_id: Optional[str]):
        """Persist the new state, then make it visible. Caller holds the lock."""
        document: Dict[str, Any] = {
            "server": self._server_settings,
            "sites": [s.to_dict() for s in sites],
        }
        if active_site_id:
            document["activeSiteId"] = active_site_id
        await asyncio.to_thread(self._store.save, document)
        self._sites = list(sites)
        self._active_site_id = active_site_id
