"""
Backend Client Factory — site record -> authenticated client

A new client is built per call and closed by the caller (the router does it
with ``async with``). Nothing is cached, so credential edits take effect on
the very next call.
"""

from typing import Any, Dict, Optional

import httpx

from wpmcp.backends.http import BackendClient
from wpmcp.backends import wordpress
from wpmcp.backends.woocommerce import WooCommerceClient
from wpmcp.backends.wordpress import WordPressClient
from wpmcp.errors import NoActiveSiteError, NotFoundError, ValidationError
from wpmcp.sites.registry import SiteRecord, SiteRegistry

WORDPRESS = "wordpress"
WOOCOMMERCE = "woocommerce"
BACKENDS = (WORDPRESS, WOOCOMMERCE)


class ClientFactory:
    """
    Builds clients for sites held by a SiteRegistry.

    default_site_id pins a site for one session (SSE /<account_key>/sse);
    it takes precedence over the registry's active site.
    """

    def __init__(
        self,
        sites: SiteRegistry,
        default_site_id: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.sites = sites
        self.default_site_id = default_site_id
        self._transport = transport
        self._timeout = timeout

    def build(self, site: SiteRecord, backend: str = WORDPRESS, require_credentials: bool = True) -> BackendClient:
        """
        A new client for site. WordPress clients may be built without
        credentials for the public REST index (require_credentials=False).
        """
        if backend == WORDPRESS:
            if require_credentials and not site.has_wordpress_credentials:
                raise ValidationError(
                    f'Site "{site.name}" has no WordPress credentials (username and applicationPassword)'
                )
            return WordPressClient(
                site.url,
                site.username,
                site.application_password,
                transport=self._transport,
                timeout=self._timeout,
            )
        if backend == WOOCOMMERCE:
            return WooCommerceClient(
                site.url,
                site.consumer_key,
                site.consumer_secret,
                transport=self._transport,
                timeout=self._timeout,
            )
        raise ValidationError(f"Unknown backend: {backend}")

    def for_site(self, site_id: str, backend: str = WORDPRESS, require_credentials: bool = True) -> BackendClient:
        site = self.sites.get_by_id(site_id)
        if site is None:
            raise NotFoundError(f"Site not found: {site_id}")
        return self.build(site, backend, require_credentials)

    def for_active_site(self, backend: str = WORDPRESS) -> BackendClient:
        if self.default_site_id:
            return self.for_site(self.default_site_id, backend)
        site = self.sites.get_active()
        if site is None:
            raise NoActiveSiteError()
        return self.build(site, backend)

    def resolve(self, site_id: Optional[str], backend: str = WORDPRESS) -> BackendClient:
        """Explicit site_id wins; otherwise the session/active site."""
        if site_id:
            return self.for_site(site_id, backend)
        return self.for_active_site(backend)

    async def validate_credentials(
        self, url: str, username: Optional[str], application_password: Optional[str]
    ) -> Dict[str, Any]:
        """Check WordPress credentials against /wp/v2/users/me before storing them."""
        return await wordpress.validate_credentials(
            url, username, application_password, transport=self._transport
        )
