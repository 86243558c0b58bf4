"""
WordPress REST API client — Application Password (Basic) auth

Requests are relative to <site>/wp-json, e.g. "/wp/v2/posts".
"""

import base64
from typing import Any, Dict, Optional

import httpx

from wpmcp.backends.http import BackendClient
from wpmcp.errors import UpstreamError, ValidationError
from wpmcp.server.logger import get_logger

log = get_logger("backends.wordpress")


def create_auth_headers(username: Optional[str], application_password: Optional[str]) -> Dict[str, str]:
    """Build the Basic auth header for an application password."""
    if not username or not application_password:
        raise ValidationError("Missing required credentials: username and applicationPassword")
    token = base64.b64encode(f"{username}:{application_password}".encode()).decode("ascii")
    return {"Authorization": f"Basic {token}"}


class WordPressClient(BackendClient):
    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        application_password: Optional[str] = None,
        **kwargs: Any,
    ):
        headers = {}
        if username and application_password:
            headers = create_auth_headers(username, application_password)
        super().__init__(f"{url.rstrip('/')}/wp-json", headers=headers, **kwargs)

    async def get_site_info(self) -> Dict[str, Any]:
        resp = await self.get("/")
        info = resp.data or {}
        return {
            "name": info.get("name"),
            "description": info.get("description"),
            "url": info.get("url"),
            "home": info.get("home"),
            "gmt_offset": info.get("gmt_offset"),
            "timezone_string": info.get("timezone_string"),
            "namespaces": info.get("namespaces", []),
            "authentication": info.get("authentication"),
            "routes": list((info.get("routes") or {}).keys()),
        }

    async def ping(self) -> bool:
        """True when the REST index answers; never raises for upstream failures."""
        try:
            await self.get("/")
            return True
        except UpstreamError as exc:
            log.warning(f"Ping {self.base_url} failed: {exc}")
            return False

    async def current_user(self) -> Dict[str, Any]:
        resp = await self.get("/wp/v2/users/me", params={"context": "edit"})
        user = resp.data or {}
        return {
            "id": user.get("id"),
            "name": user.get("name"),
            "roles": user.get("roles"),
            "capabilities": user.get("capabilities"),
        }


async def validate_credentials(
    url: str,
    username: Optional[str],
    application_password: Optional[str],
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    """
    Round-trip /wp/v2/users/me with the given credentials.
    Returns the user summary; raises ValidationError if they are rejected.
    """
    create_auth_headers(username, application_password)
    async with WordPressClient(url, username, application_password, transport=transport) as client:
        try:
            return await client.current_user()
        except UpstreamError as exc:
            raise ValidationError(f"Failed to validate site credentials: {exc.message}") from exc
