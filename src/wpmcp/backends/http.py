"""
Backend HTTP client — thin httpx.AsyncClient wrapper shared by the
WordPress and WooCommerce clients.

Every request:
  - is relative to the client's base_url (e.g. https://site/wp-json)
  - drops None-valued query parameters
  - is bounded by Config.REQUEST_TIMEOUT
  - raises UpstreamError on non-2xx, BackendTimeoutError on timeout

No retries: a failed call is reported to the caller as-is.
"""

from typing import Any, Dict, Optional

import httpx

from wpmcp.config import Config
from wpmcp.errors import BackendTimeoutError, UpstreamError
from wpmcp.server.logger import get_logger

log = get_logger("backends.http")


def clean_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in (params or {}).items() if v is not None}


class BackendResponse:
    """Decoded JSON body plus the headers WordPress uses for pagination."""

    __slots__ = ("data", "headers", "status_code")

    def __init__(self, data: Any, headers: httpx.Headers, status_code: int):
        self.data = data
        self.headers = headers
        self.status_code = status_code

    def _int_header(self, name: str) -> int:
        try:
            return int(self.headers.get(name, "0"))
        except ValueError:
            return 0

    @property
    def total(self) -> int:
        return self._int_header("X-WP-Total")

    @property
    def total_pages(self) -> int:
        return self._int_header("X-WP-TotalPages")


class BackendClient:
    """
    Usage:
        async with BackendClient("https://site/wp-json", headers=auth) as client:
            resp = await client.get("/wp/v2/posts", params={"per_page": 5})
    """

    def __init__(
        self,
        base_url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        auth: Optional[httpx.Auth] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else Config.REQUEST_TIMEOUT
        self._default_params = clean_params(params)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json", **(headers or {})},
            auth=auth,
            timeout=self.timeout,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> BackendResponse:
        query = {**self._default_params, **clean_params(params)}
        log.debug(f"{method} {self.base_url}{path}")

        try:
            resp = await self._client.request(method, path, params=query, json=json)
        except httpx.TimeoutException as exc:
            raise BackendTimeoutError(
                f"{method} {path} timed out after {self.timeout:g}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"{method} {path} failed: {exc}") from exc

        if resp.is_error:
            detail = ""
            try:
                body = resp.json()
                if isinstance(body, dict) and body.get("message"):
                    detail = f" - {body['message']}"
            except ValueError:
                pass
            log.warning(f"{method} {path} -> {resp.status_code}")
            raise UpstreamError(
                f"{method} {path} failed: {resp.status_code} {resp.reason_phrase}{detail}",
                status=resp.status_code,
            )

        if not resp.content:
            return BackendResponse(None, resp.headers, resp.status_code)
        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError(
                f"{method} {path} returned invalid JSON", status=resp.status_code
            ) from exc
        return BackendResponse(data, resp.headers, resp.status_code)

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> BackendResponse:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, data: Optional[Dict[str, Any]] = None,
                   params: Optional[Dict[str, Any]] = None) -> BackendResponse:
        return await self.request("POST", path, params=params, json=clean_params(data))

    async def put(self, path: str, data: Optional[Dict[str, Any]] = None,
                  params: Optional[Dict[str, Any]] = None) -> BackendResponse:
        return await self.request("PUT", path, params=params, json=clean_params(data))

    async def delete(self, path: str, params: Optional[Dict[str, Any]] = None) -> BackendResponse:
        return await self.request("DELETE", path, params=params)

    async def aclose(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
