"""
WooCommerce REST API client — consumer key/secret auth

Requests are relative to <site>/wp-json/wc/v3, e.g. "/products".
Over https the key pair is sent as HTTP Basic credentials; over plain http
WooCommerce only accepts it as consumer_key/consumer_secret query params.
"""

from typing import Any, Optional

import httpx

from wpmcp.backends.http import BackendClient
from wpmcp.errors import ValidationError

API_PATH = "/wp-json/wc/v3"


class WooCommerceClient(BackendClient):
    def __init__(
        self,
        url: str,
        consumer_key: Optional[str],
        consumer_secret: Optional[str],
        **kwargs: Any,
    ):
        if not consumer_key or not consumer_secret:
            raise ValidationError("Missing required credentials: consumerKey and consumerSecret")

        base_url = f"{url.rstrip('/')}{API_PATH}"
        if base_url.lower().startswith("https://"):
            super().__init__(base_url, auth=httpx.BasicAuth(consumer_key, consumer_secret), **kwargs)
        else:
            super().__init__(
                base_url,
                params={"consumer_key": consumer_key, "consumer_secret": consumer_secret},
                **kwargs,
            )
