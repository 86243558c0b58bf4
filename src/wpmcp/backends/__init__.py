"""Backend HTTP clients for WordPress and WooCommerce, and the factory that builds them."""

from wpmcp.backends.factory import BACKENDS, WOOCOMMERCE, WORDPRESS, ClientFactory
from wpmcp.backends.http import BackendClient, BackendResponse

__all__ = [
    "BACKENDS",
    "WOOCOMMERCE",
    "WORDPRESS",
    "BackendClient",
    "BackendResponse",
    "ClientFactory",
]
