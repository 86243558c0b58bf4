"""
wpmcp MCP Tools

Modules:
  site_tools      — 9 site registry tools (no backend client)
  post_tools      — 5 WordPress post tools
  page_tools      — 5 WordPress page tools
  product_tools   — 4 WooCommerce product tools
  order_tools     — 4 WooCommerce order tools
  customer_tools  — 4 WooCommerce customer tools
"""

from wpmcp.tools import site_tools
from wpmcp.tools import post_tools
from wpmcp.tools import page_tools
from wpmcp.tools import product_tools
from wpmcp.tools import order_tools
from wpmcp.tools import customer_tools

MODULES = (site_tools, post_tools, page_tools, product_tools, order_tools, customer_tools)

ALL_TOOLS = [tool for module in MODULES for tool in module.TOOLS]


def register_all(server):
    """Register every tool module with server and check both tables agree."""
    for module in MODULES:
        module.register(server)
    server.check_registrations()
