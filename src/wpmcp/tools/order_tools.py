"""
WooCommerce Order Tools — /wc/v3/orders

Tools:
  list_orders   — Paged order listing (search, status filters)
  create_order  — New order from line items
  update_order  — Change status, total or line items
  delete_order  — Permanently delete an order
"""

from typing import Any, Dict, List

from wpmcp.backends.factory import WOOCOMMERCE
from wpmcp.server.logger import get_logger
from wpmcp.server.protocol import success_result
from wpmcp.tools.common import ORDER, SITE_ID, deleted_item, page_result, paging, pick, query

log = get_logger("tools.orders")

ORDERS = "/orders"

_ORDER_STATUS = {"type": "string", "description": "Order status (e.g., pending, processing, completed)"}
_TOTAL = {"type": "string", "description": "Total amount for the order"}
_LINE_ITEMS = {
    "type": "array",
    "description": "Array of line items for the order",
    "items": {
        "type": "object",
        "properties": {
            "product_id": {"type": "integer"},
            "quantity": {"type": "integer"},
        },
        "required": ["product_id", "quantity"],
    },
}

TOOLS: List[Dict[str, Any]] = [
    {
        "name": "list_orders",
        "description": "List orders from a WooCommerce site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                **paging("orders"),
                "search": {"type": "string", "description": "Search term for orders"},
                "status": {
                    **_ORDER_STATUS,
                    "enum": ["pending", "processing", "on-hold", "completed", "cancelled", "refunded", "failed", "trash"],
                },
                "order": ORDER,
                "orderby": {
                    "type": "string",
                    "description": "Order by field",
                    "enum": ["date", "id", "total"],
                    "default": "date",
                },
            },
        },
    },
    {
        "name": "create_order",
        "description": "Create a new order in WooCommerce",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                "customer_id": {"type": "integer", "description": "Customer ID for the order"},
                "line_items": _LINE_ITEMS,
                "status": {**_ORDER_STATUS, "default": "pending"},
                "total": _TOTAL,
            },
            "required": ["line_items"],
        },
    },
    {
        "name": "update_order",
        "description": "Update an existing order in WooCommerce",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                "id": {"type": "integer", "description": "Order ID to update"},
                "status": _ORDER_STATUS,
                "total": _TOTAL,
                "line_items": _LINE_ITEMS,
            },
            "required": ["id"],
        },
    },
    {
        "name": "delete_order",
        "description": "Delete an order in WooCommerce",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                "id": {"type": "integer", "description": "Order ID to delete"},
            },
            "required": ["id"],
        },
    },
]


async def list_orders(client, args: Dict) -> Dict:
    params = query(args, ("per_page", "page", "search", "status", "order", "orderby"))
    resp = await client.get(ORDERS, params=params)
    return page_result(resp, "orders", resp.data or [], args.get("page"))


async def create_order(client, args: Dict) -> Dict:
    log.info(f"Creating order with {len(args['line_items'])} line items")
    body = pick(args, ("customer_id", "line_items", "status", "total"))
    resp = await client.post(ORDERS, body)
    return success_result("Order created successfully", order=resp.data)


async def update_order(client, args: Dict) -> Dict:
    body = pick(args, ("status", "total", "line_items"))
    resp = await client.put(f"{ORDERS}/{args['id']}", body)
    return success_result(f"Order '{args['id']}' updated successfully", order=resp.data)


async def delete_order(client, args: Dict) -> Dict:
    resp = await client.delete(f"{ORDERS}/{args['id']}", params={"force": "true"})
    return success_result(f"Order '{args['id']}' deleted successfully", order=deleted_item(resp.data))


def register(server):
    server.register_tool_definitions(TOOLS)
    for handler in (list_orders, create_order, update_order, delete_order):
        server.register_tool_handler(handler.__name__, handler, backend=WOOCOMMERCE)
