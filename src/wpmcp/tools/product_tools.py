"""
WooCommerce Product Tools — /wc/v3/products

Tools:
  list_products   — Paged product listing (search, category, status filters)
  create_product  — New product
  update_product  — Edit an existing product
  delete_product  — Permanently delete a product (WooCommerce has no product trash via force)

Category ids are sent as [{"id": n}] and image urls as [{"src": url}],
the object forms the WooCommerce API expects.
"""

from typing import Any, Dict, List, Optional

from wpmcp.backends.factory import WOOCOMMERCE
from wpmcp.server.logger import get_logger
from wpmcp.server.protocol import success_result
from wpmcp.tools.common import ORDER, SITE_ID, deleted_item, id_list, page_result, paging, pick, query

log = get_logger("tools.products")

PRODUCTS = "/products"

_WRITABLE = ("name", "type", "regular_price", "description", "short_description")

_BODY_PROPERTIES = {
    "name": {"type": "string", "description": "Product name"},
    "regular_price": {"type": "string", "description": "Regular price of the product"},
    "description": {"type": "string", "description": "Full description of the product"},
    "short_description": {"type": "string", "description": "Short description of the product"},
    "categories": id_list("Array of category IDs"),
    "images": {"type": "array", "description": "Array of image URLs", "items": {"type": "string"}},
}

TOOLS: List[Dict[str, Any]] = [
    {
        "name": "list_products",
        "description": "List products from a WooCommerce site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                **paging("products"),
                "search": {"type": "string", "description": "Search term for products"},
                "category": {"type": "integer", "description": "Category ID to filter products"},
                "status": {
                    "type": "string",
                    "description": "Product status (publish, draft, etc.)",
                    "enum": ["publish", "draft", "pending", "private", "future", "trash", "any"],
                },
                "order": ORDER,
                "orderby": {
                    "type": "string",
                    "description": "Order by field",
                    "enum": ["date", "title", "price", "popularity"],
                    "default": "date",
                },
            },
        },
    },
    {
        "name": "create_product",
        "description": "Create a new product in WooCommerce",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                "type": {
                    "type": "string",
                    "description": "Product type (e.g., simple, variable)",
                    "default": "simple",
                },
                **_BODY_PROPERTIES,
            },
            "required": ["name", "regular_price"],
        },
    },
    {
        "name": "update_product",
        "description": "Update an existing product in WooCommerce",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                "id": {"type": "integer", "description": "Product ID to update"},
                "type": {"type": "string", "description": "Product type (e.g., simple, variable)"},
                **_BODY_PROPERTIES,
            },
            "required": ["id"],
        },
    },
    {
        "name": "delete_product",
        "description": "Delete a product from WooCommerce",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                "id": {"type": "integer", "description": "Product ID to delete"},
            },
            "required": ["id"],
        },
    },
]


def product_body(args: Dict[str, Any], default_type: Optional[str] = None) -> Dict[str, Any]:
    body = pick(args, _WRITABLE)
    if default_type and "type" not in body:
        body["type"] = default_type
    if args.get("categories") is not None:
        body["categories"] = [{"id": c} for c in args["categories"]]
    if args.get("images") is not None:
        body["images"] = [{"src": src} for src in args["images"]]
    return body


async def list_products(client, args: Dict) -> Dict:
    params = query(args, ("per_page", "page", "search", "category", "status", "order", "orderby"))
    resp = await client.get(PRODUCTS, params=params)
    return page_result(resp, "products", resp.data or [], args.get("page"))


async def create_product(client, args: Dict) -> Dict:
    log.info(f"Creating product: {args.get('name')}")
    resp = await client.post(PRODUCTS, product_body(args, default_type="simple"))
    return success_result(f"Product '{args['name']}' created successfully", product=resp.data)


async def update_product(client, args: Dict) -> Dict:
    resp = await client.put(f"{PRODUCTS}/{args['id']}", product_body(args))
    return success_result(f"Product '{args['id']}' updated successfully", product=resp.data)


async def delete_product(client, args: Dict) -> Dict:
    resp = await client.delete(f"{PRODUCTS}/{args['id']}", params={"force": "true"})
    return success_result(f"Product '{args['id']}' deleted successfully", product=deleted_item(resp.data))


def register(server):
    server.register_tool_definitions(TOOLS)
    for handler in (list_products, create_product, update_product, delete_product):
        server.register_tool_handler(handler.__name__, handler, backend=WOOCOMMERCE)
