"""WooCommerce Customer Tools — /wc/v3/customers (list, create, update, delete)."""

from typing import Any, Dict, List

from wpmcp.backends.factory import WOOCOMMERCE
from wpmcp.server.logger import get_logger
from wpmcp.server.protocol import success_result
from wpmcp.tools.common import ORDER, SITE_ID, deleted_item, page_result, paging, pick, query

log = get_logger("tools.customers")

CUSTOMERS = "/customers"


def _address(description: str) -> Dict[str, Any]:
    return {
        "type": "object",
        "description": description,
        "properties": {
            "first_name": {"type": "string"},
            "last_name": {"type": "string"},
            "address_1": {"type": "string"},
            "city": {"type": "string"},
            "postcode": {"type": "string"},
            "country": {"type": "string"},
        },
    }


_BODY_PROPERTIES = {
    "email": {"type": "string", "description": "Customer email"},
    "first_name": {"type": "string", "description": "Customer first name"},
    "last_name": {"type": "string", "description": "Customer last name"},
    "billing": _address("Billing address"),
    "shipping": _address("Shipping address"),
}

TOOLS: List[Dict[str, Any]] = [
    {
        "name": "list_customers",
        "description": "List customers from a WooCommerce site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                **paging("customers"),
                "search": {"type": "string", "description": "Search term for customers"},
                "order": ORDER,
                "orderby": {
                    "type": "string",
                    "description": "Order by field",
                    "enum": ["id", "email", "date"],
                    "default": "id",
                },
            },
        },
    },
    {
        "name": "create_customer",
        "description": "Create a new customer in WooCommerce",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                **_BODY_PROPERTIES,
                "username": {"type": "string", "description": "Customer username"},
                "password": {"type": "string", "description": "Customer password"},
            },
            "required": ["email", "first_name", "last_name"],
        },
    },
    {
        "name": "update_customer",
        "description": "Update an existing customer in WooCommerce",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                "id": {"type": "integer", "description": "Customer ID to update"},
                **_BODY_PROPERTIES,
            },
            "required": ["id"],
        },
    },
    {
        "name": "delete_customer",
        "description": "Delete a customer in WooCommerce",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                "id": {"type": "integer", "description": "Customer ID to delete"},
            },
            "required": ["id"],
        },
    },
]


async def list_customers(client, args: Dict) -> Dict:
    params = query(args, ("per_page", "page", "search", "order", "orderby"))
    resp = await client.get(CUSTOMERS, params=params)
    return page_result(resp, "customers", resp.data or [], args.get("page"))


async def create_customer(client, args: Dict) -> Dict:
    log.info(f"Creating customer: {args.get('email')}")
    body = pick(args, ("email", "first_name", "last_name", "username", "password", "billing", "shipping"))
    resp = await client.post(CUSTOMERS, body)
    return success_result("Customer created successfully", customer=resp.data)


async def update_customer(client, args: Dict) -> Dict:
    body = pick(args, ("email", "first_name", "last_name", "billing", "shipping"))
    resp = await client.put(f"{CUSTOMERS}/{args['id']}", body)
    return success_result(f"Customer '{args['id']}' updated successfully", customer=resp.data)


async def delete_customer(client, args: Dict) -> Dict:
    # WooCommerce refuses customer deletion without force
    resp = await client.delete(f"{CUSTOMERS}/{args['id']}", params={"force": "true"})
    return success_result(f"Customer '{args['id']}' deleted successfully", customer=deleted_item(resp.data))


def register(server):
    server.register_tool_definitions(TOOLS)
    for handler in (list_customers, create_customer, update_customer, delete_customer):
        server.register_tool_handler(handler.__name__, handler, backend=WOOCOMMERCE)
