"""
Page Tools — WordPress /wp/v2/pages

Same shape as the post tools, plus the page hierarchy fields
(parent, menu_order, template).
"""

from typing import Any, Dict, List

from wpmcp.backends.factory import WORDPRESS
from wpmcp.server.logger import get_logger
from wpmcp.server.protocol import success_result
from wpmcp.tools.common import ORDER, SITE_ID, deleted_item, page_result, paging, pick, query, summarize

log = get_logger("tools.pages")

PAGES = "/wp/v2/pages"

_WRITABLE = ("title", "content", "excerpt", "status", "parent", "menu_order", "template", "featured_media")
_LISTED = ("status", "date", "modified", "link", "author", "parent", "menu_order", "template", "featured_media")

_PAGE_ID = {"type": "integer", "description": "Page ID"}

_BODY_PROPERTIES = {
    "title": {"type": "string", "description": "Page title"},
    "content": {"type": "string", "description": "Page content"},
    "excerpt": {"type": "string", "description": "Page excerpt"},
    "parent": {"type": "integer", "description": "Parent page ID"},
    "menu_order": {"type": "integer", "description": "Menu order"},
    "template": {"type": "string", "description": "Page template"},
    "featured_media": {"type": "integer", "description": "Featured media ID"},
}

TOOLS: List[Dict[str, Any]] = [
    {
        "name": "list_pages",
        "description": "List pages from a WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                **paging("pages"),
                "search": {"type": "string", "description": "Search term"},
                "parent": {"type": "integer", "description": "Parent page ID"},
                "status": {
                    "type": "string",
                    "description": "Page status (publish, draft, etc.)",
                    "enum": ["publish", "draft", "pending", "private", "future", "trash", "any"],
                },
                "order": ORDER,
                "orderby": {
                    "type": "string",
                    "description": "Order by field",
                    "enum": ["date", "title", "modified", "menu_order", "id"],
                    "default": "date",
                },
            },
        },
    },
    {
        "name": "get_page",
        "description": "Get a page from a WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {"site_id": SITE_ID, "page_id": _PAGE_ID},
            "required": ["page_id"],
        },
    },
    {
        "name": "create_page",
        "description": "Create a page on a WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                **_BODY_PROPERTIES,
                "status": {
                    "type": "string",
                    "description": "Page status",
                    "enum": ["publish", "draft", "pending", "private", "future"],
                    "default": "draft",
                },
            },
            "required": ["title", "content"],
        },
    },
    {
        "name": "update_page",
        "description": "Update a page on a WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                "page_id": _PAGE_ID,
                **_BODY_PROPERTIES,
                "status": {
                    "type": "string",
                    "description": "Page status",
                    "enum": ["publish", "draft", "pending", "private", "future", "trash"],
                },
            },
            "required": ["page_id"],
        },
    },
    {
        "name": "delete_page",
        "description": "Delete a page from a WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                "page_id": _PAGE_ID,
                "force": {
                    "type": "boolean",
                    "description": "Whether to bypass trash and force deletion",
                    "default": False,
                },
            },
            "required": ["page_id"],
        },
    },
]


async def list_pages(client, args: Dict) -> Dict:
    params = query(args, ("per_page", "page", "search", "parent", "status", "order", "orderby"))
    resp = await client.get(PAGES, params=params)
    pages = [summarize(p, _LISTED, ("title", "excerpt")) for p in resp.data or []]
    return page_result(resp, "pages", pages, args.get("page"))


async def get_page(client, args: Dict) -> Dict:
    resp = await client.get(f"{PAGES}/{args['page_id']}")
    return success_result(page=summarize(resp.data, _LISTED, ("title", "content", "excerpt")))


async def create_page(client, args: Dict) -> Dict:
    log.info(f"Creating page: {args.get('title')}")
    resp = await client.post(PAGES, pick(args, _WRITABLE))
    return success_result(
        f"Page '{args['title']}' created successfully",
        page=summarize(resp.data, ("status", "date", "link"), ("title",)),
    )


async def update_page(client, args: Dict) -> Dict:
    resp = await client.put(f"{PAGES}/{args['page_id']}", pick(args, _WRITABLE))
    return success_result(
        "Page updated successfully",
        page=summarize(resp.data, ("status", "date", "modified", "link"), ("title",)),
    )


async def delete_page(client, args: Dict) -> Dict:
    force = bool(args.get("force"))
    resp = await client.delete(f"{PAGES}/{args['page_id']}", params={"force": "true" if force else None})
    return success_result(
        "Page permanently deleted" if force else "Page moved to trash",
        page=summarize(deleted_item(resp.data) or {}, ("status",), ("title",)),
    )


def register(server):
    server.register_tool_definitions(TOOLS)
    for handler in (list_pages, get_page, create_page, update_page, delete_page):
        server.register_tool_handler(handler.__name__, handler, backend=WORDPRESS)
