"""
Post Tools — WordPress /wp/v2/posts

Tools:
  list_posts   — Paged, filterable post listing
  get_post     — One post with rendered content
  create_post  — New post (draft unless status given)
  update_post  — Edit fields of an existing post
  delete_post  — Trash a post, or delete it outright with force
"""

from typing import Any, Dict, List

from wpmcp.backends.factory import WORDPRESS
from wpmcp.server.logger import get_logger
from wpmcp.server.protocol import success_result
from wpmcp.tools.common import ORDER, SITE_ID, deleted_item, id_list, page_result, paging, pick, query, summarize

log = get_logger("tools.posts")

POSTS = "/wp/v2/posts"

_WRITABLE = ("title", "content", "excerpt", "status", "categories", "tags", "featured_media")
_LISTED = ("status", "date", "modified", "link", "author", "featured_media", "categories", "tags")

_POST_ID = {"type": "integer", "description": "Post ID"}

_BODY_PROPERTIES = {
    "title": {"type": "string", "description": "Post title"},
    "content": {"type": "string", "description": "Post content"},
    "excerpt": {"type": "string", "description": "Post excerpt"},
    "categories": id_list("Category IDs"),
    "tags": id_list("Tag IDs"),
    "featured_media": {"type": "integer", "description": "Featured media ID"},
}

TOOLS: List[Dict[str, Any]] = [
    {
        "name": "list_posts",
        "description": "List posts from a WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                **paging("posts"),
                "search": {"type": "string", "description": "Search term"},
                "categories": id_list("Category IDs"),
                "tags": id_list("Tag IDs"),
                "status": {
                    "type": "string",
                    "description": "Post status (publish, draft, etc.)",
                    "enum": ["publish", "draft", "pending", "private", "future", "trash", "any"],
                },
                "order": ORDER,
                "orderby": {
                    "type": "string",
                    "description": "Order by field",
                    "enum": ["date", "title", "modified", "author", "id"],
                    "default": "date",
                },
            },
        },
    },
    {
        "name": "get_post",
        "description": "Get a post from a WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {"site_id": SITE_ID, "post_id": _POST_ID},
            "required": ["post_id"],
        },
    },
    {
        "name": "create_post",
        "description": "Create a post on a WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                **_BODY_PROPERTIES,
                "status": {
                    "type": "string",
                    "description": "Post status",
                    "enum": ["publish", "draft", "pending", "private", "future"],
                    "default": "draft",
                },
            },
            "required": ["title", "content"],
        },
    },
    {
        "name": "update_post",
        "description": "Update a post on a WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                "post_id": _POST_ID,
                **_BODY_PROPERTIES,
                "status": {
                    "type": "string",
                    "description": "Post status",
                    "enum": ["publish", "draft", "pending", "private", "future", "trash"],
                },
            },
            "required": ["post_id"],
        },
    },
    {
        "name": "delete_post",
        "description": "Delete a post from a WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "site_id": SITE_ID,
                "post_id": _POST_ID,
                "force": {
                    "type": "boolean",
                    "description": "Whether to bypass trash and force deletion",
                    "default": False,
                },
            },
            "required": ["post_id"],
        },
    },
]


async def list_posts(client, args: Dict) -> Dict:
    params = query(args, ("per_page", "page", "search", "categories", "tags", "status", "order", "orderby"))
    resp = await client.get(POSTS, params=params)
    posts = [summarize(p, _LISTED, ("title", "excerpt")) for p in resp.data or []]
    return page_result(resp, "posts", posts, args.get("page"))


async def get_post(client, args: Dict) -> Dict:
    resp = await client.get(f"{POSTS}/{args['post_id']}")
    return success_result(post=summarize(resp.data, _LISTED, ("title", "content", "excerpt")))


async def create_post(client, args: Dict) -> Dict:
    log.info(f"Creating post: {args.get('title')}")
    resp = await client.post(POSTS, pick(args, _WRITABLE))
    return success_result(
        f"Post '{args['title']}' created successfully",
        post=summarize(resp.data, ("status", "date", "link"), ("title",)),
    )


async def update_post(client, args: Dict) -> Dict:
    resp = await client.put(f"{POSTS}/{args['post_id']}", pick(args, _WRITABLE))
    return success_result(
        "Post updated successfully",
        post=summarize(resp.data, ("status", "date", "modified", "link"), ("title",)),
    )


async def delete_post(client, args: Dict) -> Dict:
    force = bool(args.get("force"))
    resp = await client.delete(f"{POSTS}/{args['post_id']}", params={"force": "true" if force else None})
    return success_result(
        "Post permanently deleted" if force else "Post moved to trash",
        post=summarize(deleted_item(resp.data) or {}, ("status",), ("title",)),
    )


def register(server):
    server.register_tool_definitions(TOOLS)
    for handler in (list_posts, get_post, create_post, update_post, delete_post):
        server.register_tool_handler(handler.__name__, handler, backend=WORDPRESS)
