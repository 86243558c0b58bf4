"""
Site Tools — manage the site records the other tools run against

Tools:
  add_site                — Store a new site (optionally validating credentials)
  list_sites              — All stored sites
  get_site                — One site by id or name
  update_site             — Edit a stored site
  remove_site             — Delete a stored site
  select_site             — Make a site the default for calls without site_id
  get_active_site         — The current default site
  test_site_connectivity  — Is the site's REST API reachable?
  get_site_info           — Name, namespaces and routes of the site's REST API

These handlers need no backend client from the router; they work on the
server's SiteRegistry directly.
"""

import functools
from typing import Any, Dict, List

from wpmcp.errors import NoActiveSiteError, NotFoundError, ValidationError
from wpmcp.server.logger import get_logger
from wpmcp.server.protocol import success_result

log = get_logger("tools.sites")

_INCLUDE_CREDENTIALS = {
    "type": "boolean",
    "description": "Whether to include credentials in the response",
    "default": False,
}

_VALIDATE = {
    "type": "boolean",
    "description": "Whether to validate the site credentials",
    "default": True,
}

_CREDENTIAL_PROPERTIES = {
    "username": {"type": "string", "description": "WordPress username"},
    "applicationPassword": {"type": "string", "description": "WordPress application password"},
    "consumerKey": {"type": "string", "description": "WooCommerce REST API consumer key"},
    "consumerSecret": {"type": "string", "description": "WooCommerce REST API consumer secret"},
}

TOOLS: List[Dict[str, Any]] = [
    {
        "name": "add_site",
        "description": "Add a new WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Site name"},
                "url": {"type": "string", "description": "Site URL"},
                **_CREDENTIAL_PROPERTIES,
                "validate": _VALIDATE,
            },
            "required": ["name", "url"],
        },
    },
    {
        "name": "list_sites",
        "description": "List all WordPress sites",
        "inputSchema": {
            "type": "object",
            "properties": {
                "includeCredentials": _INCLUDE_CREDENTIALS,
            },
        },
    },
    {
        "name": "get_site",
        "description": "Get a WordPress site by ID or name",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Site ID"},
                "name": {"type": "string", "description": "Site name"},
                "includeCredentials": _INCLUDE_CREDENTIALS,
            },
            "oneOf": [
                {"required": ["id"]},
                {"required": ["name"]},
            ],
        },
    },
    {
        "name": "update_site",
        "description": "Update a WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Site ID"},
                "name": {"type": "string", "description": "Site name"},
                "url": {"type": "string", "description": "Site URL"},
                **_CREDENTIAL_PROPERTIES,
                "validate": _VALIDATE,
            },
            "required": ["id"],
        },
    },
    {
        "name": "remove_site",
        "description": "Remove a WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Site ID"},
            },
            "required": ["id"],
        },
    },
    {
        "name": "select_site",
        "description": "Select a WordPress site as the active site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Site ID"},
            },
            "required": ["id"],
        },
    },
    {
        "name": "get_active_site",
        "description": "Get the active WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "includeCredentials": _INCLUDE_CREDENTIALS,
            },
        },
    },
    {
        "name": "test_site_connectivity",
        "description": "Test connectivity to a WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Site ID"},
            },
            "required": ["id"],
        },
    },
    {
        "name": "get_site_info",
        "description": "Get information about a WordPress site",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Site ID"},
            },
            "required": ["id"],
        },
    },
]


def _include(args: Dict[str, Any]) -> bool:
    return bool(args.get("includeCredentials"))


async def _add_site(server, client, args: Dict) -> Dict:
    log.info(f"Adding site: {args.get('name')}")
    if args.get("validate", True) and args.get("username") and args.get("applicationPassword"):
        await server.clients.validate_credentials(
            args.get("url") or "", args["username"], args["applicationPassword"]
        )

    site = await server.sites.add(args)
    return success_result(
        f'Site "{site.name}" added successfully',
        site=site.public_dict(_include(args)),
    )


async def _list_sites(server, client, args: Dict) -> Dict:
    active = server.sites.get_active()
    sites = [s.public_dict(_include(args)) for s in server.sites.all()]
    return success_result(
        count=len(sites),
        activeSiteId=active.id if active else None,
        sites=sites,
    )


async def _get_site(server, client, args: Dict) -> Dict:
    if args.get("id"):
        site = server.sites.get_by_id(args["id"])
    elif args.get("name"):
        site = server.sites.get_by_name(args["name"])
    else:
        raise ValidationError("Either id or name is required")

    if site is None:
        raise NotFoundError(f"Site not found: {args.get('id') or args.get('name')}")
    return success_result(site=site.public_dict(_include(args)))


async def _update_site(server, client, args: Dict) -> Dict:
    site_id = args["id"]
    current = server.sites.get_by_id(site_id)
    if current is None:
        raise NotFoundError(f"Site not found: {site_id}")

    touches_auth = any(args.get(k) for k in ("url", "username", "applicationPassword"))
    if args.get("validate", True) and touches_auth:
        username = args.get("username") or current.username
        password = args.get("applicationPassword") or current.application_password
        if username and password:
            await server.clients.validate_credentials(args.get("url") or current.url, username, password)

    patch = {k: v for k, v in args.items() if k != "id"}
    site = await server.sites.update(site_id, patch)
    return success_result(
        f'Site "{site.name}" updated successfully',
        site=site.public_dict(_include(args)),
    )


async def _remove_site(server, client, args: Dict) -> Dict:
    if not await server.sites.remove(args["id"]):
        raise NotFoundError(f"Site not found: {args['id']}")
    return success_result("Site removed successfully")


async def _select_site(server, client, args: Dict) -> Dict:
    site = await server.sites.set_active(args["id"])
    return success_result(
        f'Site "{site.name}" selected as active site',
        site=site.public_dict(),
    )


async def _get_active_site(server, client, args: Dict) -> Dict:
    site = server.sites.get_active()
    if site is None:
        raise NoActiveSiteError()
    return success_result(site=site.public_dict(_include(args)))


async def _test_site_connectivity(server, client, args: Dict) -> Dict:
    async with server.clients.for_site(args["id"], require_credentials=False) as wp:
        reachable = await wp.ping()
    return success_result(
        "Site is reachable" if reachable else "Site is not reachable",
        reachable=reachable,
    )


async def _get_site_info(server, client, args: Dict) -> Dict:
    async with server.clients.for_site(args["id"], require_credentials=False) as wp:
        info = await wp.get_site_info()
    return success_result(info=info)


_HANDLERS = {
    "add_site": _add_site,
    "list_sites": _list_sites,
    "get_site": _get_site,
    "update_site": _update_site,
    "remove_site": _remove_site,
    "select_site": _select_site,
    "get_active_site": _get_active_site,
    "test_site_connectivity": _test_site_connectivity,
    "get_site_info": _get_site_info,
}


def register(server):
    """Register the site tools; handlers are bound to server's registry and factory."""
    server.register_tool_definitions(TOOLS)
    for name, handler in _HANDLERS.items():
        server.register_tool_handler(name, functools.partial(handler, server))
