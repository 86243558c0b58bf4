"""Schema fragments and result shaping shared by the tool modules."""

from typing import Any, Dict, Iterable, List, Optional

from wpmcp.backends.http import BackendResponse
from wpmcp.errors import UpstreamError
from wpmcp.server.protocol import success_result

SITE_ID = {
    "type": "string",
    "description": "Site ID (defaults to active site if not provided)",
}

ORDER = {
    "type": "string",
    "description": "Order (asc or desc)",
    "enum": ["asc", "desc"],
    "default": "desc",
}


def paging(noun: str) -> Dict[str, Any]:
    return {
        "per_page": {
            "type": "integer",
            "description": f"Number of {noun} to return per page",
            "default": 10,
        },
        "page": {
            "type": "integer",
            "description": "Page number",
            "default": 1,
        },
    }


def id_list(description: str) -> Dict[str, Any]:
    return {"type": "array", "description": description, "items": {"type": "integer"}}


def pick(args: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    """Subset of args limited to keys, without absent/None values."""
    return {k: args[k] for k in keys if args.get(k) is not None}


def rendered(item: Dict[str, Any], field: str) -> Optional[str]:
    """WordPress wraps title/content/excerpt as {"rendered": ...}."""
    value = item.get(field)
    if isinstance(value, dict):
        return value.get("rendered")
    return value


def summarize(item: Dict[str, Any], fields: Iterable[str], rendered_fields: Iterable[str] = ()) -> Dict[str, Any]:
    if not isinstance(item, dict):
        raise UpstreamError("Site returned an empty or non-object response")
    out = {"id": item.get("id")}
    for field in rendered_fields:
        out[field] = rendered(item, field)
    for field in fields:
        out[field] = item.get(field)
    return out


def deleted_item(data: Any) -> Any:
    """A forced DELETE answers {"deleted": true, "previous": {...}}."""
    if isinstance(data, dict) and "previous" in data:
        return data["previous"]
    return data


def page_result(resp: BackendResponse, key: str, items: List[Any], page: Optional[int]) -> Dict[str, Any]:
    """Success envelope for one page of a collection."""
    return success_result(
        count=len(items),
        total=resp.total,
        total_pages=resp.total_pages,
        current_page=page or 1,
        **{key: items},
    )


def query(args: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    """pick() for query strings: lists become the comma-separated form the REST API accepts."""
    out = pick(args, keys)
    for key, value in out.items():
        if isinstance(value, (list, tuple)):
            out[key] = ",".join(str(v) for v in value)
    return out
