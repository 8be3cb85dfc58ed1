"""Shape raw Confluence JSON into compact summaries for agents.

Keys whose source value is missing are left out of the output instead of
raising. Backend calls are wrapped so failures come back as ``Err``.
"""
from __future__ import annotations

import logging
from typing import Any

from confluence_bridge.exceptions import APIError
from confluence_bridge.services.confluence.client import ConfluenceClient
from confluence_bridge.services.confluence.results import Err, Ok, Result
from confluence_bridge.services.confluence.tables import parse_tables

logger = logging.getLogger(__name__)


def _dig(data: Any, *keys: str) -> Any:
    """Walk nested dicts; None as soon as a level is missing."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def page_view_url(base_url: str, page_id: str) -> str:
    return f"{base_url}/pages/viewpage.action?pageId={page_id}"


def simplify_search_item(item: dict[str, Any], base_url: str) -> dict[str, Any]:
    webui = _dig(item, "_links", "webui")
    return _compact({
        "id": item.get("id"),
        "type": item.get("type"),
        "status": item.get("status"),
        "title": item.get("title"),
        "space": _dig(item, "space", "key"),
        "version": _dig(item, "version", "number"),
        "lastModified": _dig(item, "version", "when"),
        "url": f"{base_url}{webui}" if webui else None,
    })


def simplify_search(payload: dict[str, Any], base_url: str) -> dict[str, Any]:
    """Keep ``size``, ``limit`` and lightweight summaries of each hit."""
    results = payload.get("results") or []
    return _compact({
        "size": payload.get("size"),
        "limit": payload.get("limit"),
        "results": [simplify_search_item(item, base_url) for item in results],
    })


def simplify_page(
    payload: dict[str, Any], base_url: str, page_id: str
) -> dict[str, Any]:
    """Normalize a page; tables replace the raw body when any are found."""
    markup = _dig(payload, "body", "storage", "value") or ""
    tables = parse_tables(markup)

    by = _dig(payload, "version", "by", "displayName") or _dig(
        payload, "version", "by", "username"
    )
    page = _compact({
        "id": payload.get("id"),
        "type": payload.get("type"),
        "status": payload.get("status"),
        "title": payload.get("title"),
        "space": _compact({
            "key": _dig(payload, "space", "key"),
            "name": _dig(payload, "space", "name"),
        }),
        "version": _compact({
            "number": _dig(payload, "version", "number"),
            "when": _dig(payload, "version", "when"),
            "by": by,
        }),
        "url": page_view_url(base_url, page_id),
    })
    if tables:
        page["tables"] = [table.to_dict() for table in tables]
    else:
        page["content"] = markup
    return page


def error_result(action: str, exc: Exception) -> Err:
    if isinstance(exc, APIError):
        return Err(exc.detail)
    logger.exception(f"Unexpected error while {action}")
    return Err(str(exc))


async def search_content(
    client: ConfluenceClient, cql: str, limit: int
) -> Result:
    try:
        raw = await client.search(cql, limit)
        return Ok(simplify_search(raw, client.url))
    except Exception as exc:
        return error_result(f"searching with CQL {cql!r}", exc)


async def fetch_page(client: ConfluenceClient, page_id: str) -> Result:
    try:
        raw = await client.get_content(page_id)
        return Ok(simplify_page(raw, client.url, page_id))
    except Exception as exc:
        return error_result(f"fetching page {page_id}", exc)

