"""Read-modify-write page updates under Confluence's optimistic versioning.

The read and the write are two separate requests. Confluence rejects a write
whose version number is not exactly current + 1, which is the only guard
against a concurrent writer; a conflict comes back as ``Err`` and is never
retried here.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

from confluence_bridge.services.confluence.client import ConfluenceClient
from confluence_bridge.services.confluence.normalizer import error_result, fetch_page
from confluence_bridge.services.confluence.results import Err, Ok, Result

logger = logging.getLogger(__name__)

STORAGE_REPRESENTATION = "storage"


def _describe(error: Any) -> str:
    if isinstance(error, (dict, list)):
        return json.dumps(error, ensure_ascii=False)
    return str(error)


def next_version(current: dict[str, Any]) -> int:
    """Version number the write must carry.

    Raises:
        ValueError: the current page has no numeric version.
    """
    number = (current.get("version") or {}).get("number")
    if isinstance(number, bool) or not isinstance(number, int):
        raise ValueError(f"Current page has no usable version number: {number!r}")
    return number + 1


def build_update_payload(
    page_id: str,
    current: dict[str, Any],
    content: str,
    title: Optional[str] = None,
) -> dict[str, Any]:
    """Build the ``PUT /content/{id}`` body from a normalized current page.

    Type and space are reused, the title too unless a new one is given; the
    body is replaced wholesale.
    """
    return {
        "id": page_id,
        "type": current.get("type"),
        "title": title or current.get("title"),
        "space": current.get("space"),
        "body": {
            "storage": {
                "value": content,
                "representation": STORAGE_REPRESENTATION,
            },
        },
        "version": {"number": next_version(current)},
    }


async def update_page(
    client: ConfluenceClient,
    page_id: str,
    content: str,
    title: Optional[str] = None,
) -> Result:
    """Replace a page's body (and optionally title) with the next version.

    On success the backend's write response is returned unmodified.
    """
    current = await fetch_page(client, page_id)
    if isinstance(current, Err):
        return Err(f"Failed to get current page: {_describe(current.error)}")

    try:
        payload = build_update_payload(page_id, current.value, content, title)
    except ValueError as exc:
        return Err(f"Failed to get current page: {exc}")

    logger.info(
        f"Updating page {page_id} to version {payload['version']['number']}"
    )
    try:
        return Ok(await client.update_content(page_id, payload))
    except Exception as exc:
        return error_result(f"updating page {page_id}", exc)
