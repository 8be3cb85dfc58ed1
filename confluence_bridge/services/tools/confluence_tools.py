"""Confluence agent tools — CQL search, page read and page update.

Each handler opens its own client, so credentials are resolved per call and
nothing is shared between invocations.
"""
from __future__ import annotations

from typing import Any, Optional

from confluence_bridge.services.confluence.normalizer import fetch_page, search_content
from confluence_bridge.services.confluence.updater import update_page
from confluence_bridge.services.tools.registry import registry
from confluence_bridge.services.tools.tool_context import ToolContext


@registry.tool(
    name="execute_cql_search",
    description="Execute a CQL query on Confluence to search pages",
)
async def execute_cql_search(ctx: ToolContext, cql: str, limit: int = 10) -> Any:
    """Search Confluence with CQL.

    cql: CQL query string
    limit: Number of results to return
    """
    async with ctx.confluence() as client:
        result = await search_content(client, cql, limit)
    return result.to_payload()


@registry.tool(
    name="get_page_content",
    description="Get the content of a Confluence page",
    aliases={"page_id": "pageId"},
)
async def get_page_content(ctx: ToolContext, page_id: str) -> Any:
    """Fetch a page; tables in its body come back as structured rows.

    page_id: Confluence Page ID
    """
    async with ctx.confluence() as client:
        result = await fetch_page(client, page_id)
    return result.to_payload()


@registry.tool(
    name="update_page_content",
    description="Update the content of a Confluence page",
    aliases={"page_id": "pageId"},
)
async def update_page_content(
    ctx: ToolContext,
    page_id: str,
    content: str,
    title: Optional[str] = None,
) -> Any:
    """Replace a page body, bumping its version number.

    page_id: Confluence Page ID
    content: HTML content to update the page with
    title: Page title (optional, if you want to change it)
    """
    async with ctx.confluence() as client:
        result = await update_page(client, page_id, content, title)
    return result.to_payload()
