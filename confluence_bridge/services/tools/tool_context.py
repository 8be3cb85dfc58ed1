"""ToolContext — runtime context injected into every tool execution.

This is NOT visible to the calling agent. It carries the bridge
configuration so tools can build an authenticated Confluence client.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, AsyncIterator, Optional

from confluence_bridge.config import Settings
from confluence_bridge.services.confluence.client import ConfluenceClient

if TYPE_CHECKING:
    import httpx


@dataclass(frozen=True)
class ToolContext:
    """Immutable context injected into every tool invocation."""

    settings: Settings

    # Optional transport override for the per-invocation HTTP client
    transport: Optional["httpx.AsyncBaseTransport"] = field(default=None)

    @asynccontextmanager
    async def confluence(self) -> AsyncIterator[ConfluenceClient]:
        """Open a Confluence client for one invocation and close it afterwards.

        Usage:
            async with ctx.confluence() as client:
                raw = await client.get_content(page_id)

        Raises ``ConfigurationError`` before any request when the URL or
        credentials are missing.
        """
        client = ConfluenceClient(self.settings, transport=self.transport)
        try:
            yield client
        finally:
            await client.aclose()
