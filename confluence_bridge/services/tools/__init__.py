"""Tool system — decorator-based tool registration for agent tool calls.

Importing this package registers the Confluence tools on ``registry``.

Usage:
    from confluence_bridge.services.tools import registry, ToolContext

    ctx = ToolContext(settings=load_settings())
    text = await registry.call_tool("get_page_content", ctx, {"pageId": "123"})
"""
from confluence_bridge.services.tools.registry import registry, ToolRegistry, ToolDefinition
from confluence_bridge.services.tools.tool_context import ToolContext
from confluence_bridge.services.tools import confluence_tools  # noqa: F401  (registers tools)

__all__ = [
    "registry",
    "ToolRegistry",
    "ToolDefinition",
    "ToolContext",
]
