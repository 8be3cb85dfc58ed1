"""ToolRegistry — decorator-based tool registration with automatic JSON Schema generation.

Tools are listed to the calling agent as ``{name, description, inputSchema}``
and invoked by name with a mapping of arguments. The transport carrying those
calls (MCP stdio or otherwise) lives outside this package.

Usage:
    from confluence_bridge.services.tools.registry import registry

    @registry.tool(
        name="get_page_content",
        description="Get the content of a Confluence page",
        aliases={"page_id": "pageId"},
    )
    async def get_page_content(ctx: ToolContext, page_id: str) -> dict:
        ...
"""
from __future__ import annotations

import inspect
import json
import logging
import typing
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, get_type_hints

from confluence_bridge.exceptions import ConfigurationError, ToolExecutionError
from confluence_bridge.services.tools.tool_context import ToolContext

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Type → JSON Schema mapping
# ---------------------------------------------------------------------------

_TYPE_MAP: dict[type, dict] = {
    str: {"type": "string"},
    int: {"type": "integer"},
    float: {"type": "number"},
    bool: {"type": "boolean"},
    list: {"type": "array"},
    dict: {"type": "object"},
}


def _unwrap_optional(tp: Any) -> Any:
    """Optional[X] → X; anything else unchanged."""
    if getattr(tp, "__origin__", None) is typing.Union:
        non_none = [a for a in tp.__args__ if a is not type(None)]
        if len(non_none) == 1:
            return non_none[0]
    return tp


def _is_optional(tp: Any) -> bool:
    args = getattr(tp, "__args__", None) or ()
    return getattr(tp, "__origin__", None) is typing.Union and type(None) in args


def _python_type_to_json_schema(tp: Any) -> dict:
    """Convert a Python type hint to JSON Schema."""
    tp = _unwrap_optional(tp)
    origin = getattr(tp, "__origin__", None)
    args = getattr(tp, "__args__", None)

    if origin is list:
        if args:
            return {"type": "array", "items": _python_type_to_json_schema(args[0])}
        return {"type": "array"}
    if origin is dict:
        return {"type": "object"}
    if tp in _TYPE_MAP:
        return dict(_TYPE_MAP[tp])
    # Fallback
    return {"type": "string"}


def _param_descriptions(func: Callable) -> dict[str, str]:
    """Read ``name: description`` lines from the handler docstring."""
    descriptions: dict[str, str] = {}
    for line in (func.__doc__ or "").split("\n"):
        stripped = line.strip()
        name, sep, desc = stripped.partition(":")
        if sep and name.strip().isidentifier() and desc.strip():
            descriptions.setdefault(name.strip(), desc.strip())
    return descriptions


@dataclass
class ToolParameter:
    """One agent-visible handler argument."""

    name: str        # Python parameter name
    public_name: str  # name the agent sends
    annotation: Any
    required: bool
    default: Any = None


def _collect_parameters(func: Callable, aliases: dict[str, str]) -> list[ToolParameter]:
    """Agent-visible parameters; the injected ToolContext is skipped."""
    sig = inspect.signature(func)
    hints = get_type_hints(func)

    params: list[ToolParameter] = []
    for name, param in sig.parameters.items():
        if hints.get(name) is ToolContext:
            continue
        if param.kind in (
            inspect.Parameter.VAR_POSITIONAL,
            inspect.Parameter.VAR_KEYWORD,
        ):
            continue
        tp = hints.get(name, str)
        has_default = param.default is not inspect.Parameter.empty
        params.append(
            ToolParameter(
                name=name,
                public_name=aliases.get(name, name),
                annotation=tp,
                required=not has_default and not _is_optional(tp),
                default=param.default if has_default else None,
            )
        )
    return params


def _generate_parameters_schema(func: Callable, params: list[ToolParameter]) -> dict:
    """Auto-generate JSON Schema from the collected parameters."""
    descriptions = _param_descriptions(func)
    properties: dict[str, Any] = {}
    required: list[str] = []

    for p in params:
        schema = _python_type_to_json_schema(p.annotation)
        desc = descriptions.get(p.name) or descriptions.get(p.public_name)
        if desc:
            schema["description"] = desc
        if p.default is not None:
            schema["default"] = p.default
        properties[p.public_name] = schema
        if p.required:
            required.append(p.public_name)

    schema = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def _coerce(param: ToolParameter, value: Any) -> Any:
    """Coerce an incoming argument to the handler's declared scalar type."""
    tp = _unwrap_optional(param.annotation)
    try:
        if tp is int:
            if isinstance(value, bool):
                raise ValueError("booleans are not integers")
            if isinstance(value, float) and not value.is_integer():
                raise ValueError("not a whole number")
            return int(value)
        if tp is float:
            return float(value)
        if tp is str:
            return str(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid value for '{param.public_name}': {value!r} ({e})"
        ) from e
    return value


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


# ---------------------------------------------------------------------------
# ToolDefinition dataclass
# ---------------------------------------------------------------------------

@dataclass
class ToolDefinition:
    """A registered tool the agent can invoke."""

    name: str
    description: str
    handler: Callable[..., Awaitable[Any]]
    parameters: list[ToolParameter]
    parameters_schema: dict

    def to_listing(self) -> dict:
        """Tool-listing entry: name, description and JSON input schema."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.parameters_schema,
        }

    def bind_arguments(self, arguments: dict | None) -> dict[str, Any]:
        """Map public argument names to handler kwargs.

        Raises ``ConfigurationError`` for a missing/empty required argument or
        a value that cannot be coerced. Empty optional arguments fall back to
        the handler default.
        """
        arguments = arguments or {}
        kwargs: dict[str, Any] = {}
        for p in self.parameters:
            value = arguments.get(p.public_name)
            if _is_blank(value):
                if p.required:
                    raise ConfigurationError(f"'{p.public_name}' is required")
                continue
            kwargs[p.name] = _coerce(p, value)

        known = {p.public_name for p in self.parameters}
        extra = sorted(set(arguments) - known)
        if extra:
            logger.debug(f"Tool '{self.name}' ignoring unknown arguments: {extra}")
        return kwargs


# ---------------------------------------------------------------------------
# ToolRegistry
# ---------------------------------------------------------------------------

class ToolRegistry:
    """Collect and manage tool definitions. Singleton instance at module level."""

    def __init__(self):
        self._tools: dict[str, ToolDefinition] = {}

    # -- Decorator --

    def tool(
        self,
        name: str,
        description: str,
        aliases: dict[str, str] | None = None,
    ) -> Callable:
        """Register an async function as an agent-callable tool.

        ``aliases`` maps Python parameter names to the argument names the
        agent sends (e.g. ``{"page_id": "pageId"}``).
        """

        def decorator(func: Callable[..., Awaitable[Any]]) -> Callable:
            params = _collect_parameters(func, aliases or {})
            defn = ToolDefinition(
                name=name,
                description=description,
                handler=func,
                parameters=params,
                parameters_schema=_generate_parameters_schema(func, params),
            )
            self._tools[name] = defn
            logger.info(f"Registered tool: {name}")
            return func

        return decorator

    # -- Lookups --

    def get_tool(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def list_tools(self) -> list[dict]:
        """All tools in listing format, in registration order."""
        return [t.to_listing() for t in self._tools.values()]

    # -- Tool execution --

    async def execute_tool(
        self,
        name: str,
        ctx: ToolContext,
        arguments: dict | None,
    ) -> Any:
        """Execute a tool by name and return its JSON-serializable result.

        ``ConfigurationError`` (unknown tool, bad arguments, missing
        credentials) propagates untouched; any other handler failure is
        re-raised as ``ToolExecutionError``.
        """
        tool_def = self.get_tool(name)
        if not tool_def:
            raise ConfigurationError(f"Unknown tool '{name}'")

        kwargs = tool_def.bind_arguments(arguments)
        logger.debug(f"Calling tool '{name}' with {sorted(kwargs)}")
        try:
            return await tool_def.handler(ctx, **kwargs)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.exception(f"Tool '{name}' execution failed")
            raise ToolExecutionError(name, e) from e

    async def call_tool(
        self,
        name: str,
        ctx: ToolContext,
        arguments: dict | None,
    ) -> str:
        """Execute a tool and serialize its result as indented JSON text."""
        result = await self.execute_tool(name, ctx, arguments)
        return json.dumps(result, indent=2, ensure_ascii=False)

    def __len__(self) -> int:
        return len(self._tools)

    def __repr__(self) -> str:
        tools = ", ".join(self._tools.keys())
        return f"<ToolRegistry tools=[{tools}]>"


# Singleton registry instance — import this everywhere
registry = ToolRegistry()
