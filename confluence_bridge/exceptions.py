"""Exceptions shared across the bridge."""
from __future__ import annotations

from typing import Any, Optional


class ConfigurationError(ValueError):
    """Missing or invalid configuration/arguments. Never reaches the network."""


class APIError(Exception):
    """A failed call to the Confluence REST API."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response

    @property
    def detail(self) -> Any:
        """Backend-provided error body if there is one, else the message."""
        if self.response not in (None, ""):
            return self.response
        return self.message


class ToolExecutionError(RuntimeError):
    """A tool handler failed unexpectedly."""

    def __init__(self, tool_name: str, cause: BaseException):
        super().__init__(f"Error executing '{tool_name}': {cause}")
        self.tool_name = tool_name
        self.cause = cause
