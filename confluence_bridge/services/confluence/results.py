"""Tagged result type for backend-facing operations.

Operations that talk to Confluence return ``Ok`` or ``Err`` instead of
raising, so callers always get a well-formed JSON payload.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Ok:
    value: Any

    @property
    def is_ok(self) -> bool:
        return True

    def to_payload(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failure carrying the backend's error body, or a message."""

    error: Any

    @property
    def is_ok(self) -> bool:
        return False

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.error}


Result = Union[Ok, Err]
