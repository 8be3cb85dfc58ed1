"""Credential resolution for the Confluence REST API."""
from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Literal

from confluence_bridge.config import Settings
from confluence_bridge.exceptions import ConfigurationError

MISSING_CREDENTIALS = (
    "Confluence authentication is not configured: set CONFLUENCE_PERSONAL_TOKEN, "
    "or both CONFLUENCE_API_MAIL and CONFLUENCE_API_KEY."
)


@dataclass(frozen=True)
class Credential:
    scheme: Literal["Bearer", "Basic"]
    value: str

    @property
    def header(self) -> str:
        """Value for the ``Authorization`` header."""
        return f"{self.scheme} {self.value}"

    def __repr__(self) -> str:
        return f"Credential(scheme={self.scheme!r}, value='***')"


def bearer(token: str) -> Credential:
    return Credential(scheme="Bearer", value=token)


def basic(login: str, secret: str) -> Credential:
    encoded = base64.b64encode(f"{login}:{secret}".encode("utf-8")).decode("ascii")
    return Credential(scheme="Basic", value=encoded)


def resolve_credential(settings: Settings) -> Credential:
    """Pick exactly one auth scheme from ``settings``.

    A personal token wins over mail + API key; partial Basic credentials are
    never combined with anything else.

    Raises:
        ConfigurationError: neither configuration is complete.
    """
    if settings.confluence_personal_token:
        return bearer(settings.confluence_personal_token)
    if settings.confluence_api_mail and settings.confluence_api_key:
        return basic(settings.confluence_api_mail, settings.confluence_api_key)
    raise ConfigurationError(MISSING_CREDENTIALS)
