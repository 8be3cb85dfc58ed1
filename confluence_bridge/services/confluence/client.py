"""Confluence REST API client — async httpx.

Credentials and the instance URL come from an explicit ``Settings`` object;
the credential is resolved once, when the client is built.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from confluence_bridge.config import Settings
from confluence_bridge.exceptions import APIError, ConfigurationError
from confluence_bridge.services.confluence.auth import Credential, resolve_credential

logger = logging.getLogger(__name__)

SEARCH_EXPAND = "version"
PAGE_EXPAND = "body.storage,version,space"


class ConfluenceClient:
    """Async client for the three content endpoints the bridge uses."""

    def __init__(
        self,
        settings: Settings,
        credential: Optional[Credential] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not settings.confluence_url:
            raise ConfigurationError(
                "Confluence URL missing. Set CONFLUENCE_URL."
            )
        self.settings = settings
        self.url = settings.confluence_url
        self.base_url = settings.api_base_url
        self._credential = credential or resolve_credential(settings)

        # Caller must close via ``aclose()``
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=settings.request_timeout,
            headers=self._default_headers(),
            transport=transport,
        )

    # -- helpers --

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": self._credential.header,
        }

    @staticmethod
    def _error_body(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            resp = await self._http.request(method, path, params=params, json=json)
            resp.raise_for_status()
            try:
                return resp.json()
            except ValueError:
                return {"text": resp.text}
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning(f"Confluence {method} {path} failed with HTTP {status}")
            raise APIError(
                f"HTTP {status}: {exc.response.text[:500]}",
                status_code=status,
                response=self._error_body(exc.response),
            ) from exc
        except httpx.RequestError as exc:
            logger.warning(f"Confluence {method} {path} failed: {exc}")
            raise APIError(f"Request failed: {exc}") from exc

    # -- endpoints --

    async def search(self, cql: str, limit: int) -> Dict[str, Any]:
        """Run a CQL query (``GET /content/search``)."""
        return await self._request(
            "GET",
            "/content/search",
            params={"cql": cql, "limit": limit, "expand": SEARCH_EXPAND},
        )

    async def get_content(self, page_id: str) -> Dict[str, Any]:
        """Fetch one page with its storage body, version and space."""
        return await self._request(
            "GET", f"/content/{page_id}", params={"expand": PAGE_EXPAND}
        )

    async def update_content(
        self, page_id: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Write a new page version (``PUT /content/{id}``)."""
        return await self._request("PUT", f"/content/{page_id}", json=payload)

    async def aclose(self) -> None:
        await self._http.aclose()

    # context-manager support
    async def __aenter__(self) -> "ConfluenceClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
