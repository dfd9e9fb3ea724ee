"""Fetch discovery documents from a remote discovery service.

:class:`RemoteSource` talks to a Google-style discovery service::

    GET {discovery_url}/apis                         -> directory listing
    GET {discovery_url}/apis/{name}/{version}/rest   -> one document

Every call is asynchronous and made with :class:`httpx.AsyncClient`.
Failures are surfaced immediately; retrying is left to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from discogen.discovery.loader import parse_content, parse_document
from discogen.exceptions import DiscoveryFetchError, SchemaError, UnknownApiError
from discogen.models import DirectoryEntry, DiscoveryDocument

logger = logging.getLogger(__name__)

DEFAULT_DISCOVERY_URL = "https://www.googleapis.com/discovery/v1"


class RemoteSource:
    """Discovery source backed by a remote discovery service.

    Args:
        discovery_url: Base URL of the discovery service.
        timeout: Request timeout in seconds.
        verify_ssl: Verify SSL certificates.
        transport: Optional :class:`httpx.AsyncBaseTransport`; tests pass an
            :class:`httpx.MockTransport` here.

    Example::

        source = RemoteSource()
        doc = await source.get_document("oauth2", "v2")
    """

    def __init__(
        self,
        discovery_url: str = DEFAULT_DISCOVERY_URL,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._discovery_url = discovery_url.rstrip("/")
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._transport = transport

    @property
    def discovery_url(self) -> str:
        return self._discovery_url

    def document_url(self, name: str, version: str) -> str:
        """Return the URL of the discovery document for *name*/*version*."""
        return f"{self._discovery_url}/apis/{name}/{version}/rest"

    async def get_document(self, name: str, version: str) -> DiscoveryDocument:
        """Fetch and parse the document for *name*/*version*.

        Raises:
            UnknownApiError: If the service answers 404.
            DiscoveryFetchError: On any other HTTP or network failure.
            SchemaError: If the payload is not a valid discovery document.
        """
        url = self.document_url(name, version)
        try:
            raw = await self._fetch(url)
        except DiscoveryFetchError as exc:
            if exc.status_code == 404:
                raise UnknownApiError(name, version) from exc
            raise
        return parse_document(raw)

    async def get_document_from_url(self, url: str) -> DiscoveryDocument:
        """Fetch and parse a discovery document from an arbitrary URL."""
        return parse_document(await self._fetch(url))

    async def list_apis(self, preferred_only: bool = False) -> list[DirectoryEntry]:
        """Fetch the directory of APIs known to the discovery service.

        Args:
            preferred_only: Only return the preferred version of each API.
        """
        url = f"{self._discovery_url}/apis"
        if preferred_only:
            url = f"{url}?preferred=true"
        raw = await self._fetch(url)
        items = raw.get("items") or []
        try:
            entries = [DirectoryEntry.model_validate(item) for item in items]
        except ValidationError as exc:
            raise SchemaError(f"Malformed discovery directory at {url}: {exc}") from exc
        if preferred_only:
            entries = [entry for entry in entries if entry.preferred]
        return entries

    async def _fetch(self, url: str) -> dict[str, Any]:
        logger.debug("Fetching discovery document %s", url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                verify=self._verify_ssl,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise DiscoveryFetchError(
                f"HTTP {status} fetching discovery document from {url}",
                status_code=status,
                response=exc.response,
            ) from exc
        except httpx.RequestError as exc:
            raise DiscoveryFetchError(
                f"Failed to fetch discovery document from {url}: {exc}"
            ) from exc

        content_type = response.headers.get("content-type", "")
        hint = "yaml" if "yaml" in content_type or "yml" in content_type else ""
        return parse_content(response.text, hint=hint)
