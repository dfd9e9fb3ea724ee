"""Asynchronous HTTP transport for generated clients.

:class:`HttpTransport` executes resolved
:class:`~discogen.generator.params.ApiRequest` objects with
:class:`httpx.AsyncClient` and layers on:

- **Default headers** -- ``Accept: application/json`` plus the request's
  own headers.
- **Retry with backoff** -- retries on 5xx and network errors with
  exponential delay (1 s, 2 s, 4 s, ...), up to ``max_retries`` times.
- **Error mapping** -- HTTP error statuses become typed
  :class:`~discogen.exceptions.TransportError` subclasses.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import httpx

from discogen.exceptions import AuthError, ConnectionError_, NotFoundError, ServerError
from discogen.generator.params import ApiRequest
from discogen.models import ClientOptions

logger = logging.getLogger(__name__)


class HttpTransport:
    """Execute API requests over HTTP.

    A fresh :class:`httpx.AsyncClient` is opened per request so the
    transport can be shared by clients running on different event loops.

    Args:
        timeout: Request timeout in seconds.
        max_retries: Retry attempts for 5xx responses and network errors.
        verify_ssl: Verify SSL certificates.
        headers: Headers sent with every request.
        transport: Optional :class:`httpx.AsyncBaseTransport`; tests pass an
            :class:`httpx.MockTransport` here.

    Example::

        transport = HttpTransport(timeout=10, max_retries=0)
        response = await transport.execute(request)
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_retries: int = 3,
        verify_ssl: bool = True,
        headers: Optional[dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._max_retries = max_retries
        self._verify_ssl = verify_ssl
        self._headers = dict(headers or {})
        self._transport = transport

    @classmethod
    def from_options(
        cls,
        options: ClientOptions,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> HttpTransport:
        """Create a transport using the request settings of *options*."""
        return cls(
            timeout=options.timeout,
            max_retries=options.max_retries,
            verify_ssl=options.verify_ssl,
            transport=transport,
        )

    async def execute(self, request: ApiRequest) -> httpx.Response:
        """Send *request* and return the response.

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ServerError: On any other status >= 400 (5xx after all retries).
            ConnectionError_: On network / timeout errors after all retries.
        """
        headers: dict[str, str] = {"Accept": "application/json"}
        headers.update(self._headers)
        headers.update(request.headers)

        async with httpx.AsyncClient(
            timeout=self._timeout,
            verify=self._verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            response = await self._execute_with_retry(client, request, headers)

        self._map_response_error(response)
        return response

    async def _execute_with_retry(
        self,
        client: httpx.AsyncClient,
        request: ApiRequest,
        headers: dict[str, str],
    ) -> httpx.Response:
        """Execute the HTTP request with exponential-backoff retry."""
        kwargs: dict[str, Any] = {
            "method": request.method,
            "url": request.full_url,
            "headers": headers,
        }
        if request.body is not None:
            if isinstance(request.body, (str, bytes)):
                kwargs["content"] = request.body
            else:
                kwargs["json"] = request.body

        for attempt in range(self._max_retries + 1):
            try:
                response = await client.request(**kwargs)
            except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < self._max_retries:
                    delay = 2 ** attempt
                    logger.warning(
                        "Connection error: %s, retrying in %ss (attempt %d/%d)",
                        exc, delay, attempt + 1, self._max_retries,
                    )
                    await asyncio.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection failed after {self._max_retries + 1} attempts: {exc}"
                ) from exc

            if response.status_code >= 500 and attempt < self._max_retries:
                delay = 2 ** attempt
                logger.warning(
                    "Server error %d, retrying in %ss (attempt %d/%d)",
                    response.status_code, delay, attempt + 1, self._max_retries,
                )
                await asyncio.sleep(delay)
                continue

            return response

        raise ServerError("Request failed after all retries")  # pragma: no cover

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        try:
            detail = response.json()
            if isinstance(detail, dict):
                error = detail.get("error")
                if isinstance(error, dict):
                    msg = error.get("message") or ""
                else:
                    msg = error or detail.get("message") or detail.get("detail") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200] if response.text else ""

        prefix = f"HTTP {status}"
        full_msg = f"{prefix}: {msg}" if msg else prefix

        if status in (401, 403):
            raise AuthError(full_msg, status_code=status, response=response)
        if status == 404:
            raise NotFoundError(full_msg, status_code=status, response=response)
        raise ServerError(full_msg, status_code=status, response=response)
