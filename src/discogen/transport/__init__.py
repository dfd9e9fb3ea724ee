"""Transport layer -- executes the requests assembled by generated methods.

Any object with an ``async execute(request) -> httpx.Response`` method
satisfies :class:`Transport`; :class:`HttpTransport` is the default,
backed by :class:`httpx.AsyncClient`.

Example::

    from discogen.transport import HttpTransport

    transport = HttpTransport(max_retries=0)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import httpx

from discogen.generator.params import ApiRequest
from discogen.transport.http import HttpTransport


@runtime_checkable
class Transport(Protocol):
    """Executes a fully resolved :class:`~discogen.generator.params.ApiRequest`."""

    async def execute(self, request: ApiRequest) -> httpx.Response: ...


__all__ = ["Transport", "HttpTransport"]
