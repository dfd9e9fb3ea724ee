"""Exception hierarchy for discogen.

All exceptions inherit from :class:`DiscogenError`.  Construction-time
errors (:class:`SchemaError`, :class:`UnknownApiError`) abort client
creation; invocation-time errors (:class:`MissingRequiredParameterError`
and the :class:`TransportError` family) are delivered through whichever
completion channel the caller picked -- the callback's error argument or
the awaited coroutine.

Subclass hierarchy::

    DiscogenError
    +-- SchemaError
    +-- UnknownApiError
    +-- MissingRequiredParameterError
    +-- ConfigError
    +-- TransportError
        +-- DiscoveryFetchError
        +-- AuthError           (HTTP 401 / 403)
        +-- NotFoundError       (HTTP 404)
        +-- ServerError         (other HTTP >= 400)
        +-- ConnectionError_    (timeouts, DNS, refused connections)
"""

from __future__ import annotations

from typing import Any, Optional


class DiscogenError(Exception):
    """Base exception for all discogen errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SchemaError(DiscogenError):
    """Raised when a discovery document or one of its fragments is malformed."""

    def __init__(self, message: str, method_id: Optional[str] = None):
        super().__init__(message)
        self.method_id = method_id


class UnknownApiError(DiscogenError):
    """Raised when no discovery document exists for an API name/version pair."""

    def __init__(self, name: str, version: str, message: Optional[str] = None):
        super().__init__(message or f"Unknown API: {name} {version}")
        self.name = name
        self.version = version


class MissingRequiredParameterError(DiscogenError):
    """Raised when a required parameter has no value after merging defaults.

    Attributes:
        parameter: Name of the missing parameter.
        method_id: Discovery id of the method being invoked.
    """

    def __init__(self, parameter: str, method_id: Optional[str] = None):
        where = f" for {method_id}" if method_id else ""
        super().__init__(f"Missing required parameter: {parameter}{where}")
        self.parameter = parameter
        self.method_id = method_id


class ConfigError(DiscogenError):
    """Raised for configuration problems (invalid JSON, bad values)."""


class TransportError(DiscogenError):
    """Raised by the transport layer; passed through to callers unchanged.

    Attributes:
        status_code: HTTP status of the failed response, if one was received.
        response: The :class:`httpx.Response`, if one was received.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class DiscoveryFetchError(TransportError):
    """Raised when a remote discovery document cannot be fetched or read."""


class AuthError(TransportError):
    """Raised when the API returns HTTP 401 or 403."""


class NotFoundError(TransportError):
    """Raised when the API returns HTTP 404."""


class ServerError(TransportError):
    """Raised for HTTP 5xx responses and any other unmapped HTTP error status."""


class ConnectionError_(TransportError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """
