"""Resolve invocation parameters and assemble the outbound request.

Every call of a generated method goes through two steps:

1. :func:`resolve_params` merges the call-site values over the client's
   defaults (``ClientOptions.params``) and enforces required parameters.
   ``None`` means "not supplied" in both layers.

   A schema ``default`` states what the server assumes when a parameter
   is omitted, so it is never sent on its own.  It only fills a
   *required* parameter that neither layer supplied; the method-level
   declaration wins over the document-level one.

2. :func:`build_request` partitions the merged parameters by location:
   path-template placeholders are substituted, the ``resource`` /
   ``requestBody`` value and any ``location: body`` parameters form the
   body, and everything else -- including parameters unknown to the
   schema -- becomes the query string.

No network access happens here; :func:`resolve` runs both steps and
returns an immutable :class:`ApiRequest` for the transport.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from urllib.parse import quote

import httpx

from discogen.exceptions import MissingRequiredParameterError
from discogen.models import (
    ClientOptions,
    DiscoveryDocument,
    MethodSchema,
    ParameterLocation,
    ParameterSchema,
    join_url,
)

# Call-site keys that carry the request body.
BODY_KEYS = ("resource", "requestBody")

# ``{name}`` (simple expansion) and ``{+name}`` (reserved expansion).
_TEMPLATE_RE = re.compile(r"\{(\+?)([^{}]+)\}")

_RESERVED_SAFE = ":/?#[]@!$&'()*+,;="


@dataclass(frozen=True)
class ApiRequest:
    """A fully resolved request, ready for the transport.

    Attributes:
        method: Upper-case HTTP verb.
        url: Absolute URL without the query string.
        query: Serialised query string (keys sorted, no leading ``?``).
        query_params: The mapping ``query`` was serialised from.
        body: JSON-serialisable request body, or ``None``.
        headers: Extra request headers.
    """

    method: str
    url: str
    query: str = ""
    query_params: Mapping[str, Any] = field(default_factory=dict)
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def full_url(self) -> str:
        return f"{self.url}?{self.query}" if self.query else self.url


def template_parameters(template: str) -> list[str]:
    """Return the parameter names referenced by a path template, in order."""
    return [match.group(2) for match in _TEMPLATE_RE.finditer(template)]


def required_parameters(method: MethodSchema) -> list[str]:
    """Return every parameter that must have a value for *method*.

    ``parameterOrder`` comes first, then other parameters flagged
    ``required``, then any name the path template references.
    """
    names: list[str] = []
    for name in method.parameter_order:
        param = method.parameters.get(name)
        if param is not None and param.required and name not in names:
            names.append(name)
    for name, param in method.parameters.items():
        if param.required and name not in names:
            names.append(name)
    for name in template_parameters(method.path or ""):
        if name not in names:
            names.append(name)
    return names


def schema_defaults(
    method: MethodSchema,
    global_parameters: Optional[Mapping[str, ParameterSchema]] = None,
) -> dict[str, Any]:
    """Collect declared ``default`` values; method-level wins over global."""
    defaults: dict[str, Any] = {}
    for layer in (global_parameters or {}, method.parameters):
        for name, param in layer.items():
            if param.default is not None:
                defaults[name] = param.default
    return defaults


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def resolve_params(
    defaults: Mapping[str, Any],
    call_params: Mapping[str, Any],
    method: MethodSchema,
    global_parameters: Optional[Mapping[str, ParameterSchema]] = None,
) -> dict[str, Any]:
    """Merge parameter layers and check required parameters.

    Args:
        defaults: The client's default-parameter map.
        call_params: Parameters supplied at the call site.
        method: Schema of the method being invoked.
        global_parameters: The document-level ``parameters`` block.

    Returns:
        A new dict of parameter name to value.  Optional parameters with a
        schema ``default`` are left out.

    Raises:
        MissingRequiredParameterError: If a required parameter is ``None``
            or an empty string after merging and has no schema default.

    Example::

        >>> resolve_params({"myParam": "123"}, {"myParam": "456"}, method)
        {'myParam': '456'}
    """
    resolved = {k: v for k, v in defaults.items() if v is not None}
    resolved.update({k: v for k, v in call_params.items() if v is not None})

    declared = schema_defaults(method, global_parameters)
    for name in required_parameters(method):
        if not _is_missing(resolved.get(name)):
            continue
        if _is_missing(declared.get(name)):
            raise MissingRequiredParameterError(name, method.id)
        resolved[name] = declared[name]
    return resolved


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_stringify(item) for item in value)
    return str(value)


def expand_path(
    template: str,
    params: Mapping[str, Any],
    method_id: Optional[str] = None,
) -> tuple[str, list[str]]:
    """Substitute ``{name}`` and ``{+name}`` placeholders in *template*.

    ``{name}`` percent-encodes everything except unreserved characters;
    ``{+name}`` also keeps reserved characters such as ``/``.

    Returns:
        The expanded path and the parameter names it consumed.

    Raises:
        MissingRequiredParameterError: If a placeholder has no value.
    """
    used: list[str] = []

    def _substitute(match: re.Match[str]) -> str:
        reserved, name = match.group(1) == "+", match.group(2)
        value = params.get(name)
        if _is_missing(value):
            raise MissingRequiredParameterError(name, method_id)
        used.append(name)
        return quote(_stringify(value), safe=_RESERVED_SAFE if reserved else "")

    return _TEMPLATE_RE.sub(_substitute, template), used


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return [_query_value(item) for item in value]
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"), sort_keys=True)
    if isinstance(value, (str, int, float)):
        return value
    return str(value)


def request_url(
    document: DiscoveryDocument,
    path: str,
    root_url: Optional[str] = None,
) -> str:
    """Build the absolute URL of an expanded method *path*.

    A path starting with ``/`` is relative to the root URL; any other path
    is relative to root URL plus service path.  *root_url* replaces the
    document's ``rootUrl`` when given.
    """
    root = root_url or document.root_url
    if path.startswith("/") and root:
        return join_url(root, path)
    base = join_url(root, document.service_path or "") if root else document.api_base
    return join_url(base, path)


def build_request(
    method: MethodSchema,
    document: DiscoveryDocument,
    params: Mapping[str, Any],
    options: Optional[ClientOptions] = None,
) -> ApiRequest:
    """Partition resolved *params* by location and assemble an :class:`ApiRequest`."""
    path, used = expand_path(method.path or "", params, method.id)
    remaining = {k: v for k, v in params.items() if k not in used and v is not None}

    body: Any = None
    for key in BODY_KEYS:
        if key in remaining and key not in method.parameters:
            body = remaining.pop(key)

    body_fields = {
        name: remaining.pop(name)
        for name, param in method.parameters.items()
        if param.location == ParameterLocation.BODY and name in remaining
    }
    if body_fields:
        if body is None:
            body = body_fields
        elif isinstance(body, dict):
            body = {**body_fields, **body}
        else:
            remaining.update(body_fields)

    query_params = {k: _query_value(v) for k, v in sorted(remaining.items())}
    query = str(httpx.QueryParams(query_params))

    root_url = options.root_url if options else None
    headers = dict(options.headers) if options else {}

    return ApiRequest(
        method=(method.http_method or "GET").upper(),
        url=request_url(document, path, root_url),
        query=query,
        query_params=query_params,
        body=body,
        headers=headers,
    )


def resolve(
    defaults: Mapping[str, Any],
    call_params: Mapping[str, Any],
    method: MethodSchema,
    document: DiscoveryDocument,
    options: Optional[ClientOptions] = None,
) -> ApiRequest:
    """Merge, validate, and partition parameters for one invocation."""
    params = resolve_params(defaults, call_params, method, document.parameters)
    return build_request(method, document, params, options)
