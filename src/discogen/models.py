"""Canonical Pydantic models shared across all discogen modules.

The models fall into two groups:

**Discovery schema models** -- the parsed shape of a discovery document:
    :class:`ParameterLocation`, :class:`ParameterSchema`,
    :class:`MethodSchema`, :class:`ResourceSchema`, and
    :class:`DiscoveryDocument`.  They are frozen: once a document has been
    obtained it is shared read-only by every client generated from it.

**Configuration models** -- supplied by callers or persisted on disk:
    :class:`ClientOptions`, :class:`GlobalConfig`, and
    :class:`DirectoryEntry` (one row of the remote discovery directory).

Discovery documents use camelCase keys (``httpMethod``, ``rootUrl``);
the models expose snake_case attributes and accept either spelling via
``populate_by_name``.  Unknown keys are preserved in ``model_extra`` so
that newer discovery fields never break parsing.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Discovery schema ---


class ParameterLocation(str, enum.Enum):
    """Where a parameter is placed on the outbound request."""

    PATH = "path"
    QUERY = "query"
    BODY = "body"


class ParameterSchema(BaseModel):
    """A single parameter declaration from a method or the document root.

    Example::

        ParameterSchema(type="string", location="path", required=True)
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    type: str = "string"
    location: ParameterLocation = ParameterLocation.QUERY
    required: bool = False
    default: Any = None
    repeated: bool = False
    enum: Optional[list[str]] = None
    description: Optional[str] = None
    pattern: Optional[str] = None
    format: Optional[str] = None


class MethodSchema(BaseModel):
    """A callable API operation.

    ``http_method`` and ``path`` are optional here so that a document with a
    broken method still parses; the generator rejects such a method with a
    :class:`~discogen.exceptions.SchemaError` when the client is built.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    id: Optional[str] = None
    http_method: Optional[str] = Field(default=None, alias="httpMethod")
    path: Optional[str] = None
    flat_path: Optional[str] = Field(default=None, alias="flatPath")
    description: Optional[str] = None
    parameters: dict[str, ParameterSchema] = Field(default_factory=dict)
    parameter_order: list[str] = Field(default_factory=list, alias="parameterOrder")
    request: Optional[dict[str, Any]] = None
    response: Optional[dict[str, Any]] = None
    scopes: list[str] = Field(default_factory=list)


class ResourceSchema(BaseModel):
    """A named grouping of methods and nested resources (no depth limit)."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    methods: dict[str, MethodSchema] = Field(default_factory=dict)
    resources: dict[str, ResourceSchema] = Field(default_factory=dict)


class DiscoveryDocument(ResourceSchema):
    """Root of a discovery document.

    The document itself behaves as a resource: top-level ``methods`` (such
    as ``oauth2.tokeninfo``) sit beside top-level ``resources``.

    See Also:
        :func:`~discogen.discovery.loader.parse_document`: Build one from a
        raw dict.
    """

    name: str
    version: str
    title: Optional[str] = None
    description: Optional[str] = None
    root_url: Optional[str] = Field(default=None, alias="rootUrl")
    service_path: Optional[str] = Field(default=None, alias="servicePath")
    base_path: Optional[str] = Field(default=None, alias="basePath")
    base_url: Optional[str] = Field(default=None, alias="baseUrl")
    parameters: dict[str, ParameterSchema] = Field(default_factory=dict)
    schemas: dict[str, Any] = Field(default_factory=dict)

    @property
    def api_base(self) -> str:
        """URL prefix that relative method paths are appended to."""
        if self.root_url:
            return join_url(self.root_url, self.service_path or "")
        if self.base_url:
            return self.base_url
        return self.base_path or ""


def join_url(base: str, path: str) -> str:
    """Join *base* and *path* with exactly one slash between them."""
    if not path:
        return base
    if not base:
        return path
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


# --- Configuration ---


class ClientOptions(BaseModel):
    """Options fixed on a generated client at construction time.

    ``params`` becomes the client's default-parameter map, consulted by
    every method in the tree.  ``root_url`` replaces the document's
    ``rootUrl`` (useful for emulators and regional endpoints).

    Example::

        ClientOptions(params={"myParam": "123"}, timeout=10)
    """

    model_config = ConfigDict(frozen=True)

    params: dict[str, Any] = Field(default_factory=dict)
    root_url: Optional[str] = Field(
        default=None, description="Override the document's rootUrl"
    )
    headers: dict[str, str] = Field(
        default_factory=dict, description="Extra headers sent with every request"
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    max_retries: int = Field(default=3, description="Max retry attempts")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class GlobalConfig(BaseModel):
    """User-wide defaults persisted at ``~/.config/discogen/config.json``.

    Loaded by :func:`~discogen.config.load_global_config`; environment
    variables override file values (see
    :func:`~discogen.config.resolve_global_config`).
    """

    discovery_url: str = Field(
        default="https://www.googleapis.com/discovery/v1",
        description="Base URL of the remote discovery service",
    )
    bundle_dir: Optional[str] = Field(
        default=None, description="Directory holding bundled discovery documents"
    )
    timeout: float = Field(default=30.0)
    max_retries: int = Field(default=3)
    verify_ssl: bool = Field(default=True)


class DirectoryEntry(BaseModel):
    """One API listed by the remote discovery directory."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    version: str
    title: Optional[str] = None
    description: Optional[str] = None
    discovery_rest_url: Optional[str] = Field(default=None, alias="discoveryRestUrl")
    preferred: bool = False
