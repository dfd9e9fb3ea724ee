"""discogen -- generate live API clients at runtime from discovery documents.

A discovery document describes an API's resources, methods, and
parameters.  discogen interprets it and returns a client object whose
attributes mirror the resource tree and whose leaves are callable
methods::

    import discogen

    datastore = discogen.create("datastore", "v1beta3", params={"myParam": "123"})
    response = await datastore.projects.lookup({"projectId": "p1"})

Modules:
    factory: :class:`DiscoGen` factory and module-level ``create``/``load``.
    generator: Recursive client builder, method descriptors, parameter
        resolution.
    discovery: Bundled and remote discovery document sources.
    transport: httpx-based request execution.
    models: Pydantic models shared across the package.
    config: XDG-aware global configuration and option merging.
    exceptions: Exception hierarchy.
"""

from discogen.exceptions import (
    DiscogenError,
    MissingRequiredParameterError,
    SchemaError,
    TransportError,
    UnknownApiError,
)
from discogen.factory import DiscoGen, create, load
from discogen.models import ClientOptions, DiscoveryDocument

__version__ = "0.1.0"

__all__ = [
    "ClientOptions",
    "DiscoGen",
    "DiscogenError",
    "DiscoveryDocument",
    "MissingRequiredParameterError",
    "SchemaError",
    "TransportError",
    "UnknownApiError",
    "create",
    "load",
]
