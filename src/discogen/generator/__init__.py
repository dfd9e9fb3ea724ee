"""Client generator -- turn a discovery document into a live object graph.

Typical usage::

    from discogen.generator import build_client
    from discogen.transport import HttpTransport

    client = build_client(document, HttpTransport())
    response = await client.userinfo.v2.me.get()

Sub-modules:

* :mod:`~discogen.generator.resource_tree` -- Recursive builder producing
  :class:`~discogen.generator.resource_tree.Resource` containers and the
  root :class:`~discogen.generator.resource_tree.Client`.
* :mod:`~discogen.generator.method` -- Builds each callable
  :class:`~discogen.generator.method.ApiMethod` and normalises its three
  calling conventions.
* :mod:`~discogen.generator.params` -- Merges default and call-site
  parameters, checks required ones, and assembles the outbound request.
"""

from discogen.generator.method import ApiMethod, build_method
from discogen.generator.params import ApiRequest, build_request, resolve, resolve_params
from discogen.generator.resource_tree import Client, Resource, build_client, build_resource

__all__ = [
    "ApiMethod",
    "ApiRequest",
    "Client",
    "Resource",
    "build_client",
    "build_method",
    "build_request",
    "build_resource",
    "resolve",
    "resolve_params",
]
