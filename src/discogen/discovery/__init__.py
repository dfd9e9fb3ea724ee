"""Discovery sources -- obtain :class:`~discogen.models.DiscoveryDocument` objects.

Two sources return documents of the same shape, so a client built from
either one exposes the same callable surface:

* :class:`~discogen.discovery.bundled.BundledSource` -- synchronous lookups
  in a local snapshot directory.
* :class:`~discogen.discovery.remote.RemoteSource` -- asynchronous fetches
  from a remote discovery service.

Typical usage::

    from discogen.discovery import BundledSource, RemoteSource

    doc = BundledSource("apis").get_document("oauth2", "v2")
    doc = await RemoteSource().get_document("oauth2", "v2")
"""

from discogen.discovery.bundled import BundledSource
from discogen.discovery.loader import load_document, parse_content, parse_document
from discogen.discovery.remote import DEFAULT_DISCOVERY_URL, RemoteSource

__all__ = [
    "BundledSource",
    "RemoteSource",
    "DEFAULT_DISCOVERY_URL",
    "load_document",
    "parse_content",
    "parse_document",
]
