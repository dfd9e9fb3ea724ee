"""Client factory -- the entry point that turns an API name into a client.

:class:`DiscoGen` obtains a discovery document from a bundled snapshot
store (synchronous) or a remote discovery service (asynchronous) and
hands it to :func:`~discogen.generator.resource_tree.build_client`.  Both
paths produce clients with the same shape and behaviour.

Example::

    gen = DiscoGen(bundled=BundledSource("apis"))
    datastore = gen.create("datastore", "v1beta3", params={"myParam": "123"})
    datastore = gen.datastore("v1beta3", params={"myParam": "123"})  # same
    oauth2 = await gen.load("oauth2", "v2")                          # remote

Factory-level options apply to every client the factory builds; per-call
options are layered on top (see :func:`~discogen.config.merge_options`).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Union

import httpx

from discogen.config import (
    OptionsLike,
    coerce_options,
    merge_options,
    options_from_config,
    resolve_global_config,
)
from discogen.discovery import BundledSource, RemoteSource, load_document, parse_document
from discogen.exceptions import UnknownApiError
from discogen.generator import Client, build_client
from discogen.models import ClientOptions, DirectoryEntry, DiscoveryDocument, GlobalConfig
from discogen.transport import HttpTransport, Transport

logger = logging.getLogger(__name__)


class DiscoGen:
    """Factory for generated API clients.

    Args:
        options: Options applied to every client built by this factory.
        bundled: Snapshot store for :meth:`create`.  Defaults to
            ``GlobalConfig.bundle_dir`` when that is set.
        remote: Discovery service for :meth:`load`.  Defaults to
            ``GlobalConfig.discovery_url``.
        transport: Transport shared by all generated clients.  Defaults to
            an :class:`~discogen.transport.HttpTransport` per client, built
            from the client's options.
        http_transport: Optional :class:`httpx.AsyncBaseTransport` handed to
            the default transports (used by tests to mock the network).
        config: Global config; resolved from disk and environment when
            omitted.
    """

    def __init__(
        self,
        options: OptionsLike = None,
        bundled: Optional[BundledSource] = None,
        remote: Optional[RemoteSource] = None,
        transport: Optional[Transport] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        config: Optional[GlobalConfig] = None,
    ) -> None:
        config = config or resolve_global_config()
        self._options = merge_options(options_from_config(config), coerce_options(options))
        if bundled is None and config.bundle_dir:
            bundled = BundledSource(config.bundle_dir)
        self._bundled = bundled
        self._remote = remote or RemoteSource(
            config.discovery_url,
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
            transport=http_transport,
        )
        self._transport = transport
        self._http_transport = http_transport
        self._discovered: dict[str, DirectoryEntry] = {}

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def bundled(self) -> Optional[BundledSource]:
        return self._bundled

    @property
    def remote(self) -> RemoteSource:
        return self._remote

    # ------------------------------------------------------------------ #
    # Client construction
    # ------------------------------------------------------------------ #

    def from_document(
        self,
        document: Union[DiscoveryDocument, dict[str, Any]],
        options: OptionsLike = None,
        **overrides: Any,
    ) -> Client:
        """Build a client from an already obtained document (or raw dict).

        Raises:
            SchemaError: If the document or one of its methods is malformed.
        """
        if not isinstance(document, DiscoveryDocument):
            document = parse_document(document)
        client_options = merge_options(self._options, coerce_options(options, **overrides))
        transport = self._transport or HttpTransport.from_options(
            client_options, transport=self._http_transport
        )
        return build_client(document, transport, client_options)

    def create(
        self,
        name: str,
        version: str,
        options: OptionsLike = None,
        **overrides: Any,
    ) -> Client:
        """Build a client from the bundled snapshot of *name*/*version*.

        Keyword *overrides* are client options, e.g. ``params={...}``.

        Raises:
            UnknownApiError: If no snapshot exists (or no store is configured).
            SchemaError: If the snapshot is malformed.
        """
        if self._bundled is None:
            raise UnknownApiError(
                name, version, f"Unknown API: {name} {version} (no bundled documents configured)"
            )
        document = self._bundled.get_document(name, version)
        return self.from_document(document, options, **overrides)

    async def load(
        self,
        name: str,
        version: str,
        options: OptionsLike = None,
        **overrides: Any,
    ) -> Client:
        """Build a client from the remote discovery document of *name*/*version*.

        Raises:
            UnknownApiError: If the discovery service does not know the API.
            DiscoveryFetchError: On any other fetch failure (not retried).
            SchemaError: If the document is malformed.
        """
        document = await self._remote.get_document(name, version)
        logger.debug("Loaded remote discovery document %s %s", name, version)
        return self.from_document(document, options, **overrides)

    async def load_url(
        self,
        location: str,
        options: OptionsLike = None,
        **overrides: Any,
    ) -> Client:
        """Build a client from a discovery document at a URL or local path."""
        if location.startswith(("http://", "https://")):
            document = await self._remote.get_document_from_url(location)
        else:
            document = load_document(location)
        return self.from_document(document, options, **overrides)

    # ------------------------------------------------------------------ #
    # Discovery directory
    # ------------------------------------------------------------------ #

    async def discover(self, preferred_only: bool = True) -> list[DirectoryEntry]:
        """Fetch the remote directory and remember the APIs it lists.

        After discovery, attribute access for an API that is not bundled
        (``gen.plus``) returns an *async* factory that loads it remotely.
        """
        entries = await self._remote.list_apis(preferred_only=preferred_only)
        for entry in entries:
            self._discovered[entry.name] = entry
        logger.debug("Discovered %d APIs", len(entries))
        return entries

    def apis(self) -> list[str]:
        """Return the names of all bundled and discovered APIs, sorted."""
        names = set(self._discovered)
        if self._bundled is not None:
            names.update(api for api, _ in self._bundled.available())
        return sorted(names)

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if name.startswith("_"):
            raise AttributeError(name)

        bundled = self.__dict__.get("_bundled")
        if bundled is not None and bundled.has_api(name):

            def _create(version: str, options: OptionsLike = None, **overrides: Any) -> Client:
                return self.create(name, version, options, **overrides)

            return _create

        entry = self.__dict__.get("_discovered", {}).get(name)
        if entry is not None:

            async def _load(
                version: Optional[str] = None,
                options: OptionsLike = None,
                **overrides: Any,
            ) -> Client:
                return await self.load(name, version or entry.version, options, **overrides)

            return _load

        raise AttributeError(f"{type(self).__name__} has no API named {name!r}")


# ---------------------------------------------------------------------- #
# Module-level convenience
# ---------------------------------------------------------------------- #

_default: Optional[DiscoGen] = None


def get_default() -> DiscoGen:
    """Return the process-wide default factory, creating it on first use."""
    global _default
    if _default is None:
        _default = DiscoGen()
    return _default


def set_default(factory: Optional[DiscoGen]) -> None:
    """Replace (or with ``None``, reset) the process-wide default factory."""
    global _default
    _default = factory


def create(name: str, version: str, options: OptionsLike = None, **overrides: Any) -> Client:
    """Build a client for a bundled API using the default factory."""
    return get_default().create(name, version, options, **overrides)


async def load(name: str, version: str, options: OptionsLike = None, **overrides: Any) -> Client:
    """Build a client for a remote API using the default factory."""
    return await get_default().load(name, version, options, **overrides)
