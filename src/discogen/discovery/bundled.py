"""In-process store of bundled discovery document snapshots.

Snapshots live in a directory laid out as ``<root>/<name>/<version>.json``
(``.yaml`` and ``.yml`` are accepted too), e.g.::

    apis/
      datastore/v1beta3.json
      oauth2/v2.json

Lookups are synchronous.  Each document is parsed once per source and then
shared read-only by every client built from it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from discogen.discovery.loader import load_document
from discogen.exceptions import UnknownApiError
from discogen.models import DiscoveryDocument

logger = logging.getLogger(__name__)

_SUFFIXES = (".json", ".yaml", ".yml")


class BundledSource:
    """Discovery source backed by a local snapshot directory.

    Args:
        directory: Root of the snapshot tree.

    Example::

        source = BundledSource("/opt/discovery")
        doc = source.get_document("oauth2", "v2")
    """

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)
        self._documents: dict[tuple[str, str], DiscoveryDocument] = {}

    @property
    def directory(self) -> Path:
        return self._directory

    def get_document(self, name: str, version: str) -> DiscoveryDocument:
        """Return the bundled document for *name*/*version*.

        Raises:
            UnknownApiError: If no snapshot exists for the pair.
            SchemaError: If the snapshot exists but is malformed.
        """
        key = (name, version)
        cached = self._documents.get(key)
        if cached is not None:
            return cached

        path = self._find(name, version)
        if path is None:
            raise UnknownApiError(name, version)

        logger.debug("Loading bundled discovery document %s", path)
        document = load_document(path)
        self._documents[key] = document
        return document

    def has_api(self, name: str, version: Optional[str] = None) -> bool:
        """Return True if a snapshot exists for *name* (and *version*, if given)."""
        if version is not None:
            return self._find(name, version) is not None
        return any(api == name for api, _ in self.available())

    def versions(self, name: str) -> list[str]:
        """Return the bundled versions of *name*, sorted."""
        return [ver for api, ver in self.available() if api == name]

    def available(self) -> list[tuple[str, str]]:
        """List every bundled ``(name, version)`` pair, sorted."""
        if not self._directory.is_dir():
            return []
        pairs = {
            (api_dir.name, path.stem)
            for api_dir in self._directory.iterdir()
            if api_dir.is_dir()
            for path in api_dir.iterdir()
            if path.is_file() and path.suffix.lower() in _SUFFIXES
        }
        return sorted(pairs)

    def _find(self, name: str, version: str) -> Optional[Path]:
        # Reject names that would escape the snapshot directory.
        if not name or not version or any(
            sep in part for part in (name, version) for sep in ("/", "\\", "..")
        ):
            return None
        for suffix in _SUFFIXES:
            candidate = self._directory / name / f"{version}{suffix}"
            if candidate.is_file():
                return candidate
        return None
