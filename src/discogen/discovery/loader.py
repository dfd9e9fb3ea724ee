"""Parse discovery documents from text, files, or raw dicts.

This module converts raw discovery payloads into
:class:`~discogen.models.DiscoveryDocument` instances.  It supports both
JSON and YAML with automatic format detection, so bundled snapshots may be
stored in either format.

The public functions are:

* :func:`parse_content` -- Parse a JSON or YAML string into a dict.
* :func:`parse_document` -- Validate a raw dict into a
  :class:`~discogen.models.DiscoveryDocument`.
* :func:`load_document` -- Read and parse a document from a local file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from discogen.exceptions import SchemaError
from discogen.models import DiscoveryDocument


_SUFFIX_HINTS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def _require_object(result: Any) -> dict[str, Any]:
    if isinstance(result, dict):
        return result
    kind = "empty document" if result is None else type(result).__name__
    raise SchemaError(f"Discovery document must be a JSON/YAML object (got {kind})")


def parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse a discovery payload as JSON or YAML.

    JSON is attempted first unless *hint* is ``'yaml'``; a ``'json'`` hint
    disables the YAML fallback.

    Raises:
        SchemaError: If neither parser accepts *content*, or the top level
            is not an object.
    """
    failures: list[str] = []
    if hint != "yaml":
        try:
            return _require_object(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SchemaError(f"Invalid JSON: {exc}") from exc
            failures.append(f"JSON error: {exc}")

    try:
        loaded = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        failures.append(f"YAML error: {exc}")
        raise SchemaError(
            "Failed to parse discovery document as JSON or YAML\n  " + "\n  ".join(failures)
        ) from exc
    return _require_object(loaded)


def parse_document(raw: dict[str, Any]) -> DiscoveryDocument:
    """Validate a raw discovery dict.

    Raises:
        SchemaError: If the dict does not have the discovery shape (for
            example ``resources`` is not an object, or ``name`` is absent).
    """
    try:
        return DiscoveryDocument.model_validate(raw)
    except ValidationError as exc:
        name = raw.get("name", "<unnamed>") if isinstance(raw, dict) else "<invalid>"
        raise SchemaError(f"Malformed discovery document '{name}': {exc}") from exc


def load_document(path: str | Path) -> DiscoveryDocument:
    """Load a discovery document from a local ``.json``/``.yaml`` file.

    Raises:
        SchemaError: If the file is missing, empty, unreadable, or malformed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SchemaError(f"Discovery document not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SchemaError(f"Failed to read discovery document {path}: {exc}") from exc

    if not content.strip():
        raise SchemaError(f"Discovery document is empty: {path}")

    hint = _SUFFIX_HINTS.get(file_path.suffix.lower(), "")
    return parse_document(parse_content(content, hint=hint))
