"""Shared test fixtures for discogen.

Provides the bundled fixture documents, an in-memory fake of the Google
endpoints (discovery service plus API hosts) built on
:class:`httpx.MockTransport`, and config isolation.  These fixtures are
automatically discovered by pytest.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from discogen.discovery import BundledSource
from discogen.factory import DiscoGen
from discogen.models import GlobalConfig

FIXTURES_DIR = Path(__file__).parent / "fixtures"
APIS_DIR = FIXTURES_DIR / "apis"

DISCOVERY_PREFIX = "/discovery/v1/apis"


class FakeGoogle:
    """Serves fixture discovery documents and records every API call.

    Discovery URLs (``/discovery/v1/apis/...``) are answered from
    ``tests/fixtures``; any other request is recorded in :attr:`requests`
    and answered with ``200 {"ok": true}``.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    @property
    def api_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if not r.url.path.startswith(DISCOVERY_PREFIX)]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == DISCOVERY_PREFIX:
            return httpx.Response(200, json=_read_json(FIXTURES_DIR / "directory.json"))
        if path.startswith(DISCOVERY_PREFIX):
            parts = path[len(DISCOVERY_PREFIX):].strip("/").split("/")
            if len(parts) == 3 and parts[2] == "rest":
                doc_path = APIS_DIR / parts[0] / f"{parts[1]}.json"
                if doc_path.is_file():
                    return httpx.Response(200, json=_read_json(doc_path))
            return httpx.Response(404, json={"error": {"code": 404, "message": "Not Found"}})
        return httpx.Response(200, json={"ok": True})


def _read_json(path: Path) -> Any:
    with open(path) as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Discovery fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def bundled() -> BundledSource:
    """Bundled source over the fixture snapshot directory."""
    return BundledSource(APIS_DIR)


@pytest.fixture
def datastore_raw() -> dict[str, Any]:
    """Raw datastore v1beta3 discovery dict."""
    return _read_json(APIS_DIR / "datastore" / "v1beta3.json")


@pytest.fixture
def oauth2_raw() -> dict[str, Any]:
    """Raw oauth2 v2 discovery dict."""
    return _read_json(APIS_DIR / "oauth2" / "v2.json")


@pytest.fixture
def fake_google() -> FakeGoogle:
    return FakeGoogle()


@pytest.fixture
def gen(bundled: BundledSource, fake_google: FakeGoogle) -> DiscoGen:
    """A factory wired to the fixture snapshots and the fake network.

    Retries are disabled so that error tests never sleep.
    """
    return DiscoGen(
        bundled=bundled,
        http_transport=fake_google.transport,
        config=GlobalConfig(max_retries=0),
    )


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME to a subdirectory of tmp_path so that tests never
    touch real user config, and clears all DISCOGEN_* environment
    variables.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("discogen.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    for var in [
        "DISCOGEN_DISCOVERY_URL",
        "DISCOGEN_BUNDLE_DIR",
        "DISCOGEN_TIMEOUT",
        "DISCOGEN_MAX_RETRIES",
    ]:
        monkeypatch.delenv(var, raising=False)
    return tmp_path
