"""Tests for discogen.discovery.remote -- fetching documents over HTTP."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from discogen.discovery import DEFAULT_DISCOVERY_URL, RemoteSource
from discogen.exceptions import DiscoveryFetchError, SchemaError, UnknownApiError


def _source(handler) -> RemoteSource:
    return RemoteSource(transport=httpx.MockTransport(handler))


class TestGetDocument:
    def test_fetches_rest_url(self, fake_google) -> None:
        source = RemoteSource(transport=fake_google.transport)
        doc = asyncio.run(source.get_document("oauth2", "v2"))
        assert doc.name == "oauth2"
        assert str(fake_google.requests[0].url) == (
            "https://www.googleapis.com/discovery/v1/apis/oauth2/v2/rest"
        )

    def test_document_url(self) -> None:
        source = RemoteSource("https://discovery.example.com/v1/")
        assert source.discovery_url == "https://discovery.example.com/v1"
        assert source.document_url("plus", "v1") == (
            "https://discovery.example.com/v1/apis/plus/v1/rest"
        )
        assert RemoteSource().discovery_url == DEFAULT_DISCOVERY_URL

    def test_404_is_unknown_api(self, fake_google) -> None:
        source = RemoteSource(transport=fake_google.transport)
        with pytest.raises(UnknownApiError) as exc_info:
            asyncio.run(source.get_document("nonexistent", "v1"))
        assert isinstance(exc_info.value.__cause__, DiscoveryFetchError)

    def test_server_error_is_not_retried(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503, text="unavailable")

        with pytest.raises(DiscoveryFetchError) as exc_info:
            asyncio.run(_source(handler).get_document("oauth2", "v2"))
        assert exc_info.value.status_code == 503
        assert exc_info.value.response is not None
        assert len(calls) == 1

    def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DiscoveryFetchError, match="connection refused") as exc_info:
            asyncio.run(_source(handler).get_document("oauth2", "v2"))
        assert exc_info.value.status_code is None

    def test_malformed_payload(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"name": "x", "version": "v1", "resources": []})

        with pytest.raises(SchemaError):
            asyncio.run(_source(handler).get_document("x", "v1"))

    def test_get_document_from_url(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == "https://example.com/custom.json"
            return httpx.Response(200, json={"name": "custom", "version": "v3"})

        doc = asyncio.run(_source(handler).get_document_from_url("https://example.com/custom.json"))
        assert doc.name == "custom"

    def test_yaml_content_type(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                text="name: yamlapi\nversion: v1\n",
                headers={"content-type": "application/yaml"},
            )

        doc = asyncio.run(_source(handler).get_document("yamlapi", "v1"))
        assert doc.name == "yamlapi"


class TestListApis:
    def test_all_entries(self, fake_google) -> None:
        source = RemoteSource(transport=fake_google.transport)
        entries = asyncio.run(source.list_apis())
        assert [e.name for e in entries] == ["datastore", "oauth2", "plus"]
        assert entries[1].discovery_rest_url.endswith("/apis/oauth2/v2/rest")

    def test_preferred_only(self, fake_google) -> None:
        source = RemoteSource(transport=fake_google.transport)
        entries = asyncio.run(source.list_apis(preferred_only=True))
        assert [(e.name, e.version) for e in entries] == [("oauth2", "v2"), ("plus", "v1")]
        assert fake_google.requests[0].url.params["preferred"] == "true"

    def test_empty_directory(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"kind": "discovery#directoryList"})

        assert asyncio.run(_source(handler).list_apis()) == []

    def test_malformed_directory(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"items": [{"name": "no-version"}]})

        with pytest.raises(SchemaError, match="directory"):
            asyncio.run(_source(handler).list_apis())
