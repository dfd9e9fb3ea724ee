"""End-to-end tests: generated clients from bundled and remote documents."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx
import pytest

from discogen.exceptions import MissingRequiredParameterError
from discogen.factory import DiscoGen
from discogen.generator import ApiMethod, Client, Resource


def _query(response: httpx.Response) -> str:
    return response.request.url.query.decode("ascii")


class _Collector:
    """Callback that records ``(error, response)``."""

    def __init__(self) -> None:
        self.calls: list[tuple[Optional[BaseException], Optional[httpx.Response]]] = []

    def __call__(self, error: Optional[BaseException], response: Optional[httpx.Response]) -> None:
        self.calls.append((error, response))

    @property
    def response(self) -> httpx.Response:
        assert len(self.calls) == 1
        error, response = self.calls[0]
        assert error is None
        assert response is not None
        return response


def _clients(gen: DiscoGen, name: str, version: str, **options: Any) -> list[Client]:
    """Return ``[local, remote]`` clients for *name*/*version*."""
    local = gen.create(name, version, **options)
    remote = asyncio.run(gen.load(name, version, **options))
    return [local, remote]


# ---------------------------------------------------------------------------
# Generated surface
# ---------------------------------------------------------------------------


class TestGeneratedSurface:
    def test_request_helpers_follow_resources(self, gen: DiscoGen) -> None:
        for plus in _clients(gen, "plus", "v1"):
            assert isinstance(plus.people.get, ApiMethod)
            assert isinstance(plus.activities.search, ApiMethod)
            assert isinstance(plus.comments.list, ApiMethod)
            assert callable(plus.people.get)

    def test_top_level_methods(self, gen: DiscoGen) -> None:
        for oauth2 in _clients(gen, "oauth2", "v2"):
            assert isinstance(oauth2.tokeninfo, ApiMethod)

    def test_top_level_methods_and_resources(self, gen: DiscoGen) -> None:
        for oauth2 in _clients(gen, "oauth2", "v2"):
            assert isinstance(oauth2.tokeninfo, ApiMethod)
            assert isinstance(oauth2.userinfo, Resource)

    def test_nested_resources_and_methods(self, gen: DiscoGen) -> None:
        for oauth2 in _clients(gen, "oauth2", "v2"):
            assert isinstance(oauth2.userinfo, Resource)
            assert isinstance(oauth2.userinfo.v2, Resource)
            assert isinstance(oauth2.userinfo.v2.me, Resource)
            assert isinstance(oauth2.userinfo.v2.me.get, ApiMethod)

    def test_local_and_remote_expose_same_surface(self, gen: DiscoGen) -> None:
        for name, version in [("plus", "v1"), ("oauth2", "v2"), ("datastore", "v1beta3")]:
            local, remote = _clients(gen, name, version)
            assert local._method_paths() == remote._method_paths()

    def test_building_twice_gives_independent_clients(self, gen: DiscoGen) -> None:
        first = gen.create("oauth2", "v2", params={"key": "a"})
        second = gen.create("oauth2", "v2", params={"key": "b"})
        assert first is not second
        assert first.userinfo is not second.userinfo
        assert first._method_paths() == second._method_paths()
        assert first._params == {"key": "a"}
        assert second._params == {"key": "b"}

    def test_nested_method_sends_request(self, gen: DiscoGen, fake_google) -> None:
        oauth2 = gen.create("oauth2", "v2")
        response = asyncio.run(oauth2.userinfo.v2.me.get())
        assert response.status_code == 200
        assert str(response.request.url).startswith("https://www.googleapis.com/userinfo/v2/me")
        assert response.request.method == "GET"


# ---------------------------------------------------------------------------
# Default parameters
# ---------------------------------------------------------------------------


class TestDefaultParams:
    def test_default_param_in_query(self, gen: DiscoGen) -> None:
        for datastore in _clients(gen, "datastore", "v1beta3", params={"myParam": "123"}):
            response = asyncio.run(
                datastore.projects.lookup({"projectId": "test-project-id"})
            )
            assert _query(response) == "myParam=123"
            assert response.request.method == "POST"
            assert response.request.url.path == "/v1beta3/projects/test-project-id:lookup"

    def test_default_param_overridden_per_request(self, gen: DiscoGen) -> None:
        for datastore in _clients(gen, "datastore", "v1beta3", params={"myParam": "123"}):
            response = asyncio.run(
                datastore.projects.lookup({"projectId": "test-project-id", "myParam": "456"})
            )
            assert _query(response) == "myParam=456"

    def test_defaults_used_when_only_callback_given(self, gen: DiscoGen) -> None:
        params = {"projectId": "test-project-id", "myParam": "123"}
        for datastore in _clients(gen, "datastore", "v1beta3", params=params):
            collector = _Collector()
            datastore.projects.lookup(collector)
            response = collector.response
            assert _query(response) == "myParam=123"
            assert response.request.url.path == "/v1beta3/projects/test-project-id:lookup"

    def test_params_and_callback(self, gen: DiscoGen) -> None:
        datastore = gen.create("datastore", "v1beta3", params={"myParam": "123"})
        collector = _Collector()
        datastore.projects.lookup({"projectId": "p1", "myParam": "456"}, collector)
        assert _query(collector.response) == "myParam=456"


# ---------------------------------------------------------------------------
# Required parameters
# ---------------------------------------------------------------------------


class TestRequiredParams:
    def test_missing_required_param_fails_before_dispatch(
        self, gen: DiscoGen, fake_google
    ) -> None:
        datastore = gen.create("datastore", "v1beta3")
        collector = _Collector()
        datastore.projects.lookup(collector)

        assert len(collector.calls) == 1
        error, response = collector.calls[0]
        assert isinstance(error, MissingRequiredParameterError)
        assert error.parameter == "projectId"
        assert response is None
        assert fake_google.api_requests == []

    def test_missing_required_param_rejects_awaitable(
        self, gen: DiscoGen, fake_google
    ) -> None:
        datastore = gen.create("datastore", "v1beta3")
        pending = datastore.projects.lookup({})
        with pytest.raises(MissingRequiredParameterError, match="projectId"):
            asyncio.run(pending)
        assert fake_google.api_requests == []
