"""Pytest configuration and fixtures."""

import json

import httpx
import pytest

from core.models import Lockfile


@pytest.fixture
def sample_lockfile_v1():
    """Lockfile version 1 content for testing."""
    return json.dumps({
        "name": "test-project",
        "lockfileVersion": 1,
        "dependencies": {
            "foo": {
                "version": "1.2.3",
                "resolved": "https://registry.npmjs.org/foo/-/foo-1.2.3.tgz",
            },
            "@scope/bar": {
                "version": "0.1.0",
                "resolved": "https://registry.npmjs.org/@scope/bar/-/bar-0.1.0.tgz",
            },
        },
    })


@pytest.fixture
def sample_lockfile_v3():
    """Lockfile version 3 content for testing."""
    return json.dumps({
        "name": "test-project",
        "lockfileVersion": 3,
        "packages": {
            "": {"name": "test-project"},
            "node_modules/foo": {
                "version": "1.2.3",
                "resolved": "https://registry.npmjs.org/foo/-/foo-1.2.3.tgz",
            },
            "node_modules/foo/node_modules/nested": {
                "version": "1.0.0",
                "resolved": "https://registry.npmjs.org/nested/-/nested-1.0.0.tgz",
            },
        },
    })


@pytest.fixture
def sample_outdated():
    """`npm outdated --json --long` output for testing."""
    return json.dumps({
        "foo": {
            "current": "1.2.3",
            "wanted": "1.2.3",
            "latest": "2.0.0",
            "homepage": "https://github.com/acme/foo#readme",
        },
        "@scope/bar": {
            "wanted": "0.1.0",
            "latest": "0.2.0",
            "homepage": "https://github.com/scope/bar",
        },
    })


@pytest.fixture
def lockfile():
    """Parsed lockfile with a single resolved dependency."""
    return Lockfile(resolved={"foo": "https://registry.npmjs.org/foo/-/foo-1.2.3.tgz"})


@pytest.fixture
def registry_metadata():
    """Registry metadata for the `foo` dependency."""
    return {
        "name": "foo",
        "repository": {"type": "git", "url": "git+https://github.com/acme/foo.git"},
        "time": {
            "1.2.3": "2023-01-01T00:00:00.000Z",
            "2.0.0": "2024-01-01T00:00:00.000Z",
        },
    }


@pytest.fixture
def make_client():
    """Build an AsyncClient whose requests are answered by a routing table.

    Keys are full URLs without query string; values are httpx.Response objects
    or callables taking the request. Unknown URLs answer 404. Every request is
    recorded on the returned client as ``client.requests``.
    """

    def factory(routes: dict) -> httpx.AsyncClient:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            url = str(request.url).split("?", 1)[0]
            route = routes.get(url)
            if route is None:
                return httpx.Response(404, text="Not Found")
            if callable(route):
                return route(request)
            return httpx.Response(route.status_code, headers=route.headers, content=route.content)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client.requests = seen
        return client

    return factory
