from __future__ import annotations

import copy
import inspect
from collections.abc import Callable
from dataclasses import replace
from typing import Any

import httpx
import pytest
import pytest_asyncio

from dpview.core.schema import EntityCatalog, parse_catalog
from dpview.io import ClientSettings, Dp3Client

API_URL = "http://dp3.test/api/"
API_PREFIX = "/api"

CATALOG_PAYLOAD: dict[str, Any] = {
    "ip": {
        "name": "IP address",
        "eid_estimate_count": 3,
        "attribs": {
            "hostname": {"id": "hostname", "name": "Hostname", "t": 1, "data_type": "string"},
            "asn": {"name": "ASN", "t": 1, "data_type": "int"},
            "open_ports": {
                "name": "Open ports",
                "t": 2,
                "data_type": "int",
                "multi_value": True,
                "confidence": True,
            },
            "os": {"name": "OS", "t": 2, "data_type": "string", "confidence": True},
            "rtt": {"name": "RTT", "t": 2, "data_type": "float", "confidence": True},
            "traffic": {
                "name": "Traffic",
                "t": 4,
                "series": {"bps": {"data_type": "float"}, "pps": {"data_type": "int"}},
            },
        },
    },
    "empty": {"name": "Empty", "eid_estimate_count": 0, "attribs": {}},
}


class FakeBackend:
    """Route table served through httpx.MockTransport; records every request."""

    def __init__(self, routes: dict[str, Any] | None = None) -> None:
        self.routes: dict[str, Any] = dict(routes or {})
        self.requests: list[httpx.Request] = []

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix(API_PREFIX) or "/"
        route = self.routes.get(path)
        if route is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        if callable(route):
            route = route(request)
            if inspect.isawaitable(route):
                route = await route
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def paths(self) -> list[str]:
        return [r.url.path.removeprefix(API_PREFIX) or "/" for r in self.requests]


@pytest.fixture
def catalog_payload() -> dict[str, Any]:
    return copy.deepcopy(CATALOG_PAYLOAD)


@pytest.fixture
def catalog(catalog_payload: dict[str, Any]) -> EntityCatalog:
    return parse_catalog(catalog_payload)


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(api_url=API_URL, datasource_uid="dp3-uid")


@pytest.fixture
def make_backend(catalog_payload: dict[str, Any]) -> Callable[..., FakeBackend]:
    """Factory: FakeBackend serving the catalog at /entities plus extra routes."""

    def _make(routes: dict[str, Any] | None = None, *, with_catalog: bool = True) -> FakeBackend:
        table: dict[str, Any] = {"/entities": catalog_payload} if with_catalog else {}
        table.update(routes or {})
        return FakeBackend(table)

    return _make


@pytest_asyncio.fixture
async def make_client(settings: ClientSettings):
    """Factory: Dp3Client bound to a FakeBackend; all clients closed after the test."""
    clients: list[Dp3Client] = []

    def _make(backend: FakeBackend, **overrides: Any) -> Dp3Client:
        c = Dp3Client(replace(settings, **overrides), transport=backend.transport())
        clients.append(c)
        return c

    yield _make
    for c in clients:
        await c.aclose()
