"""
Async HTTP client for the backend API.

Wraps httpx.AsyncClient with the handful of GET endpoints the dispatcher and the
dashboard generators need. Every method is a coroutine; no call blocks the event
loop.

Endpoints
- GET /entities                                   -> entity catalog
- GET /entity/{etype}/{eid}/get/{attr}            -> {current_value} | {history: [...]}
- GET /entity/{etype}?limit&eid_filter|generic_filter -> {data: [...]}
- GET /                                           -> {detail: "It works!"}

Error mapping
- Catalog fetch/parse failures raise SchemaUnavailable.
- Transport failures and non-2xx answers on data fetches raise BackendRequestFailed.
- An unexpected health body raises HealthCheckMismatch.

Notes
- Window bounds are sent as epoch milliseconds.
- Tests inject an ``httpx.MockTransport`` via ``transport=``.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import httpx

from dpview.core.constants import HEALTH_OK_DETAIL
from dpview.core.errors import SchemaError
from dpview.core.hashing import json_dumps_canonical
from dpview.core.schema import EntityCatalog, parse_catalog
from dpview.core.typing import JsonDict

from .config import ClientSettings
from .errors import BackendRequestFailed, HealthCheckMismatch, SchemaUnavailable

__all__ = ["Dp3Client"]

logger = logging.getLogger(__name__)


class Dp3Client:
    """
    Async client bound to one backend.

    Args:
        settings (ClientSettings | None): Backend settings; defaults to ``ClientSettings()``.
        transport (httpx.AsyncBaseTransport | None): Optional transport override.
        client (httpx.AsyncClient | None): Optional pre-built client; not closed by ``aclose``.

    Examples:
        >>> async def main():  # doctest: +SKIP
        ...     async with Dp3Client(ClientSettings(api_url="http://dp3/api")) as c:
        ...         catalog = await c.get_entity_spec()
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or ClientSettings()
        self._owns_client = client is None
        self._http = client or httpx.AsyncClient(
            timeout=self.settings.timeout,
            verify=self.settings.verify_tls,
            transport=transport,
        )

    async def __aenter__(self) -> Dp3Client:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    def url(self, path: str) -> str:
        return self.settings.base_url(path)

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = self.url(path)
        logger.debug("GET %s params=%s", url, params)
        try:
            response = await self._http.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise BackendRequestFailed(
                f"{url} answered {exc.response.status_code}",
                url=url,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise BackendRequestFailed(f"request to {url} failed: {exc}", url=url) from exc
        try:
            return response.json()
        except ValueError as exc:
            raise BackendRequestFailed(
                f"{url} returned a non-JSON body", url=url, status_code=response.status_code
            ) from exc

    async def get_entity_spec(self) -> EntityCatalog:
        """
        Fetch and validate the entity catalog.

        Raises:
            SchemaUnavailable: On transport failure, non-2xx, bad JSON, or invalid catalog.
        """
        try:
            payload = await self._get_json("/entities")
            catalog = parse_catalog(payload)
        except (BackendRequestFailed, SchemaError) as exc:
            raise SchemaUnavailable(f"entity catalog unavailable: {exc}") from exc
        logger.info("fetched entity catalog with %d entity types", len(catalog))
        return catalog

    async def get_attribute(
        self,
        entity_type: str,
        entity_id: str,
        attribute_id: str,
        date_from_ms: int,
        date_to_ms: int,
    ) -> JsonDict:
        """Fetch one attribute of one entity id over a window (epoch ms bounds)."""
        data = await self._get_json(
            f"/entity/{entity_type}/{entity_id}/get/{attribute_id}",
            {"date_from": date_from_ms, "date_to": date_to_ms},
        )
        return data if isinstance(data, dict) else {}

    async def get_entities(
        self,
        entity_type: str,
        limit: int,
        *,
        eid_filter: str | None = None,
        generic_filter: Any = None,
    ) -> list[JsonDict]:
        """
        Fetch current values of all ids of an entity type.

        Args:
            entity_type: Catalog key.
            limit: Row cap.
            eid_filter: Plain substring filter, sent as ``eid_filter`` when not None.
            generic_filter: JSON filter object, sent canonical-encoded as ``generic_filter``.

        Returns:
            list[JsonDict]: The ``data`` rows (empty if the body has none).
        """
        params: dict[str, Any] = {"limit": limit}
        if eid_filter is not None:
            params["eid_filter"] = eid_filter
        if generic_filter is not None:
            params["generic_filter"] = json_dumps_canonical(generic_filter)
        data = await self._get_json(f"/entity/{entity_type}", params)
        rows = data.get("data") if isinstance(data, dict) else None
        return [r for r in rows if isinstance(r, dict)] if isinstance(rows, list) else []

    async def health(self) -> str:
        """
        Check the API root.

        Returns:
            str: The success detail.

        Raises:
            BackendRequestFailed: On transport failure or non-2xx.
            HealthCheckMismatch: If the body is not ``{"detail": "It works!"}``.
        """
        body = await self._get_json("/")
        if isinstance(body, dict) and body.get("detail") == HEALTH_OK_DETAIL:
            return HEALTH_OK_DETAIL
        raise HealthCheckMismatch(f"Unexpected body: {json_dumps_canonical(body)}", body=body)
