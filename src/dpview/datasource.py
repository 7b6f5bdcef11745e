"""
DataSource facade.

Binds ClientSettings and a Dp3Client and exposes every consumer-facing operation:
catalog fetch, batch query, the two overview fetches, both dashboard generators,
and the health check.

Ordering
- Each operation fetches the catalog itself (unless an EntitySpec is passed in) and
  only then dispatches queries or generates dashboards. Nothing is cached across calls.

Import DAG discipline
- Top of the library stack: depends on dpview.core, dpview.io, dpview.query and
  dpview.dashboards. Must not import cli or app.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from types import TracebackType

import httpx

from dpview.core.constants import HEALTH_OK_DETAIL
from dpview.core.errors import SchemaError
from dpview.core.fields import eid_field
from dpview.core.frames import Frame
from dpview.core.schema import EntityCatalog, EntitySpec, HealthStatus, QueryDescriptor, TimeRange
from dpview.core.typing import Substitute
from dpview.dashboards import (
    Dashboard,
    DatasourceRef,
    generate_full_overview_dashboard,
    generate_per_id_dashboard,
)
from dpview.io import BackendRequestFailed, ClientSettings, Dp3Client, HealthCheckMismatch
from dpview.query import (
    QueryResult,
    dollar_substitute,
    entity_overview_query,
    full_overview_query,
    query,
)

__all__ = ["DataSource"]

logger = logging.getLogger(__name__)


class DataSource:
    """
    Facade bound to one backend.

    Args:
        settings (ClientSettings | None): Backend settings; defaults to ``ClientSettings()``.
        client (Dp3Client | None): Pre-built client (tests); built from settings when None.
        transport (httpx.AsyncBaseTransport | None): Transport override for the built client.

    Notes:
        Use as an async context manager, or call ``aclose()`` when done.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        client: Dp3Client | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or (client.settings if client else ClientSettings())
        self.client = client or Dp3Client(self.settings, transport=transport)

    async def __aenter__(self) -> DataSource:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    @property
    def datasource_ref(self) -> DatasourceRef:
        return DatasourceRef(type=self.settings.datasource_type, uid=self.settings.datasource_uid)

    # ---------------------------------------------------------------------
    # Catalog
    # ---------------------------------------------------------------------
    async def get_entity_spec(self) -> EntityCatalog:
        """Fetch the entity catalog (raises SchemaUnavailable)."""
        return await self.client.get_entity_spec()

    async def _entity(self, entity_type: str, entity: EntitySpec | None) -> EntitySpec | None:
        if entity is not None:
            return entity
        return (await self.get_entity_spec()).get(entity_type)

    # ---------------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------------
    async def query(
        self,
        batch: Sequence[QueryDescriptor],
        time_range: TimeRange,
        *,
        scope: Mapping[str, str] | None = None,
        substitute: Substitute = dollar_substitute,
    ) -> list[QueryResult]:
        """
        Evaluate a batch of descriptors.

        Returns:
            list[QueryResult]: One result per descriptor, in submission order.

        Raises:
            SchemaUnavailable: If the catalog cannot be fetched.
        """
        return await query(self.client, batch, time_range, scope=scope, substitute=substitute)

    async def entity_overview_query(
        self, entity_type: str, eid_filter: str = "", *, entity: EntitySpec | None = None
    ) -> Frame:
        """
        Preview of an entity type (cap ``preview_limit``, substring ``eid_filter``).

        An unknown entity type yields an empty frame with only the eid field.
        """
        spec = await self._entity(entity_type, entity)
        if spec is None:
            logger.warning("overview of unknown entity type %r", entity_type)
            return Frame(fields=[eid_field()])
        return await entity_overview_query(self.client, spec, eid_filter)

    async def full_overview_query(
        self,
        entity_type: str,
        eid_filter: str | None = None,
        *,
        entity: EntitySpec | None = None,
    ) -> Frame:
        """
        Full overview of an entity type (cap ``overview_limit``, JSON ``generic_filter``).

        An unknown entity type yields an empty frame with only the eid field.
        """
        spec = await self._entity(entity_type, entity)
        if spec is None:
            logger.warning("full overview of unknown entity type %r", entity_type)
            return Frame(fields=[eid_field()])
        return await full_overview_query(self.client, spec, eid_filter)

    # ---------------------------------------------------------------------
    # Dashboards
    # ---------------------------------------------------------------------
    async def generate_full_overview_dashboard(
        self, entity_type: str, *, entity: EntitySpec | None = None
    ) -> Dashboard:
        """
        Generate the full-overview dashboard of an entity type.

        Raises:
            SchemaError: If the entity type is not in the catalog.
        """
        spec = await self._entity(entity_type, entity)
        if spec is None:
            raise SchemaError(f"unknown entity type {entity_type!r}")
        return generate_full_overview_dashboard(entity_type, spec, self.datasource_ref)

    async def generate_per_id_dashboard(
        self,
        entity_type: str,
        example_eid: str | None = None,
        *,
        entity: EntitySpec | None = None,
    ) -> Dashboard:
        """
        Generate the per-id dashboard of an entity type.

        When ``example_eid`` is None, the first id of the preview overview seeds the
        ``eid`` variable (empty when the entity type has no rows).

        Raises:
            SchemaError: If the entity type is not in the catalog.
        """
        spec = await self._entity(entity_type, entity)
        if spec is None:
            raise SchemaError(f"unknown entity type {entity_type!r}")
        if example_eid is None:
            preview = await entity_overview_query(self.client, spec)
            example_eid = str(preview.rows[0]["eid"] or "") if preview.rows else ""
        return generate_per_id_dashboard(entity_type, spec, self.datasource_ref, example_eid)

    # ---------------------------------------------------------------------
    # Health
    # ---------------------------------------------------------------------
    async def health_check(self) -> HealthStatus:
        """
        Check the backend.

        Returns:
            HealthStatus: ``success`` with "It works!", or ``error`` with the raw body
            or transport failure in the message.
        """
        try:
            await self.client.health()
        except HealthCheckMismatch as exc:
            return HealthStatus(status="error", message=str(exc))
        except BackendRequestFailed as exc:
            return HealthStatus(status="error", message=str(exc))
        return HealthStatus(status="success", message=HEALTH_OK_DETAIL)
