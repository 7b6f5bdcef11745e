"""
Query dispatcher and frame builder.

Validates a QueryDescriptor against the entity catalog, issues the backend fetch
for its kind, and normalizes the JSON answer into typed Frames.

Kinds
- CURRENT_ATTR: attribute + entity id; point window at ``time_range.end``;
  one row holding the current value, only when it is not null.
- HISTORY_ATTR: attribute + entity id; window ``[start, end]``; one row per
  history entry with ``t1``/``t2`` plus the value (and confidence) or the
  per-series values.
- CURRENT_ETYPE_OVERVIEW: all ids (cap overview_limit); eid plus every
  current-valued attribute.
- CURRENT_ATTR_OVERVIEW: attribute; all ids (cap overview_limit); eid plus the
  attribute's current fields.

Invalid targets
- Unknown entity type, missing/unknown attribute, missing entity id, or an
  attribute whose kind cannot answer the query produce ``[]`` and a warning.
  They never raise.

Batches
- ``query()`` fetches the catalog once, then runs every descriptor concurrently:
  interpolation into a fresh copy followed by dispatch. Results keep submission
  order, and a failing substitution or dispatch is reported in its own QueryResult
  without touching siblings.

Import DAG discipline
- Depends on stdlib, dpview.core.*, dpview.io.*, and dpview.query.interpolate.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from dpview.core.fields import (
    attr_has_current_value,
    attr_has_history,
    confidence_field_name,
    eid_field,
    fields_for_attribute,
    history_time_fields,
    series_field_name,
)
from dpview.core.frames import Frame
from dpview.core.grammar import AttrKind, QueryKind, QueryMode
from dpview.core.schema import (
    AttributeSpec,
    EntityCatalog,
    EntitySpec,
    QueryDescriptor,
    TimeRange,
)
from dpview.core.typing import Substitute
from dpview.io.client import Dp3Client

from .interpolate import dollar_substitute, interpolate_descriptor

__all__ = [
    "QueryResult",
    "dispatch",
    "query",
    "entity_overview_query",
    "full_overview_query",
    "overview_frame",
]

logger = logging.getLogger(__name__)

_NEEDS_ATTRIBUTE = frozenset(
    {QueryKind.CURRENT_ATTR, QueryKind.HISTORY_ATTR, QueryKind.CURRENT_ATTR_OVERVIEW}
)
_NEEDS_ENTITY_ID = frozenset({QueryKind.CURRENT_ATTR, QueryKind.HISTORY_ATTR})


@dataclass(slots=True)
class QueryResult:
    """
    Outcome of one dispatch within a batch.

    Attributes:
        ref_id (str): Reference of the submitted descriptor.
        frames (list[Frame]): Result frames; empty for invalid targets and failures.
        error (Exception | None): Failure raised by the dispatch, if any.
    """

    ref_id: str
    frames: list[Frame] = field(default_factory=list)
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _invalid(descriptor: QueryDescriptor, reason: str) -> list[Frame]:
    logger.warning(
        "invalid %s target (refId=%s): %s",
        descriptor.query_kind.value,
        descriptor.ref_id,
        reason,
    )
    return []


def _resolve(
    descriptor: QueryDescriptor, catalog: EntityCatalog
) -> tuple[EntitySpec | None, AttributeSpec | None, str | None]:
    """Return (entity, attribute, reason); reason is set when the target is invalid."""
    kind = descriptor.query_kind
    if not descriptor.entity_type:
        return None, None, "no entity type"
    entity = catalog.get(descriptor.entity_type)
    if entity is None:
        return None, None, f"unknown entity type {descriptor.entity_type!r}"

    attr: AttributeSpec | None = None
    if kind in _NEEDS_ATTRIBUTE:
        if not descriptor.attribute_id:
            return entity, None, "no attribute"
        attr = entity.attributes.get(descriptor.attribute_id)
        if attr is None:
            return entity, None, (
                f"unknown attribute {descriptor.attribute_id!r} of {descriptor.entity_type!r}"
            )
        if kind is QueryKind.HISTORY_ATTR and not attr_has_history(attr):
            return entity, attr, f"attribute {attr.id!r} has no history"
        if kind is not QueryKind.HISTORY_ATTR and not attr_has_current_value(attr):
            return entity, attr, f"attribute {attr.id!r} has no current value"

    if kind in _NEEDS_ENTITY_ID and not descriptor.entity_id:
        return entity, attr, "no entity id"
    return entity, attr, None


async def dispatch(
    client: Dp3Client,
    descriptor: QueryDescriptor,
    catalog: EntityCatalog,
    time_range: TimeRange,
) -> list[Frame]:
    """
    Evaluate one descriptor against an already-fetched catalog.

    Args:
        client (Dp3Client): Backend client.
        descriptor (QueryDescriptor): Interpolated descriptor.
        catalog (EntityCatalog): Read-only catalog snapshot.
        time_range (TimeRange): Query window; ``end`` is "now" for current values.

    Returns:
        list[Frame]: One frame for a valid target, ``[]`` for an invalid one.

    Raises:
        BackendRequestFailed: If the data fetch fails.
    """
    entity, attr, reason = _resolve(descriptor, catalog)
    if reason is not None or entity is None:
        return _invalid(descriptor, reason or "unresolved target")

    kind = descriptor.query_kind
    eid = descriptor.entity_id or ""
    if kind is QueryKind.CURRENT_ATTR and attr is not None:
        return [await _current_value(client, descriptor, entity, attr, eid, time_range)]
    if kind is QueryKind.HISTORY_ATTR and attr is not None:
        return [await _history(client, descriptor, entity, attr, eid, time_range)]
    if kind is QueryKind.CURRENT_ATTR_OVERVIEW and attr is not None:
        frame = Frame(ref_id=descriptor.ref_id, fields=[eid_field()])
        frame.add_fields(fields_for_attribute(attr, QueryMode.CURRENT))
    else:
        frame = overview_frame(entity, ref_id=descriptor.ref_id)
    frame.extend(await client.get_entities(entity.id, client.settings.overview_limit))
    return [frame]


async def _current_value(
    client: Dp3Client,
    descriptor: QueryDescriptor,
    entity: EntitySpec,
    attr: AttributeSpec,
    entity_id: str,
    time_range: TimeRange,
) -> Frame:
    frame = Frame(ref_id=descriptor.ref_id, fields=fields_for_attribute(attr, QueryMode.CURRENT))
    now_ms = time_range.end_ms()
    data = await client.get_attribute(entity.id, entity_id, attr.id, now_ms, now_ms)
    value = data.get("current_value")
    if value is not None:
        frame.add({attr.id: value})
    return frame


async def _history(
    client: Dp3Client,
    descriptor: QueryDescriptor,
    entity: EntitySpec,
    attr: AttributeSpec,
    entity_id: str,
    time_range: TimeRange,
) -> Frame:
    frame = Frame(ref_id=descriptor.ref_id, fields=history_time_fields())
    frame.add_fields(fields_for_attribute(attr, QueryMode.HISTORY))
    data = await client.get_attribute(
        entity.id, entity_id, attr.id, time_range.start_ms(), time_range.end_ms()
    )
    history = data.get("history")
    if not isinstance(history, list):
        return frame
    for entry in history:
        if isinstance(entry, Mapping):
            frame.add(_history_row(attr, entry))
    return frame


def _history_row(attr: AttributeSpec, entry: Mapping[str, Any]) -> dict[str, Any]:
    row: dict[str, Any] = {"t1": entry.get("t1"), "t2": entry.get("t2")}
    value = entry.get("v")
    if attr.kind is AttrKind.TIMESERIES:
        if isinstance(value, Mapping):
            for key, series_value in value.items():
                row[series_field_name(attr.id, key)] = series_value
    else:
        row[attr.id] = value
        row[confidence_field_name(attr.id)] = entry.get("c")
    return row


async def query(
    client: Dp3Client,
    batch: Sequence[QueryDescriptor],
    time_range: TimeRange,
    *,
    scope: Mapping[str, str] | None = None,
    substitute: Substitute = dollar_substitute,
) -> list[QueryResult]:
    """
    Evaluate a batch of descriptors concurrently.

    The catalog is fetched once and gates every dispatch.

    Args:
        client (Dp3Client): Backend client.
        batch (Sequence[QueryDescriptor]): Descriptors in submission order.
        time_range (TimeRange): Shared query window.
        scope (Mapping[str, str] | None): Template variables.
        substitute (Substitute): Substitution function applied before validation.

    Returns:
        list[QueryResult]: One result per descriptor, in submission order.

    Raises:
        SchemaUnavailable: If the catalog cannot be fetched.
    """
    catalog = await client.get_entity_spec()

    async def run(descriptor: QueryDescriptor) -> list[Frame]:
        prepared = interpolate_descriptor(descriptor, substitute, scope)
        return await dispatch(client, prepared, catalog, time_range)

    outcomes = await asyncio.gather(*(run(d) for d in batch), return_exceptions=True)

    results: list[QueryResult] = []
    for descriptor, outcome in zip(batch, outcomes, strict=True):
        if isinstance(outcome, Exception):
            logger.warning("dispatch refId=%s failed: %s", descriptor.ref_id, outcome)
            results.append(QueryResult(ref_id=descriptor.ref_id, error=outcome))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results.append(QueryResult(ref_id=descriptor.ref_id, frames=outcome))
    return results


def overview_frame(entity: EntitySpec, ref_id: str = "A") -> Frame:
    """Empty frame with the eid field and every current-valued attribute, in catalog order."""
    frame = Frame(ref_id=ref_id, fields=[eid_field()])
    for attr in entity.attributes.values():
        if attr_has_current_value(attr):
            frame.add_fields(fields_for_attribute(attr, QueryMode.CURRENT))
    return frame


async def entity_overview_query(
    client: Dp3Client, entity: EntitySpec, eid_filter: str = ""
) -> Frame:
    """
    Interactive preview of an entity type (cap ``preview_limit``).

    The filter is sent as a plain ``eid_filter`` substring parameter.
    """
    frame = overview_frame(entity)
    frame.extend(
        await client.get_entities(entity.id, client.settings.preview_limit, eid_filter=eid_filter)
    )
    return frame


async def full_overview_query(
    client: Dp3Client, entity: EntitySpec, eid_filter: str | None = None
) -> Frame:
    """
    Full overview of an entity type (cap ``overview_limit``).

    An optional filter is sent as a JSON ``generic_filter`` object ``{"eid": ...}``.
    """
    frame = overview_frame(entity)
    generic_filter = {"eid": eid_filter} if eid_filter else None
    frame.extend(
        await client.get_entities(
            entity.id, client.settings.overview_limit, generic_filter=generic_filter
        )
    )
    return frame
