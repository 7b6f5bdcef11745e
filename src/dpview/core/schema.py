"""
Pydantic v2 models for the entity catalog, query descriptors, and time windows.

The backend's catalog is an untyped JSON tree; this module is the boundary where
it becomes a closed, validated structure. Attribute kinds are normalized onto
AttrKind (unknown tags degrade to AttrKind.UNKNOWN), and an attribute that breaks
its per-kind invariants is downgraded to UNKNOWN so downstream code never sees a
half-formed attribute.

Responsibilities
- Define EntitySpec / AttributeSpec / SeriesSpec and the catalog parser.
- Accept both the backend's compact keys (``t``, ``attribs``, ``confidence``,
  ``eid_estimate_count``) and descriptive field names.
- Define the immutable QueryDescriptor shared by the dispatcher and dashboard targets.
- Define TimeRange (absolute query window) and HealthStatus.

Style
- Zero-IO (stdlib + pydantic only).
- Models are frozen; derive new instances with ``model_copy(update=...)``.

References
- grammar: src/dpview/core/grammar.py (AttrKind, QueryKind normalization)
- errors: src/dpview/core/errors.py (SchemaError)
- tests: tests/core/test_schema_catalog.py
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .errors import SchemaError
from .grammar import AttrKind, QueryKind, attr_kind_from_value, query_kind_from_value
from .typing import JsonDict

logger = logging.getLogger(__name__)

__all__ = [
    "SeriesSpec",
    "AttributeSpec",
    "EntitySpec",
    "EntityCatalog",
    "parse_catalog",
    "entity_type_options",
    "QueryDescriptor",
    "TimeRange",
    "HealthStatus",
]


# ============================================================================
# Catalog
# ============================================================================


class SeriesSpec(BaseModel):
    """One named sub-series of a timeseries attribute."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    data_type: str


class AttributeSpec(BaseModel):
    """
    Attribute descriptor from the entity catalog.

    Attributes:
        id (str): Attribute id (also the result field name).
        name (str): Human-readable name; defaults to ``id``.
        description (str): Free-form description.
        kind (AttrKind): Normalized kind (wire key ``t``).
        data_type (str | None): Type token, atomic or ``base<params>``.
        multi_value (bool): Observation holds a set of values per interval.
        has_confidence (bool): Observation values carry a confidence (wire key ``confidence``).
        series (dict[str, SeriesSpec]): Series map (timeseries only), in declaration order.

    Notes:
        A timeseries without series, or a plain/observation attribute without a
        data_type, is downgraded to AttrKind.UNKNOWN with a warning so one broken
        attribute never invalidates the catalog. Null ``name``/``description`` take
        their defaults.

    Examples:
        >>> from dpview.core.schema import AttributeSpec
        >>> a = AttributeSpec.model_validate({"id": "open_ports", "t": 2, "data_type": "int",
        ...                                   "multi_value": True, "confidence": True})
        >>> a.kind.name, a.has_confidence
        ('OBSERVATION', True)
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    id: str
    name: str = ""
    description: str = ""
    kind: AttrKind = Field(validation_alias=AliasChoices("t", "kind"))
    data_type: str | None = None
    multi_value: bool = False
    has_confidence: bool = Field(
        default=False, validation_alias=AliasChoices("confidence", "has_confidence")
    )
    series: dict[str, SeriesSpec] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        out = {k: v for k, v in data.items() if not (k in ("name", "description") and v is None)}
        if not out.get("name") and out.get("id"):
            out["name"] = out["id"]
        kind = attr_kind_from_value(out.pop("t", out.get("kind")))
        problem = None
        if kind is AttrKind.TIMESERIES and not out.get("series"):
            problem = "declares no series"
        elif kind in (AttrKind.PLAIN, AttrKind.OBSERVATION) and not out.get("data_type"):
            problem = "declares no data_type"
        if problem is not None:
            logger.warning("attribute %r %s; treating its kind as unknown", out.get("id"), problem)
            kind = AttrKind.UNKNOWN
        out["kind"] = kind
        return out

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, v: Any) -> AttrKind:
        return attr_kind_from_value(v)

    @field_validator("series", mode="before")
    @classmethod
    def _none_series(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def display_name(self) -> str:
        return self.name or self.id


class EntitySpec(BaseModel):
    """
    Entity descriptor: one entity type of the catalog.

    Attributes:
        id (str): Entity type key.
        name (str): Human-readable name; defaults to ``id``.
        estimated_id_count (int): Approximate number of ids (wire key ``eid_estimate_count``).
        attributes (dict[str, AttributeSpec]): Attributes keyed by id (wire key ``attribs``),
            in catalog order.

    Notes:
        Attribute entries without an ``id`` take their map key.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    id: str
    name: str = ""
    estimated_id_count: int = Field(
        default=0, validation_alias=AliasChoices("eid_estimate_count", "estimated_id_count")
    )
    attributes: dict[str, AttributeSpec] = Field(
        default_factory=dict, validation_alias=AliasChoices("attribs", "attributes")
    )

    @model_validator(mode="before")
    @classmethod
    def _default_attribute_ids(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        out = dict(data)
        if not out.get("name") and out.get("id"):
            out["name"] = out["id"]
        for key in ("attribs", "attributes"):
            attrs = out.get(key)
            if isinstance(attrs, Mapping):
                out[key] = {
                    k: ({"id": k, **v} if isinstance(v, Mapping) and "id" not in v else v)
                    for k, v in attrs.items()
                }
        return out


EntityCatalog = dict[str, EntitySpec]


def parse_catalog(payload: Any) -> EntityCatalog:
    """
    Validate a raw ``/entities`` payload into an EntityCatalog.

    Args:
        payload (Any): Decoded JSON mapping entity-type key -> entity descriptor.

    Returns:
        EntityCatalog: Mapping key -> EntitySpec, in payload order.

    Raises:
        SchemaError: If the payload is not a mapping or any entity fails validation.
    """
    if not isinstance(payload, Mapping):
        raise SchemaError(f"entity catalog must be a mapping, got {type(payload).__name__}")
    catalog: EntityCatalog = {}
    for key, raw in payload.items():
        if not isinstance(raw, Mapping):
            raise SchemaError(f"entity {key!r} must be a mapping")
        data = {"id": key, **raw} if "id" not in raw else dict(raw)
        try:
            catalog[str(key)] = EntitySpec.model_validate(data)
        except ValidationError as exc:
            raise SchemaError(f"invalid entity {key!r}: {exc}") from exc
    return catalog


def entity_type_options(catalog: EntityCatalog) -> list[tuple[str, str, str]]:
    """
    Return ``(key, label, description)`` picker options for each entity type.

    Examples:
        >>> cat = parse_catalog({"ip": {"name": "IP address", "eid_estimate_count": 42, "attribs": {}}})
        >>> entity_type_options(cat)
        [('ip', 'IP address (ip)', '~ 42 EIDs')]
    """
    return [
        (key, f"{spec.name} ({key})", f"~ {spec.estimated_id_count} EIDs")
        for key, spec in catalog.items()
    ]


# ============================================================================
# Queries
# ============================================================================


class QueryDescriptor(BaseModel):
    """
    Immutable query descriptor.

    Serializes with the dashboard-target keys (``queryType``, ``etype``, ``attr``,
    ``eid``, ``refId``) and validates from either those keys or the field names,
    so a generated dashboard target can be dispatched as-is.

    Attributes:
        query_kind (QueryKind): What to fetch.
        entity_type (str | None): Catalog key of the target entity type.
        attribute_id (str | None): Attribute id (kind dependent).
        entity_id (str | None): Entity id (kind dependent).
        ref_id (str): Opaque reference propagated to result frames.

    Examples:
        >>> q = QueryDescriptor.model_validate({"queryType": "HISTORY_ATTR", "etype": "ip",
        ...                                     "attr": "open_ports", "eid": "$eid"})
        >>> q.to_target()["eid"]
        '$eid'
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    query_kind: QueryKind = Field(alias="queryType")
    entity_type: str | None = Field(default=None, alias="etype")
    attribute_id: str | None = Field(default=None, alias="attr")
    entity_id: str | None = Field(default=None, alias="eid")
    ref_id: str = Field(default="A", alias="refId")

    @field_validator("query_kind", mode="before")
    @classmethod
    def _normalize_query_kind(cls, v: Any) -> QueryKind:
        return query_kind_from_value(v)

    def to_target(self) -> JsonDict:
        """Serialize to a dashboard target mapping (wire keys, no nulls)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass(frozen=True, slots=True)
class TimeRange:
    """
    Absolute query window. ``end`` doubles as "now" for point-in-time fetches.

    Naive datetimes are interpreted as UTC.
    """

    start: datetime
    end: datetime

    @classmethod
    def instant(cls, at: datetime | None = None) -> TimeRange:
        moment = at or datetime.now(tz=UTC)
        return cls(start=moment, end=moment)

    def start_ms(self) -> int:
        return _to_epoch_ms(self.start)

    def end_ms(self) -> int:
        return _to_epoch_ms(self.end)


def _to_epoch_ms(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp() * 1000)


class HealthStatus(BaseModel):
    """Outcome of a backend health check."""

    model_config = ConfigDict(frozen=True)

    status: Literal["success", "error"]
    message: str

    @property
    def ok(self) -> bool:
        return self.status == "success"
