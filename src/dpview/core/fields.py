"""
Attribute type system: data-type tokens and attribute kinds to result fields.

Overview
- map_data_type(): type token -> SemanticType (total, pure).
- attr_has_current_value() / attr_has_history(): capability predicates by kind.
- fields_for_attribute(): field layout of one attribute in current or history mode.
- attributes_for_query_kind(): attribute ids a query kind may target.

Type tokens
- Atomic tokens are matched exactly (tag, binary, string, int, int64, float, ipv4,
  ipv6, mac, time, special, json).
- Composite tokens are written ``base<params>``; only ``base`` is inspected.
- Anything unrecognized maps to SemanticType.OPAQUE.

Field layout by kind
- PLAIN: one field named ``<id>``.
- OBSERVATION: one value field ``<id>`` (OPAQUE when multi-valued); in HISTORY mode
  and with confidence, an extra ``<id>#c`` field bounded to [0, 1]. Current values
  never carry confidence.
- TIMESERIES: one field per series, ``<id>/<series_key>``; never a confidence field.
- UNKNOWN: no fields and a warning.

Notes
- Zero-IO; depends only on stdlib and dpview.core.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .grammar import AttrKind, QueryKind, QueryMode, SemanticType
from .schema import AttributeSpec, EntitySpec

__all__ = [
    "FieldDescriptor",
    "CONFIDENCE_SUFFIX",
    "SERIES_SEPARATOR",
    "map_data_type",
    "attr_has_current_value",
    "attr_has_history",
    "fields_for_attribute",
    "attributes_for_query_kind",
    "confidence_field_name",
    "series_field_name",
    "eid_field",
    "history_time_fields",
]

logger = logging.getLogger(__name__)

CONFIDENCE_SUFFIX = "#c"
SERIES_SEPARATOR = "/"

_ATOMIC_TYPES: dict[str, SemanticType] = {
    "tag": SemanticType.BOOLEAN,
    "binary": SemanticType.BOOLEAN,
    "string": SemanticType.STRING,
    "int": SemanticType.NUMBER,
    "int64": SemanticType.NUMBER,
    "float": SemanticType.NUMBER,
    "ipv4": SemanticType.STRING,
    "ipv6": SemanticType.STRING,
    "mac": SemanticType.STRING,
    "time": SemanticType.TIME,
    "special": SemanticType.OPAQUE,
    "json": SemanticType.STRING,
}

_COMPOSITE_TYPES: dict[str, SemanticType] = {
    "link": SemanticType.STRING,
    "array": SemanticType.OPAQUE,
    "set": SemanticType.OPAQUE,
    "dict": SemanticType.OPAQUE,
    "category": SemanticType.STRING,
}


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """
    One column of a result frame.

    Attributes:
        name (str): Field name; rows are keyed by it.
        semantic_type (SemanticType): Value type.
        display_name (str): Human-readable label.
        description (str | None): Optional description.
        unit (str | None): Optional display unit (e.g., "percentunit").
        min (float | None): Optional lower bound.
        max (float | None): Optional upper bound.
    """

    name: str
    semantic_type: SemanticType
    display_name: str
    description: str | None = None
    unit: str | None = None
    min: float | None = None
    max: float | None = None


def map_data_type(token: str) -> SemanticType:
    """
    Map a data-type token to its semantic type.

    Args:
        token (str): Atomic token or composite ``base<params>`` token.

    Returns:
        SemanticType: Never raises; unknown tokens map to OPAQUE.

    Examples:
        >>> map_data_type("ipv4").name, map_data_type("category<a,b>").name
        ('STRING', 'STRING')
        >>> map_data_type("dict<string,int>").name, map_data_type("nonsense").name
        ('OPAQUE', 'OPAQUE')
    """
    if token in _ATOMIC_TYPES:
        return _ATOMIC_TYPES[token]
    base = str(token).split("<", 1)[0]
    return _COMPOSITE_TYPES.get(base, SemanticType.OPAQUE)


def attr_has_current_value(attr: AttributeSpec) -> bool:
    return attr.kind in (AttrKind.PLAIN, AttrKind.OBSERVATION)


def attr_has_history(attr: AttributeSpec) -> bool:
    return attr.kind in (AttrKind.OBSERVATION, AttrKind.TIMESERIES)


def confidence_field_name(attr_id: str) -> str:
    return f"{attr_id}{CONFIDENCE_SUFFIX}"


def series_field_name(attr_id: str, series_key: str) -> str:
    return f"{attr_id}{SERIES_SEPARATOR}{series_key}"


def eid_field() -> FieldDescriptor:
    """Entity id column leading every multi-id frame."""
    return FieldDescriptor(name="eid", semantic_type=SemanticType.STRING, display_name="EID")


def history_time_fields() -> list[FieldDescriptor]:
    """Interval start/end columns leading every history frame."""
    return [
        FieldDescriptor(name="t1", semantic_type=SemanticType.TIME, display_name="Time (start)"),
        FieldDescriptor(name="t2", semantic_type=SemanticType.TIME, display_name="Time (end)"),
    ]


def fields_for_attribute(attr: AttributeSpec, mode: QueryMode) -> list[FieldDescriptor]:
    """
    Compute the result fields of one attribute.

    Args:
        attr (AttributeSpec): Attribute descriptor.
        mode (QueryMode): CURRENT or HISTORY.

    Returns:
        list[FieldDescriptor]: Fields in layout order; empty for unknown kinds.

    Notes:
        - Confidence is emitted only in HISTORY mode.
        - Multi-valued confidence is OPAQUE and carries no unit/bounds.
    """
    if attr.kind is AttrKind.PLAIN:
        return [_value_field(attr, map_data_type(attr.data_type or ""))]

    if attr.kind is AttrKind.OBSERVATION:
        value_type = SemanticType.OPAQUE if attr.multi_value else map_data_type(attr.data_type or "")
        fields = [_value_field(attr, value_type)]
        if attr.has_confidence and mode is QueryMode.HISTORY:
            label = f"{attr.display_name} - confidence"
            if attr.multi_value:
                fields.append(
                    FieldDescriptor(
                        name=confidence_field_name(attr.id),
                        semantic_type=SemanticType.OPAQUE,
                        display_name=label,
                    )
                )
            else:
                fields.append(
                    FieldDescriptor(
                        name=confidence_field_name(attr.id),
                        semantic_type=SemanticType.NUMBER,
                        display_name=label,
                        unit="percentunit",
                        min=0.0,
                        max=1.0,
                    )
                )
        return fields

    if attr.kind is AttrKind.TIMESERIES:
        return [
            FieldDescriptor(
                name=series_field_name(attr.id, key),
                semantic_type=map_data_type(series.data_type),
                display_name=f"{attr.display_name}{SERIES_SEPARATOR}{key}",
            )
            for key, series in attr.series.items()
        ]

    logger.warning("unknown attribute kind for %r; emitting no fields", attr.id)
    return []


def _value_field(attr: AttributeSpec, semantic_type: SemanticType) -> FieldDescriptor:
    return FieldDescriptor(
        name=attr.id,
        semantic_type=semantic_type,
        display_name=attr.display_name,
        description=attr.description or None,
    )


def attributes_for_query_kind(entity: EntitySpec, kind: QueryKind) -> list[str]:
    """
    List the attribute ids of an entity that a query kind may target.

    History queries accept observation/timeseries attributes; current-value queries
    accept plain/observation attributes; entity-type overviews take no attribute.
    """
    if kind is QueryKind.CURRENT_ETYPE_OVERVIEW:
        return []
    predicate = attr_has_history if kind is QueryKind.HISTORY_ATTR else attr_has_current_value
    return [key for key, attr in entity.attributes.items() if predicate(attr)]
