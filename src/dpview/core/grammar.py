"""
Canonical dpview grammar and helpers.

Defines attribute kinds, semantic value types, query kinds/modes, and
visualization kinds, plus zero-IO normalization helpers used across the stack.

Responsibilities
- Define the closed enums shared by the type system, dispatcher, and dashboards.
- Normalize loose wire values (ints, mixed-case strings) onto enum members.
- Keep the wire representation of each enum in its ``.value``.

Design principles
-----------------
1) Closed tags:
   - AttrKind is exhaustive over {PLAIN, OBSERVATION, TIMESERIES}. Anything else
     the backend declares normalizes to AttrKind.UNKNOWN, which downstream code
     treats as "no fields, warn" rather than an error.

2) Wire values:
   - AttrKind values are the backend's integer tags (1, 2, 4).
   - QueryKind values are the dashboard target ``queryType`` strings.
   - VisualizationKind values are panel plugin ids.

Examples
--------
>>> from dpview.core.grammar import AttrKind, attr_kind_from_value, query_kind_from_value
>>> attr_kind_from_value(2) is AttrKind.OBSERVATION
True
>>> attr_kind_from_value("Timeseries") is AttrKind.TIMESERIES
True
>>> attr_kind_from_value(3) is AttrKind.UNKNOWN
True
>>> query_kind_from_value("history_attr").value
'HISTORY_ATTR'
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .errors import GrammarError

__all__ = [
    "AttrKind",
    "SemanticType",
    "QueryKind",
    "QueryMode",
    "VisualizationKind",
    "attr_kind_from_value",
    "query_kind_from_value",
]


class AttrKind(Enum):
    """
    Attribute kind declared by the entity catalog.

    Notes:
        - PLAIN: static value, current value only.
        - OBSERVATION: time-stamped values, optional confidence, current + history.
        - TIMESERIES: named numeric sub-series sharing a time axis, history only.
        - UNKNOWN: any other declared tag; emits no fields.
    """

    UNKNOWN = 0
    PLAIN = 1
    OBSERVATION = 2
    TIMESERIES = 4


class SemanticType(Enum):
    """Semantic value type of a result field."""

    BOOLEAN = "boolean"
    STRING = "string"
    NUMBER = "number"
    TIME = "time"
    OPAQUE = "opaque"


class QueryKind(Enum):
    """
    Query descriptor kinds understood by the dispatcher.

    Serialized values appear as ``queryType`` in dashboard targets.
    """

    CURRENT_ATTR = "CURRENT_ATTR"
    HISTORY_ATTR = "HISTORY_ATTR"
    CURRENT_ETYPE_OVERVIEW = "CURRENT_ETYPE_OVERVIEW"
    CURRENT_ATTR_OVERVIEW = "CURRENT_ATTR_OVERVIEW"


class QueryMode(Enum):
    """Field layout mode: current values carry no confidence, history may."""

    CURRENT = "current"
    HISTORY = "history"


class VisualizationKind(Enum):
    """Panel plugin ids used in generated dashboards."""

    ROW = "row"
    STAT = "stat"
    TABLE = "table"
    TIMESERIES = "timeseries"
    MULTI_VALUE_TIMELINE = "cesnet-dp3multivaluetimeline-panel"


_ATTR_KIND_NAMES: dict[str, AttrKind] = {
    "plain": AttrKind.PLAIN,
    "observation": AttrKind.OBSERVATION,
    "observations": AttrKind.OBSERVATION,
    "timeseries": AttrKind.TIMESERIES,
}


def attr_kind_from_value(value: Any) -> AttrKind:
    """
    Normalize a declared attribute kind onto AttrKind.

    Args:
        value (Any): Integer tag (1, 2, 4), kind name (any case), or an AttrKind.

    Returns:
        AttrKind: Matching member, or AttrKind.UNKNOWN for anything unrecognized.
    """
    if isinstance(value, AttrKind):
        return value
    if isinstance(value, bool):
        return AttrKind.UNKNOWN
    if isinstance(value, int):
        for member in AttrKind:
            if member.value == value and member is not AttrKind.UNKNOWN:
                return member
        return AttrKind.UNKNOWN
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return attr_kind_from_value(int(text))
        return _ATTR_KIND_NAMES.get(text.lower(), AttrKind.UNKNOWN)
    return AttrKind.UNKNOWN


def query_kind_from_value(value: Any) -> QueryKind:
    """
    Normalize a query kind value (enum, or string in any case).

    Raises:
        GrammarError: If the value does not name a query kind.
    """
    if isinstance(value, QueryKind):
        return value
    if isinstance(value, str):
        try:
            return QueryKind(value.strip().upper())
        except ValueError:
            pass
    raise GrammarError(f"unknown query kind: {value!r}")
