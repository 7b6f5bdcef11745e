"""
Typed result frames.

A Frame is the dispatcher's unit of output: an ordered list of FieldDescriptor
columns plus rows keyed by field name. Rows are projected onto the declared
fields on insert (unknown keys dropped, missing keys filled with None) and each
value is coerced according to its field's SemanticType, so every row of a frame
has the same shape.

Overview
- Frame.add(): project + coerce one raw mapping.
- Frame.to_polars(): materialize as a polars.DataFrame with a fixed schema.
- parse_utc_timestamp(): backend timestamps are UTC-naive; never read them as local time.

Dtype mapping
- BOOLEAN -> pl.Boolean
- STRING  -> pl.Utf8
- NUMBER  -> pl.Float64
- TIME    -> pl.Datetime("ms", "UTC")
- OPAQUE  -> pl.Object

Import DAG discipline
- Depends on stdlib, polars, and dpview.core.*.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import polars as pl

from .fields import FieldDescriptor
from .grammar import SemanticType
from .hashing import json_dumps_canonical
from .typing import Row

__all__ = [
    "Frame",
    "POLARS_DTYPES",
    "parse_utc_timestamp",
    "coerce_value",
]

# Polars exposes dtype singletons/classes; keep this mapping loosely typed.
POLARS_DTYPES: dict[SemanticType, object] = {
    SemanticType.BOOLEAN: pl.Boolean,
    SemanticType.STRING: pl.Utf8,
    SemanticType.NUMBER: pl.Float64,
    SemanticType.TIME: pl.Datetime("ms", "UTC"),
    SemanticType.OPAQUE: pl.Object,
}


def parse_utc_timestamp(value: str) -> datetime:
    """
    Parse a backend timestamp as an absolute UTC instant.

    Naive ISO strings are taken as UTC (equivalent to appending a ``Z`` marker);
    strings carrying an explicit offset are converted to UTC.

    Examples:
        >>> parse_utc_timestamp("2024-03-01T10:00:00").isoformat()
        '2024-03-01T10:00:00+00:00'
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def coerce_value(semantic_type: SemanticType, value: Any) -> Any:
    """
    Coerce one raw JSON value to the Python type expected for a semantic type.

    None passes through unchanged. OPAQUE values are kept as-is. Unparseable
    TIME and NUMBER values become None.
    """
    if value is None:
        return None
    if semantic_type is SemanticType.TIME:
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=UTC)
        try:
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return datetime.fromtimestamp(value / 1000, tz=UTC)
            return parse_utc_timestamp(str(value))
        except (OverflowError, OSError, ValueError):
            return None
    if semantic_type is SemanticType.STRING:
        return value if isinstance(value, str) else json_dumps_canonical(value)
    if semantic_type is SemanticType.BOOLEAN:
        return bool(value)
    if semantic_type is SemanticType.NUMBER:
        if isinstance(value, bool):
            return float(value)
        if isinstance(value, (int, float)):
            return value
        try:
            return float(value)
        except (TypeError, ValueError):
            return None
    return value


@dataclass(slots=True)
class Frame:
    """
    Typed result set.

    Attributes:
        ref_id (str): Reference of the query that produced the frame.
        fields (list[FieldDescriptor]): Columns in order; names are unique.
        rows (list[Row]): Rows keyed by field name, each with exactly the field names as keys.

    Examples:
        >>> from dpview.core.fields import eid_field
        >>> f = Frame(ref_id="A", fields=[eid_field()])
        >>> f.add({"eid": "10.0.0.1", "ignored": 1})
        >>> f.rows
        [{'eid': '10.0.0.1'}]
    """

    ref_id: str = "A"
    fields: list[FieldDescriptor] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def height(self) -> int:
        return len(self.rows)

    def get_field(self, name: str) -> FieldDescriptor:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    def add_fields(self, fields: Iterable[FieldDescriptor]) -> None:
        for f in fields:
            if f.name in self.field_names:
                continue
            self.fields.append(f)

    def add(self, raw: Mapping[str, Any]) -> None:
        """Project a raw mapping onto the frame's fields and append it."""
        self.rows.append({f.name: coerce_value(f.semantic_type, raw.get(f.name)) for f in self.fields})

    def extend(self, raws: Iterable[Mapping[str, Any]]) -> None:
        for raw in raws:
            self.add(raw)

    def column(self, name: str) -> list[Any]:
        self.get_field(name)
        return [row[name] for row in self.rows]

    def polars_schema(self) -> dict[str, object]:
        return {f.name: POLARS_DTYPES[f.semantic_type] for f in self.fields}

    def to_polars(self) -> pl.DataFrame:
        """
        Materialize the frame as a polars DataFrame.

        Returns:
            pl.DataFrame: One column per field with the mapped dtype (possibly zero rows).

        Notes:
            Columns are built non-strictly; values that cannot be represented in the
            target dtype become null.
        """
        series = [
            pl.Series(f.name, self.column(f.name), dtype=POLARS_DTYPES[f.semantic_type], strict=False)  # type: ignore[arg-type]
            for f in self.fields
        ]
        return pl.DataFrame(series)
