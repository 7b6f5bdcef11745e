from __future__ import annotations

from datetime import UTC, datetime

import polars as pl
import pytest

from dpview.core.fields import FieldDescriptor, eid_field, history_time_fields
from dpview.core.frames import Frame, coerce_value, parse_utc_timestamp
from dpview.core.grammar import SemanticType


def test_parse_utc_timestamp_never_uses_local_time() -> None:
    naive = parse_utc_timestamp("2024-03-01T10:00:00")
    assert naive == datetime(2024, 3, 1, 10, 0, tzinfo=UTC)
    assert parse_utc_timestamp("2024-03-01T10:00:00Z") == naive
    assert parse_utc_timestamp("2024-03-01T12:00:00+02:00") == naive


@pytest.mark.parametrize(
    "semantic_type,raw,expected",
    [
        (SemanticType.NUMBER, "1.5", 1.5),
        (SemanticType.NUMBER, "n/a", None),
        (SemanticType.NUMBER, 3, 3),
        (SemanticType.STRING, {"b": 1, "a": 2}, '{"a":2,"b":1}'),
        (SemanticType.STRING, "x", "x"),
        (SemanticType.BOOLEAN, 1, True),
        (SemanticType.OPAQUE, [1, 2], [1, 2]),
        (SemanticType.TIME, 0, datetime(1970, 1, 1, tzinfo=UTC)),
        (SemanticType.TIME, "not-a-date", None),
        (SemanticType.TIME, 1e20, None),
        (SemanticType.NUMBER, None, None),
    ],
)
def test_coerce_value(semantic_type: SemanticType, raw, expected) -> None:
    assert coerce_value(semantic_type, raw) == expected


def test_frame_add_projects_onto_fields() -> None:
    frame = Frame(
        ref_id="Q",
        fields=[eid_field(), FieldDescriptor("asn", SemanticType.NUMBER, "ASN")],
    )
    frame.add({"eid": "10.0.0.1", "asn": "64500", "extra": True})
    frame.add({"eid": "10.0.0.2"})
    assert frame.rows == [{"eid": "10.0.0.1", "asn": 64500.0}, {"eid": "10.0.0.2", "asn": None}]
    assert frame.height == 2
    assert frame.column("eid") == ["10.0.0.1", "10.0.0.2"]
    with pytest.raises(KeyError):
        frame.column("missing")


def test_add_fields_skips_duplicates() -> None:
    frame = Frame(fields=[eid_field()])
    frame.add_fields([eid_field(), *history_time_fields()])
    assert frame.field_names == ["eid", "t1", "t2"]


def test_to_polars_uses_fixed_schema() -> None:
    frame = Frame(
        fields=[
            *history_time_fields(),
            FieldDescriptor("rtt", SemanticType.NUMBER, "RTT"),
            FieldDescriptor("up", SemanticType.BOOLEAN, "Up"),
        ]
    )
    frame.add({"t1": "2024-03-01T10:00:00", "t2": "2024-03-01T11:00:00", "rtt": 12, "up": 1})
    df = frame.to_polars()
    assert df.columns == ["t1", "t2", "rtt", "up"]
    assert df.schema["t1"] == pl.Datetime("ms", "UTC")
    assert df.schema["rtt"] == pl.Float64
    assert df.schema["up"] == pl.Boolean
    assert df.get_column("rtt").to_list() == [12.0]


def test_empty_frame_to_polars_keeps_columns() -> None:
    frame = Frame(fields=[eid_field()])
    df = frame.to_polars()
    assert df.columns == ["eid"]
    assert df.height == 0
    assert frame.polars_schema() == {"eid": pl.Utf8}
