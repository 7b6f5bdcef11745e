from __future__ import annotations

from datetime import UTC, datetime

from app.charts import history_intervals, history_timeline_chart
from dpview.core.fields import FieldDescriptor, history_time_fields
from dpview.core.frames import Frame
from dpview.core.grammar import SemanticType


def _history_frame(rows: list[dict]) -> Frame:
    frame = Frame(
        fields=[
            *history_time_fields(),
            FieldDescriptor(name="ports", semantic_type=SemanticType.OPAQUE, display_name="Ports"),
            FieldDescriptor(name="ports#c", semantic_type=SemanticType.OPAQUE, display_name="c"),
        ]
    )
    frame.extend(rows)
    return frame


def test_history_intervals_explodes_lists_with_confidence() -> None:
    frame = _history_frame(
        [
            {"t1": "2024-03-01T10:00:00", "t2": "2024-03-01T11:00:00", "ports": [22, 80], "ports#c": [1.0, 0.5]},
            {"t1": "2024-03-01T11:00:00", "t2": "2024-03-01T12:00:00", "ports": None},
            {"t1": "2024-03-01T12:00:00", "t2": "2024-03-01T13:00:00", "ports": 443},
        ]
    )

    df = history_intervals(frame, "ports")

    assert df.columns == ["t1", "t2", "value", "confidence"]
    assert df.get_column("value").to_list() == ["22", "80", "443"]
    assert df.get_column("confidence").to_list() == [1.0, 0.5, None]
    assert df.get_column("t1").to_list()[0] == datetime(2024, 3, 1, 10, tzinfo=UTC)


def test_history_intervals_empty_frame() -> None:
    df = history_intervals(_history_frame([]), "ports")
    assert df.height == 0
    assert df.columns == ["t1", "t2", "value", "confidence"]


def test_history_timeline_chart_encodes_intervals() -> None:
    frame = _history_frame(
        [{"t1": "2024-03-01T10:00:00", "t2": "2024-03-01T11:00:00", "ports": [22], "ports#c": [0.7]}]
    )

    spec = history_timeline_chart(history_intervals(frame, "ports"), title="Ports").to_dict()

    mark = spec["mark"]
    assert (mark["type"] if isinstance(mark, dict) else mark) == "bar"
    assert spec["encoding"]["x"]["field"] == "t1"
    assert spec["encoding"]["x2"]["field"] == "t2"
    assert spec["encoding"]["y"]["field"] == "value"
    assert spec["data"]["values"][0]["t1"] == "2024-03-01T10:00:00Z"
    assert spec["title"] == "Ports"
