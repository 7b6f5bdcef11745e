from __future__ import annotations

import polars as pl

from app.ui.helpers import entity_caption, frame_to_display, run_async
from dpview.core.fields import FieldDescriptor, eid_field
from dpview.core.frames import Frame
from dpview.core.grammar import SemanticType


def test_frame_to_display_uses_display_names_and_json_for_opaque() -> None:
    frame = Frame(
        fields=[
            eid_field(),
            FieldDescriptor(name="ports", semantic_type=SemanticType.OPAQUE, display_name="Open ports"),
            FieldDescriptor(name="rtt", semantic_type=SemanticType.NUMBER, display_name="RTT"),
        ]
    )
    frame.add({"eid": "a", "ports": [80, 22], "rtt": 1.5})
    frame.add({"eid": "b"})

    df = frame_to_display(frame)

    assert df.columns == ["EID", "Open ports", "RTT"]
    assert df.schema["Open ports"] == pl.Utf8
    assert df.schema["RTT"] == pl.Float64
    assert df.get_column("Open ports").to_list() == ["[80,22]", None]
    assert df.get_column("RTT").to_list() == [1.5, None]


def test_frame_to_display_disambiguates_duplicate_labels() -> None:
    frame = Frame(
        fields=[
            FieldDescriptor(name="a", semantic_type=SemanticType.STRING, display_name="Name"),
            FieldDescriptor(name="b", semantic_type=SemanticType.STRING, display_name="Name"),
        ]
    )
    frame.add({"a": "x", "b": "y"})

    assert frame_to_display(frame).columns == ["Name", "Name (b)"]


def test_entity_caption(catalog) -> None:
    assert entity_caption("ip", catalog["ip"]) == "ip · ~ 3 EIDs · 6 attributes"
    assert entity_caption("empty", catalog["empty"]) == "empty · ~ 0 EIDs · 0 attributes"


def test_run_async_returns_result() -> None:
    async def answer() -> int:
        return 42

    assert run_async(answer()) == 42
