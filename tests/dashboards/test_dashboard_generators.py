from __future__ import annotations

import json

import pytest

from dpview.core.grammar import AttrKind, VisualizationKind
from dpview.core.schema import AttributeSpec
from dpview.dashboards import (
    SECTION_TITLES,
    DatasourceRef,
    generate_full_overview_dashboard,
    generate_per_id_dashboard,
    history_visualization_kind,
)

DS = DatasourceRef(type="cesnet-dp3-datasource", uid="dp3-uid")


def _obs(data_type: str, **kw) -> AttributeSpec:
    return AttributeSpec.model_validate({"id": "a", "t": 2, "data_type": data_type, **kw})


@pytest.mark.parametrize(
    "attr,expected",
    [
        (_obs("string", multi_value=True), VisualizationKind.MULTI_VALUE_TIMELINE),
        (_obs("tag"), VisualizationKind.MULTI_VALUE_TIMELINE),
        (_obs("binary"), VisualizationKind.MULTI_VALUE_TIMELINE),
        (_obs("category<string; a, b>"), VisualizationKind.MULTI_VALUE_TIMELINE),
        (_obs("int64"), VisualizationKind.TIMESERIES),
        (_obs("float"), VisualizationKind.TIMESERIES),
        (_obs("ipv4"), VisualizationKind.TABLE),
        (_obs("dict<k:int>"), VisualizationKind.TABLE),
    ],
)
def test_history_visualization_kind(attr, expected) -> None:
    assert history_visualization_kind(attr) is expected


def test_full_overview_dashboard(catalog) -> None:
    dash = generate_full_overview_dashboard("ip", catalog["ip"], DS)
    doc = dash.to_grafana()

    assert doc["title"] == "IP address (ip) - full overview"
    assert doc["time"] == {"from": "now", "to": "now"}
    assert doc["timepicker"] == {"hidden": True}
    assert dash.time.is_instant
    assert "templating" not in doc
    (panel,) = doc["panels"]
    assert panel["type"] == "table"
    assert panel["gridPos"] == {"w": 24, "h": 18, "x": 0, "y": 0}
    assert panel["fieldConfig"]["defaults"]["custom"]["filterable"] is True
    assert panel["options"]["footer"]["enablePagination"] is True
    (target,) = panel["targets"]
    assert target["queryType"] == "CURRENT_ETYPE_OVERVIEW"
    assert target["etype"] == "ip"
    assert target["datasource"] == {"type": "cesnet-dp3-datasource", "uid": "dp3-uid"}


def test_per_id_dashboard_sections_and_positions(catalog) -> None:
    dash = generate_per_id_dashboard("ip", catalog["ip"], DS, example_eid="10.0.0.1")

    layout = [(p.title, p.kind, p.grid_pos.x, p.grid_pos.y) for p in dash.panels]
    assert layout == [
        (SECTION_TITLES[0], VisualizationKind.ROW, 0, 0),
        ("Hostname", VisualizationKind.STAT, 0, 1),
        ("ASN", VisualizationKind.STAT, 12, 1),
        (SECTION_TITLES[1], VisualizationKind.ROW, 0, 5),
        ("Open ports", VisualizationKind.STAT, 0, 6),
        ("OS", VisualizationKind.STAT, 12, 6),
        ("RTT", VisualizationKind.STAT, 0, 10),
        (SECTION_TITLES[2], VisualizationKind.ROW, 0, 14),
        ("Open ports", VisualizationKind.MULTI_VALUE_TIMELINE, 0, 15),
        ("OS", VisualizationKind.TABLE, 12, 15),
        ("RTT", VisualizationKind.TIMESERIES, 0, 27),
        (SECTION_TITLES[3], VisualizationKind.ROW, 0, 39),
        ("Traffic", VisualizationKind.TIMESERIES, 0, 40),
    ]
    assert dash.title == "IP address (ip)"
    assert (dash.time.start, dash.time.end) == ("now-24h", "now")
    assert not dash.time.is_instant


def test_per_id_dashboard_targets_and_variable(catalog) -> None:
    doc = generate_per_id_dashboard("ip", catalog["ip"], DS, example_eid="10.0.0.1").to_grafana()

    rows = [p for p in doc["panels"] if p["type"] == "row"]
    assert all("targets" not in p and "datasource" not in p for p in rows)

    targets = [t for p in doc["panels"] for t in p.get("targets", [])]
    assert targets
    assert {t["eid"] for t in targets} == {"$eid"}
    kinds = {(t["attr"], t["queryType"]) for t in targets}
    assert ("hostname", "CURRENT_ATTR") in kinds
    assert ("os", "HISTORY_ATTR") in kinds
    assert ("traffic", "HISTORY_ATTR") in kinds
    assert ("traffic", "CURRENT_ATTR") not in kinds

    (variable,) = doc["templating"]["list"]
    assert (variable["name"], variable["label"], variable["type"]) == ("eid", "EID", "textbox")
    assert variable["current"]["value"] == "10.0.0.1"
    assert "timepicker" not in doc


def test_stat_panel_options_differ_by_kind(catalog) -> None:
    dash = generate_per_id_dashboard("ip", catalog["ip"], DS)
    plain_stat = dash.panels[1]
    obs_stat = dash.panels[4]

    assert plain_stat.options == {"reduceOptions": {"calcs": [], "fields": "/.*/", "value": False}}
    assert obs_stat.options["textMode"] == "value"


def test_timeseries_panel_overrides_per_series(catalog) -> None:
    dash = generate_per_id_dashboard("ip", catalog["ip"], DS)
    traffic = dash.panels[-1]

    overrides = traffic.field_config["overrides"]
    assert [o["matcher"] for o in overrides] == [
        {"id": "byName", "options": "Traffic/bps"},
        {"id": "byName", "options": "Traffic/pps"},
    ]
    assert overrides[0]["properties"] == [
        {"id": "custom.axisPlacement", "value": "left"},
        {"id": "unit", "value": "bps"},
    ]


def test_empty_entity_keeps_four_stacked_headers(catalog) -> None:
    dash = generate_per_id_dashboard("empty", catalog["empty"], DS)
    assert [(p.title, p.grid_pos.y) for p in dash.panels] == [(t, i) for i, t in enumerate(SECTION_TITLES)]
    assert dash.variables[0].default == ""


def test_dashboard_json_is_deterministic(catalog) -> None:
    a = generate_per_id_dashboard("ip", catalog["ip"], DS, example_eid="x")
    b = generate_per_id_dashboard("ip", catalog["ip"], DS, example_eid="x")

    assert a.to_json() == b.to_json()
    assert json.loads(a.to_json(indent=2)) == a.to_grafana()
    assert a.uid != generate_full_overview_dashboard("ip", catalog["ip"], DS).uid


def test_attribute_kinds_present_in_fixture(catalog) -> None:
    kinds = {a.kind for a in catalog["ip"].attributes.values()}
    assert kinds == {AttrKind.PLAIN, AttrKind.OBSERVATION, AttrKind.TIMESERIES}
