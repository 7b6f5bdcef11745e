"""
Pydantic v2 models for generated dashboard documents.

A Dashboard is an ordered list of Panels plus a time window and template
variables. Panels embed QueryDescriptors as their targets; the descriptors are
declarative here and are only executed when the document is loaded by a viewer,
which sends them back through the dispatcher unchanged.

Serialization
- ``Dashboard.to_grafana()`` produces the JSON-ready mapping (camelCase keys).
- ``Dashboard.to_json()`` is canonical JSON; equal inputs give identical bytes.

Notes
- Row panels (section headers) carry no datasource and no targets.
- Target mappings repeat the panel datasource reference.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dpview.core.grammar import VisualizationKind
from dpview.core.hashing import json_dumps_canonical
from dpview.core.schema import QueryDescriptor
from dpview.core.typing import JsonDict

__all__ = [
    "GridPos",
    "DatasourceRef",
    "Panel",
    "TimeWindow",
    "TemplateVariable",
    "Dashboard",
]


class GridPos(BaseModel):
    """Panel position on the 24-column grid."""

    model_config = ConfigDict(frozen=True)

    w: int
    h: int
    x: int = 0
    y: int = 0


class DatasourceRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    uid: str = ""


class Panel(BaseModel):
    """
    One visualization block.

    Attributes:
        title (str): Panel title.
        kind (VisualizationKind): Panel plugin (serialized as ``type``).
        grid_pos (GridPos): Position (serialized as ``gridPos``).
        datasource (DatasourceRef | None): Datasource reference; None for row panels.
        targets (list[QueryDescriptor]): Embedded query descriptors.
        field_config (JsonDict | None): ``fieldConfig`` block (defaults/overrides).
        options (JsonDict | None): Plugin options.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    kind: VisualizationKind = Field(alias="type")
    grid_pos: GridPos = Field(alias="gridPos")
    datasource: DatasourceRef | None = None
    targets: list[QueryDescriptor] = Field(default_factory=list)
    field_config: JsonDict | None = Field(default=None, alias="fieldConfig")
    options: JsonDict | None = None

    def to_grafana(self) -> JsonDict:
        out = self.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"targets"})
        if self.targets:
            ds = self.datasource.model_dump(mode="json") if self.datasource else None
            out["targets"] = [
                {**t.to_target(), **({"datasource": ds} if ds else {})} for t in self.targets
            ]
        return out


class TimeWindow(BaseModel):
    """Relative time window (``from``/``to`` expressions such as ``now-24h``)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    start: str = Field(default="now-24h", alias="from")
    end: str = Field(default="now", alias="to")

    @property
    def is_instant(self) -> bool:
        return self.start == self.end


class TemplateVariable(BaseModel):
    """Text-entry template variable; ``default`` seeds its current value."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    default: str = ""

    def to_grafana(self) -> JsonDict:
        return {
            "current": {"selected": False, "text": self.default, "value": self.default},
            "hide": 0,
            "label": self.label,
            "name": self.name,
            "options": [{"selected": True, "text": self.default, "value": self.default}],
            "query": self.default,
            "skipUrlSync": False,
            "type": "textbox",
        }


class Dashboard(BaseModel):
    """
    Generated dashboard document.

    Attributes:
        title (str): Dashboard title.
        uid (str): Stable uid derived from (variant, entity type).
        editable (bool): Whether viewers may edit the document.
        panels (list[Panel]): Panels in layout order.
        time (TimeWindow): Default time window.
        timepicker_hidden (bool): Hide the time picker (point-in-time snapshots).
        variables (list[TemplateVariable]): Template variables.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    uid: str
    editable: bool = True
    panels: list[Panel] = Field(default_factory=list)
    time: TimeWindow = Field(default_factory=TimeWindow)
    timepicker_hidden: bool = False
    variables: list[TemplateVariable] = Field(default_factory=list)

    def to_grafana(self) -> JsonDict:
        out: dict[str, Any] = {
            "title": self.title,
            "uid": self.uid,
            "editable": self.editable,
            "time": self.time.model_dump(by_alias=True),
            "panels": [p.to_grafana() for p in self.panels],
        }
        if self.timepicker_hidden:
            out["timepicker"] = {"hidden": True}
        if self.variables:
            out["templating"] = {"list": [v.to_grafana() for v in self.variables]}
        return out

    def to_json(self, indent: int | None = None) -> str:
        """Serialize to JSON with sorted keys; compact canonical form when ``indent`` is None."""
        if indent is None:
            return json_dumps_canonical(self.to_grafana())
        return json.dumps(self.to_grafana(), sort_keys=True, indent=indent, ensure_ascii=False)
