"""
dpview.dashboards: Dashboard documents synthesized from the entity catalog.

## Public API
- Dashboard, Panel, GridPos, DatasourceRef, TimeWindow, TemplateVariable: document models.
- pack_half_width / section_header_pos: grid layout.
- generate_per_id_dashboard / generate_full_overview_dashboard: generators.
- history_visualization_kind: history panel plugin selection.

## Import DAG discipline
- Depends only on pydantic and dpview.core.*; performs no IO.
"""

from __future__ import annotations

from .generator import (
    FULL_OVERVIEW_VARIANT,
    PER_ID_VARIANT,
    SECTION_TITLES,
    generate_full_overview_dashboard,
    generate_per_id_dashboard,
    history_visualization_kind,
)
from .layout import pack_half_width, section_header_pos
from .models import Dashboard, DatasourceRef, GridPos, Panel, TemplateVariable, TimeWindow

__all__ = [
    "Dashboard",
    "Panel",
    "GridPos",
    "DatasourceRef",
    "TimeWindow",
    "TemplateVariable",
    "pack_half_width",
    "section_header_pos",
    "generate_per_id_dashboard",
    "generate_full_overview_dashboard",
    "history_visualization_kind",
    "PER_ID_VARIANT",
    "FULL_OVERVIEW_VARIANT",
    "SECTION_TITLES",
]
