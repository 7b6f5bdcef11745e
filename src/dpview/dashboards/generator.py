"""
Dashboard generators: entity descriptor -> Dashboard document.

Both generators are pure functions of (entity type, entity descriptor, datasource
reference, optional example id). They embed QueryDescriptors as panel targets
instead of executing them.

Per-id dashboard
- Four sections in fixed order, each led by a header row:
  "Plain attributes", "Current values of observation attributes",
  "History of observation attributes", "Timeseries attributes".
- Plain -> stat panel (CURRENT_ATTR).
- Observation -> stat panel (CURRENT_ATTR) + history panel (HISTORY_ATTR) whose
  plugin follows ``history_visualization_kind``.
- Timeseries -> timeseries panel (HISTORY_ATTR) with one override per series.
- Every target reads the entity id from the ``$eid`` text variable.

Full-overview dashboard
- One filterable, paginated table panel (CURRENT_ETYPE_OVERVIEW) and a
  zero-width ``now..now`` window with the time picker hidden.
"""

from __future__ import annotations

import logging

from dpview.core.constants import (
    CURRENT_PANEL_HEIGHT,
    EID_VARIABLE,
    GRID_WIDTH,
    HALF_WIDTH,
    HISTORY_PANEL_HEIGHT,
    MULTI_VALUE_DATA_TYPES,
    NUMERIC_DATA_TYPES,
    OVERVIEW_TABLE_HEIGHT,
)
from dpview.core.grammar import AttrKind, QueryKind, VisualizationKind
from dpview.core.hashing import dashboard_uid
from dpview.core.schema import AttributeSpec, EntitySpec, QueryDescriptor

from .layout import pack_half_width, section_header_pos
from .models import Dashboard, DatasourceRef, GridPos, Panel, TemplateVariable, TimeWindow

__all__ = [
    "PER_ID_VARIANT",
    "FULL_OVERVIEW_VARIANT",
    "SECTION_TITLES",
    "history_visualization_kind",
    "generate_per_id_dashboard",
    "generate_full_overview_dashboard",
]

logger = logging.getLogger(__name__)

PER_ID_VARIANT = "per_id"
FULL_OVERVIEW_VARIANT = "full_overview"

SECTION_TITLES: tuple[str, str, str, str] = (
    "Plain attributes",
    "Current values of observation attributes",
    "History of observation attributes",
    "Timeseries attributes",
)

_STAT_REDUCE_OPTIONS = {"calcs": [], "fields": "/.*/", "value": False}


def history_visualization_kind(attr: AttributeSpec) -> VisualizationKind:
    """
    Pick the history panel plugin for an observation attribute.

    Multi-valued, boolean-like (tag/binary) and categorical attributes use the
    multi-value timeline; numeric atomic types use a time series; anything else
    falls back to a table.
    """
    data_type = attr.data_type or ""
    categorical = data_type.startswith("category")
    if attr.multi_value or data_type in MULTI_VALUE_DATA_TYPES or categorical:
        return VisualizationKind.MULTI_VALUE_TIMELINE
    if data_type in NUMERIC_DATA_TYPES:
        return VisualizationKind.TIMESERIES
    return VisualizationKind.TABLE


def _target(entity_type: str, attr: AttributeSpec, kind: QueryKind) -> QueryDescriptor:
    return QueryDescriptor(
        query_kind=kind,
        entity_type=entity_type,
        attribute_id=attr.id,
        entity_id=f"${EID_VARIABLE}",
    )


def _stat_panel(
    entity_type: str, attr: AttributeSpec, ds: DatasourceRef, *, value_only: bool
) -> Panel:
    options: dict[str, object] = {"reduceOptions": dict(_STAT_REDUCE_OPTIONS)}
    if value_only:
        options["textMode"] = "value"
    return Panel(
        title=attr.display_name,
        kind=VisualizationKind.STAT,
        grid_pos=GridPos(w=HALF_WIDTH, h=CURRENT_PANEL_HEIGHT),
        datasource=ds,
        targets=[_target(entity_type, attr, QueryKind.CURRENT_ATTR)],
        options=options,
    )


def _history_panel(entity_type: str, attr: AttributeSpec, ds: DatasourceRef) -> Panel:
    return Panel(
        title=attr.display_name,
        kind=history_visualization_kind(attr),
        grid_pos=GridPos(w=HALF_WIDTH, h=HISTORY_PANEL_HEIGHT),
        datasource=ds,
        targets=[_target(entity_type, attr, QueryKind.HISTORY_ATTR)],
    )


def _timeseries_panel(entity_type: str, attr: AttributeSpec, ds: DatasourceRef) -> Panel:
    overrides = [
        {
            "matcher": {"id": "byName", "options": f"{attr.display_name}/{key}"},
            "properties": [
                {"id": "custom.axisPlacement", "value": "left"},
                {"id": "unit", "value": key},
            ],
        }
        for key in attr.series
    ]
    return Panel(
        title=attr.display_name,
        kind=VisualizationKind.TIMESERIES,
        grid_pos=GridPos(w=HALF_WIDTH, h=HISTORY_PANEL_HEIGHT),
        datasource=ds,
        targets=[_target(entity_type, attr, QueryKind.HISTORY_ATTR)],
        field_config={"overrides": overrides},
    )


def _sections(entity_type: str, entity: EntitySpec, ds: DatasourceRef) -> list[list[Panel]]:
    plain: list[Panel] = []
    obs_current: list[Panel] = []
    obs_history: list[Panel] = []
    timeseries: list[Panel] = []
    for attr in entity.attributes.values():
        if attr.kind is AttrKind.PLAIN:
            plain.append(_stat_panel(entity_type, attr, ds, value_only=False))
        elif attr.kind is AttrKind.OBSERVATION:
            obs_current.append(_stat_panel(entity_type, attr, ds, value_only=True))
            obs_history.append(_history_panel(entity_type, attr, ds))
        elif attr.kind is AttrKind.TIMESERIES:
            timeseries.append(_timeseries_panel(entity_type, attr, ds))
        else:
            logger.warning("skipping attribute %r of unknown kind", attr.id)
    return [plain, obs_current, obs_history, timeseries]


def generate_per_id_dashboard(
    entity_type: str,
    entity: EntitySpec,
    datasource: DatasourceRef,
    example_eid: str = "",
) -> Dashboard:
    """
    Build the per-entity-id dashboard of an entity type.

    Args:
        entity_type (str): Catalog key.
        entity (EntitySpec): Entity descriptor.
        datasource (DatasourceRef): Datasource reference embedded in panels and targets.
        example_eid (str): Default of the ``eid`` variable (empty if unknown).

    Returns:
        Dashboard: Sectioned document over ``now-24h..now``.
    """
    panels: list[Panel] = []
    cursor = 0
    sections = _sections(entity_type, entity, datasource)
    for title, section in zip(SECTION_TITLES, sections, strict=True):
        panels.append(
            Panel(title=title, kind=VisualizationKind.ROW, grid_pos=section_header_pos(cursor))
        )
        cursor += 1
        positions, cursor = pack_half_width([p.grid_pos.h for p in section], start_y=cursor)
        panels.extend(
            p.model_copy(update={"grid_pos": pos})
            for p, pos in zip(section, positions, strict=True)
        )

    logger.info("generated per-id dashboard for %r with %d panels", entity_type, len(panels))
    return Dashboard(
        title=f"{entity.name} ({entity_type})",
        uid=dashboard_uid(PER_ID_VARIANT, entity_type),
        panels=panels,
        time=TimeWindow(start="now-24h", end="now"),
        variables=[TemplateVariable(name=EID_VARIABLE, label="EID", default=example_eid)],
    )


def generate_full_overview_dashboard(
    entity_type: str, entity: EntitySpec, datasource: DatasourceRef
) -> Dashboard:
    """Build the single-table, point-in-time overview dashboard of an entity type."""
    title = f"{entity.name} ({entity_type}) - full overview"
    table = Panel(
        title=title,
        kind=VisualizationKind.TABLE,
        grid_pos=GridPos(x=0, y=0, w=GRID_WIDTH, h=OVERVIEW_TABLE_HEIGHT),
        datasource=datasource,
        targets=[
            QueryDescriptor(query_kind=QueryKind.CURRENT_ETYPE_OVERVIEW, entity_type=entity_type)
        ],
        field_config={"defaults": {"custom": {"filterable": True}}},
        options={"footer": {"enablePagination": True}},
    )
    logger.info("generated full overview dashboard for %r", entity_type)
    return Dashboard(
        title=title,
        uid=dashboard_uid(FULL_OVERVIEW_VARIANT, entity_type),
        panels=[table],
        time=TimeWindow(start="now", end="now"),
        timepicker_hidden=True,
    )
