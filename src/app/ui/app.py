"""
Streamlit application orchestrator for dpview.

Renders an overview page of the backend: one section per entity type with a
preview of current values, an attribute history timeline, and downloads for
both generated dashboards.

Responsibilities:
    - Configure the Streamlit page and resolve ClientSettings (sidebar API URL).
    - Check backend health and fetch the entity catalog once per render.
    - Per entity type: id filter -> preview overview table (capped preview fetch).
    - Per entity type: history timeline of one observation attribute for one id.
    - Per entity type: per-id and full-overview dashboard JSON downloads.

Notes:
    - Each backend call runs through app.ui.helpers.run_async; nothing is cached
      across reruns.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any, cast

import streamlit as st

from app import charts as app_charts
from dpview.core.grammar import AttrKind, QueryKind
from dpview.core.schema import EntitySpec, QueryDescriptor, TimeRange
from dpview.datasource import DataSource
from dpview.io import ClientError, ClientSettings

from .helpers import entity_caption, frame_to_display, run_async


def _settings(default_api_url: str | None, default_config: str | None) -> ClientSettings:
    base = ClientSettings.load(default_config)
    api_url = st.sidebar.text_input("API URL", value=default_api_url or base.api_url)
    return replace(base, api_url=api_url).validate()


def _render_history(settings: ClientSettings, key: str, spec: EntitySpec) -> None:
    observations = [a for a in spec.attributes.values() if a.kind is AttrKind.OBSERVATION]
    if not observations:
        st.caption("No observation attributes.")
        return
    c1, c2, c3 = st.columns([2, 2, 1])
    with c1:
        attr_id = st.selectbox(
            "Attribute",
            options=[a.id for a in observations],
            format_func=lambda a: spec.attributes[a].display_name,
            key=f"hist_attr_{key}",
        )
    with c2:
        eid = st.text_input("EID", key=f"hist_eid_{key}")
    with c3:
        hours = st.number_input("Hours", min_value=1, value=24, key=f"hist_hours_{key}")
    if not eid:
        st.caption("Enter an EID to show the attribute history.")
        return

    now = datetime.now(tz=UTC)
    window = TimeRange(start=now - timedelta(hours=int(hours)), end=now)
    descriptor = QueryDescriptor(
        query_kind=QueryKind.HISTORY_ATTR, entity_type=key, attribute_id=attr_id, entity_id=eid
    )

    async def fetch() -> Any:
        async with DataSource(settings) as ds:
            return await ds.query([descriptor], window)

    (result,) = run_async(fetch())
    if result.error is not None:
        st.error(f"History query failed: {result.error}")
        return
    if not result.frames or not result.frames[0].rows:
        st.caption("No history in the selected window.")
        return
    intervals = app_charts.history_intervals(result.frames[0], str(attr_id))
    ch = app_charts.history_timeline_chart(intervals, title=spec.attributes[attr_id].display_name)
    st.altair_chart(cast(Any, ch), theme=None, use_container_width=True)


def _render_entity(settings: ClientSettings, key: str, spec: EntitySpec) -> None:
    st.subheader(spec.name)
    st.caption(entity_caption(key, spec))

    eid_filter = st.text_input(
        "EID filter", key=f"eid_filter_{key}", help="EIDs must contain this substring"
    )

    async def fetch() -> Any:
        async with DataSource(settings) as ds:
            preview = await ds.entity_overview_query(key, eid_filter, entity=spec)
            example_eid = str(preview.rows[0]["eid"] or "") if preview.rows else ""
            per_id = await ds.generate_per_id_dashboard(key, example_eid, entity=spec)
            full = await ds.generate_full_overview_dashboard(key, entity=spec)
            return preview, per_id, full

    try:
        with st.spinner(f"Loading {key} ..."):
            preview, per_id, full = run_async(fetch())
    except ClientError as e:
        st.error(f"Failed to load {key}: {e}")
        return

    st.dataframe(frame_to_display(preview), use_container_width=True)

    d1, d2 = st.columns(2)
    with d1:
        st.download_button(
            "Generate dashboard",
            data=per_id.to_json(indent=2),
            file_name=f"{key}-dashboard.json",
            mime="application/json",
            key=f"dl_per_id_{key}",
        )
    with d2:
        st.download_button(
            "Generate full overview dashboard",
            data=full.to_json(indent=2),
            file_name=f"{key}-full-overview.json",
            mime="application/json",
            key=f"dl_full_{key}",
        )

    with st.expander("Attribute history", expanded=False):
        _render_history(settings, key, spec)


def streamlit_app(default_api_url: str | None = None, default_config: str | None = None) -> None:
    """Render the dpview Streamlit application.

    Args:
        default_api_url (str | None): Preselected API URL (overrides config).
        default_config (str | None): Optional TOML config path for ClientSettings.load.

    Returns:
        None
    """
    st.set_page_config(page_title="dpview", layout="wide")
    st.title("Entity overview")

    try:
        settings = _settings(default_api_url, default_config)
    except ClientError as e:
        st.error(str(e))
        return

    async def fetch() -> Any:
        async with DataSource(settings) as ds:
            status = await ds.health_check()
            catalog = await ds.get_entity_spec() if status.ok else {}
            return status, catalog

    try:
        status, catalog = run_async(fetch())
    except ClientError as e:
        st.error(f"Failed to load entity catalog: {e}")
        return
    if not status.ok:
        st.error(status.message)
        return
    st.sidebar.success(status.message)

    if not catalog:
        st.info("The backend declares no entity types.")
        return
    for key, spec in catalog.items():
        _render_entity(settings, key, spec)
        st.divider()
