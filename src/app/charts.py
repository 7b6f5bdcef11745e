from __future__ import annotations

from typing import Any

import altair as alt
import polars as pl

from dpview.core.fields import confidence_field_name
from dpview.core.frames import Frame

__all__ = ["history_intervals", "history_timeline_chart"]


# Uniform chart defaults for a professional look
def _apply_chart_defaults(ch: alt.Chart) -> alt.Chart:
    return (
        ch.configure_axis(labelFontSize=12, titleFontSize=12, grid=True)
        .configure_legend(labelFontSize=12, titleFontSize=12)
        .configure_title(fontSize=14)
        .configure_view(strokeOpacity=0)
    )


def _value_label(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def history_intervals(frame: Frame, attr_id: str) -> pl.DataFrame:
    """Flatten an attribute history frame into one interval row per value.

    Multi-valued entries (lists) become one row per element, paired with the
    element of the confidence list at the same index when present.

    Args:
        frame (Frame): History frame with ``t1``, ``t2``, ``<attr_id>`` and optionally
            ``<attr_id>#c``.
        attr_id (str): Attribute id.

    Returns:
        pl.DataFrame: Columns ``t1``, ``t2``, ``value`` (str) and ``confidence`` (f64).
    """
    conf_name = confidence_field_name(attr_id)
    has_conf = conf_name in frame.field_names
    t1s: list[Any] = []
    t2s: list[Any] = []
    values: list[str] = []
    confs: list[float | None] = []
    for row in frame.rows:
        value = row.get(attr_id)
        conf = row.get(conf_name) if has_conf else None
        if value is None:
            continue
        items = value if isinstance(value, list) else [value]
        conf_items = conf if isinstance(conf, list) else [conf] * len(items)
        for i, item in enumerate(items):
            c = conf_items[i] if i < len(conf_items) else None
            t1s.append(row["t1"])
            t2s.append(row["t2"])
            values.append(_value_label(item))
            confs.append(float(c) if isinstance(c, (int, float)) else None)
    return pl.DataFrame(
        {"t1": t1s, "t2": t2s, "value": values, "confidence": confs},
        schema={
            "t1": pl.Datetime("ms", "UTC"),
            "t2": pl.Datetime("ms", "UTC"),
            "value": pl.Utf8,
            "confidence": pl.Float64,
        },
    )


def history_timeline_chart(intervals: pl.DataFrame, *, title: str = "") -> alt.Chart:
    """Interval timeline: one bar from t1 to t2 per value, one lane per distinct value.

    Args:
        intervals (pl.DataFrame): Output of history_intervals.
        title (str): Chart title.

    Returns:
        alt.Chart: Bar chart with x/x2 time encoding; opacity follows confidence.
    """
    data = intervals.with_columns(
        pl.col("t1").dt.strftime("%Y-%m-%dT%H:%M:%SZ"),
        pl.col("t2").dt.strftime("%Y-%m-%dT%H:%M:%SZ"),
    ).to_dicts()
    ch = (
        alt.Chart(alt.Data(values=data))
        .mark_bar()
        .encode(
            x=alt.X("t1:T", title="Time"),
            x2="t2:T",
            y=alt.Y("value:N", title="Value"),
            color=alt.Color("value:N", legend=None),
            opacity=alt.Opacity("confidence:Q", scale=alt.Scale(domain=[0, 1]), legend=None),
            tooltip=["value:N", "t1:T", "t2:T", "confidence:Q"],
        )
        .properties(title=title, height=max(60, 24 * intervals.get_column("value").n_unique()))
    )
    return _apply_chart_defaults(ch)
