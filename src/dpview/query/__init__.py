"""
dpview.query: Query interpolation and dispatch.

## Public API
- dollar_substitute / interpolate_descriptor: template-variable expansion.
- dispatch: evaluate one descriptor against a catalog snapshot.
- query: evaluate a batch concurrently (catalog fetched once, order preserved).
- entity_overview_query / full_overview_query: the two overview fetch shapes.
- QueryResult: per-descriptor outcome of a batch.

## Import DAG discipline
- Depends on dpview.core.* and dpview.io.*.
- MUST NOT import dashboards, datasource, cli, or app.
"""

from __future__ import annotations

from .dispatcher import (
    QueryResult,
    dispatch,
    entity_overview_query,
    full_overview_query,
    overview_frame,
    query,
)
from .interpolate import dollar_substitute, interpolate_descriptor

__all__ = [
    "QueryResult",
    "dispatch",
    "query",
    "entity_overview_query",
    "full_overview_query",
    "overview_frame",
    "dollar_substitute",
    "interpolate_descriptor",
]
