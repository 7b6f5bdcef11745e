"""
dpview core defaults.

Defines request caps, the health-check contract, and dashboard grid geometry
consumed by the dispatcher and the dashboard generators. This module is zero-IO
and uses only the Python standard library.

Notes:
    - The backend grid is 24 columns wide; generated panels use half width.
    - OVERVIEW_LIMIT and PREVIEW_LIMIT are the two fixed row caps of the
      entity-type fetch (full overview vs. interactive preview).
"""

from __future__ import annotations

__all__ = [
    "OVERVIEW_LIMIT",
    "PREVIEW_LIMIT",
    "HEALTH_OK_DETAIL",
    "GRID_WIDTH",
    "HALF_WIDTH",
    "ROW_HEADER_HEIGHT",
    "CURRENT_PANEL_HEIGHT",
    "HISTORY_PANEL_HEIGHT",
    "OVERVIEW_TABLE_HEIGHT",
    "NUMERIC_DATA_TYPES",
    "MULTI_VALUE_DATA_TYPES",
    "DEFAULT_DATASOURCE_TYPE",
    "EID_VARIABLE",
]

# Row cap for the full entity-type overview fetch.
OVERVIEW_LIMIT: int = 9999

# Row cap for the interactive preview fetch (browse tooling).
PREVIEW_LIMIT: int = 10

# The health endpoint answers {"detail": HEALTH_OK_DETAIL} when the API is up.
HEALTH_OK_DETAIL: str = "It works!"

GRID_WIDTH: int = 24
HALF_WIDTH: int = GRID_WIDTH // 2
ROW_HEADER_HEIGHT: int = 1
CURRENT_PANEL_HEIGHT: int = 4
HISTORY_PANEL_HEIGHT: int = 12
OVERVIEW_TABLE_HEIGHT: int = 18

# Atomic data types rendered as a continuous time series.
NUMERIC_DATA_TYPES: frozenset[str] = frozenset({"int", "int64", "float"})

# Atomic data types rendered as a multi-value timeline (boolean-like).
MULTI_VALUE_DATA_TYPES: frozenset[str] = frozenset({"tag", "binary"})

DEFAULT_DATASOURCE_TYPE: str = "cesnet-dp3-datasource"

# Name of the dashboard template variable holding the entity id.
EID_VARIABLE: str = "eid"
