"""
Grid layout for generated dashboards.

Panels are packed two per row at half width inside labeled sections. Each
section starts with a full-width, one-unit-high header row panel.

Packing rule
- Even index: column 0, starts a new row below the previous one.
- Odd index: column 1 (x = HALF_WIDTH), same y as the panel to its left.
- A row is as tall as its tallest panel; the cursor moves past it when the
  next row begins (or when the section ends).

Examples:
    >>> positions, next_y = pack_half_width([4, 4, 4], start_y=0)
    >>> [(p.x, p.y) for p in positions], next_y
    ([(0, 0), (12, 0), (0, 4)], 8)
"""

from __future__ import annotations

from collections.abc import Sequence

from dpview.core.constants import GRID_WIDTH, HALF_WIDTH, ROW_HEADER_HEIGHT

from .models import GridPos

__all__ = ["pack_half_width", "section_header_pos"]


def pack_half_width(heights: Sequence[int], start_y: int = 0) -> tuple[list[GridPos], int]:
    """
    Place half-width panels two per row.

    Args:
        heights (Sequence[int]): Panel heights in section order.
        start_y (int): First free row of the grid.

    Returns:
        tuple[list[GridPos], int]: Positions in input order and the next free row.
    """
    positions: list[GridPos] = []
    row_y = start_y
    row_h = 0
    for i, h in enumerate(heights):
        if i % 2 == 0:
            row_y += row_h
            row_h = h
            positions.append(GridPos(x=0, y=row_y, w=HALF_WIDTH, h=h))
        else:
            row_h = max(row_h, h)
            positions.append(GridPos(x=HALF_WIDTH, y=row_y, w=HALF_WIDTH, h=h))
    return positions, row_y + row_h


def section_header_pos(y: int) -> GridPos:
    """Full-width header row at ``y``; occupies ROW_HEADER_HEIGHT rows."""
    return GridPos(x=0, y=y, w=GRID_WIDTH, h=ROW_HEADER_HEIGHT)
