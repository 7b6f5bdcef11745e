"""
Shared UI helper utilities for the dpview Streamlit application.

This module centralizes small cross-cutting helpers (async bridging, table
shaping, entity captions) used by the page. It contains no Streamlit state
manipulation itself, so it can be unit-tested without a running server.

Notes:
    - All functions include Google-style docstrings.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

import polars as pl

from dpview.core.frames import Frame
from dpview.core.grammar import SemanticType
from dpview.core.hashing import json_dumps_canonical
from dpview.core.schema import EntitySpec

T = TypeVar("T")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion from Streamlit's synchronous script thread.

    Args:
        coro (Coroutine): Coroutine to run.

    Returns:
        T: The coroutine's result.
    """
    return asyncio.run(coro)


def frame_to_display(frame: Frame) -> pl.DataFrame:
    """Convert a result frame into a display table keyed by field display names.

    Opaque values (sets, arrays, dicts) are rendered as canonical JSON text so
    the table stays a plain, Arrow-compatible frame.

    Args:
        frame (Frame): Result frame.

    Returns:
        pl.DataFrame: One column per field, headed by its display name.
    """
    typed_fields = [f for f in frame.fields if f.semantic_type is not SemanticType.OPAQUE]
    typed = Frame(ref_id=frame.ref_id, fields=typed_fields, rows=frame.rows).to_polars()

    columns: list[pl.Series] = []
    seen: set[str] = set()
    for f in frame.fields:
        label = f.display_name if f.display_name not in seen else f"{f.display_name} ({f.name})"
        seen.add(label)
        if f.semantic_type is SemanticType.OPAQUE:
            text = [None if v is None else json_dumps_canonical(v) for v in frame.column(f.name)]
            columns.append(pl.Series(label, text, dtype=pl.Utf8))
        else:
            columns.append(typed.get_column(f.name).alias(label))
    return pl.DataFrame(columns)


def entity_caption(key: str, spec: EntitySpec) -> str:
    """Caption line for an entity type section.

    Args:
        key (str): Entity type key.
        spec (EntitySpec): Entity descriptor.

    Returns:
        str: e.g. ``"ip · ~ 42 EIDs · 7 attributes"``.
    """
    return f"{key} · ~ {spec.estimated_id_count} EIDs · {len(spec.attributes)} attributes"
