"""
Core exception types raised by catalog parsing and enum normalization.

Provides typed exceptions for core-domain failures:
- SchemaError for catalog shape and attribute invariant violations.
- GrammarError for enum-like values that cannot be normalized.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Validators in dpview.core.schema raise SchemaError; pydantic wraps it into
      a ValidationError at the model boundary.
    - Soft failures (unknown attribute kinds, invalid query targets) are NOT
      exceptions; they degrade to empty output plus a warning.

Examples:
    >>> from dpview.core.errors import SchemaError
    >>> try:
    ...     raise SchemaError("timeseries attribute needs series")
    ... except ValueError as e:
    ...     msg = str(e)
    >>> "series" in msg
    True
"""

from __future__ import annotations

__all__ = [
    "SchemaError",
    "GrammarError",
]


class SchemaError(ValueError):
    """Catalog-level validation failure (shape, attribute invariants)."""


class GrammarError(ValueError):
    """Enum normalization failure (e.g., unknown query kind)."""
