"""
Lightweight typing aliases used across schemas, frames, and the dispatcher.

Notes:
    - Intended for annotations only; no runtime logic.

Examples:
    >>> from dpview.core.typing import Scope
    >>> def lookup(scope: Scope, name: str) -> str:
    ...     return scope.get(name, "")
    >>> lookup({"eid": "10.0.0.1"}, "eid")
    '10.0.0.1'
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

__all__ = [
    "JsonDict",
    "Row",
    "Scope",
    "Substitute",
]

# Broad JSON mapping alias for raw backend payloads.
JsonDict = dict[str, Any]

# One result row keyed by field name.
Row = dict[str, Any]

# Variable scope for template substitution and the substitution contract.
Scope = Mapping[str, str]
Substitute = Callable[[str, Scope], str]
