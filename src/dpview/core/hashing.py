"""
Canonical JSON serialization and hashing helpers.

Provides a single canonical JSON policy and SHA-256 helpers used to derive stable
dashboard uids and to render opaque JSON values as text. This module is zero-IO
and uses only the Python standard library.

Notes:
    - Canonical JSON:
        - sort_keys=True
        - separators=(",", ":")
        - ensure_ascii=False
    - Hashing is performed over the UTF-8 encoded canonical JSON string.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

__all__ = [
    "json_dumps_canonical",
    "hash_json",
    "dashboard_uid",
]

# Grafana caps dashboard uids at 40 characters.
_UID_LENGTH = 40


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object.

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.

    Notes:
        This function assumes the input is JSON-serializable and does not perform
        coercion of unsupported types.
    """
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _sha256_hexdigest(s: str) -> str:
    """Compute SHA-256 hex digest of a UTF-8 string."""
    h = hashlib.sha256()
    h.update(s.encode("utf-8"))
    return h.hexdigest()


def hash_json(obj: Any) -> str:
    """
    Hash any JSON-serializable value via its canonical JSON form.

    Examples:
        >>> hash_json({"a": 1, "b": 2}) == hash_json({"b": 2, "a": 1})
        True
    """
    return _sha256_hexdigest(json_dumps_canonical(obj))


def dashboard_uid(variant: str, entity_type: str) -> str:
    """
    Derive a stable dashboard uid for a (variant, entity type) pair.

    Examples:
        >>> dashboard_uid("per_id", "ip") == dashboard_uid("per_id", "ip")
        True
        >>> len(dashboard_uid("full_overview", "ip"))
        40
    """
    return hash_json({"variant": variant, "entity_type": entity_type})[:_UID_LENGTH]
