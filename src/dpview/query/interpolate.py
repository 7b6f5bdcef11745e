"""
Template-variable interpolation for query descriptors.

The substitution service is an explicit function passed to the dispatcher, with
the contract ``substitute(template, scope) -> str``. The default implementation
expands ``$name`` and ``${name}`` and leaves unknown variables untouched, so a
dashboard target such as ``{"eid": "$eid"}`` survives a scope that lacks ``eid``.

Examples:
    >>> dollar_substitute("${etype}/$eid", {"eid": "10.0.0.1", "etype": "ip"})
    'ip/10.0.0.1'
    >>> dollar_substitute("$missing", {})
    '$missing'
"""

from __future__ import annotations

from collections.abc import Mapping
from string import Template

from dpview.core.schema import QueryDescriptor
from dpview.core.typing import Scope, Substitute

__all__ = ["dollar_substitute", "interpolate_descriptor"]

_INTERPOLATED_FIELDS = ("entity_type", "attribute_id", "entity_id")


def dollar_substitute(template: str, scope: Scope) -> str:
    return Template(template).safe_substitute(scope)


def interpolate_descriptor(
    descriptor: QueryDescriptor,
    substitute: Substitute = dollar_substitute,
    scope: Mapping[str, str] | None = None,
) -> QueryDescriptor:
    """
    Return a fresh descriptor with entity type, attribute id, and entity id expanded.

    Args:
        descriptor (QueryDescriptor): Source descriptor; never modified.
        substitute (Substitute): Substitution function.
        scope (Mapping[str, str] | None): Variable values; empty when None.

    Returns:
        QueryDescriptor: New instance (unset fields stay None).
    """
    scope = scope or {}
    update: dict[str, str] = {}
    for name in _INTERPOLATED_FIELDS:
        value = getattr(descriptor, name)
        if value is not None:
            update[name] = substitute(value, scope)
    return descriptor.model_copy(update=update)
