"""
Core package aggregator for dpview contracts (grammar, schema, type system, frames).

## Contracts (single source of truth)
- Grammar: closed enums (AttrKind, SemanticType, QueryKind, QueryMode, VisualizationKind).
- Schema: pydantic models for the entity catalog and query descriptors.
- Fields: the attribute type system (type tokens and kinds to result fields).
- Frames: typed result sets, materializable as polars DataFrames.
- Hashing: canonical JSON and stable dashboard uids.
- Constants/Errors/Typing: shared defaults, exceptions, and aliases.

## Notes
- Zero network IO: stdlib + pydantic + polars only.
- Soft failures (unknown kinds) log a warning and degrade; they do not raise.

## Examples
```python
from dpview.core.schema import parse_catalog
from dpview.core.fields import fields_for_attribute
from dpview.core.grammar import QueryMode

catalog = parse_catalog({"ip": {"attribs": {"hostname": {"t": 1, "data_type": "string"}}}})
fields_for_attribute(catalog["ip"].attributes["hostname"], QueryMode.CURRENT)
```
"""
