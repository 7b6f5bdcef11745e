"""
dpview.io: Backend access layer.

## Responsibilities
- Hold runtime configuration for backend access (ClientSettings).
- Talk to the backend API over async HTTP (Dp3Client) and validate the entity
  catalog at the boundary (via dpview.core.schema).
- Map transport and payload failures onto the IO error taxonomy.

## Public API
- ClientSettings: configuration with env > TOML > defaults precedence.
- Dp3Client: async client (catalog, attribute fetch, entity-type fetch, health).
- Errors: ClientError, ClientConfigError, SchemaUnavailable, BackendRequestFailed,
  HealthCheckMismatch.

## Import DAG discipline
- Depends only on stdlib, httpx, and dpview.core.*.
- MUST NOT import higher layers: query, dashboards, datasource, cli, or app.
"""

from __future__ import annotations

from .client import Dp3Client
from .config import ClientSettings
from .errors import (
    BackendRequestFailed,
    ClientConfigError,
    ClientError,
    HealthCheckMismatch,
    SchemaUnavailable,
)

__all__ = [
    "ClientSettings",
    "Dp3Client",
    "ClientError",
    "ClientConfigError",
    "SchemaUnavailable",
    "BackendRequestFailed",
    "HealthCheckMismatch",
]
