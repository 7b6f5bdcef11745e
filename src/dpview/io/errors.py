"""
Custom exceptions for the dpview.io module.

Purpose
- Provide IO-layer error types that map onto the failure taxonomy of backend access.
- Keep dpview.core as the source of truth for catalog/enum errors (see dpview.core.errors).

Taxonomy
- ClientConfigError: invalid or unsupported client configuration.
- SchemaUnavailable: the entity catalog could not be fetched or parsed; fatal for a batch.
- BackendRequestFailed: transport failure or non-2xx answer on a data fetch; isolated
  to the one dispatch that issued it.
- HealthCheckMismatch: health endpoint reachable but its body is unexpected.

Notes
- Invalid query targets are NOT errors; the dispatcher answers them with no frames.
"""

from __future__ import annotations

from typing import Any


class ClientError(Exception):
    """
    Base class for backend-access errors in dpview.io.

    Notes:
        Use this as a catch-all for IO-layer failures, distinct from dpview.core errors.
    """


class ClientConfigError(ClientError):
    """
    Raised when client configuration is invalid.

    Examples:
        - Empty api_url
        - Non-positive timeout or row limits
    """


class SchemaUnavailable(ClientError):
    """Raised when the entity catalog cannot be fetched or does not validate."""


class BackendRequestFailed(ClientError):
    """
    Raised when a data fetch fails in transport or answers with a non-2xx status.

    Attributes:
        url (str): Requested URL (without query string).
        status_code (int | None): HTTP status when a response was received.
    """

    def __init__(self, message: str, *, url: str = "", status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class HealthCheckMismatch(ClientError):
    """
    Raised when the health endpoint answers with an unexpected body.

    Attributes:
        body (Any): Decoded (or raw text) body, echoed for diagnosis.
    """

    def __init__(self, message: str, *, body: Any = None) -> None:
        super().__init__(message)
        self.body = body
