"""
Configuration for the dpview.io module.

Defines ClientSettings, a frozen dataclass carrying runtime configuration for backend
access and dashboard datasource references. Defaults for the row caps are sourced
from dpview.core.constants (the single source of truth).

Source of truth
- dpview.core.constants.OVERVIEW_LIMIT, PREVIEW_LIMIT, DEFAULT_DATASOURCE_TYPE

Import DAG discipline
- Depends only on stdlib and dpview.core.constants.
- Does not import higher layers (query, dashboards, datasource, app).

Notes
- Precedence: environment > TOML > defaults.
- Unparseable values are ignored and the previous value is kept.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from dpview.core.constants import DEFAULT_DATASOURCE_TYPE
from dpview.core.constants import OVERVIEW_LIMIT as CORE_OVERVIEW_LIMIT
from dpview.core.constants import PREVIEW_LIMIT as CORE_PREVIEW_LIMIT

from .errors import ClientConfigError

__all__ = ["ClientSettings"]

_TRUE = {"1", "true", "t", "yes", "y", "on"}


def _bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        return v.strip().lower() in _TRUE
    return False


@dataclass(frozen=True)
class ClientSettings:
    """
    Runtime settings for backend access.

    Attributes:
        api_url (str): Base URL of the backend API (trailing slash ignored).
        timeout (float): Per-request timeout in seconds.
        verify_tls (bool): Verify TLS certificates.
        overview_limit (int): Row cap for the full entity-type overview fetch.
        preview_limit (int): Row cap for the interactive preview fetch.
        datasource_type (str): Datasource ``type`` embedded in generated dashboards.
        datasource_uid (str): Datasource ``uid`` embedded in generated dashboards.

    Examples:
        >>> from dpview.io import ClientSettings
        >>> ClientSettings(api_url="http://dp3.local/api").base_url("/entities")
        'http://dp3.local/api/entities'
    """

    api_url: str = "http://localhost:5000"
    timeout: float = 30.0
    verify_tls: bool = True
    overview_limit: int = CORE_OVERVIEW_LIMIT
    preview_limit: int = CORE_PREVIEW_LIMIT
    datasource_type: str = DEFAULT_DATASOURCE_TYPE
    datasource_uid: str = ""

    def base_url(self, path: str = "") -> str:
        """Join api_url (without trailing slash) and a path."""
        return self.api_url.rstrip("/") + path

    def validate(self) -> ClientSettings:
        """
        Check settings for values the client cannot work with.

        Raises:
            ClientConfigError: On empty api_url or non-positive timeout/limits.
        """
        if not self.api_url.strip():
            raise ClientConfigError("api_url must not be empty")
        if self.timeout <= 0:
            raise ClientConfigError(f"timeout must be positive, got {self.timeout!r}")
        if self.overview_limit < 1 or self.preview_limit < 1:
            raise ClientConfigError("row limits must be >= 1")
        return self

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: ClientSettings, cfg: dict[str, Any] | None) -> ClientSettings:
        """Apply a loose config mapping onto ClientSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        for key in ("api_url", "datasource_type", "datasource_uid"):
            if key in cfg and isinstance(cfg[key], str):
                s = replace(s, **{key: cfg[key]})

        if "timeout" in cfg:
            try:
                s = replace(s, timeout=float(cfg["timeout"]))
            except (TypeError, ValueError):
                pass

        for key in ("overview_limit", "preview_limit"):
            if key in cfg:
                try:
                    s = replace(s, **{key: int(cfg[key])})
                except (TypeError, ValueError):
                    pass

        if "verify_tls" in cfg:
            s = replace(s, verify_tls=_bool(cfg["verify_tls"]))

        return s

    @classmethod
    def from_env(
        cls, base: ClientSettings | None = None, prefix: str = "DPVIEW_"
    ) -> ClientSettings:
        """
        Build ClientSettings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - DPVIEW_API_URL
            - DPVIEW_TIMEOUT
            - DPVIEW_VERIFY_TLS (1/0/true/false/yes/no/on/off)
            - DPVIEW_OVERVIEW_LIMIT
            - DPVIEW_PREVIEW_LIMIT
            - DPVIEW_DATASOURCE_TYPE
            - DPVIEW_DATASOURCE_UID
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in (
            "api_url",
            "timeout",
            "verify_tls",
            "overview_limit",
            "preview_limit",
            "datasource_type",
            "datasource_uid",
        ):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> ClientSettings:
        """
        Build ClientSettings from a TOML file.

        Search order when `path` is None:
            1) ./dpview.toml (with either a [client] table or top-level keys)
            2) ./pyproject.toml under [tool.dpview.client]

        Returns defaults if no file is present or none of them parses.
        """
        s = cls()

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError):
                return None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "dpview.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("dpview", {}).get("client", {}) if isinstance(tool, dict) else None
            elif isinstance(data.get("client"), dict):
                cfg = data["client"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> ClientSettings:
        """
        Load ClientSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (dpview.toml, pyproject.toml).
        """
        s = cls.from_toml(path)
        return cls.from_env(base=s)
