from __future__ import annotations

from pathlib import Path

import pytest

from dpview.io.config import ClientSettings
from dpview.io.errors import ClientConfigError

_ENV_KEYS = [
    "DPVIEW_API_URL",
    "DPVIEW_TIMEOUT",
    "DPVIEW_VERIFY_TLS",
    "DPVIEW_OVERVIEW_LIMIT",
    "DPVIEW_PREVIEW_LIMIT",
    "DPVIEW_DATASOURCE_TYPE",
    "DPVIEW_DATASOURCE_UID",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def _write_dpview_toml(tmp: Path, content: str) -> Path:
    p = tmp / "dpview.toml"
    p.write_text(content)
    return p


def test_client_settings_defaults() -> None:
    s = ClientSettings()
    assert s.api_url == "http://localhost:5000"
    assert s.timeout == 30.0
    assert s.verify_tls is True
    assert (s.overview_limit, s.preview_limit) == (9999, 10)
    assert s.datasource_type == "cesnet-dp3-datasource"
    assert s.datasource_uid == ""


def test_client_settings_precedence_env_over_toml(tmp_path: Path, monkeypatch) -> None:
    # Arrange TOML
    _write_dpview_toml(
        tmp_path,
        """
        [client]
        api_url = "http://toml:5000"
        timeout = 5
        preview_limit = 20
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    # Arrange ENV that should override TOML
    monkeypatch.setenv("DPVIEW_API_URL", "http://env:5000")
    monkeypatch.setenv("DPVIEW_TIMEOUT", "7.5")

    s = ClientSettings.load()

    assert s.api_url == "http://env:5000"
    assert s.timeout == 7.5
    assert s.preview_limit == 20  # TOML, no env override


def test_client_settings_from_top_level_toml_keys(tmp_path: Path, monkeypatch) -> None:
    _write_dpview_toml(tmp_path, 'api_url = "http://flat:1"\nverify_tls = false\n')
    monkeypatch.chdir(tmp_path)

    s = ClientSettings.load()

    assert s.api_url == "http://flat:1"
    assert s.verify_tls is False


def test_client_settings_from_pyproject_tool_table(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
        [tool.dpview.client]
        datasource_uid = "abc"
        overview_limit = 500
        """.strip()
    )
    monkeypatch.chdir(tmp_path)

    s = ClientSettings.load()

    assert s.datasource_uid == "abc"
    assert s.overview_limit == 500


def test_client_settings_explicit_path_and_invalid_values_ignored(tmp_path: Path) -> None:
    p = _write_dpview_toml(tmp_path, '[client]\ntimeout = "soon"\npreview_limit = 3\n')

    s = ClientSettings.from_toml(p)

    assert s.timeout == 30.0  # unparseable, default kept
    assert s.preview_limit == 3


def test_client_settings_env_bool_parsing(monkeypatch) -> None:
    monkeypatch.setenv("DPVIEW_VERIFY_TLS", "off")
    assert ClientSettings.from_env().verify_tls is False
    monkeypatch.setenv("DPVIEW_VERIFY_TLS", "Yes")
    assert ClientSettings.from_env().verify_tls is True


def test_client_settings_missing_toml_gives_defaults(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert ClientSettings.load() == ClientSettings()


@pytest.mark.parametrize(
    "kwargs",
    [{"api_url": "  "}, {"timeout": 0}, {"overview_limit": 0}, {"preview_limit": -1}],
)
def test_validate_rejects_unusable_settings(kwargs) -> None:
    with pytest.raises(ClientConfigError):
        ClientSettings(**kwargs).validate()


def test_base_url_strips_trailing_slash() -> None:
    s = ClientSettings(api_url="http://dp3/api/")
    assert s.base_url("/entities") == "http://dp3/api/entities"
