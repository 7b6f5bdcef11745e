from __future__ import annotations

import os
from pathlib import Path

import pytest

from app import main as app_main


def test_main_renders_inline(monkeypatch, tmp_path) -> None:
    called = {}

    def fake_streamlit_app(*, default_api_url=None, default_config=None):
        called["default_api_url"] = default_api_url
        called["default_config"] = default_config

    monkeypatch.setenv("STREAMLIT_SERVER_PORT", "1")
    # Patch the imported symbol used inside app.main (not the package attribute)
    monkeypatch.setattr(app_main, "streamlit_app", fake_streamlit_app, raising=True)

    cfg = tmp_path / "dpview.toml"
    app_main.main(["--api-url", "http://dp3:5000", "--config", str(cfg)])

    assert called == {"default_api_url": "http://dp3:5000", "default_config": str(cfg)}


def test_main_execs_streamlit(monkeypatch) -> None:
    # Ensure not in Streamlit context
    monkeypatch.delenv("STREAMLIT_SERVER_PORT", raising=False)

    captured = {}

    def fake_execv(exe: str, cmd: list[str]) -> None:
        captured["exe"] = exe
        captured["cmd"] = cmd
        # Prevent process handoff
        raise SystemExit

    monkeypatch.setattr(os, "execv", fake_execv, raising=True)

    with pytest.raises(SystemExit):
        app_main.main(["--api-url", "http://dp3:5000"])

    assert captured["cmd"][0] == captured["exe"]
    assert captured["cmd"][1:4] == ["-m", "streamlit", "run"]
    assert captured["cmd"][4] == str(Path(app_main.__file__).resolve())
    dashdash_idx = captured["cmd"].index("--")
    assert captured["cmd"][dashdash_idx + 1 :] == ["--api-url", "http://dp3:5000"]


def test_main_without_options_passes_nothing_through(monkeypatch) -> None:
    monkeypatch.delenv("STREAMLIT_SERVER_PORT", raising=False)
    captured = {}

    def fake_execv(exe: str, cmd: list[str]) -> None:
        captured["cmd"] = cmd
        raise SystemExit

    monkeypatch.setattr(os, "execv", fake_execv, raising=True)

    with pytest.raises(SystemExit):
        app_main.main([])

    assert "--" not in captured["cmd"]
