"""
dpview App entrypoint.

This module provides the CLI entrypoint to launch the Streamlit UI. It defers
all UI composition to the app.ui package and exists solely to start Streamlit
programmatically or render directly when already running under Streamlit.

Usage:
    - Python execution (hands process to Streamlit):
        python -m app.main --api-url http://localhost:5000

    - Streamlit direct:
        streamlit run src/app/main.py -- --api-url http://localhost:5000
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from pathlib import Path

from app.ui import streamlit_app


def main(argv: list[str] | None = None) -> None:
    """Console entrypoint that launches Streamlit with the dpview UI.

    If already executing within a Streamlit server (environment variable
    STREAMLIT_SERVER_PORT is set), this function renders the app directly.
    Otherwise, it execs "python -m streamlit run <this_module>" to leverage
    Streamlit's reloader and argument parsing, passing through any supported
    options after "--".

    Args:
        argv (list[str] | None): Optional list of CLI arguments. If None,
            sys.argv[1:] is used.
    """
    args = list(sys.argv[1:] if argv is None else argv)

    parser = argparse.ArgumentParser(description="dpview Streamlit App")
    parser.add_argument("--api-url", default=None, help="Backend API URL.")
    parser.add_argument("--config", default=None, help="dpview TOML config path.")
    ns = parser.parse_args(args)

    # If invoked within Streamlit, just render
    if os.environ.get("STREAMLIT_SERVER_PORT"):
        streamlit_app(default_api_url=ns.api_url, default_config=ns.config)
        return

    # Otherwise, exec streamlit run on this module to take over the process
    app_path = Path(__file__).resolve()
    cmd = [sys.executable, "-m", "streamlit", "run", str(app_path)]

    passthrough: list[str] = []
    if ns.api_url:
        passthrough += ["--api-url", ns.api_url]
    if ns.config:
        passthrough += ["--config", ns.config]
    if passthrough:
        cmd += ["--"] + passthrough

    try:
        os.execv(sys.executable, cmd)
    except OSError:
        subprocess.run(cmd, check=False)


if __name__ == "__main__":
    # Support: --api-url, --config after '--' when using `streamlit run`
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--api-url", default=None)
    parser.add_argument("--config", default=None)
    ns, _ = parser.parse_known_args(sys.argv[1:])
    streamlit_app(default_api_url=ns.api_url, default_config=ns.config)
