"""
dpview App UI package.

Modules:
    - app: Streamlit application orchestrator (streamlit_app).
    - helpers: Small cross-cutting helpers (async bridging, table shaping, captions).

Usage:
    from app.ui import streamlit_app
    streamlit_app(default_api_url="http://localhost:5000")
"""

from __future__ import annotations

from .app import streamlit_app

__all__ = [
    "streamlit_app",
]
