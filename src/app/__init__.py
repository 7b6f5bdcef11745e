"""
Top-level Streamlit app package.

This package hosts the interactive dpview browse app (Streamlit) decoupled
from the dpview.* library modules. Charts live in app.charts; the Streamlit UI
shell and app-specific helpers live under app.ui.

CLI entrypoint (configured in pyproject.toml):
    dpview-app = app.main:main
"""
