#!/usr/bin/env python3
"""
Start the Spot Map Streamlit client.

API_BASE_URL (default http://localhost:8000/api) points it at the backend.
"""

import os
import sys

import streamlit.web.cli as stcli

APP_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "streamlit_app.py")

if __name__ == "__main__":
    sys.argv = [
        "streamlit",
        "run",
        APP_PATH,
        "--server.address", os.getenv("STREAMLIT_HOST", "0.0.0.0"),
        "--server.port", os.getenv("STREAMLIT_PORT", "8501"),
        "--server.headless", "true",
        "--browser.gatherUsageStats", "false",
    ]
    sys.exit(stcli.main())
