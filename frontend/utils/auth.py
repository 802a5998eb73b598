"""Per-browser-session wiring: one APIClient and controller per visitor, plus the login UI."""

import logging
from typing import Any, Dict, Optional

import streamlit as st

from utils.api_client import APIClient, APIError, SessionExpiredError
from utils.state import SpotMapController

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def init_session_state():
    if "api_client" not in st.session_state:
        st.session_state.api_client = APIClient()
    if "controller" not in st.session_state:
        st.session_state.controller = SpotMapController(st.session_state.api_client)
    st.session_state.setdefault("authenticated", False)
    st.session_state.setdefault("user_info", None)


def get_api_client() -> APIClient:
    init_session_state()
    return st.session_state.api_client


def get_controller() -> SpotMapController:
    init_session_state()
    return st.session_state.controller


def get_current_user() -> Optional[Dict[str, Any]]:
    return st.session_state.get("user_info")


def is_admin() -> bool:
    user = get_current_user()
    return bool(user) and user.get("role") == "admin"


def _signed_in(user: Dict[str, Any]):
    st.session_state.authenticated = True
    st.session_state.user_info = user
    get_controller().load_favorites()


def _signed_out():
    st.session_state.authenticated = False
    st.session_state.user_info = None
    get_controller().state.favorites = set()


def login(email: str, password: str) -> bool:
    try:
        data = get_api_client().login(email, password)
    except APIError as e:
        st.error(f"Login failed: {e.message}")
        return False
    _signed_in(data["user"])
    return True


def register(email: str, password: str, full_name: str) -> bool:
    try:
        data = get_api_client().register(email, password, full_name)
    except APIError as e:
        st.error(f"Registration failed: {e.message}")
        return False
    _signed_in(data["user"])
    return True


def logout():
    """Sign out locally even when the backend cannot be told."""
    try:
        get_api_client().logout()
    except APIError as e:
        logger.warning("Server-side logout failed: %s", e.message)
    _signed_out()


def handle_api_error(error: APIError):
    """Show an API failure; an expired session signs the visitor out."""
    if isinstance(error, SessionExpiredError):
        _signed_out()
        st.error("Session expired. Please log in again.")
        st.rerun()
    st.error(f"API Error: {error.message}")


def _login_tab():
    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        if not st.form_submit_button("Login"):
            return
    if not (email and password):
        st.error("Please enter both email and password.")
    elif login(email, password):
        st.rerun()


def _register_tab():
    with st.form("register_form"):
        full_name = st.text_input("Full name")
        email = st.text_input("Email", key="register_email")
        password = st.text_input("Password", type="password", key="register_password")
        if not st.form_submit_button("Create account"):
            return
    if len(password) < MIN_PASSWORD_LENGTH:
        st.error(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    elif register(email, password, full_name):
        st.rerun()


def show_login_form():
    login_tab, register_tab = st.tabs(["Login", "Register"])
    with login_tab:
        _login_tab()
    with register_tab:
        _register_tab()


def require_auth():
    """Render the login form and halt the page for anonymous visitors."""
    if not st.session_state.get("authenticated"):
        st.warning("Please log in to access this page.")
        show_login_form()
        st.stop()


def require_admin():
    require_auth()
    if not is_admin():
        st.error("Admin access required.")
        st.stop()
