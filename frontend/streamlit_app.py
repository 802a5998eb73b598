import time
from datetime import datetime

import pandas as pd
import streamlit as st

from config import (
    PAGE_TITLE, PAGE_ICON, LAYOUT, CATEGORIES, PRICE_MIN, PRICE_MAX,
    DISTANCE_OPTIONS_KM, MAP_CENTER, MAP_ZOOM,
)
from utils.api_client import APIError
from utils.auth import (
    init_session_state, get_controller, get_current_user,
    handle_api_error, is_admin, logout, show_login_form,
)
from utils.export import export_csv, export_json
from utils.filters import format_price, is_open_now, todays_hours

# Page configuration
st.set_page_config(
    page_title=PAGE_TITLE,
    page_icon=PAGE_ICON,
    layout=LAYOUT,
    initial_sidebar_state="expanded"
)

# Initialize session state
init_session_state()
controller = get_controller()
state = controller.state


def on_search_change():
    controller.on_search_input(st.session_state.search_input)


# Sidebar
with st.sidebar:
    if st.session_state.authenticated:
        user_info = get_current_user() or {}
        st.markdown(f"👤 **{user_info.get('fullName') or user_info.get('email', 'User')}**")
        st.caption(f"Role: {user_info.get('role', 'user')}")

        if st.button("🚪 Logout", use_container_width=True):
            logout()
            st.rerun()
    else:
        with st.expander("🔐 Login / Register"):
            show_login_form()

    st.markdown("---")
    st.header("🔎 Filters")

    st.text_input("Search", key="search_input", on_change=on_search_change,
                  placeholder="Name, description, tips...")

    labels = {c["slug"]: f"{c['icon']} {c['name']}" for c in CATEGORIES}
    slugs = list(labels)
    category = st.radio(
        "Category", slugs,
        index=slugs.index(state.category) if state.category in slugs else 0,
        format_func=lambda slug: labels[slug]
    )
    controller.set_category(category)

    price = st.slider("Price (€)", PRICE_MIN, PRICE_MAX,
                      (int(state.filters.min_price), int(state.filters.max_price)))
    min_rating = st.slider("Minimum rating", 0.0, 5.0, float(state.filters.min_rating), 0.5)
    open_now = st.checkbox("Open now", value=state.filters.open_now)
    editor_pick = st.checkbox("⭐ Editor's picks only", value=state.filters.editor_pick)
    has_video = st.checkbox("🎬 Has video", value=state.filters.has_video)

    distance = st.selectbox(
        "Max distance", [None] + DISTANCE_OPTIONS_KM,
        format_func=lambda km: "Any" if km is None else f"{km} km"
    )
    if distance:
        col1, col2 = st.columns(2)
        with col1:
            user_lat = st.number_input("Your lat", value=MAP_CENTER[0], format="%.5f")
        with col2:
            user_lng = st.number_input("Your lng", value=MAP_CENTER[1], format="%.5f")
        controller.set_user_location(user_lat, user_lng)
    else:
        controller.set_user_location(None, None)

    controller.set_filters(
        min_price=price[0],
        max_price=price[1],
        min_rating=min_rating,
        open_now=open_now,
        editor_pick=editor_pick,
        has_video=has_video,
        max_distance_km=distance,
    )

    if st.session_state.authenticated:
        state.favorites_only = st.checkbox("❤️ Favorites only", value=state.favorites_only)

    if st.button("↺ Reset filters", use_container_width=True):
        controller.reset_filters()
        st.rerun()

# Load data
try:
    if controller.debouncer.pending:
        time.sleep(controller.debouncer.delay)
        controller.apply_pending_search()
    if not state.spots:
        controller.load_spots()
except APIError as e:
    handle_api_error(e)

if state.last_error:
    st.warning(f"⚠️ {state.last_error}. Showing locally available results.")

spots = controller.visible_spots()

st.title(f"{PAGE_ICON} {PAGE_TITLE}")
st.caption(f"{len(spots)} of {len(state.spots)} spots")

# Map
if spots:
    map_df = pd.DataFrame([{"lat": s["lat"], "lon": s["lng"]} for s in spots])
    st.map(map_df, zoom=MAP_ZOOM)
else:
    st.map(pd.DataFrame([{"lat": MAP_CENTER[0], "lon": MAP_CENTER[1]}]), zoom=MAP_ZOOM)
    st.info("No spots match the current filters.")

# Cards
now = datetime.now()
for spot in spots:
    with st.container(border=True):
        col1, col2 = st.columns([4, 1])
        with col1:
            badge = " ⭐ Editor's Pick" if spot.get("editorPick") else ""
            st.markdown(f"### {spot['icon']} {spot['name']}{badge}")
            if spot.get("description"):
                st.write(spot["description"])

            hours = todays_hours(spot, now)
            status = ""
            if hours:
                status = " · 🟢 Open now" if is_open_now(hours, now) else " · 🔴 Closed"
            st.caption(
                f"{spot.get('categoryName') or spot['category']} · ★ {spot['rating']} · "
                f"{format_price(spot.get('price'))}{status}"
            )

            if spot.get("tips"):
                with st.expander("💡 Tips"):
                    for tip in spot["tips"]:
                        st.markdown(f"- {tip}")

            for media in spot.get("media") or []:
                if media["type"] == "video":
                    st.video(media["url"])
                else:
                    st.image(media.get("thumbnail") or media["url"], caption=media.get("caption"), width=320)

            links = []
            social = spot.get("social") or {}
            if social.get("website"):
                links.append(f"[Website]({social['website']})")
            if social.get("instagram"):
                links.append(f"[Instagram]({social['instagram']})")
            if spot.get("relatedArticle"):
                links.append(f"[{spot['relatedArticle']['title']}]({spot['relatedArticle']['url']})")
            if links:
                st.markdown(" · ".join(links))
            if spot.get("author"):
                st.caption(f"Recommended by {spot['author']['name']}")

        with col2:
            if st.session_state.authenticated:
                label = "💔 Unfavorite" if spot["isFavorite"] else "❤️ Favorite"
                if st.button(label, key=f"fav_{spot['id']}"):
                    try:
                        controller.toggle_favorite(spot["id"])
                    except APIError as e:
                        handle_api_error(e)
                    st.rerun()

# Export
if spots:
    st.markdown("---")
    col1, col2, col3 = st.columns(3)
    with col1:
        st.download_button("⬇️ Export CSV", export_csv(spots), "spots.csv", "text/csv")
    with col2:
        st.download_button("⬇️ Export JSON", export_json(spots), "spots.json", "application/json")
    with col3:
        if st.button("🔄 Refresh"):
            try:
                controller.load_spots(use_cache=False)
            except APIError as e:
                handle_api_error(e)
            st.rerun()

if is_admin():
    st.sidebar.info("🛠️ Use the Manage Spots page to edit the directory.")
