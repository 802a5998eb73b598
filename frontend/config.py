import os
from dotenv import load_dotenv

load_dotenv()

# Backend API configuration
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000/api")
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "10"))
RETRY_ATTEMPTS = int(os.getenv("API_RETRY_ATTEMPTS", "3"))
RETRY_DELAY = float(os.getenv("API_RETRY_DELAY", "1.0"))  # seconds

# Cache TTLs (minutes)
CACHE_NAMESPACE = "lgm_cache_"
CACHE_TTL_SPOTS = 5
CACHE_TTL_CATEGORIES = 60
CACHE_TTL_USERS = 10

# Streamlit configuration
PAGE_TITLE = "Spot Map"
PAGE_ICON = "📍"
LAYOUT = "wide"

# Search
SEARCH_DEBOUNCE = 0.3  # seconds
SEARCH_MIN_LENGTH = 2

# Filter defaults
PRICE_MIN = 0
PRICE_MAX = 200
RATING_MIN = 0
DISTANCE_OPTIONS_KM = [1, 2, 5, 10, 25, 50]

CATEGORIES = [
    {"slug": "all", "name": "All", "icon": "🗺️"},
    {"slug": "restaurant", "name": "Food", "icon": "🍽️"},
    {"slug": "museum", "name": "Culture", "icon": "🏛️"},
    {"slug": "park", "name": "Nature", "icon": "🌳"},
    {"slug": "shopping", "name": "Shopping", "icon": "🛍️"},
]

# Map defaults (Paris)
MAP_CENTER = (48.8566, 2.3522)
MAP_ZOOM = 13

# Colors and styling
PRIMARY_COLOR = "#1f77b4"
EDITOR_PICK_COLOR = "#ff7f0e"
