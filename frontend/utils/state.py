"""
Client application state and the controller that mutates it.

Streamlit reruns the page script on every interaction, so the controller is
kept in ``st.session_state`` and all UI code goes through it instead of
touching shared globals.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from config import SEARCH_DEBOUNCE, SEARCH_MIN_LENGTH
from utils.api_client import APIClient, APIError, SessionExpiredError
from utils.filters import FilterState, filter_spots, matches_search

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    spots: List[Dict[str, Any]] = field(default_factory=list)
    category: str = "all"
    filters: FilterState = field(default_factory=FilterState)
    user_location: Optional[Tuple[float, float]] = None
    search_term: str = ""
    local_search: bool = False
    favorites: Set[int] = field(default_factory=set)
    favorites_only: bool = False
    last_error: Optional[str] = None


class SearchDebouncer:
    """Holds the latest search term until input has been quiet for ``delay`` seconds."""

    def __init__(self, delay: float = SEARCH_DEBOUNCE, clock: Callable[[], float] = time.monotonic):
        self.delay = delay
        self._clock = clock
        self._pending: Optional[str] = None
        self._submitted_at = 0.0

    def submit(self, term: str) -> None:
        self._pending = term
        self._submitted_at = self._clock()

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def due(self) -> Optional[str]:
        """The pending term once the quiet period has passed, else None. Fires once."""
        if self._pending is None or self._clock() - self._submitted_at < self.delay:
            return None
        term, self._pending = self._pending, None
        return term


class SpotMapController:
    def __init__(self, api: APIClient, state: Optional[AppState] = None,
                 debouncer: Optional[SearchDebouncer] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.api = api
        self.state = state or AppState()
        self.debouncer = debouncer or SearchDebouncer()
        self._clock = clock

    # ----- loading -----

    def load_spots(self, use_cache: bool = True) -> List[Dict[str, Any]]:
        """Fetch spots for the current search term. On failure the last list is kept."""
        term = self.state.search_term
        try:
            spots = self.api.get_spots({"search": term} if term else None, use_cache=use_cache)
        except SessionExpiredError:
            self.state.favorites = set()
            raise
        except APIError as e:
            logger.warning("Loading spots failed: %s", e.message)
            self.state.last_error = e.message
            # Search locally over what is already loaded
            self.state.local_search = bool(term)
            return self.state.spots

        self.state.spots = spots
        self.state.local_search = False
        self.state.last_error = None
        return spots

    def load_favorites(self) -> Set[int]:
        if not self.api.has_token:
            self.state.favorites = set()
            return self.state.favorites
        self.state.favorites = set(self.api.get_favorites())
        return self.state.favorites

    # ----- filters -----

    def set_category(self, category: str) -> None:
        self.state.category = category or "all"

    def set_filters(self, **changes) -> FilterState:
        for name, value in changes.items():
            if not hasattr(self.state.filters, name):
                raise AttributeError(f"Unknown filter {name}")
            setattr(self.state.filters, name, value)
        return self.state.filters

    def reset_filters(self) -> None:
        self.state.filters = FilterState()
        self.state.favorites_only = False

    def set_user_location(self, lat: Optional[float], lng: Optional[float]) -> None:
        self.state.user_location = (lat, lng) if lat is not None and lng is not None else None

    # ----- search -----

    def on_search_input(self, term: str) -> None:
        self.debouncer.submit((term or "").strip())

    def apply_pending_search(self) -> bool:
        """Run the debounced search if it is due. Returns True when spots were reloaded."""
        term = self.debouncer.due()
        if term is None:
            return False
        if term and len(term) < SEARCH_MIN_LENGTH:
            return False
        if term == self.state.search_term:
            return False

        self.state.search_term = term
        self.load_spots()
        return True

    # ----- favorites -----

    def toggle_favorite(self, spot_id: int) -> bool:
        """Flip the favorite flag for a spot. Returns the new value."""
        if spot_id in self.state.favorites:
            self.api.remove_favorite(spot_id)
            self.state.favorites.discard(spot_id)
            return False

        self.api.add_favorite(spot_id)
        self.state.favorites.add(spot_id)
        return True

    # ----- view -----

    def visible_spots(self) -> List[Dict[str, Any]]:
        """Spots to draw: local filters applied, favorite flag attached."""
        spots = self.state.spots
        if self.state.local_search and self.state.search_term:
            spots = [s for s in spots if matches_search(s, self.state.search_term)]
        if self.state.favorites_only:
            spots = [s for s in spots if s.get("id") in self.state.favorites]

        visible = filter_spots(
            spots,
            self.state.category,
            self.state.filters,
            self.state.user_location,
            self._clock(),
        )
        return [{**s, "isFavorite": s.get("id") in self.state.favorites} for s in visible]
