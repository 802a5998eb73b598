"""
Client-side filtering of the loaded spot list.

Spots are the camelCase dicts returned by ``GET /spots``. Every function here
is pure: the same spots, filters and clock always give the same result.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from config import PRICE_MAX, PRICE_MIN, RATING_MIN

EARTH_RADIUS_KM = 6371.0

Spot = Dict[str, Any]


@dataclass
class FilterState:
    min_price: float = PRICE_MIN
    max_price: float = PRICE_MAX
    min_rating: float = RATING_MIN
    open_now: bool = False
    editor_pick: bool = False
    has_video: bool = False
    max_distance_km: Optional[float] = None


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2)
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def parse_minutes(value: str) -> int:
    """Minutes since midnight for ``HH:MM`` (seconds are ignored)."""
    hours, minutes = value.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def api_weekday(now: datetime) -> int:
    """Day index with Sunday = 0, as stored by the API."""
    return (now.weekday() + 1) % 7


def todays_hours(spot: Spot, now: datetime) -> Optional[Dict[str, Any]]:
    """Today's entry from the weekly schedule, or None when there is none."""
    day = api_weekday(now)
    for entry in spot.get("openingHours") or []:
        if entry.get("dayOfWeek") == day:
            return entry
    return None


def is_open_now(hours: Optional[Dict[str, Any]], now: datetime) -> bool:
    """Whether ``now`` falls inside the opening window.

    Missing hours count as always open. A window whose close is before its
    open crosses midnight.
    """
    if not hours:
        return True
    if hours.get("isClosed"):
        return False
    if not hours.get("open") or not hours.get("close"):
        return True

    current = now.hour * 60 + now.minute
    open_minutes = parse_minutes(hours["open"])
    close_minutes = parse_minutes(hours["close"])

    if close_minutes < open_minutes:
        return current >= open_minutes or current <= close_minutes
    return open_minutes <= current <= close_minutes


def format_price(price: Optional[float], currency: str = "€") -> str:
    if not price:
        return "Free"
    if price > 100:
        return currency * 4
    if price > 50:
        return currency * 3
    if price > 20:
        return currency * 2
    return currency


def matches_search(spot: Spot, term: str) -> bool:
    """Local text match over name, description, tips and author name."""
    needle = (term or "").strip().lower()
    if not needle:
        return True

    haystack = [spot.get("name") or "", spot.get("description") or ""]
    haystack.extend(spot.get("tips") or [])
    author = spot.get("author") or {}
    haystack.append(author.get("name") or "")
    return any(needle in text.lower() for text in haystack)


def _passes(spot: Spot, state: FilterState, user_location: Optional[Tuple[float, float]],
            now: datetime) -> bool:
    price = spot.get("price")
    if price is not None and not (state.min_price <= price <= state.max_price):
        return False

    if state.min_rating > 0 and (spot.get("rating") or 0) < state.min_rating:
        return False

    if state.open_now and not is_open_now(todays_hours(spot, now), now):
        return False

    if state.editor_pick and not spot.get("editorPick"):
        return False

    if state.has_video and not any(m.get("type") == "video" for m in spot.get("media") or []):
        return False

    if state.max_distance_km and user_location:
        distance = haversine_km(user_location[0], user_location[1], spot["lat"], spot["lng"])
        if distance > state.max_distance_km:
            return False

    return True


def filter_spots(
    spots: List[Spot],
    category: str = "all",
    state: Optional[FilterState] = None,
    user_location: Optional[Tuple[float, float]] = None,
    now: Optional[datetime] = None,
) -> List[Spot]:
    """Spots in ``category`` that pass every active filter, in input order."""
    state = state or FilterState()
    now = now or datetime.now()

    candidates = spots if category == "all" else [s for s in spots if s.get("category") == category]
    return [s for s in candidates if _passes(s, state, user_location, now)]
