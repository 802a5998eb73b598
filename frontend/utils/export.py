import json
from typing import Any, Dict, List

import pandas as pd

EXPORT_COLUMNS = [
    "id", "name", "category", "description", "lat", "lng",
    "price", "rating", "editorPick", "icon", "tips", "instagram", "website",
]


def spots_to_frame(spots: List[Dict[str, Any]]) -> pd.DataFrame:
    """Flatten spots into one row each; tips are joined with ``|``."""
    rows = []
    for spot in spots:
        social = spot.get("social") or {}
        rows.append({
            "id": spot.get("id"),
            "name": spot.get("name"),
            "category": spot.get("category"),
            "description": spot.get("description") or "",
            "lat": spot.get("lat"),
            "lng": spot.get("lng"),
            "price": spot.get("price"),
            "rating": spot.get("rating"),
            "editorPick": bool(spot.get("editorPick")),
            "icon": spot.get("icon"),
            "tips": " | ".join(spot.get("tips") or []),
            "instagram": social.get("instagram", ""),
            "website": social.get("website", ""),
        })
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_csv(spots: List[Dict[str, Any]]) -> str:
    return spots_to_frame(spots).to_csv(index=False)


def export_json(spots: List[Dict[str, Any]]) -> str:
    return json.dumps(spots, ensure_ascii=False, indent=2, default=str)


def parse_import(raw: str) -> List[Dict[str, Any]]:
    """Parse a JSON import file: a list of spots or ``{"spots": [...]}``.

    Each entry needs a name and coordinates; read-only fields are dropped.
    """
    data = json.loads(raw)
    if isinstance(data, dict):
        data = data.get("spots", [])
    if not isinstance(data, list):
        raise ValueError("Import file must contain a list of spots")

    spots = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"Entry {i} is not an object")
        lat = item.get("lat", item.get("latitude"))
        lng = item.get("lng", item.get("longitude"))
        if not item.get("name") or lat is None or lng is None:
            raise ValueError(f"Entry {i} needs name, lat and lng")

        spot = {k: v for k, v in item.items()
                if k not in ("id", "createdAt", "updatedAt", "isFavorite", "categoryName",
                             "lat", "lng", "latitude", "longitude", "openingHours")}
        spot["latitude"] = float(lat)
        spot["longitude"] = float(lng)
        if item.get("openingHours") and "hours" not in spot:
            spot["hours"] = item["openingHours"]
        spots.append(spot)

    return spots
