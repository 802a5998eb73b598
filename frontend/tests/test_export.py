import io
import json

import pandas as pd
import pytest

from utils.export import export_csv, export_json, parse_import

SPOT = {
    "id": 4, "name": "Cafe, Paris", "category": "restaurant", "description": None,
    "lat": 48.85, "lng": 2.35, "price": 12.0, "rating": 4.1, "editorPick": True, "icon": "☕",
    "tips": ["Go early", "Cash only"], "social": {"website": "https://cafe.example"},
    "openingHours": [{"dayOfWeek": 1, "open": "09:00", "close": "17:00", "isClosed": False}],
    "isFavorite": True,
}


def test_csv_export_flattens_spots():
    frame = pd.read_csv(io.StringIO(export_csv([SPOT])))

    row = frame.iloc[0]
    assert row["name"] == "Cafe, Paris"
    assert row["tips"] == "Go early | Cash only"
    assert row["website"] == "https://cafe.example"
    assert bool(row["editorPick"]) is True


def test_json_export_then_import_prepares_create_bodies():
    bodies = parse_import(export_json([SPOT]))

    assert bodies == [{
        "name": "Cafe, Paris", "category": "restaurant", "description": None,
        "price": 12.0, "rating": 4.1, "editorPick": True, "icon": "☕",
        "tips": ["Go early", "Cash only"], "social": {"website": "https://cafe.example"},
        "latitude": 48.85, "longitude": 2.35,
        "hours": [{"dayOfWeek": 1, "open": "09:00", "close": "17:00", "isClosed": False}],
    }]


def test_import_accepts_wrapped_list():
    raw = json.dumps({"spots": [{"name": "A", "latitude": 1, "longitude": 2}]})

    assert parse_import(raw)[0]["latitude"] == 1.0


@pytest.mark.parametrize("raw", ['"nope"', '[{"name": "No coords"}]', "[1]"])
def test_import_rejects_bad_files(raw):
    with pytest.raises(ValueError):
        parse_import(raw)
