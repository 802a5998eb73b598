from datetime import time

from sqlalchemy.exc import OperationalError

from app.models import Author, Media, OpeningHours, Spot, Tip
from app.services.spot_aggregator import SpotAggregator


def _seed(db):
    first = Spot(name="First", latitude=1, longitude=1)
    second = Spot(name="Second", latitude=2, longitude=2)
    first.media = [
        Media(type="image", url="https://b", display_order=1),
        Media(type="image", url="https://a", display_order=0),
    ]
    first.tips = [Tip(tip_text="One", display_order=0)]
    first.opening_hours = [
        OpeningHours(day_of_week=3, open_time=time(9), close_time=time(17)),
        OpeningHours(day_of_week=1, open_time=time(10), close_time=time(16)),
    ]
    second.author = Author(name="Someone")
    db.add_all([first, second])
    db.commit()
    return first, second


def test_aggregate_groups_children_per_spot(db):
    first, second = _seed(db)

    bundles = SpotAggregator(db).aggregate([(first, None), (second, None)])

    assert [b.spot.name for b in bundles] == ["First", "Second"]
    assert [m.url for m in bundles[0].media] == ["https://a", "https://b"]
    assert [h.day_of_week for h in bundles[0].opening_hours] == [1, 3]
    assert [t.tip_text for t in bundles[0].tips] == ["One"]
    assert bundles[0].author is None
    assert bundles[1].media == [] and bundles[1].tips == []
    assert bundles[1].author.name == "Someone"


def test_aggregate_empty_input(db):
    assert SpotAggregator(db).aggregate([]) == []


def test_child_query_failure_degrades_to_empty(db, monkeypatch):
    first, _ = _seed(db)
    aggregator = SpotAggregator(db)
    original_query = db.query

    def failing_query(model, *args, **kwargs):
        if model is Media:
            raise OperationalError("SELECT", {}, Exception("media table missing"))
        return original_query(model, *args, **kwargs)

    monkeypatch.setattr(db, "query", failing_query)

    bundles = aggregator.aggregate([(first, None)])

    assert bundles[0].media == []
    assert [t.tip_text for t in bundles[0].tips] == ["One"]
