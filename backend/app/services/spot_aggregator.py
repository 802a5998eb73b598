import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import (
    Author, Category, Media, OpeningHours, RelatedArticle, SocialLink, Spot, Tip,
)

logger = logging.getLogger(__name__)


@dataclass
class SpotBundle:
    """A spot row plus its child records."""
    spot: Spot
    category: Optional[Category] = None
    media: List[Media] = field(default_factory=list)
    tips: List[Tip] = field(default_factory=list)
    opening_hours: List[OpeningHours] = field(default_factory=list)
    social_links: List[SocialLink] = field(default_factory=list)
    author: Optional[Author] = None
    related_article: Optional[RelatedArticle] = None


class SpotAggregator:
    """Loads child collections for a page of spots, one query per child table."""

    def __init__(self, db: Session):
        self.db = db

    def _load(self, model, spot_ids: List[int], *order_by) -> Dict[int, list]:
        try:
            rows = (
                self.db.query(model)
                .filter(model.spot_id.in_(spot_ids))
                .order_by(model.spot_id, *order_by)
                .all()
            )
        except SQLAlchemyError:
            # A broken child table degrades to empty values instead of failing the batch
            logger.warning(
                "Failed to load %s for %d spots", model.__tablename__, len(spot_ids), exc_info=True
            )
            self.db.rollback()
            return {}

        grouped: Dict[int, list] = defaultdict(list)
        for row in rows:
            grouped[row.spot_id].append(row)
        return grouped

    def aggregate(self, rows: Sequence[Tuple[Spot, Optional[Category]]]) -> List[SpotBundle]:
        if not rows:
            return []

        spot_ids = [spot.id for spot, _ in rows]

        media = self._load(Media, spot_ids, Media.display_order, Media.id)
        tips = self._load(Tip, spot_ids, Tip.display_order, Tip.id)
        hours = self._load(OpeningHours, spot_ids, OpeningHours.day_of_week)
        social = self._load(SocialLink, spot_ids, SocialLink.platform)
        authors = self._load(Author, spot_ids, Author.id)
        articles = self._load(RelatedArticle, spot_ids, RelatedArticle.id)

        bundles = []
        for spot, category in rows:
            bundles.append(SpotBundle(
                spot=spot,
                category=category,
                media=media.get(spot.id, []),
                tips=tips.get(spot.id, []),
                opening_hours=hours.get(spot.id, []),
                social_links=social.get(spot.id, []),
                author=next(iter(authors.get(spot.id, [])), None),
                related_article=next(iter(articles.get(spot.id, [])), None),
            ))

        return bundles
