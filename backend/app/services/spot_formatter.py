import math
from datetime import time
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.schemas.spots import (
    AuthorOut, MediaOut, OpeningHoursOut, RelatedArticleOut, SpotOut,
)
from app.services.spot_aggregator import SpotBundle


def to_float(value: Any, default: float = 0.0) -> float:
    """Numeric or numeric-string to float; null and garbage become ``default``."""
    if value is None:
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def format_time(value: Any) -> Optional[str]:
    """``HH:MM`` from a time or a ``HH:MM:SS`` string."""
    if value is None:
        return None
    if isinstance(value, time):
        return value.strftime("%H:%M")
    return str(value)[:5]


def resolve_icon(spot_icon: Optional[str], category_icon: Optional[str]) -> str:
    return spot_icon or category_icon or settings.default_spot_icon


def format_opening_hours(rows) -> List[OpeningHoursOut]:
    return [
        OpeningHoursOut(
            day_of_week=row.day_of_week,
            open=format_time(row.open_time),
            close=format_time(row.close_time),
            is_closed=bool(row.is_closed),
        )
        for row in rows
    ]


def format_social(rows) -> Dict[str, str]:
    return {row.platform: row.url for row in rows}


def format_spot(bundle: SpotBundle) -> SpotOut:
    spot = bundle.spot
    category = bundle.category

    return SpotOut(
        id=spot.id,
        name=spot.name,
        description=spot.description,
        category=category.slug if category else settings.default_category_slug,
        category_name=category.name if category else None,
        icon=resolve_icon(spot.icon, category.icon if category else None),
        lat=to_float(spot.latitude),
        lng=to_float(spot.longitude),
        price=to_float(spot.price),
        rating=to_float(spot.rating),
        editor_pick=bool(spot.editor_pick),
        media=[
            MediaOut(
                type=m.type,
                url=m.url,
                thumbnail=m.thumbnail_url,
                caption=m.caption,
                display_order=m.display_order,
            )
            for m in bundle.media
        ],
        tips=[tip.tip_text for tip in bundle.tips],
        opening_hours=format_opening_hours(bundle.opening_hours),
        social=format_social(bundle.social_links),
        author=AuthorOut(name=bundle.author.name, avatar=bundle.author.avatar_url) if bundle.author else None,
        related_article=(
            RelatedArticleOut(title=bundle.related_article.title, url=bundle.related_article.url)
            if bundle.related_article else None
        ),
        created_at=spot.created_at,
        updated_at=spot.updated_at,
    )


def format_spots(bundles: List[SpotBundle]) -> List[SpotOut]:
    return [format_spot(bundle) for bundle in bundles]
