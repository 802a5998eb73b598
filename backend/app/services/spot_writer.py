import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.middleware import CurrentUser
from app.core.config import settings
from app.core.errors import NotFoundError, PersistenceError, ValidationError
from app.models import (
    Author, Category, Media, OpeningHours, RelatedArticle, SocialLink, Spot, Tip,
)
from app.schemas.spots import (
    AuthorIn, MediaIn, OpeningHoursIn, RelatedArticleIn, SpotCreate, SpotUpdate,
)

logger = logging.getLogger(__name__)

SCALAR_FIELDS = ("name", "description", "latitude", "longitude", "icon", "rating", "price", "editor_pick")


def resolve_category_id(db: Session, category_id: Optional[int], slug: Optional[str]) -> Optional[int]:
    """Validate the category reference; an unknown id or slug is a client error."""
    if category_id is not None:
        category = db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise ValidationError(f"Unknown category id {category_id}")
        return category.id

    if slug:
        category = db.query(Category).filter(Category.slug == slug).first()
        if not category:
            raise ValidationError(f"Unknown category '{slug}'")
        return category.id

    return None


def get_active_spot(db: Session, spot_id: int) -> Spot:
    spot = db.query(Spot).filter(Spot.id == spot_id, Spot.is_active == True).first()
    if not spot:
        raise NotFoundError("Spot not found")
    return spot


def _media_rows(items: List[MediaIn]) -> List[Media]:
    return [
        Media(type=m.type, url=m.url, thumbnail_url=m.thumbnail, caption=m.caption, display_order=i)
        for i, m in enumerate(items)
    ]


def _tip_rows(tips: List[str], user_id: int) -> List[Tip]:
    return [Tip(tip_text=text, display_order=i, created_by=user_id) for i, text in enumerate(tips)]


def _hours_rows(hours: List[OpeningHoursIn]) -> List[OpeningHours]:
    by_day = {h.day_of_week: h for h in hours}  # last entry per day wins
    return [
        OpeningHours(
            day_of_week=h.day_of_week,
            open_time=h.open,
            close_time=h.close,
            is_closed=h.is_closed,
        )
        for h in sorted(by_day.values(), key=lambda h: h.day_of_week)
    ]


def _social_rows(social: dict) -> List[SocialLink]:
    return [SocialLink(platform=platform, url=url) for platform, url in social.items()]


def _author_row(author: Optional[AuthorIn]) -> Optional[Author]:
    return Author(name=author.name, avatar_url=author.avatar) if author else None


def _article_row(article: Optional[RelatedArticleIn]) -> Optional[RelatedArticle]:
    return RelatedArticle(title=article.title, url=article.url) if article else None


def create_spot(db: Session, data: SpotCreate, current_user: CurrentUser) -> Spot:
    """Insert a spot and all nested rows in one transaction."""
    category_id = resolve_category_id(db, data.category_id, data.category)

    spot = Spot(
        name=data.name,
        description=data.description,
        category_id=category_id,
        latitude=data.latitude,
        longitude=data.longitude,
        icon=data.icon or settings.default_spot_icon,
        rating=data.rating,
        price=data.price,
        editor_pick=data.editor_pick,
        created_by=current_user.user_id,
        updated_by=current_user.user_id,
    )
    spot.media = _media_rows(data.media)
    spot.tips = _tip_rows(data.tips, current_user.user_id)
    spot.opening_hours = _hours_rows(data.hours)
    spot.social_links = _social_rows(data.social)
    spot.author = _author_row(data.author)
    spot.related_article = _article_row(data.related_article)

    try:
        db.add(spot)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Create spot failed: %s", e, exc_info=True)
        raise PersistenceError("Failed to create spot") from e

    logger.info("Spot %s created by user %s", spot.id, current_user.user_id)
    return spot


def _replace(db: Session, spot: Spot, attr: str, value) -> None:
    # Flush removals first so unique (spot, day/platform) rows can be re-inserted
    current = getattr(spot, attr)
    if isinstance(current, list):
        current.clear()
    else:
        setattr(spot, attr, None)
    db.flush()
    setattr(spot, attr, value)


def update_spot(db: Session, spot_id: int, data: SpotUpdate, current_user: CurrentUser) -> Spot:
    """Apply only the fields present in the request; nested lists are replaced wholesale."""
    spot = get_active_spot(db, spot_id)
    fields = data.model_fields_set

    category_id = None
    if "category_id" in fields or "category" in fields:
        category_id = resolve_category_id(db, data.category_id, data.category)

    try:
        for name in SCALAR_FIELDS:
            if name in fields:
                setattr(spot, name, getattr(data, name))
        if "category_id" in fields or "category" in fields:
            spot.category_id = category_id

        if "media" in fields:
            _replace(db, spot, "media", _media_rows(data.media or []))
        if "tips" in fields:
            _replace(db, spot, "tips", _tip_rows(data.tips or [], current_user.user_id))
        if "hours" in fields:
            _replace(db, spot, "opening_hours", _hours_rows(data.hours or []))
        if "social" in fields:
            _replace(db, spot, "social_links", _social_rows(data.social or {}))
        if "author" in fields:
            _replace(db, spot, "author", _author_row(data.author))
        if "related_article" in fields:
            _replace(db, spot, "related_article", _article_row(data.related_article))

        spot.updated_by = current_user.user_id
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Update spot %s failed: %s", spot_id, e, exc_info=True)
        raise PersistenceError("Failed to update spot") from e

    return spot


def soft_delete_spot(db: Session, spot_id: int, current_user: CurrentUser) -> Spot:
    spot = get_active_spot(db, spot_id)

    try:
        spot.is_active = False
        spot.updated_by = current_user.user_id
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Delete spot %s failed: %s", spot_id, e, exc_info=True)
        raise PersistenceError("Failed to delete spot") from e

    return spot
