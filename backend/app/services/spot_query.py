"""
Composable query for the active-spot set.

Each filter appends one SQLAlchemy condition to a list; ``build`` ANDs them in
insertion order. Values always travel as bound parameters.
"""

from typing import List, Optional

from sqlalchemy import Float, and_, case, cast, func, or_, select
from sqlalchemy.sql import ColumnElement, Select

from app.core.errors import AuthError
from app.models import Category, Favorite, Spot
from app.schemas.spots import SpotFilters

EARTH_RADIUS_KM = 6371.0
LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def haversine_km_expr(lat: float, lng: float) -> ColumnElement:
    """Great-circle distance in km from (lat, lng) to each spot, as a SQL expression."""
    spot_lat = func.radians(cast(Spot.latitude, Float), type_=Float)
    spot_lng = func.radians(cast(Spot.longitude, Float), type_=Float)
    origin_lat = func.radians(lat, type_=Float)
    origin_lng = func.radians(lng, type_=Float)

    def half_sin_squared(delta):
        return func.power(func.sin(delta / 2, type_=Float), 2, type_=Float)

    a = (
        half_sin_squared(spot_lat - origin_lat)
        + func.cos(origin_lat, type_=Float) * func.cos(spot_lat, type_=Float)
        * half_sin_squared(spot_lng - origin_lng)
    )
    # Rounding can push a past 1 near antipodes, outside the domain of asin(sqrt(a))
    a = case((a > 1.0, 1.0), else_=a)
    return 2 * EARTH_RADIUS_KM * func.asin(func.sqrt(a, type_=Float), type_=Float)


class SpotQueryBuilder:
    """Collects predicates over active spots joined to their category."""

    def __init__(self):
        self._conditions: List[ColumnElement] = [Spot.is_active == True]

    @property
    def conditions(self) -> List[ColumnElement]:
        return list(self._conditions)

    def where(self, condition: ColumnElement) -> "SpotQueryBuilder":
        self._conditions.append(condition)
        return self

    def category(self, slug: Optional[str]) -> "SpotQueryBuilder":
        if slug and slug != "all":
            self.where(Category.slug == slug)
        return self

    def search(self, term: Optional[str]) -> "SpotQueryBuilder":
        term = (term or "").strip()
        if term:
            pattern = f"%{escape_like(term)}%"
            self.where(or_(
                Spot.name.ilike(pattern, escape=LIKE_ESCAPE),
                Spot.description.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        return self

    def within_radius(self, lat: Optional[float], lng: Optional[float],
                      radius_km: Optional[float]) -> "SpotQueryBuilder":
        if lat is not None and lng is not None and radius_km is not None:
            self.where(haversine_km_expr(lat, lng) <= radius_km)
        return self

    def favorites_of(self, user_id: int) -> "SpotQueryBuilder":
        favorite_ids = select(Favorite.spot_id).where(Favorite.user_id == user_id)
        return self.where(Spot.id.in_(favorite_ids))

    def build(self) -> Select:
        return (
            select(Spot, Category)
            .outerjoin(Category, Spot.category_id == Category.id)
            .where(and_(*self._conditions))
            .order_by(Spot.id)
        )


def build_spot_query(filters: SpotFilters) -> Select:
    """Translate request filters into a single select ordered by spot id."""
    builder = (
        SpotQueryBuilder()
        .category(filters.category)
        .search(filters.search)
        .within_radius(filters.lat, filters.lng, filters.radius_km)
    )

    if filters.favorites_only:
        if filters.user_id is None:
            raise AuthError("Login required to list favorites", status_code=401)
        builder.favorites_of(filters.user_id)

    return builder.build()


def single_spot_query(spot_id: int) -> Select:
    return SpotQueryBuilder().where(Spot.id == spot_id).build()
