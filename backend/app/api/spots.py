from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.core.database import get_db
from app.core.errors import NotFoundError, PersistenceError
from app.auth.middleware import get_optional_user, require_admin, CurrentUser
from app.schemas.spots import (
    SpotCreate, SpotFilters, SpotListResponse, SpotResponse, SpotUpdate,
)
from app.services.activity import log_activity
from app.services.spot_aggregator import SpotAggregator
from app.services.spot_formatter import format_spots
from app.services.spot_query import build_spot_query, single_spot_query
from app.services import spot_writer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/spots", tags=["spots"])


@router.get("", response_model=SpotListResponse)
async def get_spots(
    category: Optional[str] = Query(None, description="Category slug, or 'all'"),
    search: Optional[str] = Query(None, max_length=255),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[float] = Query(None, ge=0, description="Radius in km"),
    favorites_only: bool = Query(False, alias="favoritesOnly"),
    db: Session = Depends(get_db),
    current_user: Optional[CurrentUser] = Depends(get_optional_user)
):
    """List active spots matching every provided filter."""
    filters = SpotFilters(
        category=category,
        search=search,
        lat=lat,
        lng=lng,
        radius_km=radius,
        favorites_only=favorites_only,
        user_id=current_user.user_id if current_user else None
    )
    query = build_spot_query(filters)
    
    try:
        rows = db.execute(query).all()
    except SQLAlchemyError as e:
        logger.error("Get spots failed: %s", e, exc_info=True)
        raise PersistenceError("Failed to fetch spots") from e
    
    bundles = SpotAggregator(db).aggregate([(row[0], row[1]) for row in rows])
    return SpotListResponse(spots=format_spots(bundles))


@router.get("/{spot_id}", response_model=SpotResponse)
async def get_spot(spot_id: int, db: Session = Depends(get_db)):
    """Get a single active spot."""
    try:
        row = db.execute(single_spot_query(spot_id)).first()
    except SQLAlchemyError as e:
        logger.error("Get spot %s failed: %s", spot_id, e, exc_info=True)
        raise PersistenceError("Failed to fetch spot") from e
    
    if not row:
        raise NotFoundError("Spot not found")
    
    bundle = SpotAggregator(db).aggregate([(row[0], row[1])])[0]
    return SpotResponse(spot=format_spots([bundle])[0])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_spot(
    spot_data: SpotCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    """Create a spot with its media, tips, hours, social links, author and article."""
    spot = spot_writer.create_spot(db, spot_data, current_user)
    
    log_activity(current_user.user_id, "create", "spot", spot.id, {"name": spot.name}, request)
    
    return {"message": "Spot created successfully", "spotId": spot.id}


@router.put("/{spot_id}")
async def update_spot(
    spot_id: int,
    spot_data: SpotUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    """Partially update a spot."""
    spot_writer.update_spot(db, spot_id, spot_data, current_user)
    
    log_activity(
        current_user.user_id, "update", "spot", spot_id,
        {"fields": sorted(spot_data.model_fields_set)}, request
    )
    
    return {"message": "Spot updated successfully", "spotId": spot_id}


@router.delete("/{spot_id}")
async def delete_spot(
    spot_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    """Soft delete a spot."""
    spot_writer.soft_delete_spot(db, spot_id, current_user)
    
    log_activity(current_user.user_id, "delete", "spot", spot_id, {}, request)
    
    return {"message": "Spot deleted successfully", "spotId": spot_id}
