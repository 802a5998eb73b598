from fastapi import APIRouter, Depends, Request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from app.core.database import get_db
from app.core.errors import PersistenceError
from app.auth.middleware import get_current_user, CurrentUser
from app.models import Favorite
from app.services.activity import log_activity
from app.services.spot_writer import get_active_spot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("")
async def get_favorites(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Spot ids the current user has favorited."""
    rows = db.query(Favorite.spot_id).filter(
        Favorite.user_id == current_user.user_id
    ).order_by(Favorite.spot_id).all()
    
    return {"spotIds": [row[0] for row in rows]}


@router.post("/{spot_id}")
async def add_favorite(
    spot_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Favorite a spot. Favoriting twice is a no-op."""
    get_active_spot(db, spot_id)
    
    existing = db.query(Favorite).filter(
        Favorite.user_id == current_user.user_id,
        Favorite.spot_id == spot_id
    ).first()
    
    if not existing:
        try:
            db.add(Favorite(user_id=current_user.user_id, spot_id=spot_id))
            db.commit()
        except IntegrityError:
            # Concurrent insert of the same pair
            db.rollback()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Add favorite failed: %s", e, exc_info=True)
            raise PersistenceError("Failed to add favorite") from e
        else:
            log_activity(current_user.user_id, "favorite", "spot", spot_id, {}, request)
    
    return {"spotId": spot_id, "favorite": True}


@router.delete("/{spot_id}")
async def remove_favorite(
    spot_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Remove a favorite. Removing a missing favorite is a no-op."""
    try:
        db.query(Favorite).filter(
            Favorite.user_id == current_user.user_id,
            Favorite.spot_id == spot_id
        ).delete()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Remove favorite failed: %s", e, exc_info=True)
        raise PersistenceError("Failed to remove favorite") from e
    
    return {"spotId": spot_id, "favorite": False}
