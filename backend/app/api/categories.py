from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from app.core.database import get_db
from app.core.errors import PersistenceError
from app.models import Category
from app.schemas.spots import CategoryListResponse, CategoryOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=CategoryListResponse)
async def get_categories(db: Session = Depends(get_db)):
    """Active categories ordered by display name."""
    try:
        categories = db.query(Category).filter(
            Category.is_active == True
        ).order_by(Category.name).all()
    except SQLAlchemyError as e:
        logger.error("Get categories failed: %s", e, exc_info=True)
        raise PersistenceError("Failed to fetch categories") from e
    
    return CategoryListResponse(categories=[
        CategoryOut(id=c.id, slug=c.slug, name=c.name, icon=c.icon, is_active=c.is_active)
        for c in categories
    ])
