from sqlalchemy import Column, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from .base import IdType


class Favorite(Base):
    __tablename__ = "favorites"
    
    # Composite key: a user favorites a spot at most once
    user_id = Column(IdType, ForeignKey("users.id"), primary_key=True)
    spot_id = Column(IdType, ForeignKey("spots.id"), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    user = relationship("User", back_populates="favorites")
