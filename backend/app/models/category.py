from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from .base import BaseModel


class Category(BaseModel):
    __tablename__ = "categories"
    
    slug = Column(String(50), unique=True, index=True, nullable=False)  # restaurant, museum, park, shopping
    name = Column(String(100), nullable=False)
    icon = Column(String(16))
    is_active = Column(Boolean, default=True, nullable=False)
    
    # Relationships
    spots = relationship("Spot", back_populates="category")
