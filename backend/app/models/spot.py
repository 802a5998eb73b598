from sqlalchemy import (
    Column, String, Boolean, ForeignKey, Text, Numeric, Integer, Time, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from .base import BaseModel, IdType


class Spot(BaseModel):
    __tablename__ = "spots"
    
    name = Column(String(255), nullable=False)
    description = Column(Text)
    icon = Column(String(16))
    latitude = Column(Numeric(10, 8), nullable=False)
    longitude = Column(Numeric(11, 8), nullable=False)
    price = Column(Numeric(10, 2), default=0)
    rating = Column(Numeric(3, 2), default=0)  # 0-5
    editor_pick = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)  # Soft delete
    
    # Foreign keys
    category_id = Column(IdType, ForeignKey("categories.id"), nullable=True)
    created_by = Column(IdType, ForeignKey("users.id"), nullable=True)
    updated_by = Column(IdType, ForeignKey("users.id"), nullable=True)
    
    # Relationships
    category = relationship("Category", back_populates="spots")
    media = relationship("Media", back_populates="spot", cascade="all, delete-orphan",
                         order_by="Media.display_order")
    tips = relationship("Tip", back_populates="spot", cascade="all, delete-orphan",
                        order_by="Tip.display_order")
    opening_hours = relationship("OpeningHours", back_populates="spot", cascade="all, delete-orphan",
                                 order_by="OpeningHours.day_of_week")
    social_links = relationship("SocialLink", back_populates="spot", cascade="all, delete-orphan")
    author = relationship("Author", back_populates="spot", uselist=False, cascade="all, delete-orphan")
    related_article = relationship("RelatedArticle", back_populates="spot", uselist=False,
                                   cascade="all, delete-orphan")


class Media(BaseModel):
    __tablename__ = "media"
    
    type = Column(String(10), nullable=False)  # image or video
    url = Column(String(1024), nullable=False)
    thumbnail_url = Column(String(1024))
    caption = Column(String(255))
    display_order = Column(Integer, default=0, nullable=False)
    
    spot_id = Column(IdType, ForeignKey("spots.id"), nullable=False, index=True)
    spot = relationship("Spot", back_populates="media")


class Tip(BaseModel):
    __tablename__ = "tips"
    
    tip_text = Column(Text, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)
    
    spot_id = Column(IdType, ForeignKey("spots.id"), nullable=False, index=True)
    created_by = Column(IdType, ForeignKey("users.id"), nullable=True)
    spot = relationship("Spot", back_populates="tips")


class OpeningHours(BaseModel):
    __tablename__ = "opening_hours"
    __table_args__ = (UniqueConstraint("spot_id", "day_of_week", name="uq_opening_hours_spot_day"),)
    
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    open_time = Column(Time)
    close_time = Column(Time)
    is_closed = Column(Boolean, default=False, nullable=False)
    
    spot_id = Column(IdType, ForeignKey("spots.id"), nullable=False, index=True)
    spot = relationship("Spot", back_populates="opening_hours")


class SocialLink(BaseModel):
    __tablename__ = "social_links"
    __table_args__ = (UniqueConstraint("spot_id", "platform", name="uq_social_links_spot_platform"),)
    
    platform = Column(String(20), nullable=False)  # instagram or website
    url = Column(String(1024), nullable=False)
    
    spot_id = Column(IdType, ForeignKey("spots.id"), nullable=False, index=True)
    spot = relationship("Spot", back_populates="social_links")


class Author(BaseModel):
    __tablename__ = "authors"
    
    name = Column(String(255), nullable=False)
    avatar_url = Column(String(1024))
    
    spot_id = Column(IdType, ForeignKey("spots.id"), nullable=False, unique=True)
    spot = relationship("Spot", back_populates="author")


class RelatedArticle(BaseModel):
    __tablename__ = "related_articles"
    
    title = Column(String(255), nullable=False)
    url = Column(String(1024), nullable=False)
    
    spot_id = Column(IdType, ForeignKey("spots.id"), nullable=False, unique=True)
    spot = relationship("Spot", back_populates="related_article")
