#!/usr/bin/env python3
"""Seed script to populate the database with categories, users and sample Paris spots."""

import logging
from datetime import time

from app.core.config import settings
from app.core.database import Base, SessionLocal, engine
from app.models import (
    Author, Category, Media, OpeningHours, RelatedArticle, SocialLink, Spot, Tip, User,
)
from app.auth.password import password_manager

logger = logging.getLogger("seed_data")

CATEGORIES = [
    {"slug": "restaurant", "name": "Food", "icon": "🍽️"},
    {"slug": "museum", "name": "Culture", "icon": "🏛️"},
    {"slug": "park", "name": "Nature", "icon": "🌳"},
    {"slug": "shopping", "name": "Shopping", "icon": "🛍️"},
]

SAMPLE_SPOTS = [
    {
        "name": "Eiffel Tower",
        "description": "The iron lady of Paris stands tall at 330 meters, offering breathtaking views of the city.",
        "category": "museum",
        "icon": "🗼",
        "rating": 4.8,
        "lat": 48.8584,
        "lng": 2.2945,
        "price": 26,
        "hours": ("09:30", "23:45"),
        "editor_pick": True,
        "author": ("Sophie Martin", "https://i.pravatar.cc/100?img=1"),
        "media": [
            ("image", "https://images.unsplash.com/photo-1511739001486-6bfe10ce785f?w=800", "Eiffel Tower at sunset"),
            ("image", "https://images.unsplash.com/photo-1543349689-9a4d426bee8e?w=800", "Night view with lights"),
        ],
        "tips": [
            "Visit early morning or late evening to avoid crowds",
            "Book tickets online to skip the queue",
            "The view from Trocadéro is perfect for photos",
        ],
        "article": ("48 Hours in Paris: A Perfect Weekend Guide", "#"),
        "social": {
            "instagram": "https://instagram.com/toureiffelofficielle",
            "website": "https://www.toureiffel.paris",
        },
    },
    {
        "name": "Le Jules Verne",
        "description": "Michelin-starred dining experience 125 meters above Paris.",
        "category": "restaurant",
        "icon": "🍽️",
        "rating": 4.7,
        "lat": 48.8582,
        "lng": 2.2945,
        "price": 190,
        "hours": ("12:00", "21:30"),
        "editor_pick": False,
        "author": ("Marcus Chen", "https://i.pravatar.cc/100?img=3"),
        "media": [
            ("image", "https://images.unsplash.com/photo-1414235077428-338989a2e8c0?w=800", "Signature dish presentation"),
        ],
        "tips": [
            "Reservations essential - book 2-3 months ahead",
            "Lunch menu offers better value",
        ],
        "article": ("Paris's Most Spectacular Dining Views", "#"),
        "social": {
            "instagram": "https://instagram.com/lejulesverneparis",
            "website": "https://www.lejules-verne.com",
        },
    },
    {
        "name": "Luxembourg Gardens",
        "description": "A 23-hectare oasis in the heart of Paris with the famous Medici Fountain.",
        "category": "park",
        "icon": "🌳",
        "rating": 4.6,
        "lat": 48.8462,
        "lng": 2.3372,
        "price": 0,
        "hours": ("07:30", "21:30"),
        "editor_pick": True,
        "author": None,
        "media": [],
        "tips": ["Bring a picnic and grab one of the green chairs"],
        "article": None,
        "social": {},
    },
]


def _parse_time(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def create_sample_data():
    """Create categories, users and sample spots. Safe to run on an empty database only."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    
    try:
        if db.query(Category).count() > 0:
            logger.info("Database already seeded, skipping")
            return
        
        categories = {}
        for data in CATEGORIES:
            category = Category(is_active=True, **data)
            db.add(category)
            categories[data["slug"]] = category
        
        admin_user = User(
            email="admin@example.com",
            hashed_password=password_manager.hash_password(settings.seed_admin_password or "admin123"),
            full_name="Admin User",
            role="admin",
            is_active=True
        )
        member_user = User(
            email="user@example.com",
            hashed_password=password_manager.hash_password("user123"),
            full_name="Regular User",
            role="user",
            is_active=True
        )
        db.add_all([admin_user, member_user])
        db.flush()
        
        for data in SAMPLE_SPOTS:
            spot = Spot(
                name=data["name"],
                description=data["description"],
                category=categories[data["category"]],
                icon=data["icon"],
                rating=data["rating"],
                latitude=data["lat"],
                longitude=data["lng"],
                price=data["price"],
                editor_pick=data["editor_pick"],
                created_by=admin_user.id,
                updated_by=admin_user.id
            )
            open_time, close_time = data["hours"]
            spot.opening_hours = [
                OpeningHours(day_of_week=day, open_time=_parse_time(open_time), close_time=_parse_time(close_time))
                for day in range(7)
            ]
            spot.media = [
                Media(type=kind, url=url, caption=caption, display_order=i)
                for i, (kind, url, caption) in enumerate(data["media"])
            ]
            spot.tips = [
                Tip(tip_text=text, display_order=i, created_by=admin_user.id)
                for i, text in enumerate(data["tips"])
            ]
            spot.social_links = [SocialLink(platform=p, url=u) for p, u in data["social"].items()]
            if data["author"]:
                spot.author = Author(name=data["author"][0], avatar_url=data["author"][1])
            if data["article"]:
                spot.related_article = RelatedArticle(title=data["article"][0], url=data["article"][1])
            db.add(spot)
        
        db.commit()
        logger.info("Seeded %d categories and %d spots", len(CATEGORIES), len(SAMPLE_SPOTS))
        
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_sample_data()
