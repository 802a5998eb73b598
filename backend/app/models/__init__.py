from .base import BaseModel
from .user import User, UserSession
from .category import Category
from .spot import Spot, Media, Tip, OpeningHours, SocialLink, Author, RelatedArticle
from .favorite import Favorite
from .activity_log import ActivityLog

__all__ = [
    "BaseModel",
    "User",
    "UserSession",
    "Category",
    "Spot",
    "Media",
    "Tip",
    "OpeningHours",
    "SocialLink",
    "Author",
    "RelatedArticle",
    "Favorite",
    "ActivityLog",
]
