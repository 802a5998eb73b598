from datetime import datetime, time
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ----- Query parameters -----

class SpotFilters(BaseModel):
    """Optional filters for the spot list; absent values impose no restriction."""
    category: Optional[str] = None
    search: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    radius_km: Optional[float] = None
    favorites_only: bool = False
    user_id: Optional[int] = None


# ----- Requests -----

class MediaIn(WireModel):
    type: Literal["image", "video"]
    url: str = Field(..., min_length=1, max_length=1024)
    thumbnail: Optional[str] = Field(None, max_length=1024)
    caption: Optional[str] = Field(None, max_length=255)


class OpeningHoursIn(WireModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday")
    open: Optional[time] = None
    close: Optional[time] = None
    is_closed: bool = False

    @model_validator(mode="after")
    def check_times(self):
        if not self.is_closed and (self.open is None or self.close is None):
            raise ValueError("open and close are required unless the day is closed")
        return self


class AuthorIn(WireModel):
    name: str = Field(..., min_length=1, max_length=255)
    avatar: Optional[str] = Field(None, max_length=1024)


class RelatedArticleIn(WireModel):
    title: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=1024)


def _clean_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("name cannot be blank")
    return value


def _clean_tips(tips: Optional[List[str]]) -> Optional[List[str]]:
    if tips is None:
        return None
    return [tip.strip() for tip in tips if tip and tip.strip()]


def _hours_from_mapping(value: Any) -> Any:
    # Also accept {"1": {"open": "09:00", "close": "17:00"}, ...}
    if isinstance(value, dict):
        return [
            {"dayOfWeek": int(day), **(times or {})}
            for day, times in value.items()
        ]
    return value


class SpotCreate(WireModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    latitude: float = Field(..., ge=-90, le=90, validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(..., ge=-180, le=180, validation_alias=AliasChoices("longitude", "lng"))
    category_id: Optional[int] = None
    category: Optional[str] = Field(None, description="Category slug, alternative to categoryId")
    icon: Optional[str] = Field(None, max_length=16)
    rating: float = Field(0, ge=0, le=5)
    price: float = Field(0, ge=0)
    editor_pick: bool = False
    hours: List[OpeningHoursIn] = Field(default_factory=list)
    media: List[MediaIn] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)
    social: Dict[Literal["instagram", "website"], str] = Field(default_factory=dict)
    related_article: Optional[RelatedArticleIn] = None
    author: Optional[AuthorIn] = None

    @field_validator("hours", mode="before")
    @classmethod
    def normalize_hours(cls, value: Any) -> Any:
        return _hours_from_mapping(value)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return _clean_name(value)

    @field_validator("tips")
    @classmethod
    def strip_tips(cls, tips: List[str]) -> List[str]:
        return _clean_tips(tips)


class SpotUpdate(WireModel):
    """Partial update; only fields present in the body are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    latitude: Optional[float] = Field(None, ge=-90, le=90, validation_alias=AliasChoices("latitude", "lat"))
    longitude: Optional[float] = Field(None, ge=-180, le=180, validation_alias=AliasChoices("longitude", "lng"))
    category_id: Optional[int] = None
    category: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=16)
    rating: Optional[float] = Field(None, ge=0, le=5)
    price: Optional[float] = Field(None, ge=0)
    editor_pick: Optional[bool] = None
    hours: Optional[List[OpeningHoursIn]] = None
    media: Optional[List[MediaIn]] = None
    tips: Optional[List[str]] = None
    social: Optional[Dict[Literal["instagram", "website"], str]] = None
    related_article: Optional[RelatedArticleIn] = None
    author: Optional[AuthorIn] = None

    @field_validator("hours", mode="before")
    @classmethod
    def normalize_hours(cls, value: Any) -> Any:
        return _hours_from_mapping(value)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        return _clean_name(value)

    @field_validator("tips")
    @classmethod
    def strip_tips(cls, tips: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_tips(tips)

    @model_validator(mode="after")
    def required_fields_not_null(self):
        for name in ("name", "latitude", "longitude"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


# ----- Responses -----

class MediaOut(WireModel):
    type: str
    url: str
    thumbnail: Optional[str] = None
    caption: Optional[str] = None
    display_order: int = 0


class OpeningHoursOut(WireModel):
    day_of_week: int
    open: Optional[str] = None
    close: Optional[str] = None
    is_closed: bool = False


class AuthorOut(WireModel):
    name: str
    avatar: Optional[str] = None


class RelatedArticleOut(WireModel):
    title: str
    url: str


class SpotOut(WireModel):
    id: int
    name: str
    description: Optional[str] = None
    category: str
    category_name: Optional[str] = None
    icon: str
    lat: float
    lng: float
    price: float
    rating: float
    editor_pick: bool
    media: List[MediaOut] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)
    opening_hours: List[OpeningHoursOut] = Field(default_factory=list)
    social: Dict[str, str] = Field(default_factory=dict)
    author: Optional[AuthorOut] = None
    related_article: Optional[RelatedArticleOut] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SpotListResponse(BaseModel):
    spots: List[SpotOut]


class SpotResponse(BaseModel):
    spot: SpotOut


class CategoryOut(WireModel):
    id: int
    slug: str
    name: str
    icon: Optional[str] = None
    is_active: bool = True


class CategoryListResponse(BaseModel):
    categories: List[CategoryOut]
