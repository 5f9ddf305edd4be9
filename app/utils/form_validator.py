from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.errors import InvalidInput


CATEGORIES = (
    "electronics",
    "clothing",
    "bags",
    "keys-wallets",
    "documents",
    "others",
)


class VerificationForm(BaseModel):
    question: str = Field(min_length=3, max_length=280)
    answer: str = Field(min_length=1, max_length=280)


class FoundItemForm(BaseModel):
    title: str = Field(min_length=3, max_length=60)
    category: str
    description: str = Field(default="", max_length=280)
    location: str = Field(default="", max_length=120)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    date_found: Optional[str] = None
    image_url: Optional[str] = None
    verifications: List[VerificationForm] = Field(min_length=1)


class LostItemForm(BaseModel):
    title: str = Field(min_length=3, max_length=60)
    category: str
    description: str = Field(default="", max_length=280)
    location_last_seen: str = Field(min_length=3, max_length=120)
    date_lost: str
    urgency: str = "NORMAL"
    image_url: Optional[str] = None


class ItemUpdateForm(BaseModel):
    """Partial edit of a report; fields left out stay as they are."""

    title: Optional[str] = Field(default=None, min_length=3, max_length=60)
    category: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=280)
    location: Optional[str] = Field(default=None, max_length=120)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    date: Optional[str] = None
    urgency: Optional[str] = None
    image_url: Optional[str] = None


class AssetForm(BaseModel):
    category: str
    description: str = Field(min_length=3, max_length=280)
    private_image_url: Optional[str] = None
    lost_mode: bool = False


def parse_date(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        raise InvalidInput(f"Date not parseable: {value!r}")


def normalize_category(value: str) -> str:
    category = (value or "").strip().lower()

    if category not in CATEGORIES:
        raise InvalidInput(f"Invalid category option: {value!r}")

    return category


def check_coordinates(latitude: Optional[float], longitude: Optional[float]):
    # both or neither
    if (latitude is None) != (longitude is None):
        raise InvalidInput("Latitude and longitude must be given together")
