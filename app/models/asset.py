from typing import Optional
import uuid
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class Asset(SQLModel, table=True):
    __tablename__ = "assets"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Last status change, doubles as "time reported lost" while in lost mode
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Owner info
    owner_id: int = Field(foreign_key="users.id", index=True)

    # Asset fields
    category: str = Field(index=True)
    description: str
    private_image_url: Optional[str] = None  # Only shown to the owner

    lost_mode: bool = Field(default=False, index=True)

    # Where the owner last saw it, supplied when lost mode is switched on
    last_seen_latitude: Optional[float] = None
    last_seen_longitude: Optional[float] = None


class FoundEvent(SQLModel, table=True):
    __tablename__ = "found_events"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    asset_id: uuid.UUID = Field(foreign_key="assets.id", index=True)
    finder_id: Optional[int] = Field(default=None, foreign_key="users.id")

    location: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    note: str = ""
    image_url: Optional[str] = None
