from enum import Enum
from typing import Optional
import uuid
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class ItemType(str, Enum):
    LOST = "LOST"
    FOUND = "FOUND"


class ItemStatus(str, Enum):
    OPEN = "OPEN"
    CLAIMED = "CLAIMED"
    RESOLVED = "RESOLVED"


class ItemUrgency(str, Enum):
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class Item(SQLModel, table=True):
    __tablename__ = "items"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Reporter info, exactly one of these is set depending on type
    finder_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    owner_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)

    # Item fields
    title: str
    type: ItemType = Field(default=ItemType.FOUND, index=True)
    category: str = Field(index=True)
    description: str = ""
    location: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image_url: Optional[str] = None
    date: Optional[datetime] = None  # date found or date lost

    # Lost reports only
    urgency: ItemUrgency = Field(default=ItemUrgency.NORMAL)

    status: ItemStatus = Field(default=ItemStatus.OPEN, index=True)


class ItemVerification(SQLModel, table=True):
    __tablename__ = "item_verifications"

    id: Optional[int] = Field(default=None, primary_key=True)
    item_id: uuid.UUID = Field(foreign_key="items.id", index=True, ondelete="CASCADE")

    question: str
    answer: str  # never leaves the server
