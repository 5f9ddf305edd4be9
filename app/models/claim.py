from enum import Enum
from typing import Optional
import uuid
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class ClaimStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Claim(SQLModel, table=True):
    __tablename__ = "claims"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)

    # Claimant
    claimant_id: int = Field(foreign_key="users.id", index=True) # for sending notifications

    # Claimed found item
    item_id: uuid.UUID = Field(foreign_key="items.id", index=True)

    status: ClaimStatus = Field(default=ClaimStatus.PENDING, index=True)

    # Content
    answer: str
    proof_image_url: Optional[str] = None

    decided_at: Optional[datetime] = None
