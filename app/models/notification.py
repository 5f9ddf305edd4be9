import uuid
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


# Reference types carried by notifications
REF_POTENTIAL_MATCH = "POTENTIAL_MATCH"
REF_CLAIM_NEW = "CLAIM_NEW"
REF_CLAIM_APPROVED = "CLAIM_APPROVED"
REF_CLAIM_REJECTED = "CLAIM_REJECTED"
REF_ASSET_FOUND = "ASSET_FOUND"


class Notification(SQLModel, table=True):
    __tablename__ = "notifications"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Ownership
    user_id: int = Field(foreign_key="users.id", index=True)

    # Notification fields
    ref_type: str = Field(index=True)
    ref_id: uuid.UUID = Field(index=True)

    title: str
    body: str

    is_read: bool = Field(default=False)
