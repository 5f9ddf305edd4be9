"""Typed failures raised by the matching and claim services.

Every failure carries an ``ErrorKind`` so the HTTP layer can map it to a
status code without looking at the message text.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    ITEM_NOT_OPEN = "ITEM_NOT_OPEN"
    ALREADY_DECIDED = "ALREADY_DECIDED"
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_INPUT = "INVALID_INPUT"


class LostFoundError(Exception):
    """Root exception for all domain failures."""

    kind: ErrorKind

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.kind.value.replace("_", " ").lower())
        self.message = str(self)


class NotFound(LostFoundError):
    """A referenced item, claim, asset or user does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, entity: str, entity_id: object = None) -> None:
        where = f" ({entity_id})" if entity_id is not None else ""
        super().__init__(f"{entity} not found{where}")
        self.entity = entity
        self.entity_id = entity_id


class ItemNotOpen(LostFoundError):
    """The item is no longer accepting claims or approvals."""

    kind = ErrorKind.ITEM_NOT_OPEN

    def __init__(self, item_id: object, status: str) -> None:
        super().__init__(f"Item {item_id} is not open for claims (status: {status})")
        self.item_id = item_id
        self.status = status


class AlreadyDecided(LostFoundError):
    """The claim has already left PENDING."""

    kind = ErrorKind.ALREADY_DECIDED

    def __init__(self, claim_id: object, status: str) -> None:
        super().__init__(f"Claim {claim_id} has already been decided (status: {status})")
        self.claim_id = claim_id
        self.status = status


class Unauthorized(LostFoundError):
    """The caller is not the finder/owner the operation requires."""

    kind = ErrorKind.UNAUTHORIZED


class InvalidInput(LostFoundError):
    """Malformed decision value, unparsable date, unknown category and similar."""

    kind = ErrorKind.INVALID_INPUT
