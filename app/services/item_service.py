import uuid
from typing import List, Optional, Tuple

from sqlalchemy import delete, update
from sqlmodel import Session, select

from app.errors import InvalidInput, NotFound
from app.models.claim import Claim
from app.models.item import Item, ItemStatus, ItemType, ItemUrgency, ItemVerification
from app.services.policy import ensure_reporter
from app.utils.form_validator import (
    FoundItemForm,
    ItemUpdateForm,
    LostItemForm,
    check_coordinates,
    normalize_category,
    parse_date,
)
from app.utils.logging_config import get_logger

logger = get_logger(__name__)


# Explicit status updates; OPEN -> CLAIMED is normally done by approving a claim
ITEM_TRANSITIONS = {
    ItemStatus.OPEN: {ItemStatus.CLAIMED, ItemStatus.RESOLVED},
    ItemStatus.CLAIMED: {ItemStatus.RESOLVED},
    ItemStatus.RESOLVED: set(),
}


def _parse_enum(enum_cls, value, label: str):
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidInput(f"Invalid {label} {value!r}: must be one of {allowed}")


def item_public_view(item: Item, questions: List[str]) -> dict:
    data = item.model_dump()
    data["verification_questions"] = questions
    return data


class ItemService:
    def __init__(self, session: Session, dispatcher=None):
        self.session = session
        self.dispatcher = dispatcher

    def report_found_item(self, form: FoundItemForm, finder_id: int) -> Item:
        category = normalize_category(form.category)
        check_coordinates(form.latitude, form.longitude)
        date_found = parse_date(form.date_found) if form.date_found else None

        item = Item(
            finder_id=finder_id,
            title=form.title.strip(),
            type=ItemType.FOUND,
            category=category,
            description=form.description.strip(),
            location=form.location.strip(),
            latitude=form.latitude,
            longitude=form.longitude,
            image_url=form.image_url,
            date=date_found,
            status=ItemStatus.OPEN,
        )
        self.session.add(item)

        for verification in form.verifications:
            self.session.add(ItemVerification(
                item_id=item.id,
                question=verification.question.strip(),
                answer=verification.answer.strip(),
            ))

        self.session.commit()
        self.session.refresh(item)

        logger.info("found_item_reported item=%s finder=%s category=%s", item.id, finder_id, category)

        # matching runs after the report is stored and never blocks it
        if self.dispatcher is not None:
            try:
                self.dispatcher.submit(item.id)
            except Exception:
                logger.exception("matching_schedule_failed item=%s", item.id)

        return item

    def report_lost_item(self, form: LostItemForm, owner_id: int) -> Item:
        category = normalize_category(form.category)
        date_lost = parse_date(form.date_lost)
        urgency = _parse_enum(ItemUrgency, form.urgency or ItemUrgency.NORMAL.value, "urgency")

        item = Item(
            owner_id=owner_id,
            title=form.title.strip(),
            type=ItemType.LOST,
            category=category,
            description=form.description.strip(),
            location=form.location_last_seen.strip(),
            image_url=form.image_url,
            date=date_lost,
            urgency=urgency,
            status=ItemStatus.OPEN,
        )

        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)

        logger.info("lost_item_reported item=%s owner=%s category=%s", item.id, owner_id, category)
        return item

    def get_item(self, item_id: uuid.UUID) -> Tuple[Item, List[str]]:
        item = self.session.get(Item, item_id)
        if not item:
            raise NotFound("Item", item_id)

        questions = self.session.exec(
            select(ItemVerification.question)
            .where(ItemVerification.item_id == item.id)
            .order_by(ItemVerification.id)
        ).all()

        return item, list(questions)

    def list_items(self, status: Optional[str] = None, item_type: Optional[str] = None) -> List[Item]:
        query = select(Item).order_by(Item.created_at.desc())

        if status:
            query = query.where(Item.status == _parse_enum(ItemStatus, status, "status"))

        if item_type:
            query = query.where(Item.type == _parse_enum(ItemType, item_type, "type"))

        return list(self.session.exec(query).all())

    def list_user_items(self, user_id: int) -> List[Item]:
        items = self.session.exec(
            select(Item)
            .where((Item.finder_id == user_id) | (Item.owner_id == user_id))
            .order_by(Item.created_at.desc())
        ).all()

        return list(items)

    def update_item(self, item_id: uuid.UUID, form: ItemUpdateForm, requester_id: int) -> Item:
        item = self.session.get(Item, item_id)
        if not item:
            raise NotFound("Item", item_id)

        ensure_reporter(item, requester_id, "edit this item")

        changes = form.model_dump(exclude_unset=True)

        for required in ("title", "category"):
            if required in changes and changes[required] is None:
                raise InvalidInput(f"{required.capitalize()} cannot be empty")

        if "category" in changes:
            changes["category"] = normalize_category(changes["category"])

        if "date" in changes:
            changes["date"] = parse_date(changes["date"]) if changes["date"] else None

        if "latitude" in changes or "longitude" in changes:
            check_coordinates(changes.get("latitude"), changes.get("longitude"))

        if "urgency" in changes:
            if item.type != ItemType.LOST:
                raise InvalidInput("Urgency only applies to lost reports")
            changes["urgency"] = _parse_enum(ItemUrgency, changes["urgency"] or ItemUrgency.NORMAL.value, "urgency")

        for field in ("title", "description", "location"):
            if changes.get(field) is not None:
                changes[field] = changes[field].strip()

        for field, value in changes.items():
            setattr(item, field, value)

        self.session.add(item)
        self.session.commit()
        self.session.refresh(item)

        logger.info("item_updated item=%s by=%s fields=%s", item.id, requester_id, ",".join(sorted(changes)))
        return item

    def update_item_status(self, item_id: uuid.UUID, status: str, requester_id: int) -> Item:
        target = _parse_enum(ItemStatus, status, "status")

        item = self.session.get(Item, item_id)
        if not item:
            raise NotFound("Item", item_id)

        current = item.status
        if target not in ITEM_TRANSITIONS[current]:
            raise InvalidInput(f"Invalid transition: {current.value} -> {target.value}")

        ensure_reporter(item, requester_id, "change the status of this item")

        items = Item.__table__
        moved = self.session.connection().execute(
            update(items)
            .where(items.c.id == item.id)
            .where(items.c.status == current)
            .values(status=target)
        )
        if moved.rowcount != 1:
            self.session.rollback()
            self.session.refresh(item)
            raise InvalidInput(f"Invalid transition: {item.status.value} -> {target.value}")

        self.session.commit()
        self.session.refresh(item)

        logger.info("item_status_changed item=%s from=%s to=%s by=%s", item.id, current.value, target.value, requester_id)
        return item

    def delete_item(self, item_id: uuid.UUID, requester_id: int):
        item = self.session.get(Item, item_id)
        if not item:
            raise NotFound("Item", item_id)

        ensure_reporter(item, requester_id, "delete this item")

        conn = self.session.connection()
        conn.execute(delete(ItemVerification.__table__).where(ItemVerification.__table__.c.item_id == item.id))
        conn.execute(delete(Claim.__table__).where(Claim.__table__.c.item_id == item.id))

        self.session.delete(item)
        self.session.commit()

        logger.info("item_deleted item=%s by=%s", item_id, requester_id)
