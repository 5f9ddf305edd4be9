"""Claim lifecycle: submission, listing and the finder's decision.

Every operation checks, in order, that the records exist, that they are in
the required state, and that the caller is allowed to act. Each step fails
with its own error kind.

State changes are check-and-set updates (``UPDATE ... WHERE status = ...``)
so two concurrent decisions can never both win, and a claim is never
inserted after its item has left OPEN.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlmodel import Session, select

from app.errors import AlreadyDecided, InvalidInput, ItemNotOpen, NotFound, Unauthorized
from app.models.claim import Claim, ClaimStatus
from app.models.item import Item, ItemStatus, ItemType
from app.models.notification import REF_CLAIM_APPROVED, REF_CLAIM_NEW, REF_CLAIM_REJECTED
from app.services.policy import ensure_finder, is_finder
from app.utils.logging_config import get_logger

logger = get_logger(__name__)


CLAIM_TRANSITIONS = {
    ClaimStatus.PENDING: {ClaimStatus.APPROVED, ClaimStatus.REJECTED},
    ClaimStatus.APPROVED: set(),
    ClaimStatus.REJECTED: set(),
}


def parse_decision(value) -> ClaimStatus:
    try:
        decision = ClaimStatus(value)
    except ValueError:
        raise InvalidInput(f"Invalid decision {value!r}: must be APPROVED or REJECTED")

    if decision not in CLAIM_TRANSITIONS[ClaimStatus.PENDING]:
        raise InvalidInput(f"Invalid decision {value!r}: must be APPROVED or REJECTED")

    return decision


class ClaimService:
    def __init__(self, session: Session, notifier, auto_reject_siblings: bool = False):
        self.session = session
        self.notifier = notifier
        self.auto_reject_siblings = auto_reject_siblings

    def _get_found_item(self, item_id: uuid.UUID) -> Item:
        item = self.session.get(Item, item_id)
        if not item or item.type != ItemType.FOUND:
            raise NotFound("Item", item_id)
        return item

    def _notify(self, user_id: Optional[int], title: str, body: str, ref_type: str, ref_id: uuid.UUID):
        if user_id is None:
            return

        # delivery problems never undo a committed claim change
        try:
            self.notifier.send(user_id, title, body, ref_type, ref_id)
        except Exception:
            logger.exception("claim_notify_failed user=%s ref_type=%s ref_id=%s", user_id, ref_type, ref_id)

    def submit_claim(
        self,
        item_id: uuid.UUID,
        claimant_id: int,
        answer: str,
        proof_image_url: Optional[str] = None,
    ) -> Claim:
        item = self._get_found_item(item_id)

        if item.status != ItemStatus.OPEN:
            raise ItemNotOpen(item.id, item.status.value)

        # re-check OPEN in the write transaction; the no-op update holds the
        # item row until commit, so an approval cannot slip in between
        items = Item.__table__
        still_open = self.session.connection().execute(
            update(items)
            .where(items.c.id == item.id)
            .where(items.c.status == ItemStatus.OPEN)
            .values(status=ItemStatus.OPEN)
        )
        if still_open.rowcount != 1:
            self.session.rollback()
            self.session.refresh(item)
            raise ItemNotOpen(item.id, item.status.value)

        claim = Claim(
            item_id=item.id,
            claimant_id=claimant_id,
            answer=answer.strip(),
            proof_image_url=proof_image_url,
        )

        self.session.add(claim)
        self.session.commit()
        self.session.refresh(claim)

        logger.info("claim_submitted claim=%s item=%s claimant=%s", claim.id, item.id, claimant_id)

        self._notify(
            item.finder_id,
            "New Claim Received",
            f"Someone has claimed '{item.title}', an item you found.",
            REF_CLAIM_NEW,
            claim.id,
        )

        return claim

    def list_claims(self, item_id: uuid.UUID, requester_id: int) -> List[Claim]:
        item = self._get_found_item(item_id)
        ensure_finder(item, requester_id, "view claims on this item")

        claims = self.session.exec(
            select(Claim)
            .where(Claim.item_id == item.id)
            .order_by(Claim.created_at, Claim.id)
        ).all()

        return list(claims)

    def get_claim(self, claim_id: uuid.UUID, requester_id: int) -> Tuple[Claim, Item]:
        """Fetch a claim for its claimant or for the item's finder."""
        claim = self.session.get(Claim, claim_id)
        if not claim:
            raise NotFound("Claim", claim_id)

        item = self.session.get(Item, claim.item_id)
        if not item:
            raise NotFound("Item", claim.item_id)

        if claim.claimant_id != requester_id and not is_finder(item, requester_id):
            raise Unauthorized("Not authorized to view this claim")

        return claim, item

    def decide_claim(self, claim_id: uuid.UUID, decision, requester_id: int) -> Claim:
        decision = parse_decision(decision)

        claim = self.session.get(Claim, claim_id)
        if not claim:
            raise NotFound("Claim", claim_id)

        item = self.session.get(Item, claim.item_id)
        if not item:
            raise NotFound("Item", claim.item_id)

        if decision not in CLAIM_TRANSITIONS[claim.status]:
            raise AlreadyDecided(claim.id, claim.status.value)

        ensure_finder(item, requester_id, "decide claims on this item")

        now = datetime.now(timezone.utc)
        claims = Claim.__table__
        items = Item.__table__
        conn = self.session.connection()

        decided = conn.execute(
            update(claims)
            .where(claims.c.id == claim.id)
            .where(claims.c.status == ClaimStatus.PENDING)
            .values(status=decision, decided_at=now)
        )
        if decided.rowcount != 1:
            self.session.rollback()
            self.session.refresh(claim)
            raise AlreadyDecided(claim.id, claim.status.value)

        auto_rejected = []

        if decision == ClaimStatus.APPROVED:
            moved = conn.execute(
                update(items)
                .where(items.c.id == item.id)
                .where(items.c.status == ItemStatus.OPEN)
                .values(status=ItemStatus.CLAIMED)
            )
            if moved.rowcount != 1:
                self.session.rollback()
                self.session.refresh(item)
                raise ItemNotOpen(item.id, item.status.value)

            if self.auto_reject_siblings:
                auto_rejected = self._reject_siblings(claim, now)

        self.session.commit()
        self.session.refresh(claim)

        logger.info(
            "claim_decided claim=%s item=%s decision=%s by=%s auto_rejected=%d",
            claim.id, item.id, decision.value, requester_id, len(auto_rejected),
        )

        if decision == ClaimStatus.APPROVED:
            self._notify(
                claim.claimant_id,
                "Claim Approved!",
                f"Your claim for '{item.title}' has been approved. You can now contact the finder.",
                REF_CLAIM_APPROVED,
                claim.id,
            )
        else:
            self._notify(
                claim.claimant_id,
                "Claim Rejected",
                f"Your claim for '{item.title}' has been rejected.",
                REF_CLAIM_REJECTED,
                claim.id,
            )

        for sibling_id, claimant_id in auto_rejected:
            self._notify(
                claimant_id,
                "Claim Rejected",
                f"'{item.title}' has been returned to another claimant.",
                REF_CLAIM_REJECTED,
                sibling_id,
            )

        return claim

    def _reject_siblings(self, approved: Claim, now: datetime) -> List[Tuple[uuid.UUID, int]]:
        claims = Claim.__table__

        siblings = self.session.exec(
            select(Claim.id, Claim.claimant_id)
            .where(Claim.item_id == approved.item_id)
            .where(Claim.status == ClaimStatus.PENDING)
            .where(Claim.id != approved.id)
        ).all()

        if not siblings:
            return []

        self.session.connection().execute(
            update(claims)
            .where(claims.c.id.in_([sibling_id for sibling_id, _ in siblings]))
            .where(claims.c.status == ClaimStatus.PENDING)
            .values(status=ClaimStatus.REJECTED, decided_at=now)
        )

        return [(sibling_id, claimant_id) for sibling_id, claimant_id in siblings]
