from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from sqlmodel import Session

from app.db.db import create_db_engine, init_db
from app.models.asset import Asset
from app.models.claim import Claim
from app.models.item import Item, ItemStatus, ItemType, ItemVerification
from app.models.user import User


class RecordingNotifier:
    """Stands in for the notification sink and remembers every send."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send(self, user_id, title, body, ref_type, ref_id):
        if self.fail:
            raise RuntimeError("notification backend unavailable")

        record = SimpleNamespace(user_id=user_id, title=title, body=body, ref_type=ref_type, ref_id=ref_id)
        self.sent.append(record)
        return record

    def of_type(self, ref_type):
        return [n for n in self.sent if n.ref_type == ref_type]


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def users(session):
    """finder, claimant, other claimant, outsider and an asset owner."""
    people = {}
    for key in ("finder", "claimant", "claimant2", "outsider", "owner"):
        user = User(public_id=f"pub-{key}", name=key.title(), email=f"{key}@campus.test")
        session.add(user)
        people[key] = user

    session.commit()
    return {key: user.id for key, user in people.items()}


@pytest.fixture
def make_found_item(session):
    def _make(finder_id, category="electronics", status=ItemStatus.OPEN, **fields):
        item = Item(
            finder_id=finder_id,
            title=fields.pop("title", "Black phone"),
            type=ItemType.FOUND,
            category=category,
            status=status,
            **fields,
        )
        session.add(item)
        session.add(ItemVerification(item_id=item.id, question="What is the lock screen?", answer="a cat"))
        session.commit()
        session.refresh(item)
        return item

    return _make


@pytest.fixture
def make_claim(session):
    def _make(item, claimant_id, answer="my cat is on the lock screen", created_at=None):
        claim = Claim(item_id=item.id, claimant_id=claimant_id, answer=answer)
        if created_at is not None:
            claim.created_at = created_at
        session.add(claim)
        session.commit()
        session.refresh(claim)
        return claim

    return _make


@pytest.fixture
def make_asset(session):
    def _make(owner_id, category="electronics", lost_mode=True, updated_at=None, **fields):
        asset = Asset(
            owner_id=owner_id,
            category=category,
            description=fields.pop("description", "Silver laptop"),
            lost_mode=lost_mode,
            updated_at=updated_at or datetime.now(timezone.utc),
            **fields,
        )
        session.add(asset)
        session.commit()
        session.refresh(asset)
        return asset

    return _make
