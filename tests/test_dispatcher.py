"""Tests for the match dispatcher: matching pass and notifications."""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlmodel import Session, select

from app.matching.dispatcher import MatchDispatcher
from app.models.asset import Asset
from app.models.item import Item, ItemStatus, ItemType
from app.models.notification import REF_POTENTIAL_MATCH, Notification
from app.services.notification_service import NotificationService

from conftest import RecordingNotifier

T = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def found_item(category="electronics", at=T, **fields):
    return Item(finder_id=1, title="Black phone", type=ItemType.FOUND, category=category, created_at=at, **fields)


def lost_asset(owner_id, category="electronics", at=T - timedelta(hours=10), lost_mode=True, **fields):
    return Asset(owner_id=owner_id, category=category, description="Grey phone", lost_mode=lost_mode, updated_at=at, **fields)


def test_recent_lost_asset_gets_exactly_one_notification(engine) -> None:
    notifier = RecordingNotifier()
    dispatcher = MatchDispatcher(engine, notifier)
    item = found_item()
    asset = lost_asset(owner_id=42)

    matches = dispatcher.dispatch(item, [asset])

    assert [m.asset_id for m in matches] == [asset.id]
    assert len(notifier.sent) == 1
    sent = notifier.sent[0]
    assert sent.user_id == 42
    assert sent.ref_type == REF_POTENTIAL_MATCH
    assert sent.ref_id == item.id
    dispatcher.shutdown()


def test_non_matching_candidates_are_skipped(engine) -> None:
    notifier = RecordingNotifier()
    dispatcher = MatchDispatcher(engine, notifier)

    candidates = [
        lost_asset(owner_id=1, category="bags"),                    # wrong category
        lost_asset(owner_id=2, at=T - timedelta(hours=50)),         # too old
        lost_asset(owner_id=3, lost_mode=False),                    # not lost
        lost_asset(owner_id=4, at=T - timedelta(hours=1)),          # match
    ]

    matches = dispatcher.dispatch(found_item(), candidates)

    assert [m.owner_id for m in matches] == [4]
    assert [n.user_id for n in notifier.sent] == [4]
    dispatcher.shutdown()


def test_same_candidate_twice_is_notified_once(engine) -> None:
    notifier = RecordingNotifier()
    dispatcher = MatchDispatcher(engine, notifier)
    asset = lost_asset(owner_id=7)

    dispatcher.dispatch(found_item(), [asset, asset])

    assert len(notifier.sent) == 1
    dispatcher.shutdown()


def test_dispatch_does_not_touch_records(engine) -> None:
    dispatcher = MatchDispatcher(engine, RecordingNotifier())
    item = found_item()
    asset = lost_asset(owner_id=7)

    dispatcher.dispatch(item, [asset])

    assert item.status == ItemStatus.OPEN
    assert asset.lost_mode is True
    assert asset.updated_at == T - timedelta(hours=10)
    dispatcher.shutdown()


def test_notification_failure_is_logged_and_pass_continues(engine, caplog) -> None:
    dispatcher = MatchDispatcher(engine, RecordingNotifier(fail=True))
    candidates = [lost_asset(owner_id=1), lost_asset(owner_id=2)]

    with caplog.at_level(logging.ERROR, logger="app.matching.dispatcher"):
        matches = dispatcher.dispatch(found_item(), candidates)

    assert len(matches) == 2
    assert "match_notify_failed" in caplog.text
    dispatcher.shutdown()


def test_submit_runs_in_background_against_stored_assets(engine, users, make_found_item, make_asset) -> None:
    item = make_found_item(users["finder"])
    match = make_asset(users["owner"], updated_at=datetime.now(timezone.utc) - timedelta(hours=2))
    make_asset(users["outsider"], lost_mode=False)

    dispatcher = MatchDispatcher(engine, NotificationService(engine), max_workers=1)
    matches = dispatcher.submit(item.id).result(timeout=10)
    dispatcher.shutdown()

    assert [m.asset_id for m in matches] == [match.id]

    with Session(engine) as session:
        stored = session.exec(select(Notification)).all()

    assert len(stored) == 1
    assert stored[0].user_id == users["owner"]
    assert stored[0].ref_type == REF_POTENTIAL_MATCH
    assert stored[0].ref_id == item.id


def test_submit_for_unknown_item_is_absorbed(engine, caplog) -> None:
    dispatcher = MatchDispatcher(engine, RecordingNotifier(), max_workers=1)

    with caplog.at_level(logging.WARNING, logger="app.matching.dispatcher"):
        matches = dispatcher.submit(uuid.uuid4()).result(timeout=10)
    dispatcher.shutdown()

    assert matches == []
    assert "matching_skipped" in caplog.text


def test_submit_absorbs_persistence_errors(caplog) -> None:
    class BrokenEngine:
        pass

    dispatcher = MatchDispatcher(BrokenEngine(), RecordingNotifier(), max_workers=1)

    with caplog.at_level(logging.ERROR, logger="app.matching.dispatcher"):
        matches = dispatcher.submit(uuid.uuid4()).result(timeout=10)
    dispatcher.shutdown()

    assert matches == []
    assert "matching_failed" in caplog.text
