import uuid

import pytest

from app.errors import NotFound
from app.models.notification import REF_CLAIM_NEW, REF_POTENTIAL_MATCH
from app.services.notification_service import NotificationService


@pytest.fixture
def notifier(engine):
    return NotificationService(engine)


def test_send_then_read_inbox(notifier, users) -> None:
    ref = uuid.uuid4()
    sent = notifier.send(users["owner"], "Potential Match Found!", "Check it out", REF_POTENTIAL_MATCH, ref)

    inbox = notifier.inbox(users["owner"])

    assert [(n.id, n.ref_type, n.ref_id, n.is_read) for n in inbox] == [(sent.id, REF_POTENTIAL_MATCH, ref, False)]
    assert notifier.inbox(users["outsider"]) == []


def test_unread_count_and_mark_all_read(notifier, users) -> None:
    for _ in range(3):
        notifier.send(users["finder"], "New Claim Received", "body", REF_CLAIM_NEW, uuid.uuid4())
    notifier.send(users["owner"], "New Claim Received", "body", REF_CLAIM_NEW, uuid.uuid4())

    assert notifier.unread_count(users["finder"]) == 3
    assert notifier.mark_all_read(users["finder"]) == 3
    assert notifier.unread_count(users["finder"]) == 0
    assert notifier.inbox(users["finder"], unread_only=True) == []
    # other inboxes are untouched
    assert notifier.unread_count(users["owner"]) == 1


def test_mark_read_is_scoped_to_the_recipient(notifier, users) -> None:
    sent = notifier.send(users["owner"], "Asset Scanned!", "body", REF_CLAIM_NEW, uuid.uuid4())

    with pytest.raises(NotFound):
        notifier.mark_read(sent.id, users["outsider"])
    assert notifier.unread_count(users["owner"]) == 1

    notifier.mark_read(sent.id, users["owner"])
    assert notifier.unread_count(users["owner"]) == 0


def test_mark_read_unknown_notification(notifier, users) -> None:
    with pytest.raises(NotFound):
        notifier.mark_read(uuid.uuid4(), users["owner"])


def test_inbox_limit(notifier, users) -> None:
    for _ in range(5):
        notifier.send(users["owner"], "t", "b", REF_CLAIM_NEW, uuid.uuid4())

    assert len(notifier.inbox(users["owner"], limit=2)) == 2
