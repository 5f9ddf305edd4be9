import uuid
from typing import List

from sqlalchemy import func, update
from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from app.errors import NotFound
from app.models.notification import Notification
from app.utils.logging_config import get_logger

logger = get_logger(__name__)


class NotificationService:
    """In-app notification sink and inbox.

    Each call runs in its own session so a failed write never leaves the
    caller's transaction half-done.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def send(self, user_id: int, title: str, body: str, ref_type: str, ref_id: uuid.UUID) -> Notification:
        notification = Notification(
            user_id=user_id,
            title=title,
            body=body,
            ref_type=ref_type,
            ref_id=ref_id,
        )

        with Session(self.engine) as session:
            session.add(notification)
            session.commit()
            session.refresh(notification)

        logger.info("notification_sent user=%s ref_type=%s ref_id=%s", user_id, ref_type, ref_id)
        return notification

    def inbox(self, user_id: int, limit: int = 20, unread_only: bool = False) -> List[Notification]:
        query = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id)
            .limit(limit)
        )
        if unread_only:
            query = query.where(Notification.is_read == False)  # noqa: E712

        with Session(self.engine) as session:
            return list(session.exec(query).all())

    def unread_count(self, user_id: int) -> int:
        with Session(self.engine) as session:
            return session.exec(
                select(func.count(Notification.id))
                .where(Notification.user_id == user_id)
                .where(Notification.is_read == False)  # noqa: E712
            ).one()

    def mark_read(self, notification_id: uuid.UUID, user_id: int):
        notifications = Notification.__table__

        with Session(self.engine) as session:
            # someone else's notification looks the same as a missing one
            marked = session.connection().execute(
                update(notifications)
                .where(notifications.c.id == notification_id)
                .where(notifications.c.user_id == user_id)
                .values(is_read=True)
            )
            if marked.rowcount != 1:
                raise NotFound("Notification", notification_id)
            session.commit()

    def mark_all_read(self, user_id: int) -> int:
        notifications = Notification.__table__

        with Session(self.engine) as session:
            marked = session.connection().execute(
                update(notifications)
                .where(notifications.c.user_id == user_id)
                .where(notifications.c.is_read == False)  # noqa: E712
                .values(is_read=True)
            ).rowcount
            session.commit()

        logger.info("notifications_read user=%s count=%d", user_id, marked)
        return marked
