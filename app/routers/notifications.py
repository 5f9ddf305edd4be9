import uuid
from fastapi import APIRouter, Depends

from app.models.user import User
from app.routers.deps import get_notification_service
from app.services.notification_service import NotificationService
from app.utils.auth_helper import require_user


router = APIRouter()


@router.get("")
def get_inbox(
    limit: int = 20,
    unread_only: bool = False,
    notifier: NotificationService = Depends(get_notification_service),
    user: User = Depends(require_user),
):
    return {"notifications": notifier.inbox(user.id, limit=limit, unread_only=unread_only)}


@router.get("/count")
def get_unread_count(
    notifier: NotificationService = Depends(get_notification_service),
    user: User = Depends(require_user),
):
    return {"count": notifier.unread_count(user.id)}


@router.post("/mark-all-read")
def mark_all_read(
    notifier: NotificationService = Depends(get_notification_service),
    user: User = Depends(require_user),
):
    marked = notifier.mark_all_read(user.id)

    return {"ok": True, "marked": marked}


@router.post("/{notification_id}/mark-read")
def mark_read(
    notification_id: uuid.UUID,
    notifier: NotificationService = Depends(get_notification_service),
    user: User = Depends(require_user),
):
    # 404 for notifications that belong to someone else too
    notifier.mark_read(notification_id, user.id)

    return {"ok": True}
