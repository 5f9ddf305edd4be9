from fastapi import Depends, Request
from sqlmodel import Session

from app.db.db import get_session
from app.services.asset_service import AssetService
from app.services.claim_service import ClaimService
from app.services.item_service import ItemService
from app.services.notification_service import NotificationService


def get_item_service(request: Request, session: Session = Depends(get_session)) -> ItemService:
    return ItemService(session, request.app.state.dispatcher)


def get_claim_service(request: Request, session: Session = Depends(get_session)) -> ClaimService:
    return ClaimService(
        session,
        request.app.state.notifier,
        auto_reject_siblings=request.app.state.settings.AUTO_REJECT_SIBLING_CLAIMS,
    )


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notifier


def get_asset_service(request: Request, session: Session = Depends(get_session)) -> AssetService:
    return AssetService(session, request.app.state.notifier)
