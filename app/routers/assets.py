import uuid
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.models.user import User
from app.routers.deps import get_asset_service
from app.services.asset_service import AssetService, asset_view
from app.utils.auth_helper import optional_user, require_user
from app.utils.form_validator import AssetForm


router = APIRouter()


class LostModeRequest(BaseModel):
    lost_mode: bool
    last_seen_latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    last_seen_longitude: Optional[float] = Field(default=None, ge=-180, le=180)


class ReportFoundRequest(BaseModel):
    location: Optional[str] = Field(default=None, max_length=120)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    note: str = Field(default="", max_length=280)
    image_url: Optional[str] = None


@router.post("")
def create_asset(
    payload: AssetForm,
    service: AssetService = Depends(get_asset_service),
    user: User = Depends(require_user),
):
    asset = service.register_asset(payload, user.id)

    return asset_view(asset, user.id)


@router.get("/lost")
def get_lost_assets(service: AssetService = Depends(get_asset_service)):
    # public feed, private images stripped
    assets = service.list_lost_assets()

    return {"assets": [asset_view(asset, None) for asset in assets]}


@router.get("/mine")
def get_my_assets(
    service: AssetService = Depends(get_asset_service),
    user: User = Depends(require_user),
):
    assets = service.list_user_assets(user.id)

    return {"assets": [asset_view(asset, user.id) for asset in assets]}


@router.get("/{asset_id}")
def get_asset(
    asset_id: uuid.UUID,
    service: AssetService = Depends(get_asset_service),
    viewer: Optional[User] = Depends(optional_user),
):
    asset = service.get_asset(asset_id)

    return asset_view(asset, viewer.id if viewer else None)


@router.put("/{asset_id}/lost-mode")
def update_lost_mode(
    asset_id: uuid.UUID,
    payload: LostModeRequest,
    service: AssetService = Depends(get_asset_service),
    user: User = Depends(require_user),
):
    asset = service.update_lost_mode(
        asset_id,
        payload.lost_mode,
        user.id,
        latitude=payload.last_seen_latitude,
        longitude=payload.last_seen_longitude,
    )

    return {"ok": True, "lost_mode": asset.lost_mode}


@router.post("/{asset_id}/report-found")
def report_found(
    asset_id: uuid.UUID,
    payload: ReportFoundRequest,
    service: AssetService = Depends(get_asset_service),
    user: User = Depends(require_user),
):
    event = service.report_found(
        asset_id,
        user.id,
        location=payload.location,
        latitude=payload.latitude,
        longitude=payload.longitude,
        note=payload.note,
        image_url=payload.image_url,
    )

    return {"ok": True, "event_id": str(event.id)}


@router.get("/{asset_id}/found-events")
def get_found_events(
    asset_id: uuid.UUID,
    service: AssetService = Depends(get_asset_service),
    user: User = Depends(require_user),
):
    events = service.get_found_events(asset_id, user.id)

    return {"events": events}
