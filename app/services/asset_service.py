import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlmodel import Session, select

from app.errors import InvalidInput, NotFound
from app.models.asset import Asset, FoundEvent
from app.models.notification import REF_ASSET_FOUND
from app.services.policy import ensure_asset_owner
from app.utils.form_validator import AssetForm, check_coordinates, normalize_category
from app.utils.logging_config import get_logger

logger = get_logger(__name__)


def asset_view(asset: Asset, viewer_id: Optional[int]) -> dict:
    # private image is for the owner only
    exclude = set() if asset.owner_id == viewer_id else {"private_image_url"}
    return asset.model_dump(exclude=exclude)


class AssetService:
    def __init__(self, session: Session, notifier=None):
        self.session = session
        self.notifier = notifier

    def register_asset(self, form: AssetForm, owner_id: int) -> Asset:
        asset = Asset(
            owner_id=owner_id,
            category=normalize_category(form.category),
            description=form.description.strip(),
            private_image_url=form.private_image_url,
            lost_mode=form.lost_mode,
        )

        self.session.add(asset)
        self.session.commit()
        self.session.refresh(asset)

        logger.info("asset_registered asset=%s owner=%s lost_mode=%s", asset.id, owner_id, asset.lost_mode)
        return asset

    def get_asset(self, asset_id: uuid.UUID) -> Asset:
        asset = self.session.get(Asset, asset_id)
        if not asset:
            raise NotFound("Asset", asset_id)
        return asset

    def update_lost_mode(
        self,
        asset_id: uuid.UUID,
        lost_mode: bool,
        requester_id: int,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> Asset:
        """Toggle lost mode.

        Switching it on stamps ``updated_at`` (the matching engine reads it
        as the time the asset went missing) and records the optional
        last-seen coordinates. Switching it off clears them, so passing
        coordinates together with ``lost_mode=False`` is rejected.
        """
        asset = self.get_asset(asset_id)
        ensure_asset_owner(asset, requester_id, "change lost mode")
        check_coordinates(latitude, longitude)

        if not lost_mode and latitude is not None:
            raise InvalidInput("Last-seen coordinates only apply when switching lost mode on")

        asset.lost_mode = lost_mode
        asset.updated_at = datetime.now(timezone.utc)

        if lost_mode:
            asset.last_seen_latitude = latitude
            asset.last_seen_longitude = longitude
        else:
            asset.last_seen_latitude = None
            asset.last_seen_longitude = None

        self.session.add(asset)
        self.session.commit()
        self.session.refresh(asset)

        logger.info("asset_lost_mode asset=%s lost_mode=%s", asset.id, lost_mode)
        return asset

    def list_lost_assets(self) -> List[Asset]:
        assets = self.session.exec(
            select(Asset)
            .where(Asset.lost_mode == True)  # noqa: E712
            .order_by(Asset.updated_at.desc())
        ).all()
        return list(assets)

    def list_user_assets(self, owner_id: int) -> List[Asset]:
        assets = self.session.exec(
            select(Asset)
            .where(Asset.owner_id == owner_id)
            .order_by(Asset.created_at.desc())
        ).all()
        return list(assets)

    def report_found(
        self,
        asset_id: uuid.UUID,
        finder_id: Optional[int],
        location: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        note: str = "",
        image_url: Optional[str] = None,
    ) -> FoundEvent:
        asset = self.get_asset(asset_id)
        check_coordinates(latitude, longitude)

        event = FoundEvent(
            asset_id=asset.id,
            finder_id=finder_id,
            location=location,
            latitude=latitude,
            longitude=longitude,
            note=note.strip(),
            image_url=image_url,
        )

        self.session.add(event)
        self.session.commit()
        self.session.refresh(event)

        logger.info("asset_scanned asset=%s event=%s finder=%s", asset.id, event.id, finder_id)

        if self.notifier is not None:
            try:
                self.notifier.send(
                    asset.owner_id,
                    "Asset Scanned!",
                    f"Your asset '{asset.description}' was reported found"
                    + (f" at {location}." if location else "."),
                    REF_ASSET_FOUND,
                    event.id,
                )
            except Exception:
                logger.exception("asset_notify_failed asset=%s event=%s", asset.id, event.id)

        return event

    def get_found_events(self, asset_id: uuid.UUID, requester_id: int) -> List[FoundEvent]:
        asset = self.get_asset(asset_id)
        ensure_asset_owner(asset, requester_id, "view found events")

        events = self.session.exec(
            select(FoundEvent)
            .where(FoundEvent.asset_id == asset.id)
            .order_by(FoundEvent.created_at.desc())
        ).all()
        return list(events)
