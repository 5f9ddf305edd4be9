from typing import Optional

from app.errors import Unauthorized
from app.models.asset import Asset
from app.models.item import Item


def is_finder(item: Item, user_id: Optional[int]) -> bool:
    return item.finder_id is not None and item.finder_id == user_id


def is_reporter(item: Item, user_id: Optional[int]) -> bool:
    """Finder of a found report or owner of a lost report."""
    if user_id is None:
        return False
    return user_id in (item.finder_id, item.owner_id)


def ensure_finder(item: Item, user_id: Optional[int], action: str = "manage claims on this item"):
    if not is_finder(item, user_id):
        raise Unauthorized(f"Only the finder can {action}")


def ensure_reporter(item: Item, user_id: Optional[int], action: str = "modify this item"):
    if not is_reporter(item, user_id):
        raise Unauthorized(f"Only the finder or owner can {action}")


def ensure_asset_owner(asset: Asset, user_id: Optional[int], action: str = "modify this asset"):
    if asset.owner_id != user_id:
        raise Unauthorized(f"Only the owner can {action}")
