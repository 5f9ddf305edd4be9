import uuid
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.models.user import User
from app.routers.deps import get_claim_service, get_item_service
from app.services.claim_service import ClaimService
from app.services.item_service import ItemService, item_public_view
from app.utils.auth_helper import require_user
from app.utils.form_validator import FoundItemForm, ItemUpdateForm, LostItemForm


router = APIRouter()


class ItemStatusUpdateRequest(BaseModel):
    status: str


class ClaimCreateRequest(BaseModel):
    answer: str = Field(min_length=1, max_length=500)
    proof_image_url: Optional[str] = None


@router.post("/found")
def report_found_item(
    payload: FoundItemForm,
    service: ItemService = Depends(get_item_service),
    user: User = Depends(require_user),
):
    # matching is scheduled in the background, the reporter does not wait for it
    item = service.report_found_item(payload, user.id)

    return {
        "ok": True,
        "item_id": str(item.id),
        "status": item.status,
    }


@router.post("/lost")
def report_lost_item(
    payload: LostItemForm,
    service: ItemService = Depends(get_item_service),
    user: User = Depends(require_user),
):
    item = service.report_lost_item(payload, user.id)

    return {
        "ok": True,
        "item_id": str(item.id),
        "status": item.status,
    }


@router.get("")
def get_all_items(
    status: Optional[str] = None,
    type: Optional[str] = None,
    service: ItemService = Depends(get_item_service),
):
    items = service.list_items(status=status, item_type=type)

    return {"items": items}


@router.get("/mine")
def get_my_items(
    service: ItemService = Depends(get_item_service),
    user: User = Depends(require_user),
):
    items = service.list_user_items(user.id)

    # Separate by type
    return {
        "lost_items": [item for item in items if item.type == "LOST"],
        "found_items": [item for item in items if item.type == "FOUND"],
    }


@router.get("/{item_id}")
def get_item(
    item_id: uuid.UUID,
    service: ItemService = Depends(get_item_service),
):
    item, questions = service.get_item(item_id)

    return {"item": item_public_view(item, questions)}


@router.put("/{item_id}")
def update_item(
    item_id: uuid.UUID,
    payload: ItemUpdateForm,
    service: ItemService = Depends(get_item_service),
    user: User = Depends(require_user),
):
    """
    Edit report details - accessible by the finder or owner only.
    """
    item = service.update_item(item_id, payload, user.id)

    return {"ok": True, "item": item}


@router.put("/{item_id}/status")
def update_item_status(
    item_id: uuid.UUID,
    payload: ItemStatusUpdateRequest,
    service: ItemService = Depends(get_item_service),
    user: User = Depends(require_user),
):
    item = service.update_item_status(item_id, payload.status, user.id)

    return {"ok": True, "status": item.status}


@router.delete("/{item_id}")
def delete_item(
    item_id: uuid.UUID,
    service: ItemService = Depends(get_item_service),
    user: User = Depends(require_user),
):
    service.delete_item(item_id, user.id)

    return {"ok": True}


@router.post("/{item_id}/claim")
def submit_claim(
    item_id: uuid.UUID,
    payload: ClaimCreateRequest,
    service: ClaimService = Depends(get_claim_service),
    user: User = Depends(require_user),
):
    claim = service.submit_claim(item_id, user.id, payload.answer, payload.proof_image_url)

    return {
        "ok": True,
        "claim_id": str(claim.id),
        "status": claim.status,
    }


@router.get("/{item_id}/claims")
def get_claims(
    item_id: uuid.UUID,
    service: ClaimService = Depends(get_claim_service),
    user: User = Depends(require_user),
):
    """
    Review claims - accessible by finder only.
    """
    claims = service.list_claims(item_id, user.id)

    return {"claims": claims}
