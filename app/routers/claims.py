import uuid
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from app.db.db import get_session
from app.models.claim import ClaimStatus
from app.models.user import User
from app.routers.deps import get_claim_service
from app.services.claim_service import ClaimService
from app.utils.auth_helper import require_user


router = APIRouter()


class ClaimDecideRequest(BaseModel):
    status: str  # "APPROVED" or "REJECTED"


@router.put("/{claim_id}/decide")
def decide_claim(
    claim_id: uuid.UUID,
    payload: ClaimDecideRequest,
    service: ClaimService = Depends(get_claim_service),
    user: User = Depends(require_user),
):
    claim = service.decide_claim(claim_id, payload.status, user.id)

    return {
        "ok": True,
        "claim_id": str(claim.id),
        "status": claim.status,
    }


@router.get("/{claim_id}")
def get_claim(
    claim_id: uuid.UUID,
    service: ClaimService = Depends(get_claim_service),
    session: Session = Depends(get_session),
    user: User = Depends(require_user),
):
    """
    Get claim by ID - accessible by the claimant and by the finder.
    """
    claim, item = service.get_claim(claim_id, user.id)

    item_data = item.model_dump(include={"id", "title", "category", "location", "status", "image_url"})

    # finder contact only goes to an approved claimant
    if claim.status == ClaimStatus.APPROVED and claim.claimant_id == user.id:
        finder = session.get(User, item.finder_id)

        return {
            "claim": claim,
            "item": item_data,
            "finder_contact": {
                "name": finder.name,
                "email": finder.email,
                "phone": finder.phone,
            } if finder else None,
        }

    return {
        "claim": claim,
        "item": item_data,
    }
