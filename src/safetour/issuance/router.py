"""Admin identity issuance API router."""

from fastapi import APIRouter, Depends

from safetour.auth.guard import ISSUERS
from safetour.auth.tokens import Claims
from safetour.common.security import require_roles
from safetour.issuance.schemas import (
    IdentityInfoResponse,
    IssuanceRequest,
    IssuanceResponse,
    ReceiptResponse,
)

router = APIRouter(prefix="/admin")


def _get_service():
    from safetour.deps import get_issuance_service
    return get_issuance_service()


def _get_db():
    from safetour.deps import get_db
    return get_db()


@router.post("/issue-id", response_model=IssuanceResponse)
async def issue_identity(
    body: IssuanceRequest, claims: Claims = Depends(require_roles(*ISSUERS)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        receipt = await svc.request_issuance(
            session,
            claims,
            tourist_address=body.tourist_address,
            kyc_data=body.kyc_data,
            itinerary_hash=body.itinerary_hash,
            emergency_contact=body.emergency_contact,
            duration_days=body.duration_days,
        )
        return IssuanceResponse(receipt=ReceiptResponse(
            request_id=receipt.id,
            chain_tx_ref=receipt.chain_tx_ref,
            tourist_address=receipt.tourist_address,
            kyc_hash=receipt.kyc_hash,
            duration_seconds=receipt.duration_seconds,
            created_at=receipt.created_at,
        ))


@router.get("/identity/{tourist_id}", response_model=IdentityInfoResponse)
async def get_identity_info(
    tourist_id: int, claims: Claims = Depends(require_roles(*ISSUERS)),
):
    info = await _get_service().lookup_identity(claims, tourist_id)
    return IdentityInfoResponse(tourist_id=tourist_id, info=info)
