"""Panic and alert API router."""

from fastapi import APIRouter, Depends

from safetour.alerts.schemas import (
    AlertResponse,
    AlertWithOwner,
    PanicRequest,
    PanicResponse,
)
from safetour.auth.guard import ALERT_RESPONDERS
from safetour.auth.tokens import Claims
from safetour.common.security import require_claims, require_roles

router = APIRouter()


def _get_service():
    from safetour.deps import get_alert_service
    return get_alert_service()


def _get_db():
    from safetour.deps import get_db
    return get_db()


@router.post("/panic", response_model=PanicResponse, status_code=201)
async def trigger_panic(body: PanicRequest, claims: Claims = Depends(require_claims)):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        alert = await svc.create(
            session, claims.identity_id, body.latitude, body.longitude,
        )
        return PanicResponse(alert=AlertResponse.model_validate(alert))


@router.get("/alerts", response_model=list[AlertWithOwner])
async def list_active_alerts(_=Depends(require_roles(*ALERT_RESPONDERS))):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        alerts = await svc.list_active(session)
        return [AlertWithOwner.model_validate(a) for a in alerts]


@router.patch("/alerts/{alert_id}/resolve", response_model=AlertResponse)
async def resolve_alert(
    alert_id: str, claims: Claims = Depends(require_roles(*ALERT_RESPONDERS)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        alert = await svc.resolve(session, alert_id, claims)
        return AlertResponse.model_validate(alert)
