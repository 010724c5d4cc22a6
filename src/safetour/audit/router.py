"""Audit log API router."""

from fastapi import APIRouter, Depends, Query

from safetour.auth.guard import ALERT_RESPONDERS
from safetour.audit.schemas import AuditChainVerification, AuditEventResponse
from safetour.common.security import require_roles

router = APIRouter()


def _get_service():
    from safetour.deps import get_audit_service
    return get_audit_service()


def _get_db():
    from safetour.deps import get_db
    return get_db()


@router.get("/audit/{subject_id}", response_model=list[AuditEventResponse])
async def get_audit_events(
    subject_id: str,
    event_type: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _=Depends(require_roles(*ALERT_RESPONDERS)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        events = await svc.get_events(
            session, subject_id, event_type=event_type,
            limit=limit, offset=offset,
        )
        return [AuditEventResponse.model_validate(e) for e in events]


@router.get("/audit/{subject_id}/verify", response_model=AuditChainVerification)
async def verify_audit_chain(
    subject_id: str, _=Depends(require_roles(*ALERT_RESPONDERS)),
):
    svc = _get_service()
    db = _get_db()
    async with db.get_session() as session:
        result = await svc.verify_chain(session, subject_id)
        return AuditChainVerification(**result)
