"""Audit service: record, verify, and query the per-subject event chain."""

import hashlib
import hmac as hmac_mod
import json
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from safetour.common.config import SafeTourSettings
from safetour.audit.models import AuditEventModel


class AuditService:
    """Append-only, hash-chained event log keyed by subject id.

    Subjects are alert ids and issuance request ids.
    """

    def __init__(self, settings: SafeTourSettings):
        self.settings = settings

    # ── Write ──

    async def record_event(
        self,
        session: AsyncSession,
        subject_id: str,
        event_type: str,
        actor: str = "system",
        detail: dict[str, Any] | None = None,
    ) -> AuditEventModel:
        """Append a new event to the subject's chain."""
        detail = detail or {}

        head = await self.get_chain_head(session, subject_id)
        prev_hash = head.event_hash if head else None
        sequence = head.sequence + 1 if head else 0

        event_hash = self._compute_event_hash(
            sequence, event_type, actor, detail, prev_hash,
        )

        event = AuditEventModel(
            subject_id=subject_id,
            sequence=sequence,
            event_type=event_type,
            actor=actor,
            detail=detail,
            prev_hash=prev_hash,
            event_hash=event_hash,
            signature=self._sign(event_hash),
        )
        session.add(event)
        await session.flush()
        return event

    # ── Read ──

    async def get_chain_head(
        self, session: AsyncSession, subject_id: str,
    ) -> AuditEventModel | None:
        """Return the most recent event for a subject."""
        result = await session.execute(
            select(AuditEventModel)
            .where(AuditEventModel.subject_id == subject_id)
            .order_by(AuditEventModel.sequence.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_events(
        self,
        session: AsyncSession,
        subject_id: str,
        event_type: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[AuditEventModel]:
        """Paginated event list, newest first."""
        query = (
            select(AuditEventModel)
            .where(AuditEventModel.subject_id == subject_id)
        )
        if event_type:
            query = query.where(AuditEventModel.event_type == event_type)
        query = (
            query.order_by(AuditEventModel.sequence.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await session.execute(query)
        return list(result.scalars().all())

    # ── Verify ──

    async def verify_chain(
        self, session: AsyncSession, subject_id: str,
    ) -> dict[str, Any]:
        """Walk the chain oldest→newest, verify linkage, hashes and signatures."""
        result = await session.execute(
            select(AuditEventModel)
            .where(AuditEventModel.subject_id == subject_id)
            .order_by(AuditEventModel.sequence.asc())
        )
        events = list(result.scalars().all())

        prev_hash = None
        for index, event in enumerate(events):
            expected_hash = self._compute_event_hash(
                event.sequence, event.event_type, event.actor,
                event.detail, event.prev_hash,
            )
            intact = (
                event.sequence == index
                and event.prev_hash == prev_hash
                and event.event_hash == expected_hash
                and self._verify_signature(event.event_hash, event.signature)
            )
            if not intact:
                return {"valid": False, "events_checked": index, "break_at": event.id}
            prev_hash = event.event_hash

        return {"valid": True, "events_checked": len(events), "break_at": None}

    # ── Internal helpers ──

    @staticmethod
    def _compute_event_hash(
        sequence: int,
        event_type: str,
        actor: str,
        detail: dict[str, Any],
        prev_hash: str | None,
    ) -> str:
        """SHA-256 of canonical JSON of the event fields."""
        canonical = json.dumps(
            {
                "sequence": sequence,
                "event_type": event_type,
                "actor": actor,
                "detail": detail,
                "prev_hash": prev_hash,
            },
            sort_keys=True,
            separators=(",", ":"),
        )
        return hashlib.sha256(canonical.encode()).hexdigest()

    def _sign(self, event_hash: str) -> str:
        return hmac_mod.new(
            self.settings.current_audit_key.encode(),
            event_hash.encode(),
            hashlib.sha256,
        ).hexdigest()

    def _verify_signature(self, event_hash: str, signature: str) -> bool:
        """Verify against every key in the keyring, so rotated keys still pass."""
        for _version, key in self.settings.audit_keyring.items():
            expected = hmac_mod.new(
                key.encode(), event_hash.encode(), hashlib.sha256,
            ).hexdigest()
            if hmac_mod.compare_digest(expected, signature):
                return True
        return False
