"""Alert ledger: panic alert creation, listing and resolution."""

import logging
import math
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from safetour.alerts.models import STATUS_ACTIVE, STATUS_RESOLVED, AlertModel
from safetour.auth.guard import ALERT_RESPONDERS, authorize
from safetour.auth.tokens import Claims
from safetour.common.config import SafeTourSettings
from safetour.common.exceptions import ForbiddenError, InvalidLocationError, NotFoundError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_location(latitude: float, longitude: float) -> tuple[float, float]:
    """Return the coordinates as floats, or raise InvalidLocationError."""
    try:
        if isinstance(latitude, bool) or isinstance(longitude, bool):
            raise TypeError
        lat, lon = float(latitude), float(longitude)
    except (TypeError, ValueError) as exc:
        raise InvalidLocationError("Latitude and longitude must be numbers") from exc
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidLocationError("Latitude and longitude must be finite")
    if not -90.0 <= lat <= 90.0:
        raise InvalidLocationError(f"Latitude {lat} out of range [-90, 90]")
    if not -180.0 <= lon <= 180.0:
        raise InvalidLocationError(f"Longitude {lon} out of range [-180, 180]")
    return lat, lon


class AlertService:
    """Alerts move one way, active → resolved, and are never deleted."""

    def __init__(
        self,
        settings: SafeTourSettings,
        audit_service=None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.settings = settings
        self.audit_service = audit_service
        self._clock = clock

    async def create(
        self,
        session: AsyncSession,
        owner_id: str,
        latitude: float,
        longitude: float,
    ) -> AlertModel:
        """Record a panic alert for ``owner_id``. No dedup, no rate limit."""
        lat, lon = validate_location(latitude, longitude)
        alert = AlertModel(
            owner_id=owner_id,
            latitude=lat,
            longitude=lon,
            status=STATUS_ACTIVE,
            created_at=self._clock(),
        )
        session.add(alert)
        await session.flush()

        if self.audit_service:
            await self.audit_service.record_event(
                session, alert.id, "alert.created", owner_id,
                {"latitude": lat, "longitude": lon},
            )
        logger.info("Panic alert %s raised by %s", alert.id, owner_id)
        return alert

    async def get(self, session: AsyncSession, alert_id: str) -> AlertModel | None:
        return await session.get(AlertModel, alert_id)

    async def list_active(self, session: AsyncSession) -> list[AlertModel]:
        """All active alerts, newest first, with their owners loaded."""
        result = await session.execute(
            select(AlertModel)
            .where(AlertModel.status == STATUS_ACTIVE)
            .options(selectinload(AlertModel.owner))
            .order_by(AlertModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def resolve(
        self,
        session: AsyncSession,
        alert_id: str,
        resolver: Claims,
    ) -> AlertModel:
        """Move an alert to resolved. Resolving twice returns it unchanged."""
        decision = authorize(resolver, ALERT_RESPONDERS)
        if not decision.authorized:
            raise ForbiddenError(decision.reason)

        alert = await self.get(session, alert_id)
        if alert is None:
            raise NotFoundError(f"Alert {alert_id} not found")

        # Only the request whose update matches an active row resolves it
        result = await session.execute(
            update(AlertModel)
            .where(AlertModel.id == alert_id, AlertModel.status == STATUS_ACTIVE)
            .values(
                status=STATUS_RESOLVED,
                resolved_at=self._clock(),
                resolved_by=resolver.identity_id,
            )
            .execution_options(synchronize_session=False)
        )
        await session.refresh(alert)
        if result.rowcount == 0:
            return alert

        if self.audit_service:
            await self.audit_service.record_event(
                session, alert.id, "alert.resolved", resolver.identity_id,
                {"role": resolver.role.value},
            )
        logger.info("Alert %s resolved by %s", alert.id, resolver.identity_id)
        return alert
