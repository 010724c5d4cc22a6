"""SQLAlchemy model for panic alerts."""

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from safetour.common.models import Base, TimestampMixin, generate_uuid
from safetour.identity.models import IdentityModel

STATUS_ACTIVE = "active"
STATUS_RESOLVED = "resolved"


class AlertModel(Base, TimestampMixin):
    __tablename__ = "alerts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("identities.id"), nullable=False, index=True
    )
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=STATUS_ACTIVE, index=True
    )
    resolved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    resolved_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    owner: Mapped[IdentityModel] = relationship(lazy="raise")
