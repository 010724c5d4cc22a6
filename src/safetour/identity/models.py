"""SQLAlchemy model for identity records."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from safetour.common.models import Base, TimestampMixin, generate_uuid


class IdentityModel(Base, TimestampMixin):
    __tablename__ = "identities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    wallet_address: Mapped[str | None] = mapped_column(String(42), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="tourist")
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    emergency_contact: Mapped[str | None] = mapped_column(String(255), nullable=True)
