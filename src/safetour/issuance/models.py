"""SQLAlchemy model for issuance correlation receipts."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from safetour.common.models import Base, TimestampMixin, generate_uuid


class IssuanceReceiptModel(Base, TimestampMixin):
    __tablename__ = "issuance_receipts"

    # The request id handed back to the caller
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    chain_tx_ref: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    tourist_address: Mapped[str] = mapped_column(String(42), nullable=False, index=True)
    kyc_hash: Mapped[str] = mapped_column(String(66), nullable=False)
    itinerary_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False)
    requested_by: Mapped[str] = mapped_column(String(36), nullable=False)
