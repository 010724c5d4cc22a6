"""Pydantic schemas for identity issuance."""

from datetime import datetime
from typing import Any

from safetour.common.schemas import CamelModel


class IssuanceRequest(CamelModel):
    tourist_address: str
    kyc_data: dict[str, Any]
    itinerary_hash: str
    emergency_contact: str
    duration_days: int


class ReceiptResponse(CamelModel):
    request_id: str
    chain_tx_ref: str
    tourist_address: str
    kyc_hash: str
    duration_seconds: int
    created_at: datetime


class IssuanceResponse(CamelModel):
    msg: str = "Digital ID issued successfully."
    receipt: ReceiptResponse


class IdentityInfoResponse(CamelModel):
    tourist_id: int
    info: dict[str, Any]
