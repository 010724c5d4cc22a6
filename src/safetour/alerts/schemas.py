"""Pydantic schemas for panic alerts."""

from datetime import datetime
from typing import Optional

from safetour.common.schemas import CamelModel


class PanicRequest(CamelModel):
    # Range checks live in the service so they map to INVALID_LOCATION
    latitude: float
    longitude: float


class OwnerSummary(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    emergency_contact: Optional[str] = None


class AlertResponse(CamelModel):
    id: str
    owner_id: str
    latitude: float
    longitude: float
    status: str
    created_at: datetime
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None


class AlertWithOwner(AlertResponse):
    owner: OwnerSummary


class PanicResponse(CamelModel):
    msg: str = "Panic alert successfully triggered and logged."
    alert: AlertResponse
