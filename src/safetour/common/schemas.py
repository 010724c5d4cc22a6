"""Shared Pydantic schemas for SafeTour."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    service: str = "safetour"


class ErrorResponse(BaseModel):
    error: str
    code: str
    detail: str = ""


class CamelModel(BaseModel):
    """Base for wire schemas: camelCase on the wire, snake_case accepted."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
