"""
schemas/tenant.py
-----------------
Pydantic request/response models for Tenant.

Naming convention:
  TenantCreate  → inbound request body
  TenantRead    → outbound response body (never exposes internal fields)
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from auth_service.schemas.common import CamelModel, strip_text


class TenantCreate(CamelModel):
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        examples=["Acme Corp"],
        description="Tenant (organisation) name",
    )
    address: str = Field(
        ...,
        min_length=1,
        max_length=255,
        examples=["221B Baker Street, London"],
    )

    @field_validator("name", "address", mode="before")
    @classmethod
    def strip_fields(cls, v):
        return strip_text(v)


class TenantUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = Field(None, min_length=1, max_length=255)

    @field_validator("name", "address", mode="before")
    @classmethod
    def strip_fields(cls, v):
        return strip_text(v)


class TenantRead(CamelModel):
    id: int
    name: str
    address: str
    created_at: datetime
