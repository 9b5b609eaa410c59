import datetime
from typing import Any
from pydantic import BaseModel, Field
from app.models.emission import EmissionStatus


class EmissionCreate(BaseModel):
    """Schema for recording emissions (tonnes CO2e per scope)"""

    date: datetime.date
    scope1: float = Field(default=0, ge=0)
    scope2: float = Field(default=0, ge=0)
    scope3: float = Field(default=0, ge=0)
    source: str | None = Field(None, max_length=255)
    details: dict[str, Any] | None = None


class EmissionResponse(BaseModel):
    """Schema for emission response"""

    model_config = {"from_attributes": True}

    id: int
    business_unit_id: int
    date: datetime.date
    scope1: float
    scope2: float
    scope3: float
    total: float
    source: str | None
    details: dict[str, Any] | None
    status: EmissionStatus
    approved_by_id: int | None
    created_at: datetime.datetime


class EmissionListResponse(BaseModel):
    """Schema for list of emissions"""

    emissions: list[EmissionResponse]
    total: int


class EmissionSummaryResponse(BaseModel):
    """Scope totals for a business unit"""

    business_unit_id: int
    scope1: float
    scope2: float
    scope3: float
    total: float
    record_count: int
    approved_only: bool
