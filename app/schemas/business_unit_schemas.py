from datetime import datetime
from pydantic import BaseModel, Field
from app.models.business_unit import BusinessUnitStatus


class BusinessUnitCreate(BaseModel):
    """Schema for creating a business unit"""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    manager_id: int | None = Field(None, gt=0)


class BusinessUnitUpdate(BaseModel):
    """Schema for updating a business unit"""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    manager_id: int | None = Field(None, gt=0)


class BusinessUnitResponse(BaseModel):
    """Schema for business unit response"""

    id: int
    organization_id: int
    name: str
    description: str | None
    manager_id: int | None
    status: BusinessUnitStatus
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BusinessUnitListResponse(BaseModel):
    """Schema for list of business units"""

    business_units: list[BusinessUnitResponse]
    total: int
