from datetime import datetime
from pydantic import BaseModel, Field


class OrganizationResponse(BaseModel):
    """Organization details response"""

    id: int
    name: str
    slug: str
    logo: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrganizationUpdate(BaseModel):
    """Update organization settings (MANAGE_SUBSCRIPTION only)"""

    name: str | None = Field(None, min_length=1, max_length=255)
    logo: str | None = Field(None, max_length=2048)
