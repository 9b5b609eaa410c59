from datetime import datetime
from pydantic import BaseModel, Field
from app.models.role import UserRole


class UserResponse(BaseModel):
    """Schema for user response"""

    id: int
    organization_id: int
    username: str
    email: str
    role: UserRole
    business_unit_id: int | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    """Schema for list of users"""

    users: list[UserResponse]
    total: int


class UserUpdate(BaseModel):
    """
    Change a user's role or home business unit.

    Omitted fields are left unchanged; an explicit business_unit_id of
    null clears the home unit.
    """

    role: UserRole | None = None
    business_unit_id: int | None = Field(None, gt=0)
