from datetime import datetime
from pydantic import BaseModel, Field
from app.models.role import UserRole


class InvitationCreate(BaseModel):
    """Invite a user into the current organization"""

    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    role: UserRole = Field(default=UserRole.TEAM_MEMBER, description="Role to assign (default: TEAM_MEMBER)")
    business_unit_id: int | None = Field(None, gt=0, description="Home business unit of the invited user")


class InvitationResponse(BaseModel):
    """Invitation details"""

    id: int
    organization_id: int
    email: str
    role: UserRole
    business_unit_id: int | None
    expires_at: datetime
    created_at: datetime

    model_config = {"from_attributes": True}


class InvitationCreatedResponse(InvitationResponse):
    """Returned to the inviter only; carries the token and join link"""

    token: str
    invitation_link: str


class InvitationAccept(BaseModel):
    """Credentials chosen by the invited user"""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
