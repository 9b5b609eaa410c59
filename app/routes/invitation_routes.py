from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.permissions import Permission
from app.core.security import create_access_token
from app.database import get_db
from app.dependencies import require_permission
from app.models.access_context import AccessContext
from app.services.invitation_service import InvitationService
from app.schemas.auth_schemas import TokenResponse
from app.schemas.user_schemas import UserResponse
from app.schemas.invitation_schemas import (
    InvitationCreate,
    InvitationResponse,
    InvitationCreatedResponse,
    InvitationAccept,
)

router = APIRouter()


@router.post("", response_model=InvitationCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_invitation(
    data: InvitationCreate,
    context: AccessContext = Depends(require_permission(Permission.MANAGE_USERS)),
    db: Session = Depends(get_db),
):
    """
    Invite a user into the organization.

    - **Requires MANAGE_USERS**
    - Only admins can invite admins
    - The home unit must be within the inviter's scope
    - Invitation expires after INVITATION_EXPIRE_DAYS
    """
    service = InvitationService(db)
    invitation = service.create_invitation(data, context)
    return InvitationCreatedResponse(
        **InvitationResponse.model_validate(invitation).model_dump(),
        token=invitation.token,
        invitation_link=f"/auth/join?token={invitation.token}",
    )


@router.get("/{token}", response_model=InvitationResponse)
async def get_invitation(token: str, db: Session = Depends(get_db)):
    """Look up a pending invitation. Does not require authentication."""
    service = InvitationService(db)
    return service.get_invitation(token)


@router.post("/{token}/accept", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def accept_invitation(token: str, data: InvitationAccept, db: Session = Depends(get_db)):
    """
    Accept an invitation and create the user account.

    Returns a bearer token for the new user.
    """
    service = InvitationService(db)
    user = service.accept_invitation(token, data)
    return TokenResponse(
        access_token=create_access_token(user.id, user.organization_id),
        user=UserResponse.model_validate(user),
    )
