import secrets
from datetime import datetime, timedelta, UTC

import structlog
from sqlalchemy.orm import Session

from app.config import settings
from app.models.access_context import AccessContext
from app.models.invitation import Invitation
from app.models.user import User
from app.repositories.business_unit_repository import BusinessUnitRepository
from app.repositories.invitation_repository import InvitationRepository
from app.repositories.user_repository import UserRepository
from app.schemas.invitation_schemas import InvitationCreate, InvitationAccept
from app.services.user_service import ensure_assignable
from app.core.security import hash_password
from app.core.exceptions import NotFoundException, ValidationException

logger = structlog.get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite returns naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=UTC)


class InvitationService:
    """Service layer for inviting users into an organization"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InvitationRepository(db)
        self.user_repo = UserRepository(db)
        self.business_unit_repo = BusinessUnitRepository(db)

    def create_invitation(self, data: InvitationCreate, context: AccessContext) -> Invitation:
        """
        Invite a user (route requires MANAGE_USERS).

        Args:
            data: Email, role and optional home business unit
            context: Access context

        Returns:
            Created invitation with its single-use token

        Raises:
            ForbiddenException: If the role or unit is outside the caller's authority
            ValidationException: If the email is already registered
        """
        ensure_assignable(
            context,
            self.business_unit_repo,
            role=data.role,
            business_unit_id=data.business_unit_id,
        )
        if self.user_repo.get_by_email(data.email):
            raise ValidationException("Email is already registered")

        invitation = Invitation(
            organization_id=context.organization.id,
            email=data.email.lower(),
            role=data.role,
            business_unit_id=data.business_unit_id,
            token=secrets.token_hex(32),
            expires_at=datetime.now(UTC) + timedelta(days=settings.INVITATION_EXPIRE_DAYS),
            invited_by_id=context.user.id,
        )
        invitation = self.repo.create(invitation)
        logger.info(
            "invitation_created",
            invitation_id=invitation.id,
            organization_id=invitation.organization_id,
            role=invitation.role.value,
            invited_by=context.user.id,
        )
        return invitation

    def get_invitation(self, token: str) -> Invitation:
        """
        Look up a pending invitation by token.

        Expired invitations are deleted on lookup.

        Raises:
            NotFoundException: If token unknown or already used
            ValidationException: If the invitation has expired
        """
        invitation = self.repo.get_by_token(token)
        if not invitation or invitation.accepted_at is not None:
            raise NotFoundException("Invalid or expired invitation")

        if _as_utc(invitation.expires_at) < datetime.now(UTC):
            self.repo.delete(invitation)
            raise ValidationException("Invitation has expired")

        return invitation

    def accept_invitation(self, token: str, data: InvitationAccept) -> User:
        """
        Create the invited user and consume the invitation atomically.

        Raises:
            NotFoundException: If token unknown or already used
            ValidationException: If expired or the email registered meanwhile
        """
        invitation = self.get_invitation(token)
        if self.user_repo.get_by_email(invitation.email):
            raise ValidationException("Email is already registered")

        user = self.user_repo.create_no_commit(
            User(
                organization_id=invitation.organization_id,
                username=data.username,
                email=invitation.email,
                password_hash=hash_password(data.password),
                role=invitation.role,
                business_unit_id=invitation.business_unit_id,
            )
        )
        invitation.accepted_at = datetime.now(UTC)
        self.db.commit()
        self.db.refresh(user)

        logger.info("invitation_accepted", invitation_id=invitation.id, user_id=user.id)
        return user
