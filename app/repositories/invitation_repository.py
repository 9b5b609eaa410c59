from sqlalchemy.orm import Session
from app.models.invitation import Invitation


class InvitationRepository:
    """Repository for Invitation model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_token(self, token: str) -> Invitation | None:
        """Get invitation by its token (accepted invitations included)"""
        return self.db.query(Invitation).filter(Invitation.token == token).first()

    def create(self, invitation: Invitation) -> Invitation:
        """Create new invitation"""
        self.db.add(invitation)
        self.db.commit()
        self.db.refresh(invitation)
        return invitation

    def delete(self, invitation: Invitation) -> None:
        """Delete invitation"""
        self.db.delete(invitation)
        self.db.commit()
