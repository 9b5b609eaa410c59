from sqlalchemy.orm import Session
from app.models.user import User


class UserRepository:
    """Repository for User model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> User | None:
        """Get user by internal ID"""
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> User | None:
        """Get user by email (case-insensitive)"""
        return self.db.query(User).filter(User.email == email.lower()).first()

    def get_by_id_and_organization(self, user_id: int, organization_id: int) -> User | None:
        """
        Get user ensuring they belong to the organization (multi-tenant safety).

        Returns None if user doesn't exist or belongs to another organization.
        """
        return (
            self.db.query(User)
            .filter(User.id == user_id, User.organization_id == organization_id)
            .first()
        )

    def get_by_organization(self, organization_id: int) -> list[User]:
        """Get all users of an organization, archived included"""
        return (
            self.db.query(User)
            .filter(User.organization_id == organization_id)
            .order_by(User.id)
            .all()
        )

    def create_no_commit(self, user: User) -> User:
        """Stage new user without committing (for atomic ops)"""
        self.db.add(user)
        self.db.flush()
        return user

    def update(self, user: User) -> User:
        """Update existing user"""
        self.db.commit()
        self.db.refresh(user)
        return user
