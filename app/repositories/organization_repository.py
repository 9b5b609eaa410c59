"""Repository for Organization model operations."""

from sqlalchemy.orm import Session
from app.models.organization import Organization


class OrganizationRepository:
    """Repository for Organization model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, organization_id: int) -> Organization | None:
        """
        Get organization by ID.

        Args:
            organization_id: Organization ID

        Returns:
            Organization object or None if not found
        """
        return self.db.query(Organization).filter(Organization.id == organization_id).first()

    def get_by_slug(self, slug: str) -> Organization | None:
        """Get organization by its unique URL slug"""
        return self.db.query(Organization).filter(Organization.slug == slug).first()

    def create_no_commit(self, organization: Organization) -> Organization:
        """
        Stage a new organization and assign its ID without committing.

        Used during registration, where the organization and its first
        admin user must be created atomically.
        """
        self.db.add(organization)
        self.db.flush()
        return organization

    def update(self, organization: Organization) -> Organization:
        """
        Update an existing organization.

        Args:
            organization: Organization object with updated fields

        Returns:
            Updated Organization object
        """
        self.db.commit()
        self.db.refresh(organization)
        return organization
