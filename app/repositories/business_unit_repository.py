"""Repository for BusinessUnit model operations."""

from sqlalchemy.orm import Session
from app.models.business_unit import BusinessUnit


class BusinessUnitRepository:
    """Repository for BusinessUnit model operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_organization(self, organization_id: int) -> list[BusinessUnit]:
        """
        Get every business unit of an organization, archived included.

        This is the directory snapshot handed to the permission evaluator.

        Args:
            organization_id: Organization ID

        Returns:
            List of BusinessUnit objects ordered by ID
        """
        return (
            self.db.query(BusinessUnit)
            .filter(BusinessUnit.organization_id == organization_id)
            .order_by(BusinessUnit.id)
            .all()
        )

    def get_by_id_and_organization(
        self, business_unit_id: int, organization_id: int
    ) -> BusinessUnit | None:
        """
        Get business unit ensuring it belongs to the organization.

        Returns None if unit doesn't exist or belongs to another organization.
        """
        return (
            self.db.query(BusinessUnit)
            .filter(
                BusinessUnit.id == business_unit_id,
                BusinessUnit.organization_id == organization_id,
            )
            .first()
        )

    def create(self, business_unit: BusinessUnit) -> BusinessUnit:
        """Create new business unit"""
        self.db.add(business_unit)
        self.db.commit()
        self.db.refresh(business_unit)
        return business_unit

    def update(self, business_unit: BusinessUnit) -> BusinessUnit:
        """Update existing business unit"""
        self.db.commit()
        self.db.refresh(business_unit)
        return business_unit
