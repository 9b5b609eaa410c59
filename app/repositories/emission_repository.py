import datetime
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.emission import Emission, EmissionStatus


class EmissionRepository:
    """Repository for Emission data access"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, emission: Emission) -> Emission:
        """Create a new emission record"""
        self.db.add(emission)
        self.db.commit()
        self.db.refresh(emission)
        return emission

    def update(self, emission: Emission) -> Emission:
        """Update existing emission record"""
        self.db.commit()
        self.db.refresh(emission)
        return emission

    def get_by_id_and_business_unit(
        self, emission_id: int, business_unit_id: int
    ) -> Emission | None:
        """
        Get emission ensuring it belongs to the business unit.

        Returns None if emission doesn't exist or belongs to another unit.
        """
        return (
            self.db.query(Emission)
            .filter(Emission.id == emission_id, Emission.business_unit_id == business_unit_id)
            .first()
        )

    def get_by_business_unit(
        self,
        business_unit_id: int,
        start_date: datetime.date | None = None,
        end_date: datetime.date | None = None,
    ) -> list[Emission]:
        """
        Get emissions of a business unit, optionally within a date range.

        Args:
            business_unit_id: Business unit ID
            start_date: Inclusive lower bound
            end_date: Inclusive upper bound

        Returns:
            Emissions ordered by date (oldest first)
        """
        query = self.db.query(Emission).filter(Emission.business_unit_id == business_unit_id)
        if start_date:
            query = query.filter(Emission.date >= start_date)
        if end_date:
            query = query.filter(Emission.date <= end_date)
        return query.order_by(Emission.date.asc(), Emission.id.asc()).all()

    def get_totals(self, business_unit_id: int, approved_only: bool = False) -> tuple:
        """
        Sum scope 1/2/3 for a business unit.

        Returns:
            (scope1, scope2, scope3, record_count), zeros when no records exist
        """
        query = self.db.query(
            func.coalesce(func.sum(Emission.scope1), 0),
            func.coalesce(func.sum(Emission.scope2), 0),
            func.coalesce(func.sum(Emission.scope3), 0),
            func.count(Emission.id),
        ).filter(Emission.business_unit_id == business_unit_id)
        if approved_only:
            query = query.filter(Emission.status == EmissionStatus.APPROVED)
        return query.one()
