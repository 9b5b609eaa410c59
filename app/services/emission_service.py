import datetime
import structlog
from sqlalchemy.orm import Session

from app.models.access_context import AccessContext
from app.models.business_unit import BusinessUnit
from app.models.emission import Emission, EmissionStatus
from app.repositories.business_unit_repository import BusinessUnitRepository
from app.repositories.emission_repository import EmissionRepository
from app.schemas.emission_schemas import EmissionCreate
from app.core.exceptions import NotFoundException, ValidationException

logger = structlog.get_logger(__name__)


class EmissionService:
    """Service layer for emission records of a business unit"""

    def __init__(self, db: Session):
        self.db = db
        self.emission_repo = EmissionRepository(db)
        self.business_unit_repo = BusinessUnitRepository(db)

    def _get_business_unit(self, business_unit_id: int, context: AccessContext) -> BusinessUnit:
        unit = self.business_unit_repo.get_by_id_and_organization(
            business_unit_id, context.organization.id
        )
        if not unit:
            raise NotFoundException(f"Business unit {business_unit_id} not found")
        return unit

    def list_emissions(
        self,
        business_unit_id: int,
        context: AccessContext,
        start_date: datetime.date | None = None,
        end_date: datetime.date | None = None,
    ) -> list[Emission]:
        """
        List emissions of a business unit.

        Args:
            business_unit_id: Business unit ID
            context: Access context (scoping already enforced by the route guard)
            start_date: Filter by start date (inclusive)
            end_date: Filter by end date (inclusive)

        Raises:
            NotFoundException: If the unit is not in the organization
            ValidationException: If start_date is after end_date
        """
        if start_date and end_date and start_date > end_date:
            raise ValidationException("start_date must be on or before end_date")
        self._get_business_unit(business_unit_id, context)
        return self.emission_repo.get_by_business_unit(business_unit_id, start_date, end_date)

    def create_emission(
        self, business_unit_id: int, data: EmissionCreate, context: AccessContext
    ) -> Emission:
        """
        Record emissions for a business unit. New records are PENDING.

        Raises:
            NotFoundException: If the unit is not in the organization
            ValidationException: If the unit is archived
        """
        unit = self._get_business_unit(business_unit_id, context)
        if unit.is_archived:
            raise ValidationException("Cannot record emissions for an archived business unit")

        emission = Emission(
            business_unit_id=unit.id,
            date=data.date,
            scope1=data.scope1,
            scope2=data.scope2,
            scope3=data.scope3,
            source=data.source,
            details=data.details,
            status=EmissionStatus.PENDING,
        )
        emission = self.emission_repo.create(emission)
        logger.info(
            "emission_recorded",
            emission_id=emission.id,
            business_unit_id=unit.id,
            user_id=context.user.id,
        )
        return emission

    def approve_emission(
        self, business_unit_id: int, emission_id: int, context: AccessContext
    ) -> Emission:
        """
        Approve a pending emission record.

        Raises:
            NotFoundException: If unit or emission not found
            ValidationException: If already approved
        """
        self._get_business_unit(business_unit_id, context)
        emission = self.emission_repo.get_by_id_and_business_unit(emission_id, business_unit_id)
        if not emission:
            raise NotFoundException(f"Emission {emission_id} not found")
        if emission.status == EmissionStatus.APPROVED:
            raise ValidationException(f"Emission {emission_id} is already approved")

        emission.status = EmissionStatus.APPROVED
        emission.approved_by_id = context.user.id
        emission = self.emission_repo.update(emission)
        logger.info("emission_approved", emission_id=emission.id, user_id=context.user.id)
        return emission

    def get_summary(
        self, business_unit_id: int, context: AccessContext, approved_only: bool = False
    ) -> dict:
        """
        Sum scope 1/2/3 emissions of a business unit.

        Returns:
            Dict with per-scope totals, grand total and record count
        """
        self._get_business_unit(business_unit_id, context)
        scope1, scope2, scope3, count = self.emission_repo.get_totals(
            business_unit_id, approved_only=approved_only
        )
        scope1, scope2, scope3 = float(scope1), float(scope2), float(scope3)
        return {
            "business_unit_id": business_unit_id,
            "scope1": scope1,
            "scope2": scope2,
            "scope3": scope3,
            "total": scope1 + scope2 + scope3,
            "record_count": count,
            "approved_only": approved_only,
        }
