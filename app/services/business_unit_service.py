import structlog
from sqlalchemy.orm import Session

from app.models.access_context import AccessContext
from app.models.business_unit import BusinessUnit, BusinessUnitStatus
from app.repositories.business_unit_repository import BusinessUnitRepository
from app.repositories.user_repository import UserRepository
from app.schemas.business_unit_schemas import BusinessUnitCreate, BusinessUnitUpdate
from app.models.role import UserRole
from app.core.exceptions import NotFoundException, ForbiddenException, ValidationException

logger = structlog.get_logger(__name__)


class BusinessUnitService:
    """Service layer for business unit business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BusinessUnitRepository(db)
        self.user_repo = UserRepository(db)

    def list_business_units(
        self, context: AccessContext, include_archived: bool = False
    ) -> list[BusinessUnit]:
        """
        List business units the caller is scoped to.

        Args:
            context: Access context
            include_archived: Include ARCHIVED units

        Returns:
            Accessible units ordered by ID
        """
        units = context.accessible_business_units()
        if not include_archived:
            units = [unit for unit in units if not unit.is_archived]
        return units

    def get_business_unit(self, business_unit_id: int, context: AccessContext) -> BusinessUnit:
        """
        Get a business unit of the caller's organization.

        Scoping is enforced by the route guard before this is called.

        Raises:
            NotFoundException: If unit not found in the organization
        """
        unit = self.repo.get_by_id_and_organization(business_unit_id, context.organization.id)
        if not unit:
            raise NotFoundException(f"Business unit {business_unit_id} not found")
        return unit

    def create_business_unit(self, data: BusinessUnitCreate, context: AccessContext) -> BusinessUnit:
        """
        Create a business unit.

        A manager who creates a unit without naming a manager becomes its
        manager, which keeps the new unit inside their scope.

        Raises:
            ForbiddenException: If a non-admin assigns someone else as manager
            ValidationException: If the manager is not an active user of the organization
        """
        manager_id = data.manager_id
        if manager_id is None and context.user.role == UserRole.BUSINESS_UNIT_MANAGER:
            manager_id = context.user.id
        if manager_id is not None:
            self._validate_manager(manager_id, context)

        unit = BusinessUnit(
            organization_id=context.organization.id,
            name=data.name,
            description=data.description,
            manager_id=manager_id,
        )
        unit = self.repo.create(unit)
        logger.info(
            "business_unit_created",
            business_unit_id=unit.id,
            organization_id=unit.organization_id,
            manager_id=unit.manager_id,
        )
        return unit

    def update_business_unit(
        self, business_unit_id: int, data: BusinessUnitUpdate, context: AccessContext
    ) -> BusinessUnit:
        """
        Update business unit details.

        Raises:
            NotFoundException: If unit not found
            ForbiddenException: If a non-admin reassigns the manager
            ValidationException: If the unit is archived
        """
        unit = self.get_business_unit(business_unit_id, context)
        if unit.is_archived:
            raise ValidationException("Archived business units cannot be modified")

        if data.name is not None:
            unit.name = data.name
        if data.description is not None:
            unit.description = data.description
        if data.manager_id is not None and data.manager_id != unit.manager_id:
            self._validate_manager(data.manager_id, context)
            unit.manager_id = data.manager_id

        return self.repo.update(unit)

    def archive_business_unit(self, business_unit_id: int, context: AccessContext) -> BusinessUnit:
        """
        Archive a business unit. Units are never hard-deleted.

        Raises:
            NotFoundException: If unit not found
            ValidationException: If unit already archived
        """
        unit = self.get_business_unit(business_unit_id, context)
        if unit.is_archived:
            raise ValidationException(f"Business unit {business_unit_id} is already archived")

        unit.status = BusinessUnitStatus.ARCHIVED
        unit = self.repo.update(unit)
        logger.info("business_unit_archived", business_unit_id=unit.id, user_id=context.user.id)
        return unit

    def _validate_manager(self, manager_id: int, context: AccessContext) -> None:
        # Non-admins may only name themselves
        if manager_id != context.user.id and not context.is_admin():
            raise ForbiddenException("Only admins can assign a business unit manager")

        manager = self.user_repo.get_by_id_and_organization(manager_id, context.organization.id)
        if not manager or not manager.is_active:
            raise ValidationException(f"User {manager_id} is not an active member of this organization")
