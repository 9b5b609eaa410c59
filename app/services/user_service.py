import structlog
from sqlalchemy.orm import Session

from app.models.access_context import AccessContext
from app.models.user import User
from app.models.role import UserRole, ADMIN_ROLES
from app.repositories.business_unit_repository import BusinessUnitRepository
from app.repositories.user_repository import UserRepository
from app.schemas.user_schemas import UserUpdate
from app.core.exceptions import NotFoundException, ForbiddenException, ValidationException

logger = structlog.get_logger(__name__)


def ensure_assignable(
    context: AccessContext,
    business_unit_repo: BusinessUnitRepository,
    role: UserRole | None = None,
    business_unit_id: int | None = None,
) -> None:
    """
    Verify the caller may hand out a role and/or a home business unit.

    Shared by user updates and invitations.

    Raises:
        ForbiddenException: If a non-admin grants an admin role, or assigns
            a unit outside their own scope
        NotFoundException: If the unit is not in the organization
        ValidationException: If the unit is archived
    """
    if role in ADMIN_ROLES and not context.is_admin():
        raise ForbiddenException("Only admins can grant admin roles")

    if business_unit_id is None:
        return

    unit = business_unit_repo.get_by_id_and_organization(business_unit_id, context.organization.id)
    if not unit:
        raise NotFoundException(f"Business unit {business_unit_id} not found")
    if unit.is_archived:
        raise ValidationException("Cannot assign users to an archived business unit")
    if not context.has_business_unit_access(business_unit_id):
        raise ForbiddenException("Access to this business unit is denied")


class UserService:
    """Service layer for user management within an organization"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository(db)
        self.business_unit_repo = BusinessUnitRepository(db)

    def list_users(self, context: AccessContext) -> list[User]:
        """
        List users visible to the caller.

        Admins see every user of the organization. Everyone else sees
        themselves plus users whose home unit is in their scope.
        """
        users = self.repo.get_by_organization(context.organization.id)
        if context.is_admin():
            return users

        unit_ids = {unit.id for unit in context.accessible_business_units()}
        return [
            user
            for user in users
            if user.id == context.user.id or user.business_unit_id in unit_ids
        ]

    def get_user(self, user_id: int, context: AccessContext) -> User:
        """
        Get user of the caller's organization.

        Raises:
            NotFoundException: If user not found in the organization
        """
        user = self.repo.get_by_id_and_organization(user_id, context.organization.id)
        if not user:
            raise NotFoundException(f"User {user_id} not found")
        return user

    def update_user(self, user_id: int, data: UserUpdate, context: AccessContext) -> User:
        """
        Change a user's role and/or home business unit.

        Raises:
            NotFoundException: If user not found
            ForbiddenException: If modifying self, or the target or the
                new assignment is outside the caller's authority
        """
        user = self.get_user(user_id, context)

        # Cannot modify self (check first for better error message)
        if user.id == context.user.id:
            raise ForbiddenException("Cannot change your own role or business unit")

        self._ensure_can_manage(user, context)

        unit_changed = "business_unit_id" in data.model_fields_set
        if unit_changed and data.business_unit_id is None and not context.is_admin():
            raise ForbiddenException("Only admins can remove a user from their business unit")

        ensure_assignable(
            context,
            self.business_unit_repo,
            role=data.role,
            business_unit_id=data.business_unit_id if unit_changed else None,
        )

        if data.role is not None:
            user.role = data.role
        if unit_changed:
            user.business_unit_id = data.business_unit_id

        user = self.repo.update(user)
        logger.info(
            "user_updated",
            user_id=user.id,
            role=user.role.value,
            business_unit_id=user.business_unit_id,
            updated_by=context.user.id,
        )
        return user

    def archive_user(self, user_id: int, context: AccessContext) -> User:
        """
        Archive a user. Users are never hard-deleted.

        Raises:
            NotFoundException: If user not found
            ForbiddenException: If archiving self or a user outside the caller's authority
            ValidationException: If already archived
        """
        user = self.get_user(user_id, context)

        if user.id == context.user.id:
            raise ForbiddenException("Cannot archive yourself")

        self._ensure_can_manage(user, context)

        if not user.is_active:
            raise ValidationException(f"User {user_id} is already archived")

        user.is_active = False
        user = self.repo.update(user)
        logger.info("user_archived", user_id=user.id, archived_by=context.user.id)
        return user

    def _ensure_can_manage(self, user: User, context: AccessContext) -> None:
        if context.is_admin():
            return
        if user.role in ADMIN_ROLES:
            raise ForbiddenException("Only admins can modify admin users")
        if user.business_unit_id is None or not context.has_business_unit_access(user.business_unit_id):
            raise ForbiddenException("User is outside your business units")
