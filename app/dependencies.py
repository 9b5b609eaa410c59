import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.core.security import extract_user_id
from app.core.exceptions import UnauthorizedException, ForbiddenException
from app.core.permissions import Permission
from app.database import get_db
from app.models.access_context import AccessContext
from app.models.user import User
from app.repositories.business_unit_repository import BusinessUnitRepository
from app.repositories.organization_repository import OrganizationRepository
from app.repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    FastAPI dependency to validate JWT and load the user.

    Flow:
    1. Extract token from Authorization: Bearer <token>
    2. Validate JWT using SECRET_KEY
    3. Extract user ID from 'sub' claim
    4. Load the User record
    5. Reject archived users

    Raises:
        HTTPException 401: If token invalid, expired, or user unknown
        HTTPException 403: If the user account is archived
    """
    try:
        if credentials is None:
            raise UnauthorizedException("Not authenticated")
        token = credentials.credentials
        user_id = extract_user_id(token)

        user = UserRepository(db).get_by_id(user_id)
        if user is None:
            raise UnauthorizedException("User not found")

    except UnauthorizedException as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is archived")

    return user


async def get_access_context(
    user: User = Depends(get_current_user), db: Session = Depends(get_db)
) -> AccessContext:
    """
    FastAPI dependency building the per-request access context.

    Loads the user's organization and a snapshot of its business-unit
    directory, which the permission evaluator uses for manager scoping.

    Raises:
        HTTPException 401: If the user's organization no longer exists
    """
    organization = OrganizationRepository(db).get_by_id(user.organization_id)
    if organization is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Organization not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    business_units = BusinessUnitRepository(db).get_by_organization(organization.id)
    return AccessContext(user=user, organization=organization, business_units=business_units)


def require_permission(permission: Permission):
    """
    Dependency factory: enforces an organization-wide permission.

    Authentication (401) is resolved by get_current_user before the
    evaluator runs, so a denial here is always 403.
    """

    async def _check(context: AccessContext = Depends(get_access_context)) -> AccessContext:
        if not context.can(permission):
            logger.info(
                "permission_denied",
                user_id=context.user.id,
                role=context.user.role.value,
                permission=permission.value,
            )
            raise ForbiddenException(f"Permission denied: {permission.value} required")
        return context

    return _check


def require_business_unit_access(permission: Permission):
    """
    Dependency factory: enforces a permission scoped to the business unit
    named by the ``business_unit_id`` path parameter.

    Admins pass for any ID; a missing unit is reported as 404 by the service.
    """

    async def _check(
        business_unit_id: int, context: AccessContext = Depends(get_access_context)
    ) -> AccessContext:
        if not context.can(permission, business_unit_id):
            logger.info(
                "business_unit_access_denied",
                user_id=context.user.id,
                role=context.user.role.value,
                permission=permission.value,
                business_unit_id=business_unit_id,
            )
            raise ForbiddenException("Access to this business unit is denied")
        return context

    return _check
