from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.permissions import Permission
from app.database import get_db
from app.dependencies import get_access_context, require_permission
from app.models.access_context import AccessContext
from app.services.organization_service import OrganizationService
from app.schemas.organization_schemas import OrganizationResponse, OrganizationUpdate

router = APIRouter()


@router.get("", response_model=OrganizationResponse)
async def get_organization(
    context: AccessContext = Depends(get_access_context),
    db: Session = Depends(get_db),
):
    """Get the current organization. Available to every authenticated user."""
    service = OrganizationService(db)
    return service.get_organization(context)


@router.patch("", response_model=OrganizationResponse)
async def update_organization(
    data: OrganizationUpdate,
    context: AccessContext = Depends(require_permission(Permission.MANAGE_SUBSCRIPTION)),
    db: Session = Depends(get_db),
):
    """
    Update organization name or logo.

    - **Requires MANAGE_SUBSCRIPTION**
    """
    service = OrganizationService(db)
    return service.update_organization(data, context)
