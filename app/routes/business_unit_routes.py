from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.permissions import Permission
from app.database import get_db
from app.dependencies import require_permission, require_business_unit_access
from app.models.access_context import AccessContext
from app.services.business_unit_service import BusinessUnitService
from app.schemas.business_unit_schemas import (
    BusinessUnitCreate,
    BusinessUnitUpdate,
    BusinessUnitResponse,
    BusinessUnitListResponse,
)

router = APIRouter()


@router.get("", response_model=BusinessUnitListResponse)
async def list_business_units(
    include_archived: bool = Query(False, description="Include archived units"),
    context: AccessContext = Depends(require_permission(Permission.VIEW_BUSINESS_UNIT)),
    db: Session = Depends(get_db),
):
    """
    List business units the caller is scoped to.

    - Admins see every unit of the organization
    - Managers see their home unit and units they manage
    - Everyone else sees their home unit
    """
    service = BusinessUnitService(db)
    units = service.list_business_units(context, include_archived=include_archived)
    return BusinessUnitListResponse(business_units=units, total=len(units))


@router.post("", response_model=BusinessUnitResponse, status_code=status.HTTP_201_CREATED)
async def create_business_unit(
    data: BusinessUnitCreate,
    context: AccessContext = Depends(require_permission(Permission.MANAGE_BUSINESS_UNIT)),
    db: Session = Depends(get_db),
):
    """
    Create a business unit.

    - **Requires MANAGE_BUSINESS_UNIT**
    - A manager creating a unit becomes its manager unless one is given
    - Only admins can assign another user as manager
    """
    service = BusinessUnitService(db)
    return service.create_business_unit(data, context)


@router.get("/{business_unit_id}", response_model=BusinessUnitResponse)
async def get_business_unit(
    business_unit_id: int,
    context: AccessContext = Depends(require_business_unit_access(Permission.VIEW_BUSINESS_UNIT)),
    db: Session = Depends(get_db),
):
    """Get business unit details"""
    service = BusinessUnitService(db)
    return service.get_business_unit(business_unit_id, context)


@router.patch("/{business_unit_id}", response_model=BusinessUnitResponse)
async def update_business_unit(
    business_unit_id: int,
    data: BusinessUnitUpdate,
    context: AccessContext = Depends(require_business_unit_access(Permission.MANAGE_BUSINESS_UNIT)),
    db: Session = Depends(get_db),
):
    """
    Update business unit details.

    - **Requires MANAGE_BUSINESS_UNIT for this unit**
    - Manager reassignment is admin-only
    """
    service = BusinessUnitService(db)
    return service.update_business_unit(business_unit_id, data, context)


@router.delete("/{business_unit_id}", response_model=BusinessUnitResponse)
async def archive_business_unit(
    business_unit_id: int,
    context: AccessContext = Depends(require_business_unit_access(Permission.MANAGE_BUSINESS_UNIT)),
    db: Session = Depends(get_db),
):
    """
    Archive a business unit.

    Units are never hard-deleted; the status flips to ARCHIVED.
    """
    service = BusinessUnitService(db)
    return service.archive_business_unit(business_unit_id, context)
