import datetime
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.permissions import Permission
from app.database import get_db
from app.dependencies import require_business_unit_access
from app.models.access_context import AccessContext
from app.services.emission_service import EmissionService
from app.schemas.emission_schemas import (
    EmissionCreate,
    EmissionResponse,
    EmissionListResponse,
    EmissionSummaryResponse,
)

router = APIRouter()


@router.get("", response_model=EmissionListResponse)
def list_emissions(
    business_unit_id: int,
    start_date: datetime.date | None = Query(None, description="Start date (inclusive)"),
    end_date: datetime.date | None = Query(None, description="End date (inclusive)"),
    context: AccessContext = Depends(require_business_unit_access(Permission.VIEW_BUSINESS_UNIT)),
    db: Session = Depends(get_db),
):
    """List emission records of a business unit, oldest first"""
    service = EmissionService(db)
    emissions = service.list_emissions(business_unit_id, context, start_date, end_date)
    return EmissionListResponse(emissions=emissions, total=len(emissions))


@router.post("", response_model=EmissionResponse, status_code=status.HTTP_201_CREATED)
def create_emission(
    business_unit_id: int,
    data: EmissionCreate,
    context: AccessContext = Depends(require_business_unit_access(Permission.UPLOAD_DATA)),
    db: Session = Depends(get_db),
):
    """
    Record emissions for a business unit.

    - **Requires UPLOAD_DATA for this unit**
    - New records start as PENDING
    - Archived units reject new records
    """
    service = EmissionService(db)
    return service.create_emission(business_unit_id, data, context)


@router.get("/summary", response_model=EmissionSummaryResponse)
def get_emission_summary(
    business_unit_id: int,
    approved_only: bool = Query(False, description="Only count APPROVED records"),
    context: AccessContext = Depends(require_business_unit_access(Permission.VIEW_FINANCIALS)),
    db: Session = Depends(get_db),
):
    """
    Scope 1/2/3 totals for a business unit.

    - **Requires VIEW_FINANCIALS for this unit**
    """
    service = EmissionService(db)
    return service.get_summary(business_unit_id, context, approved_only=approved_only)


@router.post("/{emission_id}/approve", response_model=EmissionResponse)
def approve_emission(
    business_unit_id: int,
    emission_id: int,
    context: AccessContext = Depends(require_business_unit_access(Permission.APPROVE_DATA)),
    db: Session = Depends(get_db),
):
    """
    Approve a pending emission record.

    - **Requires APPROVE_DATA for this unit**
    """
    service = EmissionService(db)
    return service.approve_emission(business_unit_id, emission_id, context)
