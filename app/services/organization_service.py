import structlog
from sqlalchemy.orm import Session

from app.models.access_context import AccessContext
from app.models.organization import Organization
from app.repositories.organization_repository import OrganizationRepository
from app.schemas.organization_schemas import OrganizationUpdate

logger = structlog.get_logger(__name__)


class OrganizationService:
    """Service for organization settings"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrganizationRepository(db)

    def get_organization(self, context: AccessContext) -> Organization:
        """Get the caller's organization"""
        return context.organization

    def update_organization(self, data: OrganizationUpdate, context: AccessContext) -> Organization:
        """Update organization name/logo (route requires MANAGE_SUBSCRIPTION)"""
        organization = context.organization
        if data.name is not None:
            organization.name = data.name
        if data.logo is not None:
            organization.logo = data.logo

        organization = self.repo.update(organization)
        logger.info("organization_updated", organization_id=organization.id, user_id=context.user.id)
        return organization
