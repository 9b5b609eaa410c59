"""Access context for request authorization."""

from dataclasses import dataclass, field
from app.core import permissions as access_rules
from app.core.permissions import Permission
from app.models.user import User
from app.models.organization import Organization
from app.models.business_unit import BusinessUnit
from app.models.role import ADMIN_ROLES


@dataclass
class AccessContext:
    """
    Complete access context for request authorization.

    Contains the authenticated user, their organization, and a snapshot of
    the organization's business-unit directory taken once per request.
    Every rule is delegated to app.core.permissions so services and route
    guards evaluate exactly the same table.

    Attributes:
        user: The authenticated User object
        organization: The Organization the user belongs to
        business_units: All business units of the organization (archived included)
    """

    user: User
    organization: Organization
    business_units: list[BusinessUnit] = field(default_factory=list)

    def can(self, permission: Permission, business_unit_id: int | None = None) -> bool:
        """
        Check a permission, optionally scoped to a business unit.

        Args:
            permission: Required permission
            business_unit_id: Target unit, or None for an organization-wide action

        Returns:
            True if the user may perform the action
        """
        return access_rules.can_perform_action(
            self.user, permission, business_unit_id, self.business_units
        )

    def has_business_unit_access(self, business_unit_id: int | None) -> bool:
        """Check scoping only, ignoring permission level."""
        return access_rules.has_business_unit_access(
            self.user, business_unit_id, self.business_units
        )

    def accessible_business_units(self) -> list[BusinessUnit]:
        """Business units this user is scoped to."""
        return access_rules.get_accessible_business_units(self.user, self.business_units)

    def permissions(self) -> frozenset[Permission]:
        """Static permission set of the user's role."""
        return access_rules.permissions_for_role(self.user.role)

    def is_admin(self) -> bool:
        """Check if user is ADMIN or SUPER_ADMIN."""
        return self.user.role in ADMIN_ROLES

    def __repr__(self) -> str:
        return (
            f"<AccessContext(user_id={self.user.id}, organization_id={self.organization.id}, "
            f"role={self.user.role.value})>"
        )
