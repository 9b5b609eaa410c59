"""User role enum for role-based access control."""

from enum import Enum as PyEnum


class UserRole(str, PyEnum):
    """
    Organization roles.

    Each role maps to a fixed set of permissions in
    app.core.permissions.ROLE_PERMISSIONS. Roles are not hierarchical:
    a permission check is a table lookup, and business-unit scoping is
    applied separately.

    - SUPER_ADMIN / ADMIN: every permission, access to every business unit
    - BUSINESS_UNIT_MANAGER: everything except subscription management,
      scoped to their home unit and units they are recorded as manager of
    - TEAM_MEMBER: view and upload data for their home unit
    - AUDITOR: view data and financials for their home unit
    """

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    BUSINESS_UNIT_MANAGER = "business_unit_manager"
    TEAM_MEMBER = "team_member"
    AUDITOR = "auditor"


ADMIN_ROLES = frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN})
