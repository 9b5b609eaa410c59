from pydantic import BaseModel
from app.core.permissions import Permission
from app.models.role import UserRole


class RolePermissionsResponse(BaseModel):
    """One row of the role -> permission table"""

    role: UserRole
    permissions: list[Permission]


class PermissionTableResponse(BaseModel):
    """The full role -> permission table, consumed by UI gating"""

    permissions: list[Permission]
    roles: list[RolePermissionsResponse]


class MyPermissionsResponse(BaseModel):
    """Permissions and business-unit scope of the caller"""

    role: UserRole
    permissions: list[Permission]
    business_unit_ids: list[int]


class PermissionCheckResponse(BaseModel):
    """Outcome of a single permission check"""

    permission: Permission
    business_unit_id: int | None
    allowed: bool
