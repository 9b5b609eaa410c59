from fastapi import APIRouter, Depends, Query

from app.core.permissions import Permission, ROLE_PERMISSIONS
from app.dependencies import get_access_context
from app.models.access_context import AccessContext
from app.schemas.permission_schemas import (
    PermissionTableResponse,
    RolePermissionsResponse,
    MyPermissionsResponse,
    PermissionCheckResponse,
)

router = APIRouter()


def _sorted(permissions) -> list[Permission]:
    order = list(Permission)
    return sorted(permissions, key=order.index)


@router.get("/roles", response_model=PermissionTableResponse)
async def get_role_permissions():
    """
    The role -> permission table.

    Client-side gating reads this table instead of keeping its own copy.
    Does not require authentication.
    """
    return PermissionTableResponse(
        permissions=list(Permission),
        roles=[
            RolePermissionsResponse(role=role, permissions=_sorted(perms))
            for role, perms in ROLE_PERMISSIONS.items()
        ],
    )


@router.get("/me", response_model=MyPermissionsResponse)
async def get_my_permissions(context: AccessContext = Depends(get_access_context)):
    """Permissions of the caller's role and the business units they are scoped to"""
    return MyPermissionsResponse(
        role=context.user.role,
        permissions=_sorted(context.permissions()),
        business_unit_ids=[unit.id for unit in context.accessible_business_units()],
    )


@router.get("/check", response_model=PermissionCheckResponse)
async def check_permission(
    permission: Permission = Query(..., description="Permission to check"),
    business_unit_id: int | None = Query(None, description="Target business unit"),
    context: AccessContext = Depends(get_access_context),
):
    """
    Evaluate one permission for the caller.

    Denial is reported as allowed=false, never as an error.
    """
    return PermissionCheckResponse(
        permission=permission,
        business_unit_id=business_unit_id,
        allowed=context.can(permission, business_unit_id),
    )
