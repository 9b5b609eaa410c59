"""
Role-based permission evaluation with business-unit scoping.

Single source of truth for "can this user do X, optionally in business unit Y".
Route guards (app.dependencies), services (through AccessContext) and UI
gating (through GET /api/permissions/roles) all read the same table.

Users and business units are read either by attribute (ORM rows, pydantic
models, dataclasses) or by key (plain dicts), using the field names
``id``, ``role``, ``business_unit_id`` and ``manager_id``.

Every function fails closed: a missing or malformed input is a denial,
never an exception.
"""

from collections.abc import Iterable, Mapping
from enum import Enum as PyEnum
from types import MappingProxyType
from typing import Any

from app.models.role import ADMIN_ROLES, UserRole


class Permission(str, PyEnum):
    """Capability tags checked by route guards and UI gates"""

    VIEW_BUSINESS_UNIT = "view_business_unit"
    MANAGE_BUSINESS_UNIT = "manage_business_unit"
    UPLOAD_DATA = "upload_data"
    APPROVE_DATA = "approve_data"
    MANAGE_USERS = "manage_users"
    VIEW_FINANCIALS = "view_financials"
    MANAGE_SUBSCRIPTION = "manage_subscription"


_ALL_PERMISSIONS = frozenset(Permission)

SCOPED_ROLES = frozenset(
    {UserRole.BUSINESS_UNIT_MANAGER, UserRole.TEAM_MEMBER, UserRole.AUDITOR}
)

ROLE_PERMISSIONS: Mapping[UserRole, frozenset[Permission]] = MappingProxyType(
    {
        UserRole.SUPER_ADMIN: _ALL_PERMISSIONS,
        UserRole.ADMIN: _ALL_PERMISSIONS,
        UserRole.BUSINESS_UNIT_MANAGER: frozenset(
            {
                Permission.VIEW_BUSINESS_UNIT,
                Permission.MANAGE_BUSINESS_UNIT,
                Permission.UPLOAD_DATA,
                Permission.APPROVE_DATA,
                Permission.MANAGE_USERS,
                Permission.VIEW_FINANCIALS,
            }
        ),
        UserRole.TEAM_MEMBER: frozenset(
            {
                Permission.VIEW_BUSINESS_UNIT,
                Permission.UPLOAD_DATA,
            }
        ),
        UserRole.AUDITOR: frozenset(
            {
                Permission.VIEW_BUSINESS_UNIT,
                Permission.VIEW_FINANCIALS,
            }
        ),
    }
)


def _field(obj: Any, name: str) -> Any:
    """Read a field by key or attribute; unreadable fields count as absent."""
    if obj is None:
        return None
    try:
        if isinstance(obj, Mapping):
            return obj.get(name)
        return getattr(obj, name, None)
    except Exception:
        return None


def _coerce_role(value: Any) -> UserRole | None:
    if isinstance(value, UserRole):
        return value
    if not isinstance(value, str):
        return None
    try:
        return UserRole(value)
    except ValueError:
        return None


def _coerce_permission(value: Any) -> Permission | None:
    if isinstance(value, Permission):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Permission(value)
    except ValueError:
        return None


def _is_absent(business_unit_id: Any) -> bool:
    # 0 is a valid primary key, only None and "" mean "no target"
    if business_unit_id is None:
        return True
    return isinstance(business_unit_id, str) and str.__eq__(business_unit_id, "")


def _same_id(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return False
    try:
        return bool(left == right)
    except Exception:
        return False


def _iter_units(business_units: Any) -> list[Any]:
    if business_units is None or isinstance(business_units, (str, bytes, Mapping)):
        return []
    if not isinstance(business_units, Iterable):
        return []
    try:
        return [unit for unit in business_units if unit is not None]
    except Exception:
        return []


def permissions_for_role(role: Any) -> frozenset[Permission]:
    """
    Get the static permission set for a role.

    Args:
        role: UserRole member or its string value

    Returns:
        Frozen set of permissions, empty for unknown roles
    """
    coerced = _coerce_role(role)
    if coerced is None:
        return frozenset()
    return ROLE_PERMISSIONS.get(coerced, frozenset())


def has_permission(user: Any, permission: Any) -> bool:
    """
    Check whether the user's role grants a permission.

    Args:
        user: User (or None)
        permission: Permission member or its string value

    Returns:
        True if the role's table row contains the permission.
        False for no user, no role, unknown role or unknown permission.
    """
    if user is None:
        return False
    coerced = _coerce_permission(permission)
    if coerced is None:
        return False
    return coerced in permissions_for_role(_field(user, "role"))


def has_business_unit_access(
    user: Any, business_unit_id: Any, business_units: Iterable[Any] | None = None
) -> bool:
    """
    Check whether a user is scoped to a business unit.

    Rules, first match wins:
    1. ADMIN / SUPER_ADMIN: always
    2. BUSINESS_UNIT_MANAGER: their home unit, or any unit in the directory
       that records them as manager_id
    3. TEAM_MEMBER / AUDITOR: their home unit only
    4. No role or an unknown role: never

    Permission level is not checked here; see can_perform_action.

    Args:
        user: User (or None)
        business_unit_id: Target business unit ID
        business_units: Directory of the organization's business units,
            only consulted for managers

    Returns:
        True if the user may act within the target unit
    """
    if user is None or _is_absent(business_unit_id):
        return False

    role = _coerce_role(_field(user, "role"))
    if role in ADMIN_ROLES:
        return True
    if role not in SCOPED_ROLES:
        return False

    if _same_id(_field(user, "business_unit_id"), business_unit_id):
        return True

    if role is UserRole.BUSINESS_UNIT_MANAGER:
        user_id = _field(user, "id")
        return any(
            _same_id(_field(unit, "id"), business_unit_id)
            and _same_id(_field(unit, "manager_id"), user_id)
            for unit in _iter_units(business_units)
        )

    return False


def can_perform_action(
    user: Any,
    permission: Any,
    business_unit_id: Any = None,
    business_units: Iterable[Any] | None = None,
) -> bool:
    """
    Check a permission and, when a target is given, business-unit scoping.

    Scoping is never consulted when the role lacks the permission.
    Without a business_unit_id this is exactly has_permission.
    """
    if not has_permission(user, permission):
        return False
    if _is_absent(business_unit_id):
        return True
    return has_business_unit_access(user, business_unit_id, business_units)


def get_accessible_business_units(user: Any, business_units: Iterable[Any] | None) -> list[Any]:
    """
    Filter a business-unit directory down to the units a user is scoped to.

    Agrees with has_business_unit_access for every unit in the directory.
    """
    if user is None:
        return []

    units = _iter_units(business_units)
    role = _coerce_role(_field(user, "role"))
    if role in ADMIN_ROLES:
        return units
    if role not in SCOPED_ROLES:
        return []

    home_unit_id = _field(user, "business_unit_id")
    if role is UserRole.BUSINESS_UNIT_MANAGER:
        user_id = _field(user, "id")
        return [
            unit
            for unit in units
            if _same_id(_field(unit, "manager_id"), user_id)
            or _same_id(_field(unit, "id"), home_unit_id)
        ]

    return [unit for unit in units if _same_id(_field(unit, "id"), home_unit_id)]
