"""Unit tests for the permission evaluator (no database)."""

from types import SimpleNamespace

import pytest

from app.core.permissions import (
    Permission,
    ROLE_PERMISSIONS,
    can_perform_action,
    get_accessible_business_units,
    has_business_unit_access,
    has_permission,
    permissions_for_role,
)
from app.models.role import UserRole

P = Permission

EXPECTED_TABLE = {
    UserRole.SUPER_ADMIN: set(Permission),
    UserRole.ADMIN: set(Permission),
    UserRole.BUSINESS_UNIT_MANAGER: {
        P.VIEW_BUSINESS_UNIT,
        P.MANAGE_BUSINESS_UNIT,
        P.UPLOAD_DATA,
        P.APPROVE_DATA,
        P.MANAGE_USERS,
        P.VIEW_FINANCIALS,
    },
    UserRole.TEAM_MEMBER: {P.VIEW_BUSINESS_UNIT, P.UPLOAD_DATA},
    UserRole.AUDITOR: {P.VIEW_BUSINESS_UNIT, P.VIEW_FINANCIALS},
}

ALL_ROLES = list(UserRole)
ALL_PERMISSIONS = list(Permission)


def make_user(role, user_id="U1", business_unit_id=None):
    return SimpleNamespace(id=user_id, role=role, business_unit_id=business_unit_id)


def make_unit(unit_id, manager_id=None):
    return SimpleNamespace(id=unit_id, manager_id=manager_id)


class TrackingDirectory:
    """Records whether the evaluator iterated it"""

    def __init__(self, units=()):
        self.units = list(units)
        self.consulted = False

    def __iter__(self):
        self.consulted = True
        return iter(self.units)


class ExplodingDirectory:
    """Raises part-way through iteration"""

    def __iter__(self):
        yield make_unit("BU2", manager_id="U1")
        raise RuntimeError("directory unavailable")


class ExplodingId:
    """Equality and truthiness both raise"""

    def __eq__(self, other):
        raise RuntimeError("cannot compare")

    def __bool__(self):
        raise RuntimeError("ambiguous truth value")

    __hash__ = object.__hash__


class ExplodingUser:
    """Every attribute read raises"""

    def __getattr__(self, name):
        raise RuntimeError(f"cannot read {name}")


class TestRolePermissionTable:
    """Static role -> permission table"""

    def test_table_matches_expected_rows(self):
        assert {role: set(perms) for role, perms in ROLE_PERMISSIONS.items()} == EXPECTED_TABLE

    @pytest.mark.parametrize("role", ALL_ROLES)
    def test_every_role_has_permissions(self, role):
        assert len(ROLE_PERMISSIONS[role]) > 0

    @pytest.mark.parametrize("role", ALL_ROLES)
    def test_admin_is_superset_of_every_role(self, role):
        assert ROLE_PERMISSIONS[UserRole.ADMIN] >= ROLE_PERMISSIONS[role]

    def test_super_admin_matches_admin(self):
        assert ROLE_PERMISSIONS[UserRole.SUPER_ADMIN] == ROLE_PERMISSIONS[UserRole.ADMIN]

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            ROLE_PERMISSIONS[UserRole.TEAM_MEMBER] = frozenset(Permission)  # type: ignore[index]
        with pytest.raises(AttributeError):
            ROLE_PERMISSIONS[UserRole.TEAM_MEMBER].add(P.MANAGE_USERS)  # type: ignore[attr-defined]

    def test_permissions_for_role_accepts_string(self):
        assert permissions_for_role("auditor") == ROLE_PERMISSIONS[UserRole.AUDITOR]

    @pytest.mark.parametrize("role", [None, "", "owner", "ADMIN", 42, ["admin"]])
    def test_permissions_for_unknown_role_is_empty(self, role):
        assert permissions_for_role(role) == frozenset()


class TestHasPermission:
    """Tests for has_permission"""

    @pytest.mark.parametrize("role", ALL_ROLES)
    @pytest.mark.parametrize("permission", ALL_PERMISSIONS)
    def test_matches_table_membership(self, role, permission):
        assert has_permission(make_user(role), permission) == (permission in EXPECTED_TABLE[role])

    @pytest.mark.parametrize("permission", ALL_PERMISSIONS)
    def test_manager_permission_implies_admin_permission(self, permission):
        if has_permission(make_user(UserRole.BUSINESS_UNIT_MANAGER), permission):
            assert has_permission(make_user(UserRole.ADMIN), permission)

    def test_role_given_as_plain_string(self):
        assert has_permission(make_user("team_member"), "upload_data") is True
        assert has_permission(make_user("team_member"), "approve_data") is False

    def test_dict_user(self):
        assert has_permission({"role": "auditor"}, P.VIEW_FINANCIALS) is True

    def test_no_user(self):
        assert has_permission(None, P.VIEW_BUSINESS_UNIT) is False

    def test_user_without_role(self):
        assert has_permission(SimpleNamespace(id="U1"), P.VIEW_BUSINESS_UNIT) is False
        assert has_permission(make_user(None), P.VIEW_BUSINESS_UNIT) is False
        assert has_permission(make_user(""), P.VIEW_BUSINESS_UNIT) is False

    @pytest.mark.parametrize("role", ["owner", "Admin", "user", 7, ["admin"], {"admin": 1}])
    def test_unknown_role_fails_closed(self, role):
        assert has_permission(make_user(role), P.VIEW_BUSINESS_UNIT) is False

    @pytest.mark.parametrize("permission", [None, "", "delete_everything", 3, ["upload_data"]])
    def test_unknown_permission_fails_closed(self, permission):
        assert has_permission(make_user(UserRole.ADMIN), permission) is False

    def test_unreadable_user_fails_closed(self):
        assert has_permission(ExplodingUser(), P.VIEW_BUSINESS_UNIT) is False


class TestHasBusinessUnitAccess:
    """Tests for has_business_unit_access"""

    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.SUPER_ADMIN])
    @pytest.mark.parametrize("target", ["BU1", "BU-unknown", 0, 999])
    def test_admin_bypasses_scoping(self, role, target):
        directory = [make_unit("BU1", manager_id="someone-else")]
        assert has_business_unit_access(make_user(role), target, directory) is True
        assert has_business_unit_access(make_user(role), target) is True

    def test_team_member_only_home_unit(self):
        user = make_user(UserRole.TEAM_MEMBER, business_unit_id="BU1")
        directory = [make_unit("BU1"), make_unit("BU2", manager_id="U9")]

        assert has_business_unit_access(user, "BU1", directory) is True
        assert has_business_unit_access(user, "BU2", directory) is False
        assert has_business_unit_access(user, "BU3", directory) is False

    def test_team_member_ignores_directory_manager_entries(self):
        """Only managers get directory-based access, even if recorded as manager"""
        user = make_user(UserRole.TEAM_MEMBER, user_id="U1", business_unit_id="BU1")
        directory = [make_unit("BU2", manager_id="U1")]

        assert has_business_unit_access(user, "BU2", directory) is False

    def test_auditor_only_home_unit(self):
        user = make_user(UserRole.AUDITOR, user_id="U1", business_unit_id="BU1")
        directory = [make_unit("BU2", manager_id="U1")]

        assert has_business_unit_access(user, "BU1", directory) is True
        assert has_business_unit_access(user, "BU2", directory) is False

    def test_manager_home_unit(self):
        user = make_user(UserRole.BUSINESS_UNIT_MANAGER, business_unit_id="BU1")
        assert has_business_unit_access(user, "BU1") is True
        assert has_business_unit_access(user, "BU1", []) is True

    def test_manager_delegated_unit(self):
        user = make_user(UserRole.BUSINESS_UNIT_MANAGER, user_id="U1", business_unit_id="BU1")
        directory = [make_unit("BU2", manager_id="U1")]

        assert has_business_unit_access(user, "BU2", directory) is True

    def test_manager_without_home_unit_uses_directory(self):
        user = make_user(UserRole.BUSINESS_UNIT_MANAGER, user_id="U1")
        directory = [make_unit("BU2", manager_id="U1")]

        assert has_business_unit_access(user, "BU2", directory) is True
        assert has_business_unit_access(user, "BU1", directory) is False

    def test_manager_denied_elsewhere(self):
        user = make_user(UserRole.BUSINESS_UNIT_MANAGER, user_id="U1", business_unit_id="BU1")
        directory = [
            make_unit("BU2", manager_id="U2"),
            make_unit("BU3", manager_id=None),
            make_unit("BU4", manager_id="U1"),
        ]

        assert has_business_unit_access(user, "BU2", directory) is False
        assert has_business_unit_access(user, "BU3", directory) is False

    def test_manager_requires_id_and_manager_match_on_same_entry(self):
        user = make_user(UserRole.BUSINESS_UNIT_MANAGER, user_id="U1", business_unit_id="BU1")
        directory = [make_unit("BU2", manager_id="U2"), make_unit("BU3", manager_id="U1")]

        assert has_business_unit_access(user, "BU2", directory) is False

    def test_manager_without_id_never_matches_unmanaged_units(self):
        user = make_user(UserRole.BUSINESS_UNIT_MANAGER, user_id=None, business_unit_id="BU1")
        directory = [make_unit("BU2", manager_id=None)]

        assert has_business_unit_access(user, "BU2", directory) is False

    @pytest.mark.parametrize(
        "directory",
        [None, 42, "BU2", b"BU2", {"BU2": "U1"}, [None, 1, "x", object()], [{"id": "BU3"}]],
    )
    def test_manager_malformed_directory_is_denial(self, directory):
        user = make_user(UserRole.BUSINESS_UNIT_MANAGER, user_id="U1", business_unit_id="BU1")

        assert has_business_unit_access(user, "BU2", directory) is False
        assert has_business_unit_access(user, "BU1", directory) is True

    def test_manager_dict_directory_entries(self):
        user = {"id": "U1", "role": "business_unit_manager", "business_unit_id": "BU1"}
        directory = [{"id": "BU2", "manager_id": "U1"}]

        assert has_business_unit_access(user, "BU2", directory) is True

    def test_manager_directory_generator(self):
        user = make_user(UserRole.BUSINESS_UNIT_MANAGER, user_id="U1")
        directory = (make_unit(unit_id, "U1") for unit_id in ["BU2", "BU3"])

        assert has_business_unit_access(user, "BU3", directory) is True

    def test_integer_ids_are_not_coerced(self):
        user = make_user(UserRole.TEAM_MEMBER, business_unit_id=1)

        assert has_business_unit_access(user, 1) is True
        assert has_business_unit_access(user, "1") is False

    def test_zero_is_a_valid_id(self):
        user = make_user(UserRole.TEAM_MEMBER, business_unit_id=0)
        assert has_business_unit_access(user, 0) is True

    @pytest.mark.parametrize("target", [None, ""])
    @pytest.mark.parametrize("role", ALL_ROLES)
    def test_absent_target_is_denial(self, role, target):
        user = make_user(role, business_unit_id=target)
        assert has_business_unit_access(user, target, [make_unit(target, "U1")]) is False

    def test_no_user(self):
        assert has_business_unit_access(None, "BU1", [make_unit("BU1")]) is False

    @pytest.mark.parametrize("role", ["contractor", None, "", 7, ["admin"]])
    def test_unmapped_role_denied_home_unit(self, role):
        user = make_user(role, business_unit_id="BU1")

        assert has_business_unit_access(user, "BU1") is False
        assert has_business_unit_access(user, "BU2", [make_unit("BU2", "U1")]) is False

    def test_user_without_role_attribute_denied_home_unit(self):
        user = SimpleNamespace(id="U1", business_unit_id="BU1")
        assert has_business_unit_access(user, "BU1") is False

    def test_does_not_check_permission_level(self):
        """Scoping answers yes for an auditor even where it could never upload"""
        user = make_user(UserRole.AUDITOR, business_unit_id="BU1")
        assert has_permission(user, P.UPLOAD_DATA) is False
        assert has_business_unit_access(user, "BU1") is True

    def test_manager_directory_raising_mid_iteration(self):
        user = make_user(UserRole.BUSINESS_UNIT_MANAGER, user_id="U1", business_unit_id="BU1")

        assert has_business_unit_access(user, "BU2", ExplodingDirectory()) is False
        assert has_business_unit_access(user, "BU1", ExplodingDirectory()) is True

    @pytest.mark.parametrize("role", ALL_ROLES)
    def test_target_with_raising_equality(self, role):
        user = make_user(role, user_id="U1", business_unit_id="BU1")
        directory = [make_unit("BU2", manager_id="U1")]

        assert has_business_unit_access(user, ExplodingId(), directory) in (True, False)
        assert can_perform_action(user, P.VIEW_BUSINESS_UNIT, ExplodingId(), directory) in (
            True,
            False,
        )

    def test_admin_target_with_raising_equality(self):
        assert has_business_unit_access(make_user(UserRole.ADMIN), ExplodingId()) is True

    def test_team_member_target_with_raising_equality(self):
        user = make_user(UserRole.TEAM_MEMBER, business_unit_id="BU1")
        assert has_business_unit_access(user, ExplodingId()) is False

    def test_unreadable_user_fails_closed(self):
        assert has_business_unit_access(ExplodingUser(), "BU1", [make_unit("BU1")]) is False


class TestCanPerformAction:
    """Tests for can_perform_action"""

    @pytest.mark.parametrize("role", ALL_ROLES + ["contractor", None])
    @pytest.mark.parametrize("permission", ALL_PERMISSIONS)
    def test_without_target_equals_has_permission(self, role, permission):
        user = make_user(role, business_unit_id="BU1")
        assert can_perform_action(user, permission) == has_permission(user, permission)
        assert can_perform_action(user, permission, None, None) == has_permission(user, permission)

    def test_missing_permission_short_circuits_scoping(self):
        """Scoping must never be evaluated when the role lacks the permission"""
        user = make_user(UserRole.TEAM_MEMBER, user_id="U1", business_unit_id="BU1")

        directory = TrackingDirectory([make_unit("BU2", manager_id="U1")])

        assert can_perform_action(user, P.MANAGE_BUSINESS_UNIT, "BU1", directory) is False
        assert can_perform_action(user, P.APPROVE_DATA, "BU2", directory) is False
        assert directory.consulted is False

    def test_insufficient_role_denied_even_when_directory_grants_scope(self):
        user = make_user(UserRole.AUDITOR, user_id="U1", business_unit_id="BU1")
        directory = [make_unit("BU1", manager_id="U1")]

        assert has_business_unit_access(user, "BU1", directory) is True
        assert can_perform_action(user, P.UPLOAD_DATA, "BU1", directory) is False

    def test_permission_and_scope_both_required(self):
        user = make_user(UserRole.TEAM_MEMBER, business_unit_id="BU1")

        assert can_perform_action(user, P.UPLOAD_DATA, "BU1") is True
        assert can_perform_action(user, P.UPLOAD_DATA, "BU2") is False

    def test_admin_any_unit(self):
        user = make_user(UserRole.ADMIN)
        assert can_perform_action(user, P.MANAGE_SUBSCRIPTION, "anything", []) is True

    def test_unscoped_action_for_manager(self):
        user = make_user(UserRole.BUSINESS_UNIT_MANAGER)
        assert can_perform_action(user, P.MANAGE_USERS) is True
        assert can_perform_action(user, P.MANAGE_SUBSCRIPTION) is False

    def test_idempotent(self):
        user = make_user(UserRole.BUSINESS_UNIT_MANAGER, user_id="U1", business_unit_id="BU1")
        directory = [make_unit("BU2", manager_id="U1"), make_unit("BU3", manager_id="U2")]

        for target in ["BU1", "BU2", "BU3", None]:
            results = {can_perform_action(user, P.APPROVE_DATA, target, directory) for _ in range(5)}
            assert len(results) == 1

    def test_does_not_mutate_arguments(self):
        user = make_user(UserRole.BUSINESS_UNIT_MANAGER, user_id="U1", business_unit_id="BU1")
        directory = [make_unit("BU2", manager_id="U1")]
        before = (vars(user).copy(), [vars(unit).copy() for unit in directory])

        can_perform_action(user, P.VIEW_BUSINESS_UNIT, "BU2", directory)

        assert (vars(user), [vars(unit) for unit in directory]) == before


class TestScenarios:
    """Concrete end-to-end scenarios"""

    def test_auditor_views_financials_of_home_unit(self):
        user = {"role": "auditor", "business_unit_id": "BU1"}
        assert can_perform_action(user, P.VIEW_FINANCIALS, "BU1") is True

    def test_auditor_denied_financials_of_other_unit(self):
        user = {"role": "auditor", "business_unit_id": "BU1"}
        assert can_perform_action(user, P.VIEW_FINANCIALS, "BU2") is False

    def test_manager_manages_delegated_unit(self):
        user = {"role": "business_unit_manager", "id": "U1", "business_unit_id": "BU1"}
        directory = [{"id": "BU2", "manager_id": "U1"}]
        assert can_perform_action(user, P.MANAGE_BUSINESS_UNIT, "BU2", directory) is True

    @pytest.mark.parametrize("target", [None, "BU1", "BU2"])
    def test_team_member_cannot_manage_users(self, target):
        user = {"role": "team_member", "business_unit_id": "BU1"}
        assert can_perform_action(user, P.MANAGE_USERS, target) is False

    @pytest.mark.parametrize("permission", ALL_PERMISSIONS + ["bogus", None])
    @pytest.mark.parametrize("target", [None, "", "BU1", 0])
    def test_no_user_denied_everywhere(self, permission, target):
        directory = [make_unit("BU1", manager_id=None)]
        assert has_permission(None, permission) is False
        assert has_business_unit_access(None, target, directory) is False
        assert can_perform_action(None, permission, target, directory) is False
        assert get_accessible_business_units(None, directory) == []


class TestGetAccessibleBusinessUnits:
    """Tests for get_accessible_business_units"""

    @pytest.fixture
    def directory(self):
        return [
            make_unit("BU1"),
            make_unit("BU2", manager_id="U1"),
            make_unit("BU3", manager_id="U2"),
        ]

    def test_admin_sees_all(self, directory):
        assert get_accessible_business_units(make_user(UserRole.ADMIN), directory) == directory

    def test_manager_sees_home_and_managed(self, directory):
        user = make_user(UserRole.BUSINESS_UNIT_MANAGER, user_id="U1", business_unit_id="BU1")
        ids = [unit.id for unit in get_accessible_business_units(user, directory)]
        assert ids == ["BU1", "BU2"]

    def test_team_member_sees_home_only(self, directory):
        user = make_user(UserRole.TEAM_MEMBER, user_id="U1", business_unit_id="BU3")
        ids = [unit.id for unit in get_accessible_business_units(user, directory)]
        assert ids == ["BU3"]

    def test_without_home_unit_sees_nothing(self, directory):
        user = make_user(UserRole.AUDITOR, user_id="U1")
        assert get_accessible_business_units(user, directory) == []

    @pytest.mark.parametrize("directory_value", [None, 5, "BU1"])
    def test_malformed_directory(self, directory_value):
        assert get_accessible_business_units(make_user(UserRole.ADMIN), directory_value) == []

    @pytest.mark.parametrize("role", ALL_ROLES + ["contractor", None])
    def test_agrees_with_has_business_unit_access(self, role, directory):
        user = make_user(role, user_id="U1", business_unit_id="BU1")
        accessible = {unit.id for unit in get_accessible_business_units(user, directory)}
        for unit in directory:
            assert (unit.id in accessible) == has_business_unit_access(user, unit.id, directory)
