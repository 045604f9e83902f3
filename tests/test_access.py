"""
Access rules, display-role precedence and the permission matrix.
"""

import pytest

from app.core import access
from app.config.permissions_config import (
    MODULES,
    get_permission_matrix,
    get_permissions_for_roles,
    get_role_permissions,
)

APPROVED_MAKER = {"role": "maker", "maker_approved": True, "assigned_team": "Team Ghost"}
PENDING_MAKER = {"role": "maker", "maker_approved": False}
PLAIN_USER = {"role": "user", "maker_approved": False}


class TestMakerStatus:

    def test_approved_maker_needs_both_fields(self):
        assert access.is_approved_maker(APPROVED_MAKER)
        assert not access.is_approved_maker(PENDING_MAKER)
        assert not access.is_approved_maker({"role": "user", "maker_approved": True})
        assert not access.is_approved_maker(None)

    def test_pending_maker(self):
        assert access.is_pending_maker(PENDING_MAKER)
        assert not access.is_pending_maker(APPROVED_MAKER)


class TestAdminAccess:

    def test_admin_comes_from_user_roles(self):
        assert access.is_admin(["admin"])
        assert not access.is_admin(["moderator"])
        # A profile role of "admin" alone does not make an admin
        assert not access.can_manage_users([])

    def test_admin_portal(self):
        assert access.can_access_admin(PLAIN_USER, ["admin"])
        assert access.can_access_admin(APPROVED_MAKER, [])
        assert not access.can_access_admin(PENDING_MAKER, [])
        assert not access.can_access_admin(PLAIN_USER, ["moderator"])

    def test_users_and_teams_are_admin_only(self):
        assert access.can_manage_teams(["admin"])
        assert not access.can_manage_teams(["moderator"])


class TestBadgeEditing:

    def test_admin_edits_any_badge(self):
        assert access.can_edit_badge(PLAIN_USER, ["admin"], "Other Team")
        assert access.can_edit_badge(PLAIN_USER, ["admin"], None)

    def test_maker_edits_only_assigned_team(self):
        assert access.can_edit_badge(APPROVED_MAKER, [], "Team Ghost")
        assert not access.can_edit_badge(APPROVED_MAKER, [], "Other Team")
        assert not access.can_edit_badge(APPROVED_MAKER, [], None)

    def test_maker_without_assigned_team(self):
        maker = {"role": "maker", "maker_approved": True, "assigned_team": None}
        assert not access.can_edit_badge(maker, [], None)

    def test_regular_users_cannot_edit(self):
        assert not access.can_edit_badge(PENDING_MAKER, [], None)
        assert access.can_manage_badges(APPROVED_MAKER, [])
        assert not access.can_manage_badges(PLAIN_USER, ["moderator"])


class TestDisplayRole:

    @pytest.mark.parametrize("profile,roles,expected", [
        (APPROVED_MAKER, ["admin", "moderator"], "Admin"),
        (APPROVED_MAKER, ["moderator"], "Badge Maker"),
        (PENDING_MAKER, ["moderator"], "Pending Badge Maker"),
        (PLAIN_USER, ["moderator"], "Moderator"),
        (PLAIN_USER, [], "User"),
        (None, [], "User"),
    ])
    def test_precedence(self, profile, roles, expected):
        assert access.get_display_role(profile, roles) == expected

    def test_all_display_roles(self):
        assert access.get_all_display_roles(APPROVED_MAKER, ["admin", "moderator"]) == ["Admin", "Badge Maker", "Moderator"]
        assert access.get_all_display_roles(PLAIN_USER, []) == ["User"]


class TestPermissionMatrix:

    def test_effective_roles(self):
        assert access.effective_roles(PLAIN_USER, []) == ["user"]
        assert access.effective_roles(APPROVED_MAKER, ["moderator"]) == ["user", "moderator", "maker"]
        assert "admin" in access.effective_roles(None, ["admin"])

    def test_admin_gets_every_permission(self):
        everything = {f"{m['resource']}:{a}" for m in MODULES.values() for a in m["actions"]}
        assert set(get_role_permissions("admin")) == everything

    def test_user_permissions(self):
        permissions = access.permissions_for(PLAIN_USER, [])
        assert "badges:create" in permissions
        assert "team_requests:create" in permissions
        assert "badges:approve" not in permissions
        assert "diagnostics:read" not in permissions

    def test_maker_permissions(self):
        permissions = access.permissions_for(APPROVED_MAKER, [])
        assert "badges:approve" in permissions
        assert "badge_images:create" in permissions
        assert "teams:read" in permissions
        assert "teams:create" not in permissions

    def test_moderator_permissions(self):
        permissions = get_permissions_for_roles(["user", "moderator"])
        assert "uploads:delete" in permissions
        assert "badges:approve" not in permissions

    def test_unknown_role_has_no_permissions(self):
        assert get_role_permissions("superhero") == []

    def test_matrix_shape(self):
        matrix = get_permission_matrix()
        names = {p["name"] for p in matrix["permissions"]}
        assert "matching:process" in names
        approve = next(p for p in matrix["permissions"] if p["name"] == "badges:approve")
        assert approve["description"] == "Approve or reject submitted badges"
        assert {r["name"] for r in matrix["roles"]} == {"user", "moderator", "maker", "admin"}
