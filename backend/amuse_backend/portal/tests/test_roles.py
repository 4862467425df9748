import pytest

from portal.models import Role
from portal.roles import (
    PORTALS, Permission, department_for, is_super_admin, permissions_for, portal_for,
)


@pytest.mark.parametrize("role, key", [
    (Role.CEO, "ceo"),
    (Role.ADMIN, "admin"),
    (Role.HR, "hr"),
    (Role.MARKETING, "marketing"),
    (Role.ACCOUNTS, "accounts"),
    (Role.COACH, "coach"),
    (Role.GOVERNANCE, "governance"),
])
def test_each_role_has_its_own_portal(role, key):
    assert portal_for(role).key == key
    assert portal_for(role.value).key == key


def test_every_role_is_mapped():
    assert set(PORTALS) == set(Role)


def test_unknown_role_lands_on_admin_portal():
    assert portal_for("JANITOR").key == "admin"
    assert portal_for(None).key == "admin"


def test_unknown_role_has_no_permissions():
    assert permissions_for("JANITOR") == []
    assert department_for("JANITOR") == "General"


def test_super_admins():
    assert is_super_admin(Role.CEO)
    assert is_super_admin("ADMIN")
    assert not is_super_admin(Role.ACCOUNTS)


def test_accounts_permissions():
    permissions = permissions_for(Role.ACCOUNTS)

    assert Permission.MANAGE_INVOICES in permissions
    assert Permission.APPROVE_EXPENSES not in permissions
    assert department_for(Role.ACCOUNTS) == "Finance"
