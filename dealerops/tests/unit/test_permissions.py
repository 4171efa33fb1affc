import pytest
from types import SimpleNamespace

from dealerops.core import permissions
from dealerops.core.enums import UserRole

pytestmark = [pytest.mark.unit, pytest.mark.auth]

ALL_ROLES = list(UserRole)


def _allowed(predicate):
    return {role for role in ALL_ROLES if predicate(role)}


class TestCapabilities:

    def test_leads(self):
        assert _allowed(permissions.can_access_leads) == {
            UserRole.ADMIN, UserRole.MANAGER, UserRole.SALESPERSON,
        }

    def test_sales(self):
        assert _allowed(permissions.can_access_sales) == {
            UserRole.ADMIN, UserRole.MANAGER, UserRole.SALESPERSON, UserRole.FINANCE,
        }

    def test_customers(self):
        assert _allowed(permissions.can_access_customers) == {
            UserRole.ADMIN, UserRole.MANAGER, UserRole.SALESPERSON, UserRole.FINANCE,
        }

    def test_vehicles(self):
        assert _allowed(permissions.can_access_vehicles) == {
            UserRole.ADMIN, UserRole.MANAGER, UserRole.SALESPERSON,
        }

    def test_analytics_and_users(self):
        assert _allowed(permissions.can_access_analytics) == {UserRole.ADMIN, UserRole.MANAGER}
        assert _allowed(permissions.can_access_users) == {UserRole.ADMIN, UserRole.MANAGER}

    def test_deletes_and_assignment(self):
        for predicate in (permissions.can_delete_lead, permissions.can_delete_sale, permissions.can_assign_leads):
            assert _allowed(predicate) == {UserRole.ADMIN, UserRole.MANAGER}

    def test_service_role_has_no_sales_capabilities(self):
        assert not permissions.can_access_sales(UserRole.SERVICE)
        assert not permissions.can_access_leads(UserRole.SERVICE)

    def test_role_strings(self):
        assert permissions.can_access_sales("finance")
        assert permissions.can_delete_sale("ADMIN")

    @pytest.mark.parametrize("role", ["owner", "", None, 1])
    def test_unknown_role_has_no_capability(self, role):
        assert not permissions.can_access_leads(role)
        assert not permissions.can_delete_sale(role)


class TestModifyUser:

    def test_self(self):
        actor = SimpleNamespace(id=5, role=UserRole.SALESPERSON)
        assert permissions.can_modify_user(actor, 5)

    def test_other_user(self):
        actor = SimpleNamespace(id=5, role=UserRole.MANAGER)
        assert not permissions.can_modify_user(actor, 6)

    def test_admin_modifies_anyone(self):
        actor = SimpleNamespace(id=1, role=UserRole.ADMIN)
        assert permissions.can_modify_user(actor, 99)

    def test_is_salesperson(self):
        assert permissions.is_salesperson(SimpleNamespace(role="salesperson"))
        assert not permissions.is_salesperson(SimpleNamespace(role=UserRole.FINANCE))
