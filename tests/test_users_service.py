from decimal import Decimal

import pytest

from storefront.core.config import SecurityConfig
from storefront.core.exceptions import InternalServerError, NotFoundError, UnauthorizedError, ValidationError
from storefront.core.security import verify_password
from storefront.models import Order, OrderStatus, PaymentStatus
from storefront.services import UsersService
from storefront.services.users_service import compute_order_stats

from conftest import PASSWORD

ADDRESS = {"address_line1": "1 Main St", "city": "Yerevan", "country_code": "AM"}


@pytest.fixture
def service(session):
    return UsersService(session, SecurityConfig(jwt_secret_key="test-secret", password_hash_rounds=4))


def _defaults(service, user_id):
    return [a["id"] for a in service.get_addresses(user_id)["data"] if a["isDefault"]]


class TestChangePassword:
    @pytest.mark.parametrize("old,new", [
        (None, "new-password-1"),
        ("", "new-password-1"),
        ("   ", "new-password-1"),
        (PASSWORD, None),
        (PASSWORD, ""),
        (12345678, "new-password-1"),
    ])
    def test_blank_or_non_string_passwords_are_rejected(self, service, session, user, old, new):
        original_hash = user.password_hash

        with pytest.raises(ValidationError):
            service.change_password(user.id, old, new)

        session.refresh(user)
        assert user.password_hash == original_hash

    def test_wrong_old_password_is_unauthorized(self, service, session, user):
        original_hash = user.password_hash

        with pytest.raises(UnauthorizedError) as exc:
            service.change_password(user.id, "not-my-password", "new-password-1")

        assert exc.value.title == "Invalid password"
        session.refresh(user)
        assert user.password_hash == original_hash

    def test_user_without_password_is_unauthorized(self, service, session, user):
        user.password_hash = None
        session.commit()

        with pytest.raises(UnauthorizedError) as exc:
            service.change_password(user.id, PASSWORD, "new-password-1")

        assert exc.value.title == "Invalid credentials"

    def test_unknown_user_is_unauthorized(self, service):
        with pytest.raises(UnauthorizedError):
            service.change_password(9999, PASSWORD, "new-password-1")

    def test_corrupt_hash_is_an_internal_error(self, service, session, user):
        user.password_hash = "not-a-bcrypt-hash"
        session.commit()

        with pytest.raises(InternalServerError):
            service.change_password(user.id, PASSWORD, "new-password-1")

    def test_overlong_wrong_old_password_is_unauthorized(self, service, session, user):
        original_hash = user.password_hash

        with pytest.raises(UnauthorizedError) as exc:
            service.change_password(user.id, "x" * 100, "new-password-1")

        assert exc.value.title == "Invalid password"
        session.refresh(user)
        assert user.password_hash == original_hash

    def test_overlong_new_password_is_a_validation_error(self, service, session, user):
        original_hash = user.password_hash

        with pytest.raises(ValidationError):
            service.change_password(user.id, PASSWORD, "y" * 73)

        session.refresh(user)
        assert user.password_hash == original_hash

    def test_hashing_failure_is_an_internal_error(self, service, session, user, monkeypatch):
        original_hash = user.password_hash

        def broken_hash(password, rounds=12):
            raise ValueError("hashing backend unavailable")

        monkeypatch.setattr("storefront.services.users_service.hash_password", broken_hash)

        with pytest.raises(InternalServerError) as exc:
            service.change_password(user.id, PASSWORD, "new-password-1")

        assert exc.value.detail == "Failed to hash new password"
        session.refresh(user)
        assert user.password_hash == original_hash

    def test_success_stores_a_new_hash(self, service, session, user):
        result = service.change_password(user.id, PASSWORD, "new-password-1")

        assert result == {"success": True}
        session.refresh(user)
        assert verify_password("new-password-1", user.password_hash)
        assert not verify_password(PASSWORD, user.password_hash)


class TestAddresses:
    def test_first_address_becomes_default(self, service, user):
        first = service.add_address(user.id, dict(ADDRESS))
        second = service.add_address(user.id, dict(ADDRESS, city="Gyumri"))

        assert first["isDefault"] is True
        assert second["isDefault"] is False
        assert _defaults(service, user.id) == [first["id"]]

    def test_set_default_moves_the_flag(self, service, user):
        first = service.add_address(user.id, dict(ADDRESS))
        second = service.add_address(user.id, dict(ADDRESS, city="Gyumri"))

        result = service.set_default_address(user.id, second["id"])

        assert result["isDefault"] is True
        assert _defaults(service, user.id) == [second["id"]]
        assert first["id"] not in _defaults(service, user.id)

    def test_set_default_twice_keeps_a_single_default(self, service, user):
        service.add_address(user.id, dict(ADDRESS))
        second = service.add_address(user.id, dict(ADDRESS, city="Gyumri"))

        service.set_default_address(user.id, second["id"])
        service.set_default_address(user.id, second["id"])

        assert _defaults(service, user.id) == [second["id"]]

    def test_add_with_is_default_takes_over(self, service, user):
        service.add_address(user.id, dict(ADDRESS))
        second = service.add_address(user.id, dict(ADDRESS, city="Gyumri", is_default=True))

        assert _defaults(service, user.id) == [second["id"]]

    def test_update_with_is_default_is_exclusive(self, service, user):
        service.add_address(user.id, dict(ADDRESS))
        second = service.add_address(user.id, dict(ADDRESS, city="Gyumri"))

        updated = service.update_address(user.id, second["id"], {"city": "Vanadzor", "is_default": True})

        assert updated["city"] == "Vanadzor"
        assert _defaults(service, user.id) == [second["id"]]

    def test_addresses_of_other_users_are_not_found(self, service, user, other_user):
        foreign = service.add_address(other_user.id, dict(ADDRESS))

        with pytest.raises(NotFoundError):
            service.set_default_address(user.id, foreign["id"])
        with pytest.raises(NotFoundError):
            service.update_address(user.id, foreign["id"], {"city": "Nowhere"})
        with pytest.raises(NotFoundError):
            service.delete_address(user.id, foreign["id"])

        assert _defaults(service, other_user.id) == [foreign["id"]]

    def test_delete_missing_address_is_not_found(self, service, user):
        with pytest.raises(NotFoundError) as exc:
            service.delete_address(user.id, 424242)

        assert exc.value.title == "Address not found"

    def test_deleting_the_default_promotes_the_newest(self, service, user):
        first = service.add_address(user.id, dict(ADDRESS))
        service.add_address(user.id, dict(ADDRESS, city="Gyumri"))
        newest = service.add_address(user.id, dict(ADDRESS, city="Dilijan"))

        service.delete_address(user.id, first["id"])

        remaining = service.get_addresses(user.id)["data"]
        assert len(remaining) == 2
        assert _defaults(service, user.id) == [newest["id"]]


class TestDashboard:
    def _order(self, session, user, number, total, status, payment_status):
        session.add(Order(
            number=number,
            user_id=user.id,
            status=status,
            payment_status=payment_status,
            total=Decimal(total),
        ))

    def test_stats_and_recent_orders(self, service, session, user):
        self._order(session, user, "1001", "100.00", OrderStatus.COMPLETED, PaymentStatus.PAID)
        self._order(session, user, "1002", "50.00", OrderStatus.PENDING, PaymentStatus.PAID)
        self._order(session, user, "1003", "30.00", OrderStatus.CANCELLED, PaymentStatus.UNPAID)
        session.commit()
        service.add_address(user.id, dict(ADDRESS))

        dashboard = service.get_dashboard(user.id)

        stats = dashboard["stats"]
        assert stats["totalOrders"] == 3
        assert stats["pendingOrders"] == 1
        assert stats["completedOrders"] == 1
        assert stats["totalSpent"] == 150.0
        assert stats["ordersByStatus"] == {"completed": 1, "pending": 1, "cancelled": 1}
        assert stats["addressesCount"] == 1
        assert len(dashboard["recentOrders"]) == 3

    def test_recent_orders_capped_at_five(self, service, session, user):
        for n in range(7):
            self._order(session, user, f"20{n}", "10.00", OrderStatus.PENDING, PaymentStatus.PENDING)
        session.commit()

        dashboard = service.get_dashboard(user.id)

        assert dashboard["stats"]["totalOrders"] == 7
        assert len(dashboard["recentOrders"]) == 5

    def test_empty_dashboard(self, service, user):
        dashboard = service.get_dashboard(user.id)

        assert dashboard["stats"]["totalOrders"] == 0
        assert dashboard["stats"]["totalSpent"] == 0.0
        assert dashboard["recentOrders"] == []


def test_order_stats_counts_add_up():
    orders = [
        Order(status=status, payment_status=PaymentStatus.PENDING, total=Decimal("1.00"))
        for status in ("pending", "processing", "processing", "completed")
    ]

    stats = compute_order_stats(orders)

    assert sum(stats["ordersByStatus"].values()) == stats["totalOrders"] == 4
    assert stats["totalSpent"] == 1.0
