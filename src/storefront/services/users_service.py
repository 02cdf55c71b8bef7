import logging
from collections import Counter
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from storefront.core.config import SecurityConfig
from storefront.core.exceptions import (
    InternalServerError, NotFoundError, UnauthorizedError, ValidationError
)
from storefront.core.security import hash_password, verify_password
from storefront.db import transaction
from storefront.models import Address, Order, OrderStatus, PaymentStatus
from storefront.repositories import AddressRepository, OrderRepository, UserRepository
from storefront.utils.formatting import FormattingUtils
from storefront.utils.validators import ValidationUtils

logger = logging.getLogger(__name__)

RECENT_ORDERS_LIMIT = 5
PROFILE_FIELDS = ("first_name", "last_name", "locale")
ADDRESS_FIELDS = (
    "first_name", "last_name", "company", "address_line1", "address_line2",
    "city", "state", "postal_code", "country_code", "phone",
)


def compute_order_stats(orders: Iterable[Order]) -> Dict[str, Any]:
    """
    Reduce a user's orders to dashboard counters.

    totalSpent sums orders that are completed or paid; ordersByStatus
    counts every status, so its values always add up to totalOrders.
    """
    orders = list(orders)
    by_status = Counter(o.status for o in orders)
    total_spent = sum(
        (Decimal(o.total) for o in orders
         if o.status == OrderStatus.COMPLETED or o.payment_status == PaymentStatus.PAID),
        Decimal("0"),
    )
    return {
        "totalOrders": len(orders),
        "pendingOrders": by_status.get(OrderStatus.PENDING, 0),
        "completedOrders": by_status.get(OrderStatus.COMPLETED, 0),
        "totalSpent": FormattingUtils.money_to_json(total_spent),
        "ordersByStatus": dict(by_status),
    }


def _require_password(value: Any, label: str) -> str:
    if not isinstance(value, str) or value.strip() == "":
        raise ValidationError(f"{label} password is required and must be a non-empty string")
    return value.strip()


def _exceeds_bcrypt_limit(value: str) -> bool:
    return len(value.encode("utf-8")) > ValidationUtils.MAX_PASSWORD_LENGTH


class UsersService:
    """
    Account management: profile, password, addresses, dashboard

    Responsibilities:
    - Scope every address operation to the requesting user
    - Keep at most one default address per user
    - Verify the current password before storing a new hash
    """

    def __init__(self, session: Session, security: SecurityConfig):
        self.session = session
        self.security = security
        self.users = UserRepository(session)
        self.addresses = AddressRepository(session)
        self.orders = OrderRepository(session)

    def get_profile(self, user_id: int) -> Dict[str, Any]:
        user = self.users.get_with_addresses(user_id)
        if user is None:
            raise NotFoundError("User")

        profile = user.to_dict()
        profile["addresses"] = [a.to_dict() for a in user.addresses]
        return profile

    def update_profile(self, user_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        """Only names and locale are editable here; email and phone are not"""
        with transaction(self.session):
            user = self.users.get(user_id)
            if user is None:
                raise NotFoundError("User")
            for name in PROFILE_FIELDS:
                if name in data:
                    setattr(user, name, data[name])

        logger.info(f"Updated profile of user {user_id}")
        return user.to_dict()

    def change_password(self, user_id: int, old_password: Any, new_password: Any) -> Dict[str, bool]:
        """
        Replace the user's password hash after verifying the old password

        Failure points, in order:
        - missing/blank passwords, or a new one over 72 bytes -> validation-error,
          nothing is written
        - unknown user or no stored hash -> unauthorized
        - stored hash not a usable string -> internal-error
        - old password mismatch -> unauthorized; bcrypt failure -> internal-error
        - hashing or persisting the new password fails -> internal-error
        """
        old_password = _require_password(old_password, "Old")
        new_password = _require_password(new_password, "New")
        if _exceeds_bcrypt_limit(new_password):
            raise ValidationError(f"New password cannot exceed {ValidationUtils.MAX_PASSWORD_LENGTH} bytes")

        user = self.users.get(user_id)
        if user is None or not user.password_hash:
            raise UnauthorizedError("User not found or password not set", title="Invalid credentials")

        if not isinstance(user.password_hash, str) or user.password_hash.strip() == "":
            logger.error(f"User {user_id} has an unusable password hash")
            raise InternalServerError("User password hash is invalid")

        # No stored hash can match an input bcrypt refuses to hash
        if _exceeds_bcrypt_limit(old_password):
            is_valid = False
        else:
            try:
                is_valid = verify_password(old_password, user.password_hash)
            except (ValueError, TypeError) as e:
                logger.error(f"Password verification failed for user {user_id}: {str(e)}")
                raise InternalServerError("Failed to verify password")

        if not is_valid:
            logger.warning(f"Rejected password change for user {user_id}: old password mismatch")
            raise UnauthorizedError("The old password is incorrect", title="Invalid password")

        try:
            new_hash = hash_password(new_password, self.security.password_hash_rounds)
        except (ValueError, TypeError) as e:
            logger.error(f"Password hashing failed for user {user_id}: {str(e)}")
            raise InternalServerError("Failed to hash new password")

        with transaction(self.session):
            user.password_hash = new_hash

        logger.info(f"Password changed for user {user_id}")
        return {"success": True}

    def get_addresses(self, user_id: int) -> Dict[str, List[Dict[str, Any]]]:
        return {"data": [a.to_dict() for a in self.addresses.list_for_user(user_id)]}

    def add_address(self, user_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        """The first address of a user always becomes the default"""
        with transaction(self.session):
            self._lock_user(user_id)
            is_first = self.addresses.count_for_user(user_id) == 0
            address = Address(user_id=user_id, is_default=False, **self._address_fields(data))
            self.addresses.add(address)
            self.session.flush()

            if is_first or data.get("is_default"):
                self._make_default(user_id, address)

        logger.info(f"Added address {address.id} for user {user_id}")
        return address.to_dict()

    def update_address(self, user_id: int, address_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        with transaction(self.session):
            self._lock_user(user_id)
            address = self._get_owned_address(user_id, address_id)
            for name, value in self._address_fields(data).items():
                setattr(address, name, value)

            if data.get("is_default") is True:
                self._make_default(user_id, address)
            elif data.get("is_default") is False:
                address.is_default = False

        logger.info(f"Updated address {address_id} for user {user_id}")
        return address.to_dict()

    def delete_address(self, user_id: int, address_id: int) -> None:
        """Deleting the default address promotes the newest remaining one"""
        with transaction(self.session):
            self._lock_user(user_id)
            address = self._get_owned_address(user_id, address_id)
            was_default = address.is_default
            self.addresses.delete(address)
            self.session.flush()

            if was_default:
                successor = self.addresses.latest_for_user(user_id)
                if successor is not None:
                    successor.is_default = True

        logger.info(f"Deleted address {address_id} for user {user_id}")
        return None

    def set_default_address(self, user_id: int, address_id: int) -> Dict[str, Any]:
        """
        Make one address the user's only default

        Clear and set run in a single transaction under a lock on the user
        row, so concurrent calls cannot leave zero or two defaults.
        """
        with transaction(self.session):
            self._lock_user(user_id)
            address = self._get_owned_address(user_id, address_id)
            self._make_default(user_id, address)

        logger.info(f"Address {address_id} is now the default for user {user_id}")
        return address.to_dict()

    def get_dashboard(self, user_id: int) -> Dict[str, Any]:
        orders = self.orders.list_for_user(user_id)
        stats = compute_order_stats(orders)
        stats["addressesCount"] = self.addresses.count_for_user(user_id)

        return {
            "stats": stats,
            "recentOrders": [o.to_summary() for o in orders[:RECENT_ORDERS_LIMIT]],
        }

    def _lock_user(self, user_id: int) -> None:
        if self.users.lock(user_id) is None:
            raise NotFoundError("User")

    def _get_owned_address(self, user_id: int, address_id: int) -> Address:
        address = self.addresses.get_owned(user_id, address_id)
        if address is None:
            raise NotFoundError("Address")
        return address

    def _make_default(self, user_id: int, address: Address) -> None:
        self.addresses.clear_default(user_id, keep_id=address.id)
        address.is_default = True

    @staticmethod
    def _address_fields(data: Dict[str, Any]) -> Dict[str, Optional[Any]]:
        return {name: data[name] for name in ADDRESS_FIELDS if name in data}
