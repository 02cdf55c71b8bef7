from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import selectinload

from storefront.models import Address, Order, User
from storefront.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    def get_by_email(self, email: str) -> Optional[User]:
        return self.first(select(User).where(func.lower(User.email) == email.lower()))

    def get_with_addresses(self, user_id: int) -> Optional[User]:
        return self.first(
            select(User).options(selectinload(User.addresses)).where(User.id == user_id)
        )

    def lock(self, user_id: int) -> Optional[User]:
        """
        Load the user row with SELECT ... FOR UPDATE.

        Serializes writes that must keep a per-user invariant (default
        address) until the surrounding transaction ends.
        """
        return self.first(select(User).where(User.id == user_id).with_for_update())


class AddressRepository(BaseRepository[Address]):
    model = Address

    def list_for_user(self, user_id: int) -> List[Address]:
        return self.scalars(
            select(Address)
            .where(Address.user_id == user_id)
            .order_by(Address.is_default.desc(), Address.created_at.desc(), Address.id.desc())
        )

    def get_owned(self, user_id: int, address_id: int) -> Optional[Address]:
        return self.first(
            select(Address).where(Address.id == address_id, Address.user_id == user_id)
        )

    def count_for_user(self, user_id: int) -> int:
        return self.count(select(Address.id).where(Address.user_id == user_id))

    def clear_default(self, user_id: int, keep_id: Optional[int] = None) -> None:
        stmt = update(Address).where(Address.user_id == user_id, Address.is_default.is_(True))
        if keep_id is not None:
            stmt = stmt.where(Address.id != keep_id)
        self.session.execute(stmt.values(is_default=False).execution_options(synchronize_session="fetch"))

    def latest_for_user(self, user_id: int, exclude_id: Optional[int] = None) -> Optional[Address]:
        stmt = select(Address).where(Address.user_id == user_id)
        if exclude_id is not None:
            stmt = stmt.where(Address.id != exclude_id)
        return self.first(stmt.order_by(Address.created_at.desc(), Address.id.desc()))


class OrderRepository(BaseRepository[Order]):
    model = Order

    def list_for_user(self, user_id: int) -> List[Order]:
        """Every order of the user with its items, newest first"""
        return self.scalars(
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
