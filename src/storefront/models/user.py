from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from storefront.db import Base, BigIntId
from storefront.utils.formatting import FormattingUtils


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, Enum):
    """User role enumeration"""
    CUSTOMER = "customer"
    ADMIN = "admin"


class User(Base):
    """
    Represents a registered customer or back-office admin.

    password_hash is nullable so the table can later support OAuth/SSO
    sign-ins where no local password exists.
    """

    __tablename__ = "users"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    email = Column(Text, nullable=False, unique=True)
    phone = Column(Text, nullable=True)
    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    locale = Column(Text, nullable=False, default="en")
    password_hash = Column(Text, nullable=True)
    role = Column(Text, nullable=False, default=UserRole.CUSTOMER.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    addresses = relationship(
        "Address",
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="Address.id",
    )
    orders = relationship("Order", back_populates="user")
    cart = relationship("Cart", back_populates="user", uselist=False)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "phone": self.phone,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "locale": self.locale,
        }

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"


class Address(Base):
    """
    A postal address belonging to exactly one user.

    At most one address per user carries is_default; UsersService keeps
    that true by clearing and setting the flag inside one transaction.
    """

    __tablename__ = "addresses"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    user_id = Column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    company = Column(Text, nullable=True)
    address_line1 = Column(Text, nullable=False)
    address_line2 = Column(Text, nullable=True)
    city = Column(Text, nullable=False)
    state = Column(Text, nullable=True)
    postal_code = Column(Text, nullable=True)
    country_code = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    user = relationship("User", back_populates="addresses")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "company": self.company,
            "addressLine1": self.address_line1,
            "addressLine2": self.address_line2,
            "city": self.city,
            "state": self.state,
            "postalCode": self.postal_code,
            "countryCode": self.country_code,
            "phone": self.phone,
            "isDefault": self.is_default,
            "createdAt": FormattingUtils.isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Address id={self.id} city={self.city!r} default={self.is_default}>"
