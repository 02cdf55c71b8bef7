import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.core.config import SecurityConfig
from storefront.core.exceptions import UnauthorizedError
from storefront.core.security import hash_password, issue_access_token, verify_password
from storefront.db import transaction
from storefront.models import User, UserRole
from storefront.repositories import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Registration and credential login, both answering with a bearer token"""

    def __init__(self, session: Session, security: SecurityConfig):
        self.session = session
        self.security = security
        self.users = UserRepository(session)

    def register(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a customer account

        Expects a payload validated by RegisterSchema (email already
        normalized). A duplicate email surfaces as a conflict from the
        unique constraint.
        """
        user = User(
            email=data["email"],
            phone=data.get("phone"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            locale=data.get("locale") or "en",
            password_hash=hash_password(data["password"], self.security.password_hash_rounds),
            role=UserRole.CUSTOMER.value,
        )
        with transaction(self.session, conflict_detail="An account with this email already exists"):
            self.users.add(user)
            self.session.flush()

        logger.info(f"Registered user {user.id}")
        return self._session_payload(user)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        user = self.users.get_by_email(email)
        if user is None or not user.password_hash:
            logger.warning("Login rejected: unknown email")
            raise UnauthorizedError("Email or password is incorrect", title="Invalid credentials")

        try:
            is_valid = verify_password(password, user.password_hash)
        except ValueError as e:
            logger.error(f"Stored password hash of user {user.id} is unusable: {str(e)}")
            is_valid = False

        if not is_valid:
            logger.warning(f"Login rejected for user {user.id}: wrong password")
            raise UnauthorizedError("Email or password is incorrect", title="Invalid credentials")

        logger.info(f"User {user.id} logged in")
        return self._session_payload(user)

    def _session_payload(self, user: User) -> Dict[str, Any]:
        token = issue_access_token(user.id, user.role, self.security)
        return {"user": user.to_dict(), "token": token}
