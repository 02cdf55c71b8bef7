import logging
from functools import wraps
from typing import Optional

from flask import Request, g, request

from storefront.core.config import current_config
from storefront.core.exceptions import ForbiddenError, UnauthorizedError
from storefront.core.security import JWTError, decode_access_token
from storefront.db import get_session
from storefront.models import User

logger = logging.getLogger(__name__)


def _bearer_token(req: Request) -> Optional[str]:
    header = req.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def authenticate_token(req: Request) -> Optional[User]:
    """Resolve the bearer token of a request to a stored user, or None"""
    token = _bearer_token(req)
    if token is None:
        return None

    try:
        claims = decode_access_token(token, current_config().security)
        user_id = int(claims["sub"])
    except (JWTError, KeyError, ValueError) as e:
        logger.info(f"Rejected bearer token: {str(e)}")
        return None

    return get_session().get(User, user_id)


def require_admin(user: Optional[User]) -> bool:
    return user is not None and user.is_admin


def login_required(view):
    """Run the view only for an authenticated user, exposed as g.current_user"""
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = authenticate_token(request)
        if user is None:
            raise UnauthorizedError("Authentication token required")
        g.current_user = user
        return view(*args, **kwargs)
    return wrapper


def admin_required(view):
    """Missing tokens and non-admin users both get 403"""
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = authenticate_token(request)
        if not require_admin(user):
            raise ForbiddenError("Admin access required")
        g.current_user = user
        return view(*args, **kwargs)
    return wrapper
