"""Sign-in state for the current request.

Only the user id is kept in the signed Flask session cookie; the user record is
loaded once per request into ``flask.g.current_user``.
"""

import functools
import logging
from typing import Optional

from flask import g, session
from werkzeug.security import check_password_hash

from services.errors import AuthenticationError, PermissionDenied
from services.models import User
from services.user_service import get_user, get_user_by_email

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


def load_current_user() -> None:
    """before_request hook."""
    user_id = session.get(SESSION_USER_KEY)
    g.current_user = get_user(user_id) if user_id else None
    if user_id and g.current_user is None:
        # account vanished since sign-in
        session.pop(SESSION_USER_KEY, None)


def current_user() -> Optional[User]:
    return g.get("current_user")


def sign_in(email: str, password: Optional[str] = None, role: Optional[str] = None) -> User:
    user = get_user_by_email(email)
    if user is None:
        raise AuthenticationError("User not found")
    if not isinstance(password, str) or not user.password_hash \
            or not check_password_hash(user.password_hash, password):
        raise AuthenticationError("Invalid email or password")
    if role and user.role != role:
        raise AuthenticationError(f"This account is not a {role} account")

    session.clear()
    session[SESSION_USER_KEY] = user.id
    g.current_user = user
    logger.info("User %s signed in as %s", user.id, user.role)
    return user


def sign_out() -> None:
    session.clear()
    g.current_user = None


def login_required(role: Optional[str] = None):
    """Route decorator: 401 when signed out, 403 when the role does not match."""

    def decorator(view):
        @functools.wraps(view)
        def wrapped(*args, **kwargs):
            user = current_user()
            if user is None:
                raise AuthenticationError("Please sign in first.")
            if role and user.role != role:
                raise PermissionDenied(f"This page is only available to {role}s.")
            return view(*args, **kwargs)

        return wrapped

    return decorator
