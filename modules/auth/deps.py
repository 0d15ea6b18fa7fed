"""
Auth Module - Dependencies
===========================
FastAPI dependencies for user authentication, authorization and the
request-scoped context (browser session + optional user).
These are injected into route handlers via Depends().
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request, Response, Depends
from sqlalchemy.orm import Session

from config.database import get_db
from common.exceptions import AuthenticationError, AuthorizationError
from common.security import (
    decode_token, new_session_id, get_session_cookie_kwargs,
    AUTH_COOKIE, SESSION_COOKIE,
)
from modules.user.models import User


@dataclass(frozen=True)
class RequestContext:
    """Who is calling: the browser session and, when logged in, the user."""
    session_id: str
    user: Optional[User] = None

    @property
    def user_id(self) -> Optional[int]:
        return self.user.id if self.user else None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def get_current_active_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """
    Identify the current user from the auth_token cookie.
    Returns User object or None.
    """
    token = request.cookies.get(AUTH_COOKIE)
    if not token:
        return None

    payload = decode_token(token)
    if not payload:
        return None

    user_id = payload.get("sub")
    if not user_id or not str(user_id).isdigit():
        return None

    return db.query(User).filter(User.id == int(user_id), User.is_active == True).first()  # noqa: E712


def get_request_context(
    request: Request,
    response: Response,
    user: Optional[User] = Depends(get_current_active_user),
) -> RequestContext:
    """Read the session cookie, issuing a new session id on first contact."""
    session_id = request.cookies.get(SESSION_COOKIE)
    if not session_id:
        session_id = new_session_id()
        response.set_cookie(SESSION_COOKIE, session_id, **get_session_cookie_kwargs())
    return RequestContext(session_id=session_id, user=user)


def require_login(user: Optional[User] = Depends(get_current_active_user)) -> User:
    """Require an authenticated active user. Raises 401 if not logged in."""
    if not user:
        raise AuthenticationError()
    return user


def require_admin(user: User = Depends(require_login)) -> User:
    """Only allow admin users. Raises 403 otherwise."""
    if not user.is_admin:
        raise AuthorizationError()
    return user
