"""
API Dependencies Module

This module provides FastAPI dependency functions for the entity store, the
ledger services, sessions, authentication and authorization.

Session tokens are accepted from three places so that both API clients and
the browser dashboard work:
1. ``Authorization: Bearer <token>`` header (API clients)
2. The HTTP-only session cookie (browser clients)
3. ``X-Session-Id`` header (dashboard fetch calls)
"""
from typing import Optional
from fastapi import Depends, Header, Request
from fastapi.security import OAuth2PasswordBearer

from app.core.clock import Clock, SystemClock
from app.core.config import settings
from app.core.exceptions import Forbidden, Unauthorized
from app.core.permissions import Permission, has_permission
from app.db.session import get_store
from app.db.store import EntityStore
from app.models.auth_models import AuthSession
from app.models.user import User
from app.services.categories import CategoryService
from app.services.clients import ClientService
from app.services.ledger import Ledger
from app.services.reports import Reports
from app.services.sessions import InMemorySessionStore, SessionStore
from app.services.users import UserService

# Configure OAuth2 scheme to use the login endpoint
# auto_error=False allows us to check the cookie and X-Session-Id as fallbacks
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login",
    auto_error=False,
)

_clock = SystemClock()
_session_store: Optional[SessionStore] = None


def get_clock() -> Clock:
    return _clock


def get_session_store() -> SessionStore:
    """Process-wide session store, created on first use. Override in tests."""
    global _session_store
    if _session_store is None:
        _session_store = InMemorySessionStore(_clock)
    return _session_store


def get_ledger(store: EntityStore = Depends(get_store), clock: Clock = Depends(get_clock)) -> Ledger:
    return Ledger(store, clock)


def get_reports(store: EntityStore = Depends(get_store)) -> Reports:
    return Reports(store)


def get_client_service(store: EntityStore = Depends(get_store), clock: Clock = Depends(get_clock)) -> ClientService:
    return ClientService(store, clock)


def get_category_service(store: EntityStore = Depends(get_store), clock: Clock = Depends(get_clock)) -> CategoryService:
    return CategoryService(store, clock)


def get_user_service(store: EntityStore = Depends(get_store), clock: Clock = Depends(get_clock)) -> UserService:
    return UserService(store, clock)


def get_session_token(
    request: Request,
    token: Optional[str] = Depends(reusable_oauth2),
    x_session_id: Optional[str] = Header(default=None),
) -> Optional[str]:
    """Bearer header first, then the session cookie, then X-Session-Id."""
    return token or request.cookies.get(settings.SESSION_COOKIE_NAME) or x_session_id


def get_current_session(
    token: Optional[str] = Depends(get_session_token),
    sessions: SessionStore = Depends(get_session_store),
) -> AuthSession:
    """
    Dependency that resolves the caller's live session.

    Raises:
        Unauthorized: If no token was sent, or it is unknown or expired
    """
    if not token:
        raise Unauthorized("Not authenticated")
    session = sessions.get(token)
    if session is None:
        raise Unauthorized("Session expired or invalid")
    return session


def get_current_user(
    session: AuthSession = Depends(get_current_session),
    users: UserService = Depends(get_user_service),
    sessions: SessionStore = Depends(get_session_store),
) -> User:
    """
    Dependency that retrieves the user behind the current session.

    A session whose user was deleted or deactivated since login is expired
    on the spot.

    Returns:
        User: The authenticated, active user

    Raises:
        Unauthorized: If the session's user no longer exists or is inactive
    """
    user = users.find(session.user_id)
    if user is None or not user.is_active:
        sessions.expire(session.token)
        raise Unauthorized("Session user is no longer active")
    return user


class PermissionChecker:
    """
    Dependency factory for checking role permissions.

    Usage: Depends(PermissionChecker(Permission.CREATE_CONTRACTS))
    """
    def __init__(self, permission: Permission):
        self.permission = permission

    def __call__(self, current_user: User = Depends(get_current_user)) -> User:
        if not has_permission(current_user.role, self.permission):
            raise Forbidden(f"Your role does not allow this action ({self.permission.value})")
        return current_user


def get_current_active_superuser(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Dependency that requires the current user to be an administrator.
    """
    if not current_user.is_privileged:
        raise Forbidden("The user doesn't have enough privileges")
    return current_user
