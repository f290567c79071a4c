"""
Authentication Endpoints Module

This module provides login, logout and current-session endpoints. Sessions are
identified by an opaque token that is returned in the body (for API clients)
and also set as an HTTP-only cookie (for the browser dashboard).
"""
from typing import Any
from fastapi import APIRouter, Depends, Response
from fastapi.security import OAuth2PasswordRequestForm

from app.api import deps
from app.api.responses import ok
from app.core.config import settings
from app.models.auth_models import AuthSession
from app.models.user import User
from app.schemas.user import UserRead
from app.services.sessions import SessionStore
from app.services.users import UserService

router = APIRouter()


@router.post("/login")
def login(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    users: UserService = Depends(deps.get_user_service),
    sessions: SessionStore = Depends(deps.get_session_store),
) -> Any:
    """
    Authenticate a user and open a session.

    Validates the credentials of an active user and returns a new session
    token. The token is also set as an HTTP-only cookie for browser clients.

    Returns:
        dict: success envelope with ``sessionId``, ``access_token``,
        ``token_type`` and the user profile

    Raises:
        Unauthorized: If the credentials are invalid or the account is inactive
    """
    user = users.authenticate(form_data.username, form_data.password)
    session = sessions.open(user, settings.SESSION_EXPIRE_MINUTES)

    # httponly keeps the token away from JavaScript, samesite="lax" blocks CSRF posts
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.token,
        httponly=True,
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        samesite="lax",
    )

    return ok(
        message="Login successful",
        sessionId=session.token,
        access_token=session.token,
        token_type="bearer",
        user=UserRead.model_validate(user),
    )


@router.post("/logout")
def logout(
    response: Response,
    session: AuthSession = Depends(deps.get_current_session),
    sessions: SessionStore = Depends(deps.get_session_store),
) -> Any:
    """
    Expire the current session and clear the session cookie.
    """
    sessions.expire(session.token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return ok(message="Logged out")


@router.get("/me")
def read_session_user(current_user: User = Depends(deps.get_current_user)) -> Any:
    return ok(user=UserRead.model_validate(current_user))
