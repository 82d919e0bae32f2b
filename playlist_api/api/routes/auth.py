"""
Authentication routes: registration, login, logout and the current session.

Exposes:
- POST /register: Register a new user account
- POST /login: Authenticate, set the session cookie and return the profile
- POST /logout: End the session on the server and clear the cookie
- GET /me: Return the session profile, or null when logged out

Responses align with the browser client:
- Login returns { "ok": true, "user": { username, firstName, imageUrl } }
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response, status

from playlist_api.api.deps import (
    get_app_settings,
    get_optional_session,
    get_revoked_sessions,
    get_session_claims,
    get_user_store,
)
from playlist_api.core.config import Settings
from playlist_api.core.security import create_session_token
from playlist_api.core.sessions import RevokedSessions
from playlist_api.schemas.users import SessionUser, UserCreate, UserLogin
from playlist_api.store.base import UserStore

router = APIRouter(tags=["Auth"])


@router.post(
    "/register",
    summary="Register a new user",
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "User registered"},
        400: {"description": "missing_fields"},
        409: {"description": "username_exists"},
    },
)
def register(data: UserCreate, users: UserStore = Depends(get_user_store)) -> dict:
    """
    Register a new user.

    Parameters:
    - data: username, password, firstName, imageUrl (all required)

    Returns:
    - { "ok": true }
    """
    users.register(data)
    return {"ok": True}


@router.post(
    "/login",
    summary="User login",
    responses={
        200: {"description": "Session established"},
        400: {"description": "missing_fields"},
        401: {"description": "invalid_credentials"},
    },
)
def login(
    credentials: UserLogin,
    response: Response,
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """
    Authenticate a user and establish the session cookie.

    Returns:
    - { "ok": true, "user": { username, firstName, imageUrl } }
    """
    user = users.authenticate(credentials.username, credentials.password)
    session = SessionUser.from_record(user)
    token = create_session_token(session.to_json(), settings)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_TTL_MINUTES * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return {"ok": True, "user": session.to_json()}


@router.post("/logout", summary="Logout")
def logout(
    response: Response,
    claims: Optional[Dict[str, Any]] = Depends(get_session_claims),
    revoked: RevokedSessions = Depends(get_revoked_sessions),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """Revoke the current session token, if any, and clear the cookie. Always succeeds."""
    if claims:
        revoked.revoke(claims.get("jti"), claims.get("exp") or 0)
    response.delete_cookie(settings.SESSION_COOKIE_NAME, httponly=True, samesite="lax")
    return {"ok": True}


@router.get("/me", summary="Current session profile")
def me(session: Optional[SessionUser] = Depends(get_optional_session)) -> dict:
    """Return { "user": {...} } when logged in, { "user": null } otherwise."""
    return {"user": session.to_json() if session else None}
