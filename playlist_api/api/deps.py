"""
FastAPI dependencies for stores, settings and the session.

Provides:
- get_app_settings: the Settings the running app was built with
- get_user_store / get_playlist_store: storage backends held on app.state
- get_search_client: video catalog client
- get_revoked_sessions: sessions ended by logout
- get_session_claims: decoded claims of a live session token, or None
- get_optional_session: session identity from the cookie (or Bearer token), or None
- get_current_user: the same, failing with 401 unauthorized when absent
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import jwt  # PyJWT
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from playlist_api.core.config import Settings
from playlist_api.core.errors import Unauthorized
from playlist_api.core.security import decode_session_token
from playlist_api.core.sessions import RevokedSessions
from playlist_api.schemas.users import SessionUser
from playlist_api.services.search import YouTubeClient
from playlist_api.store.base import PlaylistStore, UserStore

security_scheme = HTTPBearer(auto_error=False)


# PUBLIC_INTERFACE
def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


# PUBLIC_INTERFACE
def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


# PUBLIC_INTERFACE
def get_playlist_store(request: Request) -> PlaylistStore:
    return request.app.state.playlist_store


# PUBLIC_INTERFACE
def get_search_client(request: Request) -> YouTubeClient:
    return request.app.state.search_client


# PUBLIC_INTERFACE
def get_revoked_sessions(request: Request) -> RevokedSessions:
    return request.app.state.revoked_sessions


# PUBLIC_INTERFACE
def get_session_claims(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    settings: Settings = Depends(get_app_settings),
    revoked: RevokedSessions = Depends(get_revoked_sessions),
) -> Optional[Dict[str, Any]]:
    """
    Decode the session token, preferring the session cookie over an
    Authorization: Bearer header. Invalid, expired and logged-out tokens
    count as no session.
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token and credentials is not None and credentials.scheme.lower() == "bearer":
        token = credentials.credentials
    if not token:
        return None

    try:
        payload = decode_session_token(token, settings)
    except jwt.InvalidTokenError:
        return None
    if revoked.is_revoked(payload.get("jti")):
        return None
    return payload


# PUBLIC_INTERFACE
def get_optional_session(claims: Optional[Dict[str, Any]] = Depends(get_session_claims)) -> Optional[SessionUser]:
    """Session identity from the token claims, or None when logged out."""
    if not claims or not claims.get("username"):
        return None
    return SessionUser(
        username=str(claims["username"]),
        first_name=str(claims.get("firstName") or ""),
        image_url=str(claims.get("imageUrl") or ""),
    )


# PUBLIC_INTERFACE
def get_current_user(session: Optional[SessionUser] = Depends(get_optional_session)) -> SessionUser:
    """
    Require a logged-in session.

    Raises:
    - Unauthorized (401, "unauthorized") if there is no valid session
    """
    if session is None:
        raise Unauthorized()
    return session
