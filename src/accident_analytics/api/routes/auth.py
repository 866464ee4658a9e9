"""
Auth API Routes

Placeholder session boundary: sign-up, login, logout and session lookup with
opaque bearer tokens.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header

from accident_analytics.api.dependencies import (
    bearer_token,
    get_session_store,
    get_user_directory,
    require_user,
    to_http_error,
)
from accident_analytics.core.errors import AuthenticationError
from accident_analytics.core.sessions import SessionStore, UserDirectory
from accident_analytics.models import LoginRequest, SessionResponse, SignupRequest, UserSession

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post(
    "/signup",
    response_model=SessionResponse,
    status_code=201,
    summary="Sign Up",
    responses={
        201: {"description": "User registered and signed in"},
        401: {"description": "User already exists with this email"}
    }
)
async def signup(
    request: SignupRequest,
    directory: UserDirectory = Depends(get_user_directory),
    sessions: SessionStore = Depends(get_session_store)
) -> SessionResponse:
    try:
        user = directory.signup(request.email, request.password, request.name, request.agency_id)
    except AuthenticationError as e:
        raise to_http_error(e)
    issued = sessions.issue(user)
    return SessionResponse(**issued.model_dump())


@router.post(
    "/login",
    response_model=SessionResponse,
    summary="Log In",
    responses={
        200: {"description": "Signed in"},
        401: {"description": "Invalid email or password"}
    }
)
async def login(
    request: LoginRequest,
    directory: UserDirectory = Depends(get_user_directory),
    sessions: SessionStore = Depends(get_session_store)
) -> SessionResponse:
    try:
        user = directory.login(request.email, request.password)
    except AuthenticationError as e:
        logger.warning(f"Failed login for {request.email}")
        raise to_http_error(e)
    issued = sessions.issue(user)
    return SessionResponse(**issued.model_dump())


@router.post(
    "/logout",
    status_code=204,
    summary="Log Out",
    responses={
        204: {"description": "Session revoked (idempotent)"}
    }
)
async def logout(
    authorization: Optional[str] = Header(None),
    sessions: SessionStore = Depends(get_session_store)
):
    token = bearer_token(authorization)
    if token:
        sessions.revoke(token)
    return None


@router.get(
    "/session",
    response_model=UserSession,
    summary="Current Session",
    responses={
        200: {"description": "Session identity returned"},
        401: {"description": "Missing, unknown or expired token"}
    }
)
async def current_session(user: UserSession = Depends(require_user)) -> UserSession:
    return user
