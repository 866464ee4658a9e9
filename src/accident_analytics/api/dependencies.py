"""
API Dependencies

Shared service lookups and error translation for the routers. Services live
on ``app.state`` and are created in the application lifespan.
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException, Request

from accident_analytics.core.assistant import ForensicAssistant
from accident_analytics.core.case_store import CaseStore
from accident_analytics.core.errors import (
    AccidentAnalyticsError,
    AnalysisError,
    AuthenticationError,
    IntakeError,
    IntakeNotFound,
    InvalidTransition,
    ValidationAborted,
)
from accident_analytics.core.intake_sessions import IntakeSessionRegistry
from accident_analytics.core.sessions import SessionStore, UserDirectory
from accident_analytics.infrastructure.analysis import get_analysis_provider
from accident_analytics.models.session import UserSession

logger = logging.getLogger(__name__)

_STATUS_CODES = (
    (IntakeNotFound, 404),
    (IntakeError, 400),
    (InvalidTransition, 409),
    (ValidationAborted, 422),
    (AuthenticationError, 401),
    (AnalysisError, 502),
)


def to_http_error(error: AccidentAnalyticsError) -> HTTPException:
    """Translate a domain error into an HTTPException carrying only the safe message"""
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.safe_message)
    return HTTPException(status_code=500, detail=error.safe_message)


def get_case_store(request: Request) -> CaseStore:
    return request.app.state.case_store


def get_intake_registry(request: Request) -> IntakeSessionRegistry:
    return request.app.state.intake_registry


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_user_directory(request: Request) -> UserDirectory:
    return request.app.state.user_directory


def get_assistant() -> ForensicAssistant:
    """Dependency for the conversational assistant"""
    try:
        return ForensicAssistant(get_analysis_provider())
    except ValueError as e:
        logger.error(f"Analysis provider unavailable: {e}")
        raise HTTPException(status_code=503, detail="Analysis provider is not configured")


def bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def require_user(request: Request, authorization: Optional[str] = Header(None)) -> UserSession:
    """Resolve the Authorization bearer token to a session identity"""
    token = bearer_token(authorization)
    user = get_session_store(request).validate(token) if token else None
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user
