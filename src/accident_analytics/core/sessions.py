"""
Sessions and User Directory

Placeholder authentication boundary: a user directory keyed by email and an
opaque-token session store. Not a production identity system.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import bcrypt
from pydantic import BaseModel

from accident_analytics.config.settings import settings
from accident_analytics.core.errors import AuthenticationError
from accident_analytics.models.session import IssuedSession, UserRole, UserSession

logger = logging.getLogger(__name__)


def generate_session_token() -> str:
    """Opaque bearer token: ``aa_sess_`` prefix + 64 hex characters"""
    return f"aa_sess_{secrets.token_hex(32)}"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, stored: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), stored.encode("utf-8"))
    except (ValueError, TypeError):
        # Malformed stored hash
        return False


class SessionStore(ABC):
    """Session boundary: issue, validate and revoke opaque tokens"""

    @abstractmethod
    def issue(self, user: UserSession) -> IssuedSession:
        pass

    @abstractmethod
    def validate(self, token: str) -> Optional[UserSession]:
        """Return the session identity, or None when unknown or expired"""
        pass

    @abstractmethod
    def revoke(self, token: str) -> None:
        pass


class InMemorySessionStore(SessionStore):
    def __init__(self, ttl_seconds: Optional[int] = None):
        self.ttl = timedelta(seconds=settings.session_ttl_seconds if ttl_seconds is None else ttl_seconds)
        self._sessions: Dict[str, IssuedSession] = {}

    def issue(self, user: UserSession) -> IssuedSession:
        issued = IssuedSession(
            token=generate_session_token(),
            user=user,
            expires_at=datetime.now(timezone.utc) + self.ttl,
        )
        self._sessions[issued.token] = issued
        logger.info(f"Issued session for {user.id}")
        return issued

    def validate(self, token: str) -> Optional[UserSession]:
        issued = self._sessions.get(token)
        if issued is None:
            return None
        if issued.expires_at <= datetime.now(timezone.utc):
            del self._sessions[token]
            return None
        return issued.user

    def revoke(self, token: str) -> None:
        if self._sessions.pop(token, None) is not None:
            logger.info("Session revoked")


class _UserRecord(BaseModel):
    user: UserSession
    password_hash: str


class UserDirectory:
    """Users keyed by email"""

    def __init__(self):
        self._users: Dict[str, _UserRecord] = {}

    def signup(self, email: str, password: str, name: str, agency_id: Optional[str] = None) -> UserSession:
        if email in self._users:
            raise AuthenticationError(f"Duplicate sign-up for {email}", safe_message="User already exists with this email.")

        user = UserSession(
            id=f"usr-{secrets.token_hex(5)[:9]}",
            email=email,
            name=name,
            role=UserRole.INVESTIGATOR,
            agency_id=agency_id or "AGENCY-GENERIC",
        )
        self._users[email] = _UserRecord(user=user, password_hash=hash_password(password))
        logger.info(f"Registered user {user.id}")
        return user

    def login(self, email: str, password: str) -> UserSession:
        record = self._users.get(email)
        if record is None or not verify_password(password, record.password_hash):
            raise AuthenticationError("Login rejected", safe_message="Invalid email or password.")
        return record.user
