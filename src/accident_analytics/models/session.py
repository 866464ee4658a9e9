"""Session identity models"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    INVESTIGATOR = "Investigator"
    ADJUSTER = "Adjuster"
    ATTORNEY = "Attorney"


class UserSession(BaseModel):
    """Identity carried by a session token"""

    id: str
    email: str
    name: str
    role: UserRole = UserRole.INVESTIGATOR
    agency_id: str = Field(default="AGENCY-GENERIC")


class IssuedSession(BaseModel):
    token: str
    user: UserSession
    expires_at: datetime
