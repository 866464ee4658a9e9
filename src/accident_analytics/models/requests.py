"""
API Request and Response Models

Pydantic models for API input/output validation.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .cases import CaseFile, CaseStatus, Parties
from .evidence import EvidenceClassification, EvidenceItem, ValidationCheck
from .session import UserSession


class EvidenceUploadResponse(BaseModel):
    """Response after a file is queued"""

    evidence_id: str = Field(..., description="Unique evidence identifier")
    filename: str = Field(..., description="Original filename")
    mime_type: str = Field(..., description="MIME type")
    size: int = Field(..., description="File size in bytes")
    digest: str = Field(..., description="SHA-256 content digest")
    classification: EvidenceClassification = Field(..., description="Evidence classification")
    added_at: datetime = Field(..., description="Queue timestamp")
    message: str = Field(default="Evidence queued successfully")

    @classmethod
    def from_item(cls, item: EvidenceItem) -> "EvidenceUploadResponse":
        return cls(
            evidence_id=item.evidence_id,
            filename=item.payload.filename,
            mime_type=item.payload.mime_type,
            size=item.payload.size,
            digest=item.payload.digest,
            classification=item.classification,
            added_at=item.added_at,
        )


class EvidenceListResponse(BaseModel):
    evidence: List[EvidenceItem] = Field(default_factory=list)
    total: int = Field(..., ge=0)


class StartAnalysisRequest(BaseModel):
    jurisdiction: str = Field(..., min_length=1, description="Governing jurisdiction, e.g. 'California, USA'")
    physics_method: Optional[str] = Field(None, description="Physics method preference (default Auto-Detect)")


class IntakeSessionResponse(BaseModel):
    """Snapshot of an intake session for polling clients"""

    session_id: str
    state: str
    status_message: Optional[str] = None
    running: bool = False
    jurisdiction: Optional[str] = None
    physics_method: Optional[str] = None
    evidence: List[EvidenceItem] = Field(default_factory=list)
    checks: List[ValidationCheck] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    case_id: Optional[str] = None
    error: Optional[str] = Field(None, description="Operator-safe error message")
    created_at: datetime


class CaseSummary(BaseModel):
    """Case list item without the report body"""

    id: str
    reference_number: str
    status: CaseStatus
    date_created: str
    description: str
    location: str
    thumbnail_url: str
    parties: Parties
    has_report: bool

    @classmethod
    def from_case(cls, case: CaseFile) -> "CaseSummary":
        return cls(
            id=case.id,
            reference_number=case.reference_number,
            status=case.status,
            date_created=case.date_created,
            description=case.description,
            location=case.location,
            thumbnail_url=case.thumbnail_url,
            parties=case.parties,
            has_report=case.has_report,
        )


class CaseListResponse(BaseModel):
    cases: List[CaseSummary] = Field(default_factory=list)
    total: int = Field(..., ge=0)


class ReportResponse(BaseModel):
    """Report in wire format plus presentation hints"""

    case_id: str
    placeholder: bool = Field(default=False, description="True when no real report exists for the case")
    report: Dict[str, Any]
    sections: Dict[str, str] = Field(
        default_factory=dict,
        description="Optional section name -> 'present' or 'not_analyzed'"
    )
    integrity_flags: List[str] = Field(default_factory=list)
    environmental_risk: Optional[Dict[str, float]] = None


class HydroplaningResponse(BaseModel):
    case_id: str
    tire_pressure_psi: float
    threshold_mph: float
    vehicle_speed_mph: float
    at_risk: bool


class ChatTurnPayload(BaseModel):
    role: str = Field(..., pattern="^(user|model)$")
    text: str


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    history: List[ChatTurnPayload] = Field(default_factory=list)


class ChatResponse(BaseModel):
    reply: str


class SignupRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    agency_id: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    token: str
    user: UserSession
    expires_at: datetime


class HealthResponse(BaseModel):
    """Health check response"""

    status: str = Field(default="healthy")
    service: str = Field(default="accident-analytics-service")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    storage_available: bool = Field(default=True)
    database_available: Optional[bool] = Field(
        default=None,
        description="None when no remote case store is configured"
    )
