"""Data models for the Accident Analytics service"""

from .cases import CaseFile, CaseStatus, Parties
from .evidence import (
    AnalysisRequest,
    CheckStatus,
    EvidenceClassification,
    EvidenceItem,
    EvidencePart,
    EvidenceStatus,
    PayloadRef,
    ValidationCheck,
)
from .report import AbsentSection, AnalysisReport, PresentSection, Provenance
from .requests import (
    CaseListResponse,
    CaseSummary,
    ChatRequest,
    ChatResponse,
    EvidenceListResponse,
    EvidenceUploadResponse,
    HealthResponse,
    HydroplaningResponse,
    IntakeSessionResponse,
    LoginRequest,
    ReportResponse,
    SessionResponse,
    SignupRequest,
    StartAnalysisRequest,
)
from .session import IssuedSession, UserRole, UserSession

__all__ = [
    "CaseFile",
    "CaseStatus",
    "Parties",
    "AnalysisRequest",
    "CheckStatus",
    "EvidenceClassification",
    "EvidenceItem",
    "EvidencePart",
    "EvidenceStatus",
    "PayloadRef",
    "ValidationCheck",
    "AbsentSection",
    "AnalysisReport",
    "PresentSection",
    "Provenance",
    "CaseListResponse",
    "CaseSummary",
    "ChatRequest",
    "ChatResponse",
    "EvidenceListResponse",
    "EvidenceUploadResponse",
    "HealthResponse",
    "HydroplaningResponse",
    "IntakeSessionResponse",
    "LoginRequest",
    "ReportResponse",
    "SessionResponse",
    "SignupRequest",
    "StartAnalysisRequest",
    "IssuedSession",
    "UserRole",
    "UserSession",
]
