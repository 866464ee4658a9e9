"""
Evidence Data Models

Intake queue items, validation check state and the immutable request
snapshot handed to the analysis collaborator.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class EvidenceClassification(str, Enum):
    """Media classification chosen by the intake affordance"""
    VIDEO = "video"
    DOCUMENT = "document"
    AUDIO = "audio"
    OTHER = "other"


class EvidenceStatus(str, Enum):
    """Evidence item lifecycle"""
    QUEUED = "queued"
    UPLOADING = "uploading"
    ANALYZING = "analyzing"
    COMPLETE = "complete"


class PayloadRef(BaseModel):
    """Reference to an evidence payload held in blob storage"""

    model_config = ConfigDict(frozen=True)

    storage_key: str = Field(..., description="Blob storage key")
    filename: str = Field(..., description="Original filename")
    mime_type: str = Field(..., description="MIME type")
    size: int = Field(..., ge=0, description="Payload size in bytes")
    digest: str = Field(..., description="SHA-256 hex digest of the payload")


class EvidenceItem(BaseModel):
    """A single uploaded media artifact pending or completed analysis"""

    evidence_id: str = Field(
        default_factory=lambda: uuid4().hex,
        description="Unique evidence identifier"
    )
    case_id: Optional[str] = Field(None, description="Owning case, set on commit")
    payload: PayloadRef
    classification: EvidenceClassification
    status: EvidenceStatus = Field(default=EvidenceStatus.QUEUED)
    progress: int = Field(default=0, ge=0, le=100)
    added_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        json_schema_extra = {
            "example": {
                "evidence_id": "3f9c1b7a2e4d4c0c9a1e5b6f7d8c9e0a",
                "case_id": None,
                "payload": {
                    "storage_key": "blobs/9b/9b74c9897bac770ffc029102a200c5de",
                    "filename": "dashcam_front.mp4",
                    "mime_type": "video/mp4",
                    "size": 48211022,
                    "digest": "9b74c9897bac770ffc029102a200c5de..."
                },
                "classification": "video",
                "status": "queued",
                "progress": 0
            }
        }


class CheckStatus(str, Enum):
    """Validation check state"""
    PENDING = "pending"
    CHECKING = "checking"
    VALID = "valid"
    WARNING = "warning"

    @property
    def is_terminal(self) -> bool:
        return self in (CheckStatus.VALID, CheckStatus.WARNING)


class ValidationCheck(BaseModel):
    """One integrity/authenticity check applied before analysis"""

    check_id: str
    label: str
    status: CheckStatus = CheckStatus.PENDING
    detail: Optional[str] = None


class EvidencePart(BaseModel):
    """Content-addressed evidence bytes sent to the collaborator"""

    model_config = ConfigDict(frozen=True)

    mime_type: str
    data: bytes
    digest: str


class AnalysisRequest(BaseModel):
    """Immutable snapshot passed by value to the analysis collaborator"""

    model_config = ConfigDict(frozen=True)

    parts: Tuple[EvidencePart, ...]
    jurisdiction: str = Field(..., min_length=1)
    physics_method: str = Field(default="Auto-Detect")
    allow_simulation: bool = Field(default=False)
