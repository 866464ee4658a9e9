"""
Case File Models

A case exists only once an analysis report has been committed to the store.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .report import AnalysisReport


class CaseStatus(str, Enum):
    """Case lifecycle status"""
    DRAFT = "Draft"
    PROCESSING = "Processing"
    ADMISSIBLE = "Admissible"
    ANALYSIS_COMPLETE = "Analysis Complete"


class Parties(BaseModel):
    plaintiff: str
    defendant: str


class CaseFile(BaseModel):
    """Case metadata with an optional attached report"""

    id: str = Field(..., description="Case identifier")
    reference_number: str = Field(..., description="Human reference number, e.g. CASE-2025-1234")
    status: CaseStatus
    date_created: str = Field(..., description="ISO date (YYYY-MM-DD)")
    description: str
    location: str
    thumbnail_url: str
    parties: Parties
    report: Optional[AnalysisReport] = Field(None, description="Attached analysis report")

    @property
    def has_report(self) -> bool:
        return self.report is not None

    def snapshot(self) -> "CaseFile":
        """Read-only copy handed to consumers"""
        return self.model_copy(deep=True)
