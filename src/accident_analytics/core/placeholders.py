"""
Placeholder Data

Seed cases for the process-local store and the labelled placeholder report
shown when a case has no report anywhere.
"""

from typing import List

from accident_analytics.models.cases import CaseFile, CaseStatus, Parties
from accident_analytics.models.report import AnalysisReport

PLACEHOLDER_LABEL = "PLACEHOLDER - no analysis report is attached to this case"


def seed_cases() -> List[CaseFile]:
    return [
        CaseFile(
            id="c-101",
            reference_number="CASE-2024-8842",
            status=CaseStatus.ADMISSIBLE,
            date_created="2024-05-12",
            description="Intersection Collision @ 4th & Main",
            location="San Francisco, CA",
            thumbnail_url="https://picsum.photos/400/225",
            parties=Parties(plaintiff="J. Smith", defendant="R. Roe"),
        ),
        CaseFile(
            id="c-102",
            reference_number="CASE-2024-9911",
            status=CaseStatus.PROCESSING,
            date_created="2024-05-14",
            description="Rear-end on I-5 South",
            location="Los Angeles, CA",
            thumbnail_url="https://picsum.photos/400/226",
            parties=Parties(plaintiff="SafeHaul Logistics", defendant="T. Miller"),
        ),
        CaseFile(
            id="c-103",
            reference_number="CASE-2024-9950",
            status=CaseStatus.DRAFT,
            date_created="2024-05-15",
            description="Parking Lot Dispute",
            location="Seattle, WA",
            thumbnail_url="https://picsum.photos/400/227",
            parties=Parties(plaintiff="Unknown", defendant="L. Chen"),
        ),
    ]


def placeholder_report() -> AnalysisReport:
    """Demonstration report, labelled so it cannot pass for a real analysis"""
    return AnalysisReport.model_validate({
        "executiveSummary": (
            f"{PLACEHOLDER_LABEL}. Example content: a 4-vehicle chain reaction initiated by "
            "Vehicle A (Red Pickup) striking Vehicle B (Blue Sedan), which was pushed into "
            "Vehicle C (White SUV) and Vehicle D (Delivery Van)."
        ),
        "liability": {
            "plaintiffPercentage": 0,
            "defendantPercentage": 100,
            "rationale": "Vehicle A failed to maintain assured clear distance (rear-end).",
            "codeCited": "California Vehicle Code §21703",
        },
        "physics": {
            "vehicleA_speed": 65,
            "vehicleB_speed": 15,
            "impactAngle": 0,
            "method": "Momentum Transfer Analysis",
            "confidence": 96,
        },
        "environmental": {
            "weatherCondition": "Moderate Rain",
            "roadSurfaceCondition": "Wet Asphalt",
            "lightCondition": "Overcast",
            "roadFrictionCoefficient": 0.45,
            "hydroplaningThresholdSpeed": 58.0,
            "visibilityDistance": 350,
            "weatherContributionPercentage": 12,
            "sunGlare": False,
            "notes": "Standing water observed in lane 2.",
        },
        "insurance": {
            "status": "Covered",
            "payoutEstimate": 142000,
            "notes": "Total loss for Veh B. Major repairs for C and A. Minor for D.",
        },
        "timelineEvents": [
            {"timestamp": -2.0, "description": "Vehicle A maintains 65mph (Speed Limit 55)", "type": "Critical", "vehicle": "A"},
            {"timestamp": 0.0, "description": "IMPACT 1: A strikes B", "type": "Impact", "vehicle": "A"},
            {"timestamp": 0.3, "description": "IMPACT 2: B strikes C", "type": "Impact", "vehicle": "B"},
        ],
        "evidenceIntegrity": {
            "score": 0,
            "certificateId": "PLACEHOLDER",
            "checks": {
                "frameDuplication": False,
                "compressionArtifacts": False,
                "gpsMetadata": False,
                "audioSplicing": False,
            },
        },
    })
