"""Shared fixtures: sample report payloads, tmp blob storage and a scripted provider"""

import asyncio
import copy
import json
from typing import List, Optional, Union

import pytest

from accident_analytics.core.validation import ValidationPipeline, default_checkers
from accident_analytics.infrastructure.analysis.provider import AnalysisProvider, ChatTurn, ProviderResponse
from accident_analytics.infrastructure.storage.local_storage import LocalStorage
from accident_analytics.models.evidence import AnalysisRequest

SAMPLE_REPORT = {
    "executiveSummary": (
        "Vehicle A ran a red light at 4th & Main and struck Vehicle B broadside. "
        "Wet pavement extended the stopping distance."
    ),
    "liability": {
        "plaintiffPercentage": 10,
        "defendantPercentage": 90,
        "rationale": "Vehicle A entered the intersection against a \"steady red\" signal.",
        "codeCited": "California Vehicle Code §21453(a)",
    },
    "physics": {
        "vehicleA_speed": 48,
        "vehicleB_speed": 22.5,
        "impactAngle": 90,
        "method": "Momentum Conservation",
        "confidence": 88,
    },
    "insurance": {
        "status": "Covered",
        "payoutEstimate": 38500,
        "notes": "Property damage and medical within limits.",
    },
    "timelineEvents": [
        {"timestamp": -3.2, "description": "Signal turns red for Vehicle A", "type": "Info", "vehicle": "A"},
        {"timestamp": -0.8, "description": "Vehicle A brakes", "type": "Critical", "vehicle": "A"},
        {"timestamp": 0.0, "description": "Impact", "type": "Impact", "vehicle": "Both"},
    ],
    "evidenceIntegrity": {
        "score": 97,
        "certificateId": "CERT-7F3A-2211",
        "checks": {
            "frameDuplication": True,
            "compressionArtifacts": True,
            "gpsMetadata": True,
            "audioSplicing": True,
        },
    },
    "humanImpact": {
        "seatbeltStatus": "Confirmed",
        "deltaV": 14.2,
        "principalDirection": "3 o'clock",
        "aisScore": 2,
        "injuryProbability": {"whiplash": 35, "concussion": 12, "fracture": 4},
        "medicalConsistency": {"score": 81, "rationale": "Reported neck pain matches lateral loading."},
    },
    "driverBehavior": {
        "attentionScore": 40,
        "riskPercentile": 92,
        "detectedActions": ["Phone handling", "Late braking"],
        "drivingVolatility": 70,
        "courtRecommendation": "Subpoena phone records.",
    },
    "environmental": {
        "weatherCondition": "Light Rain",
        "roadSurfaceCondition": "Wet Asphalt",
        "lightCondition": "Night - Street Lit",
        "roadFrictionCoefficient": 0.5,
        "hydroplaningThresholdSpeed": 55,
        "visibilityDistance": 600,
        "weatherContributionPercentage": 15,
        "sunGlare": False,
        "notes": "Standing water near the crosswalk.",
    },
    "officialDocs": {
        "formType": "Generic",
        "jurisdiction": "California, USA",
        "generatedDate": "2025-10-18",
        "officerNarrative": "V1 failed to stop for a red signal.",
        "party1Data": {"name": "A. Driver", "license": "D1234567", "vin": "1HGCM82633A004352", "plate": "7ABC123", "insuranceCode": "STF-001"},
        "party2Data": {"name": "B. Driver", "license": "D7654321", "vin": "2T1BURHE0JC074321", "plate": "8XYZ987", "insuranceCode": "GEI-002"},
        "blockchainHash": "0xabc123",
        "qrCodeUrl": "https://example.test/qr/abc123",
    },
}


@pytest.fixture
def report_payload():
    """Fresh, mutable copy of the sample wire-format report"""
    return copy.deepcopy(SAMPLE_REPORT)


@pytest.fixture
def report_text(report_payload):
    return json.dumps(report_payload)


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "blobs"))


@pytest.fixture
def fast_pipeline():
    return ValidationPipeline(default_checkers(delay=0))


class ScriptedProvider(AnalysisProvider):
    """Replays queued responses; an Exception entry is raised instead of returned"""

    name = "scripted"

    def __init__(
        self,
        responses: Optional[List[Union[str, Exception]]] = None,
        delay: float = 0,
        chat_reply: Union[str, Exception] = "Delta-V is the change in velocity during the impact."
    ):
        self.responses = list(responses or [])
        self.delay = delay
        self.chat_reply = chat_reply
        self.requests: List[AnalysisRequest] = []
        self.chats: List[tuple] = []

    async def generate(self, request: AnalysisRequest) -> ProviderResponse:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return ProviderResponse(text=response, model="scripted-model")

    async def chat(self, history: List[ChatTurn], message: str) -> str:
        self.chats.append((list(history), message))
        if isinstance(self.chat_reply, Exception):
            raise self.chat_reply
        return self.chat_reply


@pytest.fixture
def scripted_provider():
    return ScriptedProvider
