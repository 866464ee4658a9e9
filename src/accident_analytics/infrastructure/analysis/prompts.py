"""
Analysis Prompts and Response Schema

Directive text, system instructions and the structured-output schema sent to
the analysis collaborator. The schema uses the OpenAPI subset accepted by
structured-output model APIs.
"""

from typing import Any, Dict, List, Optional

from accident_analytics.infrastructure.analysis.parsing import SIMULATION_FLAG
from accident_analytics.models.evidence import AnalysisRequest

Schema = Dict[str, Any]


def _obj(properties: Dict[str, Schema], required: Optional[List[str]] = None, description: str = None) -> Schema:
    schema: Schema = {"type": "OBJECT", "properties": properties}
    if required is not None:
        schema["required"] = required
    if description:
        schema["description"] = description
    return schema


def _arr(items: Schema) -> Schema:
    return {"type": "ARRAY", "items": items}


def _str(description: str = None, enum: List[str] = None) -> Schema:
    schema: Schema = {"type": "STRING"}
    if description:
        schema["description"] = description
    if enum:
        schema["enum"] = enum
    return schema


def _num(description: str = None) -> Schema:
    schema: Schema = {"type": "NUMBER"}
    if description:
        schema["description"] = description
    return schema


def _bool() -> Schema:
    return {"type": "BOOLEAN"}


def _party() -> Schema:
    return _obj({
        "name": _str(), "license": _str(), "vin": _str(), "plate": _str(), "insuranceCode": _str(),
    })


def _policy() -> Schema:
    return _obj({
        "carrier": _str(), "policyNumber": _str(), "status": _str(),
        "limitBodilyInjury": _num(), "limitPropertyDamage": _num(), "deductible": _num(),
    }, required=["carrier", "policyNumber", "status"])


def report_schema(jurisdiction: str) -> Schema:
    """Structured-output schema for an AnalysisReport.

    Only the mandatory sections are required; the model omits optional sections
    that do not apply to the evidence.
    """
    percent = "0-100"
    return _obj({
        "executiveSummary": _str(
            "A comprehensive, multi-paragraph forensic abstract (approx 250 words). MUST START by "
            "defining the vehicle types. Analyze the pre-crash trajectory, the point of impact and "
            "post-crash rest positions."
        ),
        "liability": _obj({
            "plaintiffPercentage": _num(percent),
            "defendantPercentage": _num(percent + "; plaintiff + defendant must equal 100"),
            "rationale": _str("Legal argument citing specific frames or visual evidence."),
            "codeCited": _str(f"Specific {jurisdiction} Vehicle Code section."),
        }, required=["plaintiffPercentage", "defendantPercentage", "rationale", "codeCited"]),
        "physics": _obj({
            "vehicleA_speed": _num("Speed in mph."),
            "vehicleB_speed": _num("Speed in mph."),
            "impactAngle": _num("Angle 0-360 degrees."),
            "method": _str("e.g. 'Conservation of Linear Momentum' or 'Crush Energy Analysis'."),
            "confidence": _num("0-100 score based on evidence clarity."),
        }, required=["vehicleA_speed", "vehicleB_speed", "impactAngle", "method", "confidence"]),
        "humanImpact": _obj({
            "seatbeltStatus": _str(enum=["Confirmed", "Unlikely", "Not Visible"]),
            "deltaV": _num("Change in velocity (mph)."),
            "principalDirection": _str("PDOF (e.g. '11 o'clock')."),
            "aisScore": _num("Abbreviated Injury Scale (1-6)."),
            "injuryProbability": _obj(
                {"whiplash": _num(percent), "concussion": _num(percent), "fracture": _num(percent)},
                required=["whiplash", "concussion", "fracture"],
            ),
            "medicalConsistency": _obj(
                {"score": _num(percent), "rationale": _str("Correlate G-forces with typical injury patterns.")},
                required=["score", "rationale"],
            ),
        }, required=["seatbeltStatus", "deltaV", "principalDirection", "aisScore",
                      "injuryProbability", "medicalConsistency"],
            description="Biomechanical analysis of occupants."),
        "driverBehavior": _obj({
            "attentionScore": _num(percent),
            "riskPercentile": _num(percent),
            "detectedActions": _arr(_str()),
            "drivingVolatility": _num(percent),
            "courtRecommendation": _str("Formal risk assessment for the judge/jury."),
            "identityMatch": _str(),
        }, required=["attentionScore", "riskPercentile", "detectedActions",
                      "drivingVolatility", "courtRecommendation"]),
        "environmental": _obj({
            "weatherCondition": _str(),
            "roadSurfaceCondition": _str(),
            "lightCondition": _str(),
            "roadFrictionCoefficient": _num("0.0-1.0"),
            "hydroplaningThresholdSpeed": _num("mph"),
            "visibilityDistance": _num("feet"),
            "weatherContributionPercentage": _num(percent),
            "sunGlare": _bool(),
            "notes": _str(),
        }, required=["weatherCondition", "roadSurfaceCondition", "lightCondition",
                      "roadFrictionCoefficient", "visibilityDistance",
                      "weatherContributionPercentage", "sunGlare", "notes"]),
        "audioForensics": _obj({
            "transcript": _str(),
            "speakerSentiment": _str(enum=["Calm", "Agitated", "Deceptive", "Traumatized", "Neutral"]),
            "stressLevels": _arr(_obj(
                {"timestamp": _num(), "level": _num(percent), "trigger": _str()},
                required=["timestamp", "level"],
            )),
            "deceptionIndicators": _arr(_str()),
            "voiceSignatureMatch": _bool(),
            "backgroundNoiseAnalysis": _str(),
        }, required=["transcript", "speakerSentiment", "stressLevels", "deceptionIndicators",
                      "voiceSignatureMatch", "backgroundNoiseAnalysis"]),
        "officialDocs": _obj({
            "formType": _str(enum=["TR-1", "MV-104AN", "Generic"]),
            "jurisdiction": _str(),
            "generatedDate": _str(),
            "officerNarrative": _str(
                "A strict, objective police narrative suitable for official filing. "
                "Use codes (V1, V2) and directional indicators (NB, SB)."
            ),
            "party1Data": _party(),
            "party2Data": _party(),
            "blockchainHash": _str(),
            "qrCodeUrl": _str(),
        }, required=["formType", "jurisdiction", "generatedDate", "officerNarrative",
                      "party1Data", "party2Data", "blockchainHash", "qrCodeUrl"]),
        "insurance": _obj({
            "status": _str(enum=["Covered", "Partial", "Denied"]),
            "payoutEstimate": _num(),
            "notes": _str(),
        }, required=["status", "payoutEstimate", "notes"]),
        "rippleEffect": _obj({
            "isMultiVehicle": _bool(),
            "faultOrigin": _str(),
            "sequence": _arr(_obj({
                "order": _num(), "source": _str(), "target": _str(),
                "forceEstimate": _str(), "damageDescription": _str(),
            }, required=["order", "source", "target", "forceEstimate", "damageDescription"])),
            "subrogationMatrix": _arr(_obj({
                "payer": _str(), "payee": _str(), "amount": _num(),
                "percentage": _num(percent), "rationale": _str(),
            }, required=["payer", "payee", "amount", "percentage", "rationale"])),
        }, required=["isMultiVehicle", "faultOrigin", "sequence", "subrogationMatrix"]),
        "settlementStrategy": _obj({
            "policies": _obj({"vehicleA": _policy(), "vehicleB": _policy()},
                             required=["vehicleA", "vehicleB"]),
            "calculation": _obj({
                "totalDamages": _num(), "liabilityAdjustment": _num(), "finalOffer": _num(),
            }, required=["totalDamages", "liabilityAdjustment", "finalOffer"]),
            "demandLetter": _obj({"recipient": _str(), "content": _str()},
                                 required=["recipient", "content"]),
            "emailDraft": _obj({"to": _str(), "subject": _str(), "body": _str()},
                               required=["to", "subject", "body"]),
        }, required=["policies", "calculation", "demandLetter", "emailDraft"]),
        "timelineEvents": _arr(_obj({
            "timestamp": _num("Seconds relative to impact (0.0)."),
            "description": _str(),
            "type": _str(enum=["Critical", "Info", "Impact"]),
            "vehicle": _str(enum=["A", "B", "Both"]),
        }, required=["timestamp", "description", "type", "vehicle"])),
        "evidenceIntegrity": _obj({
            "score": _num(percent),
            "certificateId": _str(),
            "checks": _obj({
                "frameDuplication": _bool(), "compressionArtifacts": _bool(),
                "gpsMetadata": _bool(), "audioSplicing": _bool(),
            }, required=["frameDuplication", "compressionArtifacts", "gpsMetadata", "audioSplicing"]),
        }, required=["score", "certificateId", "checks"]),
        SIMULATION_FLAG: {
            "type": "BOOLEAN",
            "description": "True when the report is a simulation rather than an analysis of the supplied evidence.",
        },
    }, required=["executiveSummary", "liability", "physics", "insurance",
                  "timelineEvents", "evidenceIntegrity", SIMULATION_FLAG])


SYSTEM_INSTRUCTION = """You are AccidentAnalytics Enterprise AI, a forensic accident reconstruction system.

YOUR CORE DIRECTIVE IS ACCURACY AND DETAIL.

VEHICLE MORPHOLOGY CHECK (MANDATORY):
Before generating the report, classify the vehicles correctly.
1. Motorcycle/Bike: exposed rider, 2 wheels, single headlight.
2. Sedan/Coupe: low ground clearance, trunk.
3. SUV: high ground clearance, hatchback/box rear.
4. Truck: open cargo bed (Pickup) or large commercial box.

NEVER confuse a Bike with a Car. NEVER confuse a Pickup Truck with an SUV.
Omit any optional section that the evidence does not support."""

CHAT_INSTRUCTION = (
    "You are AccidentAnalytics AI, a multilingual forensic expert. Detect the user's language and "
    "respond in that same language. Answer questions about accident reconstruction, liability laws, "
    "and physics calculations. Be precise, professional, and concise. Do not give binding legal "
    "advice, but cite relevant codes."
)

_SIMULATION_ALLOWED = f"""FALLBACK PROTOCOL:
If the video/image data is unclear or missing, generate a HIGH-FIDELITY SIMULATION of a plausible
collision and set "{SIMULATION_FLAG}" to true. The report will be labelled as simulated."""

_SIMULATION_FORBIDDEN = f"""FALLBACK PROTOCOL:
Never invent a scenario. If the evidence cannot support a grounded analysis, set "{SIMULATION_FLAG}"
to true; the report will be discarded and the operator asked for better evidence.
Otherwise "{SIMULATION_FLAG}" must be false."""


def build_directive(request: AnalysisRequest) -> str:
    fallback = _SIMULATION_ALLOWED if request.allow_simulation else _SIMULATION_FORBIDDEN
    return f"""You are the lead forensic investigator. Generate a COURT-ADMISSIBLE FORENSIC REPORT
based on the {len(request.parts)} evidence item(s) provided.

PHASE 1: VISUAL IDENTIFICATION
- Identify vehicles, colors and makes where visible.
- Collision type: T-Bone, Rear-End, Head-On, Side-Swipe.

PHASE 2: PHYSICS RECONSTRUCTION
- Preferred method: {request.physics_method}.
- Calculate speeds using momentum conservation and skid mark analysis. Estimate Delta-V.

PHASE 3: LIABILITY & LAW
- Apply {request.jurisdiction} Vehicle Codes.
- Determine fault percentages based on "Preponderance of Evidence". They must sum to 100.

PHASE 4: HUMAN IMPACT
- Analyze biomechanical forces on occupants.

PHASE 5: DOCUMENT GENERATION
- Fill the JSON schema with rich, narrative text for summaries and rationales.

{fallback}

Generate the JSON response now."""
