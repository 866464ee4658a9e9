"""
Analysis Report Contract

The structured forensic output consumed by every presentation surface.
Field names follow the snake_case convention in Python and serialize to the
camelCase wire format the analysis collaborator produces.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Percentage = Annotated[float, Field(ge=0, le=100)]

LIABILITY_SUM_TOLERANCE = 1.0

# Sections the presentation layer must treat as "not analyzed" when absent.
OPTIONAL_SECTIONS = (
    "human_impact",
    "driver_behavior",
    "environmental",
    "audio_forensics",
    "official_docs",
    "ripple_effect",
    "settlement_strategy",
)

MANDATORY_SECTIONS = (
    "executive_summary",
    "liability",
    "physics",
    "insurance",
    "timeline_events",
    "evidence_integrity",
)


class ContractModel(BaseModel):
    """Base for all report sections: camelCase aliases, immutable."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Liability(ContractModel):
    plaintiff_percentage: Percentage
    defendant_percentage: Percentage
    rationale: str
    code_cited: str


class Physics(ContractModel):
    vehicle_a_speed: float = Field(..., alias="vehicleA_speed", description="Speed in mph")
    vehicle_b_speed: float = Field(..., alias="vehicleB_speed", description="Speed in mph")
    impact_angle: float = Field(..., ge=0, le=360)
    method: str
    confidence: Percentage


class InjuryProbability(ContractModel):
    whiplash: Percentage
    concussion: Percentage
    fracture: Percentage


class MedicalConsistency(ContractModel):
    score: Percentage
    rationale: str


class HumanImpactAnalysis(ContractModel):
    seatbelt_status: Literal["Confirmed", "Unlikely", "Not Visible"]
    delta_v: float = Field(..., description="Change in velocity (mph)")
    principal_direction: str
    ais_score: float = Field(..., ge=1, le=6, description="Abbreviated Injury Scale")
    injury_probability: InjuryProbability
    medical_consistency: MedicalConsistency


class DriverBehaviorAnalysis(ContractModel):
    attention_score: Percentage
    risk_percentile: Percentage
    detected_actions: List[str]
    driving_volatility: Percentage
    court_recommendation: str
    identity_match: Optional[str] = None


class EnvironmentalAnalysis(ContractModel):
    weather_condition: str
    road_surface_condition: str
    light_condition: str
    road_friction_coefficient: float = Field(..., ge=0, le=1)
    hydroplaning_threshold_speed: Optional[float] = Field(None, ge=0)
    visibility_distance: float = Field(..., ge=0, description="Feet")
    weather_contribution_percentage: Percentage
    sun_glare: bool
    notes: str


class StressSample(ContractModel):
    timestamp: float
    level: Percentage
    trigger: Optional[str] = None


class AudioForensics(ContractModel):
    transcript: str
    speaker_sentiment: Literal["Calm", "Agitated", "Deceptive", "Traumatized", "Neutral"]
    stress_levels: List[StressSample]
    deception_indicators: List[str]
    voice_signature_match: bool
    background_noise_analysis: str


class PartyData(ContractModel):
    name: str
    license: str
    vin: str
    plate: str
    insurance_code: str


class OfficialDocs(ContractModel):
    form_type: Literal["TR-1", "MV-104AN", "Generic"]
    jurisdiction: str
    generated_date: str
    officer_narrative: str
    party1_data: PartyData
    party2_data: PartyData
    blockchain_hash: str
    qr_code_url: str


class Insurance(ContractModel):
    status: Literal["Covered", "Partial", "Denied"]
    payout_estimate: float = Field(..., ge=0)
    notes: str


class RippleSequenceItem(ContractModel):
    order: int
    source: str
    target: str
    force_estimate: str
    damage_description: str


class SubrogationItem(ContractModel):
    payer: str
    payee: str
    amount: float = Field(..., ge=0)
    percentage: Percentage
    rationale: str


class RippleEffect(ContractModel):
    is_multi_vehicle: bool
    fault_origin: str
    sequence: List[RippleSequenceItem]
    subrogation_matrix: List[SubrogationItem]


class PolicyDetails(ContractModel):
    carrier: str
    policy_number: str
    status: str
    limit_bodily_injury: Optional[float] = None
    limit_property_damage: Optional[float] = None
    deductible: Optional[float] = None


class Policies(ContractModel):
    vehicle_a: PolicyDetails
    vehicle_b: PolicyDetails


class SettlementCalculation(ContractModel):
    total_damages: float
    liability_adjustment: float
    final_offer: float


class DemandLetter(ContractModel):
    recipient: str
    content: str


class EmailDraft(ContractModel):
    to: str
    subject: str
    body: str


class SettlementStrategy(ContractModel):
    policies: Policies
    calculation: SettlementCalculation
    demand_letter: DemandLetter
    email_draft: EmailDraft


class TimelineEvent(ContractModel):
    timestamp: float = Field(..., description="Seconds relative to impact (0.0)")
    description: str
    event_type: Literal["Critical", "Info", "Impact"] = Field(..., alias="type")
    vehicle: Literal["A", "B", "Both"]


class IntegrityChecks(ContractModel):
    frame_duplication: bool
    compression_artifacts: bool
    gps_metadata: bool
    audio_splicing: bool


class EvidenceIntegrity(ContractModel):
    score: Percentage
    certificate_id: str
    checks: IntegrityChecks


class Provenance(ContractModel):
    """Attribution attached by the orchestrator, not by the collaborator."""

    generator: Literal["ai"] = "ai"
    model: str
    simulated: bool = False
    simulation_permitted: bool = False
    generated_at: datetime


class PresentSection(BaseModel):
    kind: Literal["present"] = "present"
    name: str
    data: ContractModel


class AbsentSection(BaseModel):
    kind: Literal["not_analyzed"] = "not_analyzed"
    name: str


SectionVariant = Annotated[Union[PresentSection, AbsentSection], Field(discriminator="kind")]


class AnalysisReport(ContractModel):
    """Root forensic analysis document"""

    executive_summary: str = Field(..., min_length=1)
    liability: Liability
    physics: Physics
    insurance: Insurance
    timeline_events: List[TimelineEvent]
    evidence_integrity: EvidenceIntegrity

    human_impact: Optional[HumanImpactAnalysis] = None
    driver_behavior: Optional[DriverBehaviorAnalysis] = None
    environmental: Optional[EnvironmentalAnalysis] = None
    audio_forensics: Optional[AudioForensics] = None
    official_docs: Optional[OfficialDocs] = None
    ripple_effect: Optional[RippleEffect] = None
    settlement_strategy: Optional[SettlementStrategy] = None

    provenance: Optional[Provenance] = None

    def section(self, name: str) -> SectionVariant:
        """Return an optional section as a present / not-analyzed variant.

        Accepts either the Python name (``human_impact``) or the wire name
        (``humanImpact``).
        """
        attr = _section_attr(name)
        value = getattr(self, attr)
        if value is None:
            return AbsentSection(name=attr)
        return PresentSection(name=attr, data=value)

    def sections(self) -> Dict[str, SectionVariant]:
        return {name: self.section(name) for name in OPTIONAL_SECTIONS}

    def liability_total(self) -> float:
        return self.liability.plaintiff_percentage + self.liability.defendant_percentage

    def integrity_flags(self) -> List[str]:
        """Consistency problems that the schema alone does not reject."""
        flags = []
        total = self.liability_total()
        if abs(total - 100) > LIABILITY_SUM_TOLERANCE:
            flags.append(f"Liability percentages sum to {total:g}%, expected 100%")
        if self.provenance is not None and self.provenance.simulated:
            flags.append("Report is an AI-generated simulation, not grounded in the supplied evidence")
        return flags

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """Deterministic JSON rendering of the report"""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def _section_attr(name: str) -> str:
    if name in OPTIONAL_SECTIONS:
        return name
    for attr in OPTIONAL_SECTIONS:
        if to_camel(attr) == name:
            return attr
    raise KeyError(f"Unknown optional report section: {name}")
