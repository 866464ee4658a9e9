"""Unit tests for the analysis report contract"""

import pytest
from pydantic import ValidationError

from accident_analytics.core.placeholders import PLACEHOLDER_LABEL, placeholder_report
from accident_analytics.models.report import (
    MANDATORY_SECTIONS,
    OPTIONAL_SECTIONS,
    AbsentSection,
    AnalysisReport,
    PresentSection,
)


@pytest.mark.unit
class TestReportContract:
    """Test report validation and serialization"""

    def test_valid_payload_has_all_mandatory_sections(self, report_payload):
        report = AnalysisReport.model_validate(report_payload)

        for name in MANDATORY_SECTIONS:
            assert getattr(report, name) is not None
        assert report.physics.vehicle_a_speed == 48
        assert report.timeline_events[2].event_type == "Impact"

    @pytest.mark.parametrize("missing", ["executiveSummary", "liability", "physics", "insurance", "timelineEvents", "evidenceIntegrity"])
    def test_missing_mandatory_section_rejected(self, report_payload, missing):
        del report_payload[missing]

        with pytest.raises(ValidationError):
            AnalysisReport.model_validate(report_payload)

    def test_empty_executive_summary_rejected(self, report_payload):
        report_payload["executiveSummary"] = ""

        with pytest.raises(ValidationError):
            AnalysisReport.model_validate(report_payload)

    def test_percentage_out_of_range_rejected(self, report_payload):
        report_payload["physics"]["confidence"] = 140

        with pytest.raises(ValidationError):
            AnalysisReport.model_validate(report_payload)

    def test_unknown_enum_value_rejected(self, report_payload):
        report_payload["insurance"]["status"] = "Pending"

        with pytest.raises(ValidationError):
            AnalysisReport.model_validate(report_payload)

    def test_report_is_immutable(self, report_payload):
        report = AnalysisReport.model_validate(report_payload)

        with pytest.raises(ValidationError):
            report.executive_summary = "changed"


@pytest.mark.unit
class TestOptionalSections:
    """Test present / not-analyzed section variants"""

    def test_present_section(self, report_payload):
        report = AnalysisReport.model_validate(report_payload)

        variant = report.section("humanImpact")
        assert isinstance(variant, PresentSection)
        assert variant.name == "human_impact"
        assert variant.data.delta_v == 14.2

    def test_absent_section_is_not_analyzed(self, report_payload):
        report = AnalysisReport.model_validate(report_payload)

        variant = report.section("audio_forensics")
        assert isinstance(variant, AbsentSection)
        assert variant.kind == "not_analyzed"

    def test_sections_covers_every_optional_section(self, report_payload):
        del report_payload["environmental"]
        report = AnalysisReport.model_validate(report_payload)

        sections = report.sections()
        assert set(sections) == set(OPTIONAL_SECTIONS)
        assert sections["environmental"].kind == "not_analyzed"
        assert sections["driver_behavior"].kind == "present"

    def test_unknown_section_name(self, report_payload):
        report = AnalysisReport.model_validate(report_payload)

        with pytest.raises(KeyError):
            report.section("weather")


@pytest.mark.unit
class TestIntegrityFlags:
    """Test consistency flags beyond schema validation"""

    def test_balanced_liability_has_no_flags(self, report_payload):
        report = AnalysisReport.model_validate(report_payload)

        assert report.liability_total() == 100
        assert report.integrity_flags() == []

    def test_liability_within_tolerance(self, report_payload):
        report_payload["liability"]["plaintiffPercentage"] = 10.5
        report = AnalysisReport.model_validate(report_payload)

        assert report.integrity_flags() == []

    def test_unbalanced_liability_flagged(self, report_payload):
        report_payload["liability"]["plaintiffPercentage"] = 30
        report = AnalysisReport.model_validate(report_payload)

        flags = report.integrity_flags()
        assert len(flags) == 1
        assert "120%" in flags[0]


@pytest.mark.unit
class TestWireFormat:
    """Test camelCase serialization"""

    def test_wire_format_uses_contract_names(self, report_payload):
        wire = AnalysisReport.model_validate(report_payload).to_wire()

        assert wire["physics"]["vehicleA_speed"] == 48
        assert wire["timelineEvents"][0]["type"] == "Info"
        assert wire["officialDocs"]["party1Data"]["insuranceCode"] == "STF-001"
        assert "audioForensics" not in wire

    def test_wire_round_trip_is_equal(self, report_payload):
        report = AnalysisReport.model_validate(report_payload)

        assert AnalysisReport.model_validate(report.to_wire()) == report

    def test_to_json_is_deterministic(self, report_payload):
        report = AnalysisReport.model_validate(report_payload)

        assert report.to_json() == AnalysisReport.model_validate(report_payload).to_json()


@pytest.mark.unit
class TestPlaceholderReport:
    def test_placeholder_is_labelled(self):
        report = placeholder_report()

        assert report.executive_summary.startswith(PLACEHOLDER_LABEL)
        assert report.environmental is not None
        assert report.provenance is None
