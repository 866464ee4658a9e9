"""Unit tests for collaborator response parsing"""

import json
from datetime import datetime, timedelta

import pytest

from accident_analytics.config.settings import settings
from accident_analytics.core.errors import ReportParseError, SimulationNotPermitted
from accident_analytics.infrastructure.analysis import (
    get_analysis_provider,
    reset_analysis_provider,
    set_analysis_provider,
)
from accident_analytics.infrastructure.analysis.parsing import parse_report, strip_fences
from accident_analytics.infrastructure.storage.provider import content_digest
from accident_analytics.models.evidence import AnalysisRequest, EvidencePart


@pytest.mark.unit
class TestStripFences:
    def test_json_fence(self):
        assert strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_fences('```\n{"a": 1}```') == '{"a": 1}'

    def test_unfenced_text_unchanged(self):
        assert strip_fences('{"a": 1}') == '{"a": 1}'


@pytest.mark.unit
class TestParseReport:
    """Test parse_report acceptance and rejection"""

    def test_parses_plain_json(self, report_text):
        report = parse_report(report_text, model="m-1")

        assert report.liability.defendant_percentage == 90
        assert report.provenance.model == "m-1"
        assert report.provenance.generator == "ai"
        assert report.provenance.simulated is False

    def test_parses_fenced_json(self, report_text):
        report = parse_report(f"```json\n{report_text}\n```", model="m-1")

        assert report.physics.impact_angle == 90

    def test_parses_object_inside_prose(self, report_text):
        report = parse_report(f"Here is the report:\n{report_text}\nLet me know.", model="m-1")

        assert report.insurance.status == "Covered"

    def test_generated_at_is_recorded(self, report_text):
        stamp = datetime(2025, 10, 18, 12, 0, 0)

        report = parse_report(report_text, model="m-1", generated_at=stamp)

        assert report.provenance.generated_at == stamp

    def test_generated_at_defaults_to_aware_utc(self, report_text):
        report = parse_report(report_text, model="m-1")

        assert report.provenance.generated_at.utcoffset() == timedelta(0)

    @pytest.mark.parametrize("text", [None, "", "   \n"])
    def test_empty_response_rejected(self, text):
        with pytest.raises(ReportParseError):
            parse_report(text, model="m-1")

    def test_malformed_json_rejected(self):
        with pytest.raises(ReportParseError):
            parse_report('{"executiveSummary": "truncated', model="m-1")

    def test_non_object_rejected(self):
        with pytest.raises(ReportParseError):
            parse_report("[1, 2, 3]", model="m-1")

    def test_nonconforming_payload_rejected(self, report_payload):
        del report_payload["liability"]

        with pytest.raises(ReportParseError):
            parse_report(json.dumps(report_payload), model="m-1")

    def test_collaborator_provenance_is_ignored(self, report_payload):
        report_payload["provenance"] = {"generator": "human", "model": "forged"}

        report = parse_report(json.dumps(report_payload), model="m-1")

        assert report.provenance.model == "m-1"


@pytest.mark.unit
class TestSimulationPolicy:
    """Simulated reports are only accepted when explicitly permitted"""

    def test_simulated_report_rejected_by_default(self, report_payload):
        report_payload["isSimulated"] = True

        with pytest.raises(SimulationNotPermitted):
            parse_report(json.dumps(report_payload), model="m-1")

    def test_simulated_report_accepted_when_permitted(self, report_payload):
        report_payload["isSimulated"] = True

        report = parse_report(json.dumps(report_payload), model="m-1", allow_simulation=True)

        assert report.provenance.simulated is True
        assert report.provenance.simulation_permitted is True
        assert any("simulation" in flag for flag in report.integrity_flags())

    def test_grounded_report_passes_either_way(self, report_payload):
        report_payload["isSimulated"] = False

        report = parse_report(json.dumps(report_payload), model="m-1", allow_simulation=False)

        assert report.provenance.simulated is False


@pytest.mark.unit
class TestStrictLiability:
    def test_unbalanced_liability_rejected_in_strict_mode(self, report_payload):
        report_payload["liability"]["plaintiffPercentage"] = 50

        with pytest.raises(ReportParseError):
            parse_report(json.dumps(report_payload), model="m-1", strict_liability=True)

    def test_unbalanced_liability_flagged_otherwise(self, report_payload):
        report_payload["liability"]["plaintiffPercentage"] = 50

        report = parse_report(json.dumps(report_payload), model="m-1")

        assert report.integrity_flags()


def _request(allow_simulation=False):
    part = EvidencePart(mime_type="video/mp4", data=b"dashcam", digest=content_digest(b"dashcam"))
    return AnalysisRequest(parts=(part,), jurisdiction="California, USA", allow_simulation=allow_simulation)


@pytest.mark.unit
class TestRequestAnalysis:
    """Generate + parse composed on the provider"""

    @pytest.mark.asyncio
    async def test_returns_parsed_report(self, scripted_provider, report_text):
        provider = scripted_provider([f"```json\n{report_text}\n```"])

        report = await provider.request_analysis(_request())

        assert report.liability.defendant_percentage == 90
        assert report.provenance.model == "scripted-model"
        assert provider.requests[0].jurisdiction == "California, USA"

    @pytest.mark.asyncio
    async def test_simulation_policy_comes_from_request(self, scripted_provider, report_payload):
        report_payload["isSimulated"] = True
        provider = scripted_provider([json.dumps(report_payload)])

        with pytest.raises(SimulationNotPermitted):
            await provider.request_analysis(_request(allow_simulation=False))


@pytest.mark.unit
class TestProviderFactory:
    @pytest.fixture(autouse=True)
    def _reset(self):
        reset_analysis_provider()
        yield
        reset_analysis_provider()

    def test_unknown_provider(self, monkeypatch):
        monkeypatch.setattr(settings, "analysis_provider", "oracle")

        with pytest.raises(ValueError):
            get_analysis_provider()

    def test_missing_gemini_key(self, monkeypatch):
        monkeypatch.setattr(settings, "analysis_provider", "gemini")
        monkeypatch.setattr(settings, "gemini_api_key", None)
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("API_KEY", raising=False)

        with pytest.raises(ValueError):
            get_analysis_provider()

    def test_installed_provider_is_reused(self, scripted_provider):
        provider = scripted_provider()
        set_analysis_provider(provider)

        assert get_analysis_provider() is provider
