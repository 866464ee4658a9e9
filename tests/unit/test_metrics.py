"""Unit tests for derived report metrics"""

import pytest

from accident_analytics.core.metrics import (
    assess_hydroplaning,
    environmental_risk_profile,
    hydroplaning_threshold,
)
from accident_analytics.models.report import AnalysisReport, EnvironmentalAnalysis


def _environment(**overrides):
    values = {
        "weatherCondition": "Clear",
        "roadSurfaceCondition": "Dry Asphalt",
        "lightCondition": "Daylight",
        "roadFrictionCoefficient": 0.8,
        "hydroplaningThresholdSpeed": None,
        "visibilityDistance": 1000,
        "weatherContributionPercentage": 0,
        "sunGlare": False,
        "notes": "",
    }
    values.update(overrides)
    return EnvironmentalAnalysis.model_validate(values)


@pytest.mark.unit
class TestHydroplaning:
    def test_default_pressure_threshold(self):
        assert hydroplaning_threshold() == pytest.approx(58.55, abs=0.01)

    def test_threshold_grows_with_pressure(self):
        assert hydroplaning_threshold(36) == pytest.approx(62.1)

    def test_non_positive_pressure_rejected(self):
        with pytest.raises(ValueError):
            hydroplaning_threshold(0)

    def test_assessment_flags_speed_above_threshold(self, report_payload):
        report_payload["physics"]["vehicleA_speed"] = 65
        report = AnalysisReport.model_validate(report_payload)

        assessment = assess_hydroplaning(report)

        assert assessment.threshold_mph == 58.5
        assert assessment.at_risk is True

    def test_assessment_below_threshold(self, report_payload):
        report = AnalysisReport.model_validate(report_payload)

        assert assess_hydroplaning(report, tire_pressure_psi=32).at_risk is False


@pytest.mark.unit
class TestEnvironmentalRiskProfile:
    def test_benign_conditions(self):
        profile = environmental_risk_profile(_environment())

        assert profile == {
            "Road Friction Risk": pytest.approx(12.5),
            "Visibility Risk": 0.0,
            "Hydroplaning Risk": 0.0,
            "Light Risk": 20.0,
            "Weather Severity": 0.0,
        }

    def test_hazardous_conditions(self):
        profile = environmental_risk_profile(_environment(
            roadFrictionCoefficient=0.3,
            visibilityDistance=200,
            hydroplaningThresholdSpeed=50,
            lightCondition="Night - Unlit",
            weatherContributionPercentage=45,
        ))

        assert profile["Road Friction Risk"] == pytest.approx(75)
        assert profile["Visibility Risk"] == pytest.approx(80)
        assert profile["Hydroplaning Risk"] == pytest.approx(62.5)
        assert profile["Light Risk"] == 80.0
        assert profile["Weather Severity"] == 45

    def test_values_clamped(self):
        profile = environmental_risk_profile(_environment(
            roadFrictionCoefficient=0.0,
            visibilityDistance=5000,
            hydroplaningThresholdSpeed=10,
        ))

        assert profile["Road Friction Risk"] == 100.0
        assert profile["Visibility Risk"] == 0.0
        assert profile["Hydroplaning Risk"] == 100.0
