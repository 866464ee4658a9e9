"""
Derived Report Metrics

Pure functions computed from a report for visualization and risk flags.
"""

import math
from typing import Dict, Optional

from pydantic import BaseModel

from accident_analytics.models.report import AnalysisReport, EnvironmentalAnalysis

DEFAULT_TIRE_PRESSURE_PSI = 32.0
HORNE_COEFFICIENT = 10.35


def hydroplaning_threshold(tire_pressure_psi: float = DEFAULT_TIRE_PRESSURE_PSI) -> float:
    """Dynamic hydroplaning speed in mph, Horne's equation Vp = 10.35 * sqrt(psi)"""
    if tire_pressure_psi <= 0:
        raise ValueError("Tire pressure must be positive")
    return HORNE_COEFFICIENT * math.sqrt(tire_pressure_psi)


class HydroplaningAssessment(BaseModel):
    tire_pressure_psi: float
    threshold_mph: float
    vehicle_speed_mph: float
    at_risk: bool


def assess_hydroplaning(
    report: AnalysisReport,
    tire_pressure_psi: float = DEFAULT_TIRE_PRESSURE_PSI
) -> HydroplaningAssessment:
    threshold = hydroplaning_threshold(tire_pressure_psi)
    speed = report.physics.vehicle_a_speed
    return HydroplaningAssessment(
        tire_pressure_psi=tire_pressure_psi,
        threshold_mph=round(threshold, 1),
        vehicle_speed_mph=speed,
        at_risk=speed > threshold,
    )


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def environmental_risk_profile(environment: EnvironmentalAnalysis) -> Dict[str, float]:
    """Five-axis 0-100 risk profile for the environmental radar"""
    threshold: Optional[float] = environment.hydroplaning_threshold_speed
    return {
        "Road Friction Risk": _clamp((0.9 - environment.road_friction_coefficient) * 125),
        "Visibility Risk": _clamp((1000 - environment.visibility_distance) / 10),
        "Hydroplaning Risk": _clamp((75 - threshold) * 2.5) if threshold else 0.0,
        "Light Risk": 80.0 if "Night" in environment.light_condition else 20.0,
        "Weather Severity": _clamp(environment.weather_contribution_percentage),
    }
