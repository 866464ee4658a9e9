"""
Report Parsing

Defensive unwrapping of collaborator output into an AnalysisReport. Any
problem is a ReportParseError; nothing is partially accepted.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from accident_analytics.core.errors import ReportParseError, SimulationNotPermitted
from accident_analytics.models.report import LIABILITY_SUM_TOLERANCE, AnalysisReport, Provenance

logger = logging.getLogger(__name__)

SIMULATION_FLAG = "isSimulated"

_OPENING_FENCE = re.compile(r"^\s*```[a-zA-Z]*\s*")
_CLOSING_FENCE = re.compile(r"\s*```\s*$")


def strip_fences(text: str) -> str:
    """Remove markdown code fences wrapped around a JSON payload"""
    text = _OPENING_FENCE.sub("", text)
    return _CLOSING_FENCE.sub("", text)


def _load_object(text: str) -> dict:
    body = strip_fences(text)
    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        # Prose around the object: fall back to the outermost braces
        start, end = body.find("{"), body.rfind("}")
        if start == -1 or end <= start:
            raise ReportParseError("Response contains no JSON object")
        try:
            payload = json.loads(body[start:end + 1])
        except json.JSONDecodeError as e:
            raise ReportParseError(f"Response is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ReportParseError(f"Response root is {type(payload).__name__}, expected object")
    return payload


def parse_report(
    text: Optional[str],
    *,
    model: str,
    allow_simulation: bool = False,
    strict_liability: bool = False,
    generated_at: Optional[datetime] = None
) -> AnalysisReport:
    """Parse collaborator text into a schema-conformant report with provenance.

    Raises:
        ReportParseError: Empty, malformed or nonconforming response
        SimulationNotPermitted: Simulated report while simulation is disabled
    """
    if not text or not text.strip():
        raise ReportParseError("No response text")

    payload = _load_object(text)

    simulated = bool(payload.pop(SIMULATION_FLAG, False))
    # Provenance is attached locally, never taken from the collaborator
    payload.pop("provenance", None)

    if simulated and not allow_simulation:
        raise SimulationNotPermitted(
            "Collaborator returned a simulated report but simulated fallback is disabled",
            safe_message="The evidence was insufficient for a grounded analysis."
        )

    try:
        report = AnalysisReport.model_validate(payload)
    except ValidationError as e:
        raise ReportParseError(f"Response does not conform to the report contract: {e}") from e

    if strict_liability and abs(report.liability_total() - 100) > LIABILITY_SUM_TOLERANCE:
        raise ReportParseError(
            f"Liability percentages sum to {report.liability_total():g}, expected 100"
        )

    if simulated:
        logger.warning(f"Accepted simulated report from {model} (simulated fallback enabled)")

    provenance = Provenance(
        model=model,
        simulated=simulated,
        simulation_permitted=allow_simulation,
        generated_at=generated_at or datetime.now(timezone.utc),
    )
    return report.model_copy(update={"provenance": provenance})
