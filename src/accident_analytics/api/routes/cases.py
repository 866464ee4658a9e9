"""
Case API Routes

Case list, report retrieval, exports and derived metrics.
"""

import logging
from typing import Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from accident_analytics.api.dependencies import get_case_store
from accident_analytics.core.case_store import CaseStore
from accident_analytics.core.exports import EXPORT_FORMATS, render_export
from accident_analytics.core.metrics import (
    DEFAULT_TIRE_PRESSURE_PSI,
    assess_hydroplaning,
    environmental_risk_profile,
)
from accident_analytics.core.placeholders import placeholder_report
from accident_analytics.models import (
    AnalysisReport,
    CaseFile,
    CaseListResponse,
    CaseSummary,
    HydroplaningResponse,
    ReportResponse,
)

router = APIRouter(prefix="/api/v1/cases", tags=["cases"])
logger = logging.getLogger(__name__)


async def _report_for(case_id: str, store: CaseStore) -> Tuple[AnalysisReport, bool]:
    """Return (report, is_placeholder); 404 when the case is unknown"""
    report = await store.get_report_by_case_id(case_id)
    if report is not None:
        return report, False

    if await store.get_case(case_id) is None:
        raise HTTPException(status_code=404, detail="Case not found")
    return placeholder_report(), True


@router.get(
    "",
    response_model=CaseListResponse,
    summary="List Cases",
    description="""
List case files, newest first.

When a remote case store is configured, its rows are returned together with
any session cases that have not been mirrored yet; if the remote store is
unreachable the session list is returned instead.
    """,
    responses={
        200: {"description": "Case list returned"}
    }
)
async def list_cases(store: CaseStore = Depends(get_case_store)) -> CaseListResponse:
    cases = await store.fetch_cases()
    return CaseListResponse(
        cases=[CaseSummary.from_case(case) for case in cases],
        total=len(cases),
    )


@router.get(
    "/{case_id}",
    response_model=CaseFile,
    summary="Get Case",
    responses={
        200: {"description": "Case returned"},
        404: {"description": "Case not found"}
    }
)
async def get_case(case_id: str, store: CaseStore = Depends(get_case_store)) -> CaseFile:
    case = await store.get_case(case_id)
    if case is None:
        raise HTTPException(status_code=404, detail="Case not found")
    return case


@router.get(
    "/{case_id}/report",
    response_model=ReportResponse,
    summary="Get Case Report",
    description="""
Return the case's analysis report in wire format.

**Lookup order**:
1. Session case list
2. Remote case store
3. A demonstration report clearly labelled as a placeholder (`placeholder: true`)

`sections` marks each optional section as `present` or `not_analyzed`;
`integrity_flags` lists consistency problems such as liability percentages
that do not sum to 100.
    """,
    responses={
        200: {"description": "Report returned"},
        404: {"description": "Case not found"}
    }
)
async def get_report(case_id: str, store: CaseStore = Depends(get_case_store)) -> ReportResponse:
    report, is_placeholder = await _report_for(case_id, store)

    environmental_risk = None
    if report.environmental is not None:
        environmental_risk = environmental_risk_profile(report.environmental)

    return ReportResponse(
        case_id=case_id,
        placeholder=is_placeholder,
        report=report.to_wire(),
        sections={name: variant.kind for name, variant in report.sections().items()},
        integrity_flags=report.integrity_flags(),
        environmental_risk=environmental_risk,
    )


@router.get(
    "/{case_id}/report/export",
    summary="Export Case Report",
    description="""
Download the report as `json` (verbatim report), `csv` (summary rows) or
`pdf` (paginated forensic report).

Filename: `ForensicReport_<case id>_<YYYY-MM-DD>.<ext>`. Placeholder
reports are not exported.
    """,
    responses={
        200: {"description": "Export file returned"},
        404: {"description": "Case or report not found"},
        422: {"description": "Unsupported format"}
    }
)
async def export_report(
    case_id: str,
    format: str = Query("json", pattern=f"^({'|'.join(EXPORT_FORMATS)})$", description="Export format"),
    store: CaseStore = Depends(get_case_store)
):
    report = await store.get_report_by_case_id(case_id)
    if report is None:
        raise HTTPException(status_code=404, detail="No analysis report for this case")

    content, media_type, filename = render_export(report, case_id, format)
    logger.info(f"Exported report for {case_id} as {format}")
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get(
    "/{case_id}/report/hydroplaning",
    response_model=HydroplaningResponse,
    summary="Hydroplaning Risk",
    description="""
Dynamic hydroplaning threshold by Horne's equation (Vp = 10.35 x sqrt(PSI))
compared with Vehicle A's reconstructed speed.
    """,
    responses={
        200: {"description": "Assessment returned"},
        404: {"description": "Case not found"}
    }
)
async def hydroplaning(
    case_id: str,
    tire_pressure_psi: float = Query(DEFAULT_TIRE_PRESSURE_PSI, gt=0, le=150, description="Tire pressure (PSI)"),
    store: CaseStore = Depends(get_case_store)
) -> HydroplaningResponse:
    report, _ = await _report_for(case_id, store)
    assessment = assess_hydroplaning(report, tire_pressure_psi)
    return HydroplaningResponse(case_id=case_id, **assessment.model_dump())
