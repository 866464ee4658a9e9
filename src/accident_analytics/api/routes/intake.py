"""
Intake API Routes

Upload-wizard endpoints: open a session, queue evidence, start and retry the
analysis, and poll progress.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from accident_analytics.api.dependencies import get_intake_registry, to_http_error
from accident_analytics.core.errors import AccidentAnalyticsError
from accident_analytics.core.intake_sessions import IntakeSession, IntakeSessionRegistry
from accident_analytics.models import (
    EvidenceClassification,
    EvidenceListResponse,
    EvidenceUploadResponse,
    IntakeSessionResponse,
    StartAnalysisRequest,
)

router = APIRouter(prefix="/api/v1/intake/sessions", tags=["intake"])
logger = logging.getLogger(__name__)


def _session_view(session: IntakeSession) -> IntakeSessionResponse:
    orchestrator = session.orchestrator
    return IntakeSessionResponse(
        session_id=session.session_id,
        state=orchestrator.state.value,
        status_message=orchestrator.status_message,
        running=session.running,
        jurisdiction=orchestrator.jurisdiction,
        physics_method=orchestrator.physics_method,
        evidence=session.queue.list(),
        checks=orchestrator.checks,
        warnings=orchestrator.warnings,
        case_id=orchestrator.case_id,
        error=orchestrator.last_error.safe_message if orchestrator.last_error else None,
        created_at=session.created_at,
    )


@router.post(
    "",
    response_model=IntakeSessionResponse,
    status_code=201,
    summary="Open Intake Session",
    description="""
Open a new evidence intake session with an empty queue.

**Workflow**:
1. Resolves the configured analysis provider
2. Creates an orchestrator in the Intake state
3. Returns the session id used by every other intake endpoint
    """,
    responses={
        201: {"description": "Session opened"},
        503: {"description": "Analysis provider is not configured"}
    }
)
async def open_session(
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
) -> IntakeSessionResponse:
    """Open intake session"""
    try:
        session = registry.create()
    except ValueError as e:
        logger.error(f"Cannot open intake session: {e}")
        raise HTTPException(status_code=503, detail="Analysis provider is not configured")
    return _session_view(session)


@router.get(
    "/{session_id}",
    response_model=IntakeSessionResponse,
    summary="Get Intake Session",
    description="""
Poll the session: orchestrator state, latest status message, validation
checks, queued evidence and, once complete, the committed case id.
Errors are reported with their operator-safe message only.
    """,
    responses={
        200: {"description": "Session snapshot returned"},
        404: {"description": "Session not found"}
    }
)
async def get_session(
    session_id: str,
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
) -> IntakeSessionResponse:
    try:
        return _session_view(registry.get(session_id))
    except AccidentAnalyticsError as e:
        raise to_http_error(e)


@router.delete(
    "/{session_id}",
    status_code=204,
    summary="Cancel Intake Session",
    description="""
Cancel any analysis in progress and discard the session. No case is created
for a cancelled session; queued payloads no other session references are
deleted from storage.
    """,
    responses={
        204: {"description": "Session cancelled"},
        404: {"description": "Session not found"}
    }
)
async def cancel_session(
    session_id: str,
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
):
    try:
        await registry.close(session_id)
    except AccidentAnalyticsError as e:
        raise to_http_error(e)
    return None


@router.post(
    "/{session_id}/evidence",
    response_model=EvidenceUploadResponse,
    status_code=201,
    summary="Queue Evidence File",
    description="""
Upload an evidence file into the session queue.

**Request Format**:
- Content-Type: multipart/form-data
- file: File upload (required)
- classification: video, document, audio or other (required)

Payloads are stored by SHA-256 content digest; the same bytes uploaded twice
share one blob.
    """,
    responses={
        201: {"description": "Evidence queued"},
        400: {"description": "File validation failed or session not accepting evidence"},
        404: {"description": "Session not found"},
        422: {"description": "Missing or unknown classification"},
        500: {"description": "Storage error"}
    }
)
async def upload_evidence(
    session_id: str,
    file: UploadFile = File(..., description="Evidence file to queue"),
    classification: EvidenceClassification = Form(..., description="Evidence classification chosen by the operator"),
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
) -> EvidenceUploadResponse:
    """Queue evidence file"""
    try:
        file_content = await file.read()
        item = await registry.add_evidence(
            session_id,
            file_content=file_content,
            filename=file.filename,
            classification=classification,
            content_type=file.content_type,
        )
    except AccidentAnalyticsError as e:
        raise to_http_error(e)
    except ValueError as e:
        logger.warning(f"File validation failed: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except OSError as e:
        logger.error(f"Evidence storage failed: {e}")
        raise HTTPException(status_code=500, detail="Upload failed")

    logger.info(f"Session {session_id} queued evidence {item.evidence_id}")
    return EvidenceUploadResponse.from_item(item)


@router.get(
    "/{session_id}/evidence",
    response_model=EvidenceListResponse,
    summary="List Queued Evidence",
    responses={
        200: {"description": "Evidence queue returned"},
        404: {"description": "Session not found"}
    }
)
async def list_evidence(
    session_id: str,
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
) -> EvidenceListResponse:
    try:
        items = registry.get(session_id).queue.list()
    except AccidentAnalyticsError as e:
        raise to_http_error(e)
    return EvidenceListResponse(evidence=items, total=len(items))


@router.delete(
    "/{session_id}/evidence/{evidence_id}",
    status_code=204,
    summary="Remove Queued Evidence",
    responses={
        204: {"description": "Evidence removed from the queue"},
        400: {"description": "Session not accepting changes"},
        404: {"description": "Session or evidence not found"}
    }
)
async def remove_evidence(
    session_id: str,
    evidence_id: str,
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
):
    try:
        await registry.remove_evidence(session_id, evidence_id)
    except AccidentAnalyticsError as e:
        raise to_http_error(e)
    return None


@router.post(
    "/{session_id}/analysis",
    response_model=IntakeSessionResponse,
    status_code=202,
    summary="Start Analysis",
    description="""
Start validation and analysis of the queued evidence in the background.

**Workflow**:
1. Runs the ordered integrity checks
2. Sends the evidence to the analysis collaborator with the jurisdiction and physics method
3. Parses the report and commits a new case on success

Poll `GET /api/v1/intake/sessions/{session_id}` for progress.
    """,
    responses={
        202: {"description": "Analysis started"},
        400: {"description": "Evidence queue is empty"},
        404: {"description": "Session not found"},
        409: {"description": "Session is not awaiting analysis"}
    }
)
async def start_analysis(
    session_id: str,
    request: StartAnalysisRequest,
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
) -> IntakeSessionResponse:
    try:
        session = registry.start_analysis(session_id, request.jurisdiction, request.physics_method)
    except AccidentAnalyticsError as e:
        raise to_http_error(e)
    return _session_view(session)


@router.post(
    "/{session_id}/retry",
    response_model=IntakeSessionResponse,
    status_code=202,
    summary="Retry Analysis",
    description="""
Retry a failed analysis with the same evidence and jurisdiction. Completed
integrity checks are reused when the queue has not changed.
    """,
    responses={
        202: {"description": "Retry started"},
        404: {"description": "Session not found"},
        409: {"description": "No failed analysis to retry"}
    }
)
async def retry_analysis(
    session_id: str,
    registry: IntakeSessionRegistry = Depends(get_intake_registry)
) -> IntakeSessionResponse:
    try:
        session = await registry.retry(session_id)
    except AccidentAnalyticsError as e:
        raise to_http_error(e)
    return _session_view(session)
