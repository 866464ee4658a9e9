"""
Intake Session Registry

Holds the live upload-wizard sessions. Each session owns an orchestrator and
its evidence queue; analysis runs as a background asyncio task.
"""

import asyncio
import logging
import mimetypes
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from accident_analytics.config.settings import settings
from accident_analytics.core.case_store import CaseStore
from accident_analytics.core.errors import IntakeError, IntakeNotFound, InvalidTransition
from accident_analytics.core.orchestrator import AnalysisOrchestrator, AnalysisState
from accident_analytics.core.validation import ValidationPipeline
from accident_analytics.infrastructure.analysis.provider import AnalysisProvider
from accident_analytics.infrastructure.storage.provider import StorageProvider, blob_key, content_digest
from accident_analytics.models.evidence import EvidenceClassification, EvidenceItem, PayloadRef

logger = logging.getLogger(__name__)


class IntakeSession:
    def __init__(self, session_id: str, orchestrator: AnalysisOrchestrator):
        self.session_id = session_id
        self.orchestrator = orchestrator
        self.created_at = datetime.now(timezone.utc)
        self.task: Optional[asyncio.Task] = None

    @property
    def queue(self):
        return self.orchestrator.queue

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()


class IntakeSessionRegistry:
    """Business logic for intake sessions"""

    def __init__(
        self,
        provider_getter: Callable[[], AnalysisProvider],
        store: CaseStore,
        storage: StorageProvider,
        pipeline_factory: Callable[[], ValidationPipeline] = ValidationPipeline,
        **orchestrator_options
    ):
        self.provider_getter = provider_getter
        self.store = store
        self.storage = storage
        self.pipeline_factory = pipeline_factory
        self.orchestrator_options = orchestrator_options
        self._sessions: Dict[str, IntakeSession] = {}

    def create(self) -> IntakeSession:
        """Open a session in Intake with an empty queue.

        Raises:
            ValueError: If the analysis provider cannot be configured
        """
        orchestrator = AnalysisOrchestrator(
            self.provider_getter(),
            self.store,
            self.storage,
            self.pipeline_factory(),
            **self.orchestrator_options
        )
        orchestrator.begin()

        session = IntakeSession(uuid4().hex, orchestrator)
        self._sessions[session.session_id] = session
        logger.info(f"Opened intake session {session.session_id}")
        return session

    def get(self, session_id: str) -> IntakeSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise IntakeNotFound(f"Unknown intake session: {session_id}", safe_message="Intake session not found")
        return session

    def list(self) -> List[IntakeSession]:
        return list(self._sessions.values())

    def _validate_file(self, filename: str, file_size: int) -> None:
        """
        Raises:
            ValueError: If the file is empty, too large or of a disallowed type
        """
        if file_size == 0:
            raise ValueError(f"File is empty: {filename}")

        if file_size > settings.max_file_size_bytes:
            raise ValueError(
                f"File too large: {file_size} bytes (max: {settings.max_file_size_mb}MB)"
            )

        extension = Path(filename).suffix.lower()
        if extension not in settings.allowed_extensions:
            raise ValueError(
                f"File type not allowed: {extension} (allowed: {settings.allowed_file_types})"
            )

    def _require_editable(self, session: IntakeSession) -> None:
        if session.orchestrator.state != AnalysisState.INTAKE or session.running:
            raise IntakeError(
                f"Session {session.session_id} is {session.orchestrator.state.value}",
                safe_message="Evidence can only be changed while the session is awaiting evidence."
            )

    async def add_evidence(
        self,
        session_id: str,
        file_content: bytes,
        filename: str,
        classification: EvidenceClassification,
        content_type: Optional[str] = None
    ) -> EvidenceItem:
        """Store the payload by content digest and queue it.

        Raises:
            IntakeError: Unknown session or session not in intake
            ValueError: If file validation fails
        """
        session = self.get(session_id)
        self._require_editable(session)
        self._validate_file(filename, len(file_content))

        mime_type = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        digest = content_digest(file_content)
        key = await self.storage.upload(BytesIO(file_content), blob_key(digest), mime_type)

        payload = PayloadRef(
            storage_key=key,
            filename=filename,
            mime_type=mime_type,
            size=len(file_content),
            digest=digest,
        )
        [item] = session.queue.add([payload], classification)
        return item

    async def remove_evidence(self, session_id: str, evidence_id: str) -> EvidenceItem:
        session = self.get(session_id)
        self._require_editable(session)
        item = session.queue.remove(evidence_id)
        await self._release_blob(item.payload.storage_key)
        return item

    async def _release_blob(self, storage_key: str) -> None:
        if any(s.queue.references(storage_key) for s in self._sessions.values()):
            return
        await self.storage.delete(storage_key)

    def start_analysis(self, session_id: str, jurisdiction: str, physics_method: Optional[str] = None) -> IntakeSession:
        """Launch the orchestrator run in the background.

        Raises:
            IntakeError: Empty queue or unknown session
            InvalidTransition: Session not in Intake or already running
        """
        session = self.get(session_id)
        orchestrator = session.orchestrator

        if session.running or orchestrator.state != AnalysisState.INTAKE:
            raise InvalidTransition(orchestrator.state.value, AnalysisState.VALIDATING.value)
        if len(session.queue) == 0:
            raise IntakeError(
                "Cannot start analysis with an empty evidence queue",
                safe_message="Select at least one evidence file to continue."
            )

        session.task = asyncio.create_task(orchestrator.run(jurisdiction, physics_method))
        session.task.add_done_callback(lambda task: self._on_run_finished(session, task))
        logger.info(f"Analysis started for session {session_id} ({jurisdiction})")
        return session

    async def retry(self, session_id: str) -> IntakeSession:
        """Re-run analysis for a failed session with its last jurisdiction"""
        session = self.get(session_id)
        orchestrator = session.orchestrator

        if orchestrator.state == AnalysisState.FAILED:
            await self._cancel_task(session)
            orchestrator.retry_now()
        elif orchestrator.state != AnalysisState.INTAKE or orchestrator.last_error is None:
            raise InvalidTransition(orchestrator.state.value, AnalysisState.VALIDATING.value)

        return self.start_analysis(session_id, orchestrator.jurisdiction, orchestrator.physics_method)

    async def close(self, session_id: str) -> None:
        """Cancel any run in progress and discard the session"""
        session = self.get(session_id)
        await self._cancel_task(session)
        del self._sessions[session_id]

        for item in session.queue.list():
            await self._release_blob(item.payload.storage_key)
        logger.info(f"Closed intake session {session_id}")

    async def shutdown(self) -> None:
        for session in self.list():
            await self._cancel_task(session)

    async def _cancel_task(self, session: IntakeSession) -> None:
        if not session.running:
            return
        session.task.cancel()
        try:
            await session.task
        except asyncio.CancelledError:
            logger.info(f"Analysis cancelled for session {session.session_id}")

    def _on_run_finished(self, session: IntakeSession, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Analysis task for session {session.session_id} crashed: {error!r}")
