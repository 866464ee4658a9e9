"""
Analysis Orchestrator

Drives one intake session through

    Idle -> Intake -> Validating -> Requesting -> Parsing -> Complete

with Failed reachable from Requesting and Parsing, and Failed -> Intake after a
cool-down. A CaseFile is committed only once Complete has been reached.
"""

import asyncio
import itertools
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from pydantic import BaseModel, Field

from accident_analytics.config.settings import settings
from accident_analytics.core.case_store import CaseStore
from accident_analytics.core.errors import (
    AccidentAnalyticsError,
    AnalysisError,
    AnalysisTimeout,
    IntakeError,
    InvalidTransition,
    ValidationAborted,
)
from accident_analytics.core.intake import EvidenceQueue
from accident_analytics.core.validation import ValidationPipeline
from accident_analytics.infrastructure.analysis.parsing import parse_report
from accident_analytics.infrastructure.analysis.provider import AnalysisProvider, ProviderResponse
from accident_analytics.infrastructure.storage.provider import StorageProvider, content_digest
from accident_analytics.models.evidence import (
    AnalysisRequest,
    EvidencePart,
    EvidenceStatus,
    ValidationCheck,
)
from accident_analytics.models.report import AnalysisReport

logger = logging.getLogger(__name__)


class AnalysisState(str, Enum):
    IDLE = "idle"
    INTAKE = "intake"
    VALIDATING = "validating"
    REQUESTING = "requesting"
    PARSING = "parsing"
    COMPLETE = "complete"
    FAILED = "failed"


TRANSITIONS: Dict[AnalysisState, Set[AnalysisState]] = {
    AnalysisState.IDLE: {AnalysisState.INTAKE},
    AnalysisState.INTAKE: {AnalysisState.VALIDATING},
    AnalysisState.VALIDATING: {AnalysisState.REQUESTING, AnalysisState.INTAKE},
    AnalysisState.REQUESTING: {AnalysisState.PARSING, AnalysisState.FAILED},
    AnalysisState.PARSING: {AnalysisState.COMPLETE, AnalysisState.FAILED},
    AnalysisState.FAILED: {AnalysisState.INTAKE},
    AnalysisState.COMPLETE: set(),
}

FAILURE_MESSAGE = "Analysis failed. Retrying with fallback model..."
VALIDATION_ABORT_MESSAGE = "Evidence validation could not complete. Please review the queued files."


class OrchestratorEvent(BaseModel):
    kind: str = Field(..., description="transition, status or check")
    state: AnalysisState
    message: Optional[str] = None
    checks: List[ValidationCheck] = Field(default_factory=list)


Listener = Callable[[OrchestratorEvent], Any]


class AnalysisOrchestrator:
    """State machine for one evidence intake-to-analysis session"""

    def __init__(
        self,
        provider: AnalysisProvider,
        store: CaseStore,
        storage: StorageProvider,
        pipeline: Optional[ValidationPipeline] = None,
        *,
        timeout: Optional[float] = None,
        status_interval: Optional[float] = None,
        retry_cooldown: Optional[float] = None,
        auto_retry: Optional[bool] = None,
        max_auto_retries: Optional[int] = None,
        allow_simulation: Optional[bool] = None,
        strict_liability: Optional[bool] = None
    ):
        self.provider = provider
        self.store = store
        self.storage = storage
        self.pipeline = pipeline or ValidationPipeline()

        self.timeout = settings.analysis_timeout_seconds if timeout is None else timeout
        self.status_interval = settings.status_interval_seconds if status_interval is None else status_interval
        self.retry_cooldown = settings.retry_cooldown_seconds if retry_cooldown is None else retry_cooldown
        self.auto_retry = settings.auto_retry_analysis if auto_retry is None else auto_retry
        self.max_auto_retries = settings.max_auto_retries if max_auto_retries is None else max_auto_retries
        self.allow_simulation = settings.allow_simulated_fallback if allow_simulation is None else allow_simulation
        self.strict_liability = settings.strict_liability_balance if strict_liability is None else strict_liability

        self.queue = EvidenceQueue()
        self.state = AnalysisState.IDLE
        self.checks: List[ValidationCheck] = []
        self.warnings: List[str] = []
        self.status_message: Optional[str] = None
        self.status_history: List[str] = []
        self.jurisdiction: Optional[str] = None
        self.physics_method: str = settings.default_physics_method
        self.report: Optional[AnalysisReport] = None
        self.case_id: Optional[str] = None
        self.last_error: Optional[AccidentAnalyticsError] = None

        self._listeners: List[Listener] = []
        self._validated_revision: Optional[int] = None
        self._auto_retries = 0

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self, kind: str, message: Optional[str] = None) -> None:
        event = OrchestratorEvent(
            kind=kind,
            state=self.state,
            message=message,
            checks=[check.model_copy() for check in self.checks],
        )
        for listener in self._listeners:
            listener(event)

    def _emit(self, message: str) -> None:
        self.status_message = message
        self.status_history.append(message)
        self._notify("status", message)

    def _transition(self, target: AnalysisState) -> None:
        if target not in TRANSITIONS[self.state]:
            raise InvalidTransition(self.state.value, target.value)

        if target == AnalysisState.REQUESTING and not self.validation_complete:
            raise InvalidTransition(self.state.value, target.value)

        logger.debug(f"Orchestrator {self.state.value} -> {target.value}")
        self.state = target
        self._notify("transition")

    @property
    def validation_complete(self) -> bool:
        return bool(self.checks) and all(check.status.is_terminal for check in self.checks)

    # ------------------------------------------------------------------
    # Operator actions
    # ------------------------------------------------------------------

    def begin(self) -> None:
        """Idle -> Intake with an empty queue"""
        self._transition(AnalysisState.INTAKE)
        self._emit("Awaiting evidence")

    def retry_now(self) -> None:
        """Manual retry: skip the remaining cool-down"""
        if self.state == AnalysisState.FAILED:
            self._return_to_intake()

    async def run(self, jurisdiction: str, physics_method: Optional[str] = None) -> Optional[str]:
        """Validate, analyze and commit the queued evidence.

        Returns the committed case id, or None when the run ended back in
        Intake (validation abort or failure after cool-down).

        Raises:
            IntakeError: The queue is empty
            InvalidTransition: Not in Intake
        """
        if self.state != AnalysisState.INTAKE:
            raise InvalidTransition(self.state.value, AnalysisState.VALIDATING.value)
        if len(self.queue) == 0:
            raise IntakeError(
                "Cannot start analysis with an empty evidence queue",
                safe_message="Select at least one evidence file to continue."
            )

        self.jurisdiction = jurisdiction
        self.physics_method = physics_method or self.physics_method
        self.last_error = None

        self._transition(AnalysisState.VALIDATING)
        try:
            await self._validate()
        except ValidationAborted as e:
            self._abort_validation(e)
            return None

        self._transition(AnalysisState.REQUESTING)
        try:
            request = await self._build_request()
            response = await self._await_with_status(self.provider.generate(request))
        except AnalysisError as e:
            return await self._fail(e)
        except Exception as e:
            return await self._fail(AnalysisError(f"Collaborator invocation failed: {e!r}"))

        self._transition(AnalysisState.PARSING)
        try:
            report = self._parse(response)
        except AnalysisError as e:
            return await self._fail(e)

        return await self._complete(report)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _validate(self) -> None:
        if self._validated_revision == self.queue.revision and self.validation_complete:
            self._emit("Evidence already validated; reusing integrity checks")
            return

        self._validated_revision = None
        self.warnings = []
        run = self.pipeline.run(self.queue.list(), self.storage)
        self.checks = [check.model_copy() for check in run.checks]
        self._emit("Running forensic authentication protocols...")

        async for snapshot in run:
            for index, check in enumerate(self.checks):
                if check.check_id == snapshot.check_id:
                    self.checks[index] = snapshot
            self._notify("check", f"{snapshot.label}: {snapshot.status.value}")

        for warning in run.warnings:
            self.warnings.append(f"{warning.label}: {warning.detail}")
        self._validated_revision = self.queue.revision

    def _abort_validation(self, error: ValidationAborted) -> None:
        logger.warning(f"Validation aborted: {error}")
        self.last_error = error
        self.checks = []
        self.warnings = []
        self._validated_revision = None
        self._transition(AnalysisState.INTAKE)
        self._emit(VALIDATION_ABORT_MESSAGE)

    async def _build_request(self) -> AnalysisRequest:
        self._emit("Encrypting and uploading media...")
        parts = []
        for item in self.queue.list():
            item.status = EvidenceStatus.UPLOADING
            item.progress = 0
            try:
                data = await self.storage.read(item.payload.storage_key)
            except FileNotFoundError as e:
                raise AnalysisError(f"Evidence payload missing: {item.payload.storage_key}") from e

            if content_digest(data) != item.payload.digest:
                raise AnalysisError(f"Evidence payload digest mismatch for {item.evidence_id}")

            parts.append(EvidencePart(mime_type=item.payload.mime_type, data=data, digest=item.payload.digest))
            item.progress = 100
            item.status = EvidenceStatus.ANALYZING

        return AnalysisRequest(
            parts=tuple(parts),
            jurisdiction=self.jurisdiction,
            physics_method=self.physics_method,
            allow_simulation=self.allow_simulation,
        )

    def _waiting_messages(self) -> List[str]:
        return [
            f"Initializing Physics Engine ({self.physics_method})...",
            "Analyzing Voice Stress Microtremors...",
            f"{self.provider.name.capitalize()} AI: Analyzing Liability ({self.jurisdiction})...",
            "Reconstructing Scene...",
        ]

    async def _await_with_status(self, call: Awaitable[ProviderResponse]) -> ProviderResponse:
        """Await the collaborator, narrating progress and enforcing the timeout"""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        messages = itertools.cycle(self._waiting_messages())
        task = asyncio.ensure_future(call)

        try:
            self._emit(next(messages))
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise AnalysisTimeout(
                        f"Collaborator did not respond within {self.timeout:g}s",
                        safe_message="Analysis timed out. Please retry."
                    )
                done, _ = await asyncio.wait({task}, timeout=min(self.status_interval, remaining))
                if done:
                    return task.result()
                self._emit(next(messages))
        finally:
            if not task.done():
                task.cancel()

    def _parse(self, response: ProviderResponse) -> AnalysisReport:
        report = parse_report(
            response.text,
            model=response.model,
            allow_simulation=self.allow_simulation,
            strict_liability=self.strict_liability,
        )
        for flag in report.integrity_flags():
            logger.warning(f"Report flag: {flag}")
            self.warnings.append(flag)
        return report

    async def _complete(self, report: AnalysisReport) -> str:
        self._transition(AnalysisState.COMPLETE)
        self.report = report
        self._emit("Finalizing Forensic Report...")

        self.case_id = await self.store.create_case(report, self.jurisdiction)
        for item in self.queue.list():
            item.case_id = self.case_id
            item.status = EvidenceStatus.COMPLETE

        self._emit("Analysis Complete")
        logger.info(f"Analysis complete, committed case {self.case_id}")
        return self.case_id

    async def _fail(self, error: AnalysisError) -> Optional[str]:
        logger.error(f"Analysis failed in {self.state.value}: {error}")
        self.last_error = error
        self._transition(AnalysisState.FAILED)
        self._emit(FAILURE_MESSAGE)

        await asyncio.sleep(self.retry_cooldown)
        if self.state != AnalysisState.FAILED:
            # Operator already retried manually
            return None
        self._return_to_intake()

        if self.auto_retry and self._auto_retries < self.max_auto_retries:
            self._auto_retries += 1
            logger.info(f"Automatic analysis retry {self._auto_retries}/{self.max_auto_retries}")
            return await self.run(self.jurisdiction, self.physics_method)
        return None

    def _return_to_intake(self) -> None:
        for item in self.queue.list():
            item.status = EvidenceStatus.QUEUED
            item.progress = 0
        self._transition(AnalysisState.INTAKE)
        self._emit("Ready to retry analysis")
