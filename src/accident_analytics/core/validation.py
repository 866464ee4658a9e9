"""
Validation Pipeline

Ordered integrity checks that gate the analysis. Checks run strictly one after
another; a check never starts before its predecessor reaches a terminal state.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import Counter
from enum import Enum
from typing import AsyncIterator, List, Optional, Sequence

from pydantic import BaseModel

from accident_analytics.config.settings import settings
from accident_analytics.core.errors import ValidationAborted
from accident_analytics.infrastructure.storage.provider import StorageProvider
from accident_analytics.models.evidence import CheckStatus, EvidenceItem, ValidationCheck

logger = logging.getLogger(__name__)


class Verdict(str, Enum):
    VALID = "valid"
    WARNING = "warning"
    ERROR = "error"


class CheckOutcome(BaseModel):
    verdict: Verdict
    detail: Optional[str] = None


class Checker(ABC):
    """One pluggable integrity check"""

    check_id: str
    label: str

    @abstractmethod
    async def check(self, items: Sequence[EvidenceItem], storage: StorageProvider) -> CheckOutcome:
        pass


class SimulatedChecker(Checker):
    """Gating check with a fixed processing delay.

    Confirms every queued payload is still present in storage; no real
    forensic verification is performed.
    """

    def __init__(self, check_id: str, label: str, delay: Optional[float] = None):
        self.check_id = check_id
        self.label = label
        self.delay = settings.validation_step_delay_seconds if delay is None else delay

    async def check(self, items: Sequence[EvidenceItem], storage: StorageProvider) -> CheckOutcome:
        await asyncio.sleep(self.delay)

        for item in items:
            if not await storage.file_exists(item.payload.storage_key):
                raise ValidationAborted(
                    f"Evidence {item.evidence_id} ({item.payload.filename}) disappeared during {self.check_id}",
                    check_id=self.check_id,
                )

        return self.inspect(items)

    def inspect(self, items: Sequence[EvidenceItem]) -> CheckOutcome:
        return CheckOutcome(verdict=Verdict.VALID)


class FrameDuplicationChecker(SimulatedChecker):
    """Flags payloads that were queued more than once"""

    def inspect(self, items: Sequence[EvidenceItem]) -> CheckOutcome:
        counts = Counter(item.payload.digest for item in items)
        duplicates = sorted(
            {item.payload.filename for item in items if counts[item.payload.digest] > 1}
        )
        if duplicates:
            return CheckOutcome(
                verdict=Verdict.WARNING,
                detail=f"Identical content queued more than once: {', '.join(duplicates)}"
            )
        return CheckOutcome(verdict=Verdict.VALID)


def default_checkers(delay: Optional[float] = None) -> List[Checker]:
    return [
        FrameDuplicationChecker("frame", "Video Frame Duplication Check", delay),
        SimulatedChecker("compression", "Compression Artifact Analysis", delay),
        SimulatedChecker("gps", "GPS Metadata Tamper Check", delay),
        SimulatedChecker("audio", "Audio Spectrum / Splicing Detection", delay),
        SimulatedChecker("voice", "Voice Biometrics & Stress Baseline", delay),
    ]


class ValidationRun:
    """Single-use async sequence of check state transitions.

    Yields a snapshot of the check each time it changes state. Iterating a
    second time raises RuntimeError.
    """

    def __init__(self, checkers: Sequence[Checker], items: Sequence[EvidenceItem], storage: StorageProvider):
        self._checkers = list(checkers)
        self._items = list(items)
        self._storage = storage
        self._started = False
        self.checks: List[ValidationCheck] = [
            ValidationCheck(check_id=c.check_id, label=c.label) for c in self._checkers
        ]

    @property
    def complete(self) -> bool:
        return all(check.status.is_terminal for check in self.checks)

    @property
    def warnings(self) -> List[ValidationCheck]:
        return [check for check in self.checks if check.status == CheckStatus.WARNING]

    def __aiter__(self) -> AsyncIterator[ValidationCheck]:
        if self._started:
            raise RuntimeError("Validation run already consumed; start a new run")
        self._started = True
        return self._transitions()

    async def _transitions(self) -> AsyncIterator[ValidationCheck]:
        if not self._items:
            raise ValidationAborted("No evidence to validate")

        for checker, check in zip(self._checkers, self.checks):
            check.status = CheckStatus.CHECKING
            yield check.model_copy()

            try:
                outcome = await checker.check(self._items, self._storage)
            except ValidationAborted:
                raise
            except Exception as e:
                raise ValidationAborted(
                    f"Check {checker.check_id} could not complete: {e!r}",
                    check_id=checker.check_id,
                ) from e

            if outcome.verdict == Verdict.ERROR:
                raise ValidationAborted(
                    f"Check {checker.check_id} failed: {outcome.detail}",
                    check_id=checker.check_id,
                )

            if outcome.verdict == Verdict.WARNING:
                check.status = CheckStatus.WARNING
                check.detail = outcome.detail
                logger.warning(f"Validation warning from {checker.check_id}: {outcome.detail}")
            else:
                check.status = CheckStatus.VALID
            yield check.model_copy()

    async def consume(self) -> List[ValidationCheck]:
        """Drive the run to completion and return the terminal checks"""
        async for _ in self:
            pass
        return [check.model_copy() for check in self.checks]


class ValidationPipeline:
    """Factory for validation runs over a fixed ordered checker list"""

    def __init__(self, checkers: Optional[Sequence[Checker]] = None):
        self.checkers: List[Checker] = list(checkers) if checkers is not None else default_checkers()

    def run(self, items: Sequence[EvidenceItem], storage: StorageProvider) -> ValidationRun:
        return ValidationRun(self.checkers, items, storage)
