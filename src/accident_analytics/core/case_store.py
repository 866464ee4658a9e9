"""
Case Store

Owns the canonical case list. Writes land in the process-local list first and
are mirrored to the remote store on a best-effort basis; reads fall back to the
local list whenever the remote store is unconfigured or unreachable.
"""

import logging
import random
from datetime import date
from typing import List, Optional
from uuid import uuid4

from pydantic import ValidationError

from accident_analytics.core.placeholders import seed_cases
from accident_analytics.infrastructure.database.case_repository import CaseRepository
from accident_analytics.models.cases import CaseFile, CaseStatus, Parties
from accident_analytics.models.report import AnalysisReport

logger = logging.getLogger(__name__)

DEFAULT_PLAINTIFF = "Vehicle B (Plaintiff)"
DEFAULT_DEFENDANT = "Vehicle A (Defendant)"


class CaseStore:
    """Case/report store adapter"""

    def __init__(self, repository: Optional[CaseRepository] = None, seed: bool = True):
        self.repository = repository
        self._cases: List[CaseFile] = seed_cases() if seed else []

    @property
    def remote_configured(self) -> bool:
        return self.repository is not None

    async def fetch_cases(self) -> List[CaseFile]:
        """List cases, newest first.

        Remote rows are merged with session cases that have not been mirrored yet.
        """
        if not self.remote_configured:
            logger.debug("Remote case store not configured, using session data")
            return [case.snapshot() for case in self._cases]

        try:
            remote_cases = await self.repository.list_cases()
        except Exception as e:
            logger.warning(f"Remote case fetch failed (using session fallback): {e}")
            return [case.snapshot() for case in self._cases]

        remote_ids = {case.id for case in remote_cases}
        unsynced = [case.snapshot() for case in self._cases if case.has_report and case.id not in remote_ids]
        return unsynced + remote_cases

    async def create_case(self, report: AnalysisReport, jurisdiction: str) -> str:
        """Commit a completed report as a new Admissible case and return its id"""
        case = CaseFile(
            id=f"c-{uuid4().hex[:12]}",
            reference_number=self._new_reference_number(),
            status=CaseStatus.ADMISSIBLE,
            date_created=date.today().isoformat(),
            description=_summarize(report.executive_summary),
            location=jurisdiction,
            thumbnail_url="",
            parties=Parties(plaintiff=DEFAULT_PLAINTIFF, defendant=DEFAULT_DEFENDANT),
            report=report,
        )
        case.thumbnail_url = f"https://picsum.photos/seed/{case.reference_number}/400/225"

        # Local first so the case survives any remote failure
        self._cases.insert(0, case)
        logger.info(f"Created case {case.id} ({case.reference_number}) in {jurisdiction}")

        if self.remote_configured:
            try:
                await self.repository.insert(case)
            except Exception as e:
                logger.warning(f"Background case save failed (session data preserved): {e}")

        return case.id

    async def get_report_by_case_id(self, case_id: str) -> Optional[AnalysisReport]:
        local = self._find_local(case_id)
        if local is not None and local.report is not None:
            return local.report

        if not self.remote_configured:
            return None

        try:
            report_data = await self.repository.get_report_data(case_id)
        except Exception as e:
            logger.warning(f"Remote report fetch failed for {case_id}: {e}")
            return None

        if not report_data:
            return None

        try:
            return AnalysisReport.model_validate(report_data)
        except ValidationError as e:
            logger.warning(f"Stored report for {case_id} does not match the contract: {e}")
            return None

    async def get_case(self, case_id: str) -> Optional[CaseFile]:
        local = self._find_local(case_id)
        if local is not None:
            return local.snapshot()

        for case in await self.fetch_cases():
            if case.id == case_id:
                return case
        return None

    def _find_local(self, case_id: str) -> Optional[CaseFile]:
        for case in self._cases:
            if case.id == case_id:
                return case
        return None

    def _new_reference_number(self) -> str:
        taken = {case.reference_number for case in self._cases}
        year = date.today().year
        while True:
            reference = f"CASE-{year}-{random.randint(1000, 9999)}"
            if reference not in taken:
                return reference


def _summarize(summary: str) -> str:
    first_sentence = summary.split(".")[0]
    return f"{first_sentence[:50]}..."
