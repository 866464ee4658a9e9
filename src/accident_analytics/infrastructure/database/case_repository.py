"""
Case Repository

Remote mirror operations on the ``cases`` table: select ordered by recency,
insert, select by id.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from sqlalchemy import select

from accident_analytics.infrastructure.database.client import DatabaseClient
from accident_analytics.infrastructure.database.models import CaseDB
from accident_analytics.models.cases import CaseFile, CaseStatus, Parties
from accident_analytics.models.report import AnalysisReport

logger = logging.getLogger(__name__)

DEFAULT_THUMBNAIL = "https://picsum.photos/400/225?grayscale"


class CaseRepository:
    """Async SQLAlchemy access to the remote case mirror"""

    def __init__(self, client: DatabaseClient):
        self.client = client

    async def list_cases(self) -> List[CaseFile]:
        async with self.client.get_session() as session:
            stmt = select(CaseDB).order_by(CaseDB.created_at.desc())
            result = await session.execute(stmt)
            rows = result.scalars().all()

        return [self._to_case(row) for row in rows]

    async def insert(self, case: CaseFile) -> None:
        row = CaseDB(
            id=case.id,
            reference_number=case.reference_number,
            status=case.status.value,
            created_at=datetime.combine(date.fromisoformat(case.date_created), datetime.now(timezone.utc).timetz()),
            description=case.description,
            location=case.location,
            plaintiff=case.parties.plaintiff,
            defendant=case.parties.defendant,
            report_data=case.report.to_wire() if case.report else None,
            thumbnail_url=case.thumbnail_url,
        )
        async with self.client.transaction() as session:
            session.add(row)

        logger.info(f"Mirrored case {case.id} to remote store")

    async def get_report_data(self, case_id: str) -> Optional[Dict[str, Any]]:
        async with self.client.get_session() as session:
            stmt = select(CaseDB.report_data).where(CaseDB.id == case_id)
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    def _to_case(self, row: CaseDB) -> CaseFile:
        report = None
        if row.report_data:
            try:
                report = AnalysisReport.model_validate(row.report_data)
            except ValidationError as e:
                logger.warning(f"Stored report for case {row.id} does not match the contract: {e}")

        return CaseFile(
            id=row.id,
            reference_number=row.reference_number,
            status=CaseStatus(row.status),
            date_created=row.created_at.date().isoformat(),
            description=row.description or "",
            location=row.location or "",
            thumbnail_url=row.thumbnail_url or DEFAULT_THUMBNAIL,
            parties=Parties(plaintiff=row.plaintiff or "", defendant=row.defendant or ""),
            report=report,
        )
