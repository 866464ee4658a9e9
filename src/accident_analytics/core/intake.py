"""
Evidence Intake Queue

In-memory queue of evidence items for one intake session. Classification is
supplied by the caller; this module does no I/O.
"""

import logging
from typing import Iterable, List, Optional, Set
from uuid import uuid4

from accident_analytics.core.errors import IntakeNotFound
from accident_analytics.models.evidence import EvidenceClassification, EvidenceItem, PayloadRef

logger = logging.getLogger(__name__)


class EvidenceQueue:
    """Ordered evidence queue with lifetime-unique ids"""

    def __init__(self):
        self._items: List[EvidenceItem] = []
        self._issued_ids: Set[str] = set()
        self._revision = 0

    @property
    def revision(self) -> int:
        """Incremented on every add/remove"""
        return self._revision

    def add(
        self,
        payloads: Iterable[PayloadRef],
        classification: EvidenceClassification
    ) -> List[EvidenceItem]:
        """
        Raises:
            ValueError: Unknown classification; the queue is left unchanged
        """
        classification = EvidenceClassification(classification)
        added = []
        for payload in payloads:
            item = EvidenceItem(
                evidence_id=self._new_id(),
                payload=payload,
                classification=classification,
            )
            self._items.append(item)
            added.append(item)

        if added:
            self._revision += 1
            logger.info(f"Queued {len(added)} {classification.value} evidence item(s)")
        return added

    def remove(self, evidence_id: str) -> EvidenceItem:
        item = self.get(evidence_id)
        if item is None:
            raise IntakeNotFound(
                f"Evidence not in queue: {evidence_id}",
                safe_message="Evidence item not found"
            )
        self._items.remove(item)
        self._revision += 1
        logger.info(f"Removed evidence {evidence_id} from queue")
        return item

    def get(self, evidence_id: str) -> Optional[EvidenceItem]:
        for item in self._items:
            if item.evidence_id == evidence_id:
                return item
        return None

    def list(self) -> List[EvidenceItem]:
        return list(self._items)

    def references(self, storage_key: str) -> bool:
        """True if any queued item still points at storage_key"""
        return any(item.payload.storage_key == storage_key for item in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def _new_id(self) -> str:
        while True:
            candidate = uuid4().hex
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate
