"""Insertion-ordered store of verification records."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .models import RecordStatus, VerificationRecord, as_utc

LOGGER = logging.getLogger(__name__)

DEFAULT_QUERY_TEMPLATE = "{name}: five-character UN/LOCODE, {language} name and country"


def parse_names(text: str) -> List[str]:
    """Split pasted text into one trimmed name per non-empty line."""

    return [line.strip() for line in (text or "").splitlines() if line.strip()]


class Ledger:
    """Ordered collection of :class:`VerificationRecord` objects.

    New records are only ever appended; existing records are mutated in place
    as they move through their status transitions. Duplicate names are kept
    as independent records.
    """

    def __init__(
        self,
        records: Optional[Iterable[VerificationRecord]] = None,
        *,
        query_template: str = DEFAULT_QUERY_TEMPLATE,
        language: str = "Chinese",
    ) -> None:
        self._records: List[VerificationRecord] = list(records or [])
        self.query_template = query_template
        self.language = language

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[VerificationRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> VerificationRecord:
        return self._records[index]

    @property
    def records(self) -> List[VerificationRecord]:
        return list(self._records)

    # ------------------------------------------------------------------
    # Intake
    # ------------------------------------------------------------------
    def add_names(self, names: Iterable[str]) -> List[VerificationRecord]:
        """Append a pending record for every non-blank name."""

        added: List[VerificationRecord] = []
        for name in names:
            cleaned = (name or "").strip()
            if not cleaned:
                continue
            record = VerificationRecord(
                original_name=cleaned,
                query_text=self.query_template.format(name=cleaned, language=self.language),
            )
            self._records.append(record)
            added.append(record)
        LOGGER.debug("Appended %s record(s) to the ledger", len(added))
        return added

    def add_raw_text(self, text: str) -> List[VerificationRecord]:
        return self.add_names(parse_names(text))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def eligible(self) -> List[VerificationRecord]:
        """Records the next run will process (pending or failed), in ledger order."""

        return [record for record in self._records if record.is_eligible]

    def completed(self) -> List[VerificationRecord]:
        return [record for record in self._records if record.status is RecordStatus.COMPLETED]

    def counts(self) -> Dict[RecordStatus, int]:
        counts = {status: 0 for status in RecordStatus}
        for record in self._records:
            counts[record.status] += 1
        return counts

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------
    def clear(self) -> None:
        """Drop every record. A user-level reset, never called during a run."""

        self._records.clear()

    def recover_stale(self, max_age: timedelta, now: Optional[datetime] = None) -> int:
        """Demote in-flight records untouched for longer than ``max_age`` to pending.

        Records left in flight by an abandoned run would otherwise never be
        picked up again.
        """

        now = as_utc(now) if now else datetime.now(timezone.utc)
        demoted = 0
        for record in self._records:
            if record.status is RecordStatus.IN_FLIGHT and now - as_utc(record.updated_at) > max_age:
                record.mark_pending()
                demoted += 1
        if demoted:
            LOGGER.info("Demoted %s stale in-flight record(s) back to pending", demoted)
        return demoted

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "query_template": self.query_template,
            "language": self.language,
            "records": [record.to_dict() for record in self._records],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ledger":
        return cls(
            [VerificationRecord.from_dict(item) for item in data.get("records", [])],
            query_template=data.get("query_template") or DEFAULT_QUERY_TEMPLATE,
            language=data.get("language") or "Chinese",
        )


__all__ = ["DEFAULT_QUERY_TEMPLATE", "Ledger", "parse_names"]
