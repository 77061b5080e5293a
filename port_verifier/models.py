"""Data models shared by the ledger, the orchestrator, and the oracle clients."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

MAX_SOURCES = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware datetime; naive values are taken to be UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_timestamp(value: Optional[str]) -> datetime:
    if not value:
        return _utcnow()
    return as_utc(datetime.fromisoformat(value))


def name_key(name: str) -> str:
    """Matching key for location names: comparison ignores case."""

    return (name or "").lower()


class RecordStatus(str, Enum):
    """Lifecycle state of a verification record."""

    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"
    FAILED = "failed"


# --- Oracle Response Models ---

@dataclass(slots=True)
class VerificationSource:
    """Citation the verification service used to justify a match."""

    uri: str
    title: str = "Source"

    def to_dict(self) -> Dict[str, str]:
        return {"uri": self.uri, "title": self.title}


@dataclass(slots=True)
class OracleMatch:
    """A single structured match returned for one requested name."""

    original_name: str
    code: str = ""
    localized_name: str = ""
    country_name: str = ""
    remarks: str = ""


@dataclass
class OracleResponse:
    """Result of one batch call: the matches plus the call-wide provenance list."""

    matches: List[OracleMatch] = field(default_factory=list)
    sources: List[VerificationSource] = field(default_factory=list)


# --- Ledger Models ---

@dataclass
class VerificationRecord:
    """One submitted name and its current verification outcome."""

    original_name: str
    query_text: str = ""
    code: str = ""
    localized_name: str = ""
    country_name: str = ""
    remarks: str = ""
    status: RecordStatus = RecordStatus.PENDING
    sources: List[VerificationSource] = field(default_factory=list)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def is_eligible(self) -> bool:
        """Whether the orchestrator should pick this record up on its next run."""

        return self.status in (RecordStatus.PENDING, RecordStatus.FAILED)

    def _set_status(self, status: RecordStatus) -> None:
        self.status = status
        self.updated_at = _utcnow()

    def mark_pending(self) -> None:
        self._set_status(RecordStatus.PENDING)

    def mark_in_flight(self) -> None:
        self._set_status(RecordStatus.IN_FLIGHT)

    def mark_completed(self, match: OracleMatch, sources: List[VerificationSource]) -> None:
        """Copy the match fields verbatim and replace the provenance list."""

        self.code = match.code
        self.localized_name = match.localized_name
        self.country_name = match.country_name
        self.remarks = match.remarks
        self.sources = list(sources[:MAX_SOURCES])
        self._set_status(RecordStatus.COMPLETED)

    def mark_failed(self, reason: str) -> None:
        """Flag the record as failed; previously verified fields are kept."""

        self.remarks = reason
        self._set_status(RecordStatus.FAILED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_name": self.original_name,
            "query_text": self.query_text,
            "code": self.code,
            "localized_name": self.localized_name,
            "country_name": self.country_name,
            "remarks": self.remarks,
            "status": self.status.value,
            "sources": [source.to_dict() for source in self.sources],
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VerificationRecord":
        updated_at = data.get("updated_at")
        return cls(
            original_name=str(data["original_name"]),
            query_text=str(data.get("query_text") or ""),
            code=str(data.get("code") or ""),
            localized_name=str(data.get("localized_name") or ""),
            country_name=str(data.get("country_name") or ""),
            remarks=str(data.get("remarks") or ""),
            status=RecordStatus(data.get("status", RecordStatus.PENDING.value)),
            sources=[
                VerificationSource(uri=str(item["uri"]), title=str(item.get("title") or "Source"))
                for item in data.get("sources") or []
            ][:MAX_SOURCES],
            updated_at=_parse_timestamp(updated_at),
        )


# --- Run Progress Models ---

@dataclass(frozen=True)
class BatchRun:
    """Progress counters for a single orchestrator invocation."""

    processed_count: int = 0
    total_count: int = 0


@dataclass
class BatchOutcome:
    """What happened to one batch during a run."""

    index: int
    names: List[str]
    succeeded: bool
    error: Optional[str] = None
    unmatched: List[str] = field(default_factory=list)


__all__ = [
    "MAX_SOURCES",
    "BatchOutcome",
    "BatchRun",
    "OracleMatch",
    "OracleResponse",
    "RecordStatus",
    "VerificationRecord",
    "VerificationSource",
]
