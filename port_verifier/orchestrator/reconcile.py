"""Map oracle matches back onto the records of a batch."""
from __future__ import annotations

from typing import Dict, List, Sequence

from ..models import MAX_SOURCES, OracleMatch, OracleResponse, VerificationRecord, name_key


def index_matches(matches: Sequence[OracleMatch]) -> Dict[str, OracleMatch]:
    """Key matches by :func:`name_key`; the first occurrence of a name wins."""

    indexed: Dict[str, OracleMatch] = {}
    for match in matches:
        indexed.setdefault(name_key(match.original_name), match)
    return indexed


def reconcile(
    batch_records: Sequence[VerificationRecord], response: OracleResponse
) -> List[VerificationRecord]:
    """Apply ``response`` to ``batch_records`` in place.

    Every matched record receives the same call-wide source list, truncated
    to :data:`MAX_SOURCES`. Records without a match are returned untouched.
    """

    sources = list(response.sources[:MAX_SOURCES])
    indexed = index_matches(response.matches)

    unmatched: List[VerificationRecord] = []
    for record in batch_records:
        match = indexed.get(name_key(record.original_name))
        if match is None:
            unmatched.append(record)
            continue
        record.mark_completed(match, sources)
    return unmatched
