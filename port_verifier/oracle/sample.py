"""Example oracle implementation that answers from a local lookup table."""
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..config import OracleConfig
from ..models import OracleMatch, OracleResponse, VerificationSource, name_key


class StaticOracle:
    """Oracle answering from an in-memory table keyed by name (case-insensitive).

    Names missing from the table are left out of the response, the way the
    real service omits names it could not resolve.
    """

    name = "static"

    def __init__(
        self,
        table: Optional[Mapping[str, Mapping[str, str]]] = None,
        sources: Optional[Iterable[Mapping[str, str]]] = None,
        summary: str = "",
    ) -> None:
        self._table: Dict[str, Mapping[str, str]] = {
            name_key(key): value for key, value in (table or {}).items()
        }
        self._sources = [
            VerificationSource(uri=item["uri"], title=item.get("title") or "Source") for item in sources or []
        ]
        self._summary = summary

    def verify_batch(self, names: Sequence[str], config: OracleConfig) -> OracleResponse:
        matches: List[OracleMatch] = []
        for name in names:
            entry = self._table.get(name_key(name))
            if entry is None:
                continue
            matches.append(
                OracleMatch(
                    original_name=name,
                    code=entry.get("code", ""),
                    localized_name=entry.get("localized_name", ""),
                    country_name=entry.get("country_name", ""),
                    remarks=entry.get("remarks", ""),
                )
            )
        return OracleResponse(matches=matches, sources=list(self._sources))

    def summarize(self, lines: Sequence[str], config: OracleConfig) -> str:
        if self._summary:
            return self._summary
        return f"{len(lines)} location(s) verified."
