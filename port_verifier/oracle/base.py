"""Interface shared by verification oracle clients, plus response parsing."""
from __future__ import annotations

import json
import re
from typing import Any, List, Protocol, Sequence

from ..config import OracleConfig
from ..models import OracleMatch, OracleResponse

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)

# Wire names of the structured fields, mapped to OracleMatch attributes.
MATCH_FIELDS = {
    "originalName": "original_name",
    "portCode": "code",
    "localizedName": "localized_name",
    "countryName": "country_name",
    "remarks": "remarks",
}


class OracleError(RuntimeError):
    """Raised when a call to the verification service fails."""


class OracleResponseError(OracleError):
    """Raised when the service answers with an empty or unparseable payload."""


class OracleProtocol(Protocol):
    """Protocol defining the interface that oracle clients must follow."""

    name: str

    def verify_batch(self, names: Sequence[str], config: OracleConfig) -> OracleResponse:  # pragma: no cover - runtime protocol
        """Return structured matches for the supplied names."""

    def summarize(self, lines: Sequence[str], config: OracleConfig) -> str:  # pragma: no cover - runtime protocol
        """Return a free-text synthesis of the supplied result lines."""


def parse_matches(text: str | None) -> List[OracleMatch]:
    """Parse the serialized match list returned by the service.

    Accepts a bare JSON array or one wrapped in a code fence. Every item must
    be an object with a non-empty ``originalName``; the remaining string
    fields default to ``""``.
    """

    if not text or not text.strip():
        raise OracleResponseError("Empty response from the verification service")

    payload = text.strip()
    fence_match = _FENCE_PATTERN.search(payload)
    if fence_match:
        payload = fence_match.group(1)

    try:
        data: Any = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise OracleResponseError(f"Response is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise OracleResponseError(f"Expected a JSON array of matches, got {type(data).__name__}")

    matches: List[OracleMatch] = []
    for position, item in enumerate(data):
        if not isinstance(item, dict):
            raise OracleResponseError(f"Match #{position} is not an object")
        original_name = item.get("originalName")
        if not isinstance(original_name, str) or not original_name.strip():
            raise OracleResponseError(f"Match #{position} is missing 'originalName'")
        values = {
            attribute: "" if item.get(wire) is None else str(item.get(wire))
            for wire, attribute in MATCH_FIELDS.items()
        }
        values["original_name"] = original_name.strip()
        matches.append(OracleMatch(**values))
    return matches
