"""Natural-language summary of completed verification records."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

from .config import OracleConfig
from .ledger import Ledger
from .models import VerificationRecord
from .oracle.base import OracleProtocol

LOGGER = logging.getLogger(__name__)

NOTHING_TO_SUMMARIZE = "No completed port matches to summarize."
SUMMARY_UNAVAILABLE = "Unable to generate a summary."
SUMMARY_FAILED = "Summary generation failed, please try again later."


class SummaryStatus(str, Enum):
    GENERATED = "generated"
    NOTHING = "nothing"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class Summary:
    text: str
    status: SummaryStatus

    @property
    def ok(self) -> bool:
        return self.status is SummaryStatus.GENERATED


def format_summary_line(record: VerificationRecord) -> str:
    return f"{record.original_name} -> {record.localized_name} ({record.code}), country: {record.country_name}"


def summary_lines(records: Iterable[VerificationRecord]) -> List[str]:
    return [format_summary_line(record) for record in records]


def summarize(ledger: Ledger, oracle: OracleProtocol, config: OracleConfig) -> Summary:
    """Ask the oracle to synthesise the completed records; never raises.

    The oracle is not contacted when nothing has completed yet.
    """

    completed = ledger.completed()
    if not completed:
        return Summary(NOTHING_TO_SUMMARIZE, SummaryStatus.NOTHING)

    try:
        text = oracle.summarize(summary_lines(completed), config)
    except Exception:
        LOGGER.exception("Summary generation failed for %s record(s)", len(completed))
        return Summary(SUMMARY_FAILED, SummaryStatus.FAILED)

    if not text or not text.strip():
        LOGGER.warning("Summary request returned an empty response")
        return Summary(SUMMARY_UNAVAILABLE, SummaryStatus.EMPTY)
    return Summary(text.strip(), SummaryStatus.GENERATED)
