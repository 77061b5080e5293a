from __future__ import annotations

from typing import Sequence

from port_verifier.config import OracleConfig
from port_verifier.ledger import Ledger
from port_verifier.models import OracleMatch
from port_verifier.summary import (
    NOTHING_TO_SUMMARIZE,
    SUMMARY_FAILED,
    SUMMARY_UNAVAILABLE,
    SummaryStatus,
    summarize,
)


class RecordingOracle:
    name = "recording"

    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.lines: list[list[str]] = []

    def verify_batch(self, names, config):  # pragma: no cover - unused
        raise AssertionError("verification should not be requested")

    def summarize(self, lines: Sequence[str], config: OracleConfig) -> str:
        self.lines.append(list(lines))
        if self.error is not None:
            raise self.error
        return self.reply


def _ledger_with_one_completed() -> Ledger:
    ledger = Ledger()
    done, _pending = ledger.add_names(["Shekou", "Atlantis"])
    done.mark_completed(
        OracleMatch(original_name="SHEKOU", code="CNSWA", localized_name="蛇口", country_name="China"), []
    )
    return ledger


def test_nothing_completed_short_circuits_without_calling_oracle() -> None:
    ledger = Ledger()
    ledger.add_names(["USLAX"])
    oracle = RecordingOracle("unused")

    summary = summarize(ledger, oracle, OracleConfig())

    assert summary.text == NOTHING_TO_SUMMARIZE
    assert summary.status is SummaryStatus.NOTHING
    assert oracle.lines == []


def test_only_completed_records_are_sent_as_lines() -> None:
    oracle = RecordingOracle("  Shekou is part of Shenzhen port.  ")

    summary = summarize(_ledger_with_one_completed(), oracle, OracleConfig())

    assert oracle.lines == [["Shekou -> 蛇口 (CNSWA), country: China"]]
    assert summary.ok
    assert summary.text == "Shekou is part of Shenzhen port."


def test_empty_reply_surfaces_fallback_text() -> None:
    summary = summarize(_ledger_with_one_completed(), RecordingOracle(""), OracleConfig())

    assert summary.status is SummaryStatus.EMPTY
    assert summary.text == SUMMARY_UNAVAILABLE


def test_oracle_error_is_recovered_and_ledger_untouched() -> None:
    ledger = _ledger_with_one_completed()
    before = [record.to_dict() for record in ledger]

    summary = summarize(ledger, RecordingOracle(error=RuntimeError("quota")), OracleConfig())

    assert summary.status is SummaryStatus.FAILED
    assert summary.text == SUMMARY_FAILED
    assert not summary.ok
    assert [record.to_dict() for record in ledger] == before
