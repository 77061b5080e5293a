"""Batch orchestrator that drives the oracle over the ledger's eligible records."""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from ..config import OracleConfig, OrchestratorSettings
from ..ledger import Ledger
from ..models import BatchOutcome, BatchRun, VerificationRecord
from ..oracle.base import OracleProtocol
from .reconcile import reconcile

LOGGER = logging.getLogger(__name__)

NO_MATCH_REASON = "No match returned by the verification service"
FAILURE_REASON = "Online verification failed"

ProgressCallback = Callable[[int, int], None]
OutcomeCallback = Callable[[BatchOutcome], None]


def partition(records: Sequence[VerificationRecord], size: int) -> List[List[VerificationRecord]]:
    """Split ``records`` into consecutive groups of at most ``size``, keeping order."""

    return [list(records[start:start + size]) for start in range(0, len(records), size)]


class BatchOrchestrator:
    """Verifies pending and failed records batch by batch, one oracle call at a time."""

    def __init__(
        self,
        oracle: OracleProtocol,
        oracle_config: Optional[OracleConfig] = None,
        settings: Optional[OrchestratorSettings] = None,
    ) -> None:
        self._oracle = oracle
        self._oracle_config = oracle_config or OracleConfig()
        self._settings = settings or OrchestratorSettings()

    @property
    def settings(self) -> OrchestratorSettings:
        return self._settings

    def iter_run(self, ledger: Ledger) -> Iterator[Tuple[BatchRun, BatchOutcome]]:
        """Process every eligible record, yielding progress after each batch.

        Batch failures are recorded on the records and never raised; callers
        retry by running again, which picks up the failed records.
        """

        if self._settings.stale_after_seconds:
            ledger.recover_stale(timedelta(seconds=self._settings.stale_after_seconds))

        eligible = ledger.eligible()
        progress = BatchRun(processed_count=0, total_count=len(eligible))
        if not eligible:
            LOGGER.info("No pending or failed records - nothing to verify")
            return

        batches = partition(eligible, self._settings.batch_size)
        LOGGER.info(
            "Verifying %s record(s) in %s batch(es) of up to %s",
            len(eligible),
            len(batches),
            self._settings.batch_size,
        )
        for index, batch in enumerate(batches):
            outcome = self._process_batch(index, batch)
            progress = BatchRun(progress.processed_count + len(batch), progress.total_count)
            LOGGER.debug("Progress %s/%s", progress.processed_count, progress.total_count)
            yield progress, outcome

    def run(
        self,
        ledger: Ledger,
        progress_callback: Optional[ProgressCallback] = None,
        outcome_callback: Optional[OutcomeCallback] = None,
    ) -> BatchRun:
        """Drain :meth:`iter_run` and return the final progress counters."""

        final = BatchRun(processed_count=0, total_count=0)
        for progress, outcome in self.iter_run(ledger):
            final = progress
            if outcome_callback:
                outcome_callback(outcome)
            if progress_callback:
                progress_callback(progress.processed_count, progress.total_count)
        return final

    def _process_batch(self, index: int, batch: List[VerificationRecord]) -> BatchOutcome:
        names = [record.original_name for record in batch]
        for record in batch:
            record.mark_in_flight()

        try:
            response = self._oracle.verify_batch(names, self._oracle_config)
        except Exception as exc:
            LOGGER.exception("Batch %s failed for %s", index, names)
            reason = f"{FAILURE_REASON}: {exc}" if str(exc) else FAILURE_REASON
            for record in batch:
                record.mark_failed(reason)
            return BatchOutcome(index=index, names=names, succeeded=False, error=reason)

        unmatched = reconcile(batch, response)
        if unmatched:
            LOGGER.warning(
                "Batch %s: no match returned for %s",
                index,
                [record.original_name for record in unmatched],
            )
            if self._settings.mark_unmatched_failed:
                for record in unmatched:
                    record.mark_failed(NO_MATCH_REASON)
        return BatchOutcome(
            index=index,
            names=names,
            succeeded=True,
            unmatched=[record.original_name for record in unmatched],
        )
