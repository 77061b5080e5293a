"""Batch verification of port and airport names against an online registry."""

from . import models  # noqa: F401
from .config import ConfigurationError, OracleConfig, OrchestratorSettings  # noqa: F401
from .ledger import Ledger  # noqa: F401
from .models import (
    BatchOutcome,
    BatchRun,
    OracleMatch,
    OracleResponse,
    RecordStatus,
    VerificationRecord,
    VerificationSource,
)
from .orchestrator import BatchOrchestrator  # noqa: F401
from .summary import Summary, SummaryStatus, summarize  # noqa: F401

__all__ = [
    "BatchOrchestrator",
    "BatchOutcome",
    "BatchRun",
    "ConfigurationError",
    "Ledger",
    "OracleConfig",
    "OracleMatch",
    "OracleResponse",
    "OrchestratorSettings",
    "RecordStatus",
    "Summary",
    "SummaryStatus",
    "VerificationRecord",
    "VerificationSource",
    "summarize",
    "ingestion",
    "oracle",
    "orchestrator",
]
