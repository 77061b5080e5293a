"""Batch orchestration of oracle calls over the record ledger."""

from .reconcile import reconcile
from .service import BatchOrchestrator, partition

__all__ = ["BatchOrchestrator", "partition", "reconcile"]
