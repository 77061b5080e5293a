"""Persistence helpers for ledger session files."""
from __future__ import annotations

import json
import logging
from pathlib import Path

from .config import ConfigurationError
from .ledger import Ledger

LOGGER = logging.getLogger(__name__)


def save_ledger(path: str | Path, ledger: Ledger) -> Path:
    """Write the ledger to a JSON session file."""

    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(json.dumps(ledger.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
    LOGGER.debug("Saved %s record(s) to %s", len(ledger), file_path)
    return file_path


def load_ledger(path: str | Path) -> Ledger:
    """Read a ledger previously written by :func:`save_ledger`."""

    file_path = Path(path)
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
        return Ledger.from_dict(data)
    except (json.JSONDecodeError, KeyError, ValueError) as exc:
        raise ConfigurationError(f"Session file '{file_path}' is malformed: {exc}") from exc
