"""Command line interface for running the batch verification orchestrator."""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .config import ConfigurationError, build_oracle_config, build_orchestrator_settings, load_configuration
from .factory import build_oracle
from .ingestion import EXPORT_SUFFIXES, export_records, load_names
from .io import load_ledger, save_ledger
from .ledger import Ledger
from .models import RecordStatus
from .orchestrator import BatchOrchestrator
from .summary import summarize


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Verify port and airport names in batches against an online verification service",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Text file (one name per line) or spreadsheet (CSV or XLSX) with names to verify",
    )
    parser.add_argument("output", help="Path where the verified records should be written (CSV or XLSX)")
    parser.add_argument("--config", help="Path to the configuration file (YAML or JSON)")
    parser.add_argument(
        "--state",
        help="JSON session file; loaded if present so failed records are retried, and rewritten after the run",
    )
    parser.add_argument("--column", help="Spreadsheet column holding the names")
    parser.add_argument("--batch-size", type=int, default=None, help="Number of names sent per request")
    parser.add_argument("--summary", help="Write a natural-language summary of completed records to this file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    if args.batch_size is not None and args.batch_size < 1:
        parser.error(f"--batch-size must be at least 1, got {args.batch_size}")
    if Path(args.output).suffix.lower() not in EXPORT_SUFFIXES:
        parser.error(f"unsupported output format '{Path(args.output).suffix}'; use one of {sorted(EXPORT_SUFFIXES)}")

    try:
        config = load_configuration(args.config) if args.config else {}
        oracle_config = build_oracle_config(config)
        settings = build_orchestrator_settings(config)
    except ConfigurationError as exc:
        parser.error(str(exc))
    if args.batch_size is not None:
        settings = replace(settings, batch_size=args.batch_size)

    state_path = Path(args.state) if args.state else None
    if state_path and state_path.exists():
        ledger = load_ledger(state_path)
        logging.info("Loaded %s record(s) from %s", len(ledger), state_path)
    else:
        ledger = Ledger(language=oracle_config.language)

    if args.input:
        added = ledger.add_names(load_names(args.input, column=args.column))
        logging.info("Queued %s name(s) from %s", len(added), args.input)

    if len(ledger) == 0:
        logging.warning("No names to verify - nothing to do")
        return 0

    oracle = build_oracle(config)
    orchestrator = BatchOrchestrator(oracle, oracle_config, settings)
    run = orchestrator.run(
        ledger,
        progress_callback=lambda current, total: logging.info("Verified %s/%s", current, total),
    )

    if state_path:
        save_ledger(state_path, ledger)
    export_records(ledger, args.output, include_status=True)

    counts = ledger.counts()
    logging.info(
        "Processed %s record(s): %s completed, %s failed, %s in flight",
        run.processed_count,
        counts[RecordStatus.COMPLETED],
        counts[RecordStatus.FAILED],
        counts[RecordStatus.IN_FLIGHT],
    )
    logging.info("Results written to %s", Path(args.output).resolve())

    if args.summary:
        result = summarize(ledger, oracle, oracle_config)
        Path(args.summary).write_text(result.text + "\n", encoding="utf-8")
        if not result.ok:
            logging.warning("Summary not generated (%s)", result.status.value)

    unresolved = counts[RecordStatus.FAILED] + counts[RecordStatus.IN_FLIGHT]
    return 1 if unresolved else 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
