"""Export utilities for verified port data."""
from __future__ import annotations

import csv
from datetime import date
from pathlib import Path
from typing import Iterable, MutableMapping, Optional, Union

import pandas as pd

from ..models import VerificationRecord

PathLike = Union[str, Path]

EXPORT_COLUMNS = ["original_name", "code", "localized_name", "country_name", "remarks"]
DELIMITED_SUFFIXES = {".csv", ".tsv"}
EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
EXPORT_SUFFIXES = DELIMITED_SUFFIXES | EXCEL_SUFFIXES


def default_export_name(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"verified_ports_{today.isoformat()}.csv"


def export_records(
    records: Iterable[VerificationRecord],
    path: PathLike,
    *,
    include_query: bool = False,
    include_status: bool = False,
    include_sources: bool = False,
    sheet_name: str = "Results",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write every record, whatever its status, to a CSV/TSV or Excel file.

    Delimited output starts with a UTF-8 byte-order mark so spreadsheet tools
    pick the right encoding.
    """

    dataframe = records_to_dataframe(
        records,
        include_query=include_query,
        include_status=include_status,
        include_sources=include_sources,
    )
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    _write_dataframe(dataframe, output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def records_to_dataframe(
    records: Iterable[VerificationRecord],
    *,
    include_query: bool = False,
    include_status: bool = False,
    include_sources: bool = False,
) -> pd.DataFrame:
    """Convert verification records into a :class:`pandas.DataFrame`."""

    columns = list(EXPORT_COLUMNS)
    if include_query:
        columns.insert(1, "query_text")
    if include_status:
        columns.append("status")
    if include_sources:
        columns.append("sources")

    rows = [_record_to_row(record) for record in records]
    return pd.DataFrame(rows, columns=columns)


def _record_to_row(record: VerificationRecord) -> MutableMapping[str, object]:
    return {
        "original_name": record.original_name,
        "query_text": record.query_text,
        "code": record.code,
        "localized_name": record.localized_name,
        "country_name": record.country_name,
        "remarks": record.remarks,
        "status": record.status.value,
        "sources": "; ".join(source.uri for source in record.sources),
    }


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()

    if suffix in DELIMITED_SUFFIXES:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        exporter_kwargs.setdefault("encoding", "utf-8-sig")
        exporter_kwargs.setdefault("quoting", csv.QUOTE_MINIMAL)
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix in EXCEL_SUFFIXES:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise ValueError(f"Unsupported export file extension: {suffix}")


__all__ = ["EXPORT_COLUMNS", "EXPORT_SUFFIXES", "default_export_name", "export_records", "records_to_dataframe"]
