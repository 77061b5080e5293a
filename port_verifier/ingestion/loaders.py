"""Utilities for loading raw location names from text files and spreadsheets."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, MutableMapping, Optional, Union

import pandas as pd

from ..ledger import parse_names

PathLike = Union[str, Path]

_NAME_SYNONYMS = ("original_name", "name", "port_name", "port", "airport", "location")
_TEXT_SUFFIXES = {".txt", ".lst"}
_DELIMITED_SUFFIXES = {".csv", ".tsv"}
_EXCEL_SUFFIXES = {".xls", ".xlsx", ".xlsm", ".xlsb"}


class UnsupportedFileTypeError(ValueError):
    """Raised when an unsupported file format is passed to the loader."""


def load_names(
    path: PathLike,
    *,
    column: Optional[str] = None,
    sheet_name: Union[str, int] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> List[str]:
    """Load location names from a file.

    Parameters
    ----------
    path:
        Plain text file (one name per line) or a CSV/TSV/Excel spreadsheet.
    column:
        Spreadsheet column holding the names. When omitted the first column
        whose header looks like a name column is used, else the first column.
    sheet_name:
        Sheet selector passed to :func:`pandas.read_excel`. Ignored for other
        formats.
    loader_kwargs:
        Extra keyword arguments forwarded to :func:`pandas.read_csv` or
        :func:`pandas.read_excel`.
    """

    path_obj = Path(path)
    suffix = path_obj.suffix.lower()
    if suffix in _TEXT_SUFFIXES:
        return parse_names(path_obj.read_text(encoding="utf-8-sig"))

    dataframe = _read_dataframe(path_obj, sheet_name=sheet_name, loader_kwargs=loader_kwargs)
    if dataframe.empty or len(dataframe.columns) == 0:
        return []

    selected = _resolve_column(dataframe.columns, column)
    return [name for name in (_clean_text(value) for value in dataframe[selected]) if name]


def _read_dataframe(
    path: Path,
    *,
    sheet_name: Union[str, int] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> pd.DataFrame:
    loader_kwargs = dict(loader_kwargs or {})
    suffix = path.suffix.lower()

    if suffix in _DELIMITED_SUFFIXES:
        if suffix == ".tsv":
            loader_kwargs.setdefault("sep", "\t")
        loader_kwargs.setdefault("encoding", "utf-8-sig")
        return pd.read_csv(path, dtype=str, **loader_kwargs)

    if suffix in _EXCEL_SUFFIXES:
        engine = loader_kwargs.pop("engine", None) or "openpyxl"
        return pd.read_excel(path, sheet_name=sheet_name, engine=engine, dtype=str, **loader_kwargs)

    raise UnsupportedFileTypeError(f"Unsupported file extension: {path.suffix}")


def _resolve_column(columns: Iterable[Any], requested: Optional[str]) -> Any:
    available = list(columns)
    if requested:
        if requested not in available:
            raise KeyError(f"Column '{requested}' not found; available columns: {available}")
        return requested

    normalised = {str(column).strip().lower().replace(" ", "_"): column for column in available}
    for synonym in _NAME_SYNONYMS:
        if synonym in normalised:
            return normalised[synonym]
    return available[0]


def _clean_text(value: Any) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


__all__ = ["load_names", "UnsupportedFileTypeError"]
