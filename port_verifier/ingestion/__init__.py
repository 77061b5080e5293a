"""Utilities for importing raw names and exporting verification results."""

from .exporters import EXPORT_COLUMNS, EXPORT_SUFFIXES, default_export_name, export_records, records_to_dataframe
from .loaders import UnsupportedFileTypeError, load_names

__all__ = [
    "EXPORT_COLUMNS",
    "EXPORT_SUFFIXES",
    "UnsupportedFileTypeError",
    "default_export_name",
    "export_records",
    "load_names",
    "records_to_dataframe",
]
