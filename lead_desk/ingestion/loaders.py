"""Utilities for loading lead records from spreadsheet exports."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..models import Lead
from ..normalize import unique_ignore_case
from ..store import StoreError

PathLike = Union[str, Path]

# Wire field -> accepted column names, matched case-insensitively.
_FIELD_SYNONYMS: Mapping[str, Sequence[str]] = {
    "uid": ("uid", "lead uid"),
    "slNo": ("sl no", "slno", "sl_no", "serial", "serial no"),
    "phone": ("lead mobile number", "phone", "mobile", "phone number", "mobile number"),
    "country": ("country",),
    "place": ("place", "city", "location"),
    "name": ("name", "full name", "full_name"),
    "leadQuality": ("lead quality", "leadquality", "quality", "category"),
    "businessIndustry": ("business industry", "businessindustry", "industry"),
    "specialNotes": ("special notes", "specialnotes", "notes"),
    "currentStatus": ("current status", "currentstatus", "status"),
    "forwardedTo": ("forwarded to", "forwardedto", "team", "assigned to"),
    "dateTime": ("date & time", "datetime", "date time", "date", "created"),
}


class UnsupportedFileTypeError(ValueError):
    """Raised when an unsupported file format is passed to the loader."""


def load_leads(
    path: PathLike,
    *,
    column_mapping: Optional[Mapping[str, str]] = None,
    sheet_name: Union[str, int, None] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> List[Lead]:
    """Load lead records from a spreadsheet export.

    Parameters
    ----------
    path:
        Path to the CSV/XLSX file to be loaded.
    column_mapping:
        Optional mapping of wire field names (``phone``, ``forwardedTo`` ...)
        to column names, overriding the built-in header synonyms.
    sheet_name:
        Sheet selector passed to :func:`pandas.read_excel` when loading an Excel
        file. Ignored for CSV files.
    loader_kwargs:
        Extra keyword arguments forwarded to :func:`pandas.read_csv` or
        :func:`pandas.read_excel`.

    Rows without a phone number are skipped, matching how the sheet itself
    treats them.
    """

    dataframe = _read_dataframe(path, sheet_name=sheet_name, loader_kwargs=loader_kwargs)
    resolved = _resolve_columns(dataframe.columns, dict(column_mapping or {}))
    leads: List[Lead] = []

    for _, row in dataframe.iterrows():
        if _row_is_empty(row):
            continue
        record = {field: _clean_text(row[column]) for field, column in resolved.items()}
        if not record.get("phone"):
            continue
        leads.append(Lead.from_record(record, len(leads)))

    return leads


# Delimited exports and the separator each one uses.
_DELIMITED_SUFFIXES = {".csv": ",", ".tsv": "\t"}
_WORKBOOK_SUFFIXES = frozenset({".xls", ".xlsx", ".xlsm", ".xlsb"})


def _read_dataframe(
    path: PathLike,
    *,
    sheet_name: Union[str, int, None] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> pd.DataFrame:
    """Read a sheet export as text columns so phones keep their ``+`` and leading zeros."""

    export_path = Path(path)
    suffix = export_path.suffix.lower()
    options = {"dtype": str, **(loader_kwargs or {})}

    if suffix in _DELIMITED_SUFFIXES:
        options.setdefault("sep", _DELIMITED_SUFFIXES[suffix])
        return pd.read_csv(export_path, **options)

    if suffix in _WORKBOOK_SUFFIXES:
        options.setdefault("engine", "openpyxl")
        return pd.read_excel(export_path, sheet_name=sheet_name, **options)

    raise UnsupportedFileTypeError(f"Cannot load leads from '{export_path.name}': unsupported file type")


def _is_blank(value: Any) -> bool:
    if isinstance(value, str):
        return not value.strip()
    return value is None or pd.isna(value)


def _row_is_empty(row: pd.Series) -> bool:
    return all(_is_blank(value) for value in row.values)


def _resolve_columns(columns: Iterable[Any], mapping: Mapping[str, str]) -> Dict[str, Any]:
    by_name = {str(column).strip().lower(): column for column in columns}
    resolved: Dict[str, Any] = {}
    for field, synonyms in _FIELD_SYNONYMS.items():
        if field in mapping:
            column = mapping[field]
            if column in set(by_name.values()):
                resolved[field] = column
            continue
        for synonym in synonyms:
            if synonym in by_name:
                resolved[field] = by_name[synonym]
                break
    return resolved


def _clean_text(value: Any) -> str:
    if _is_blank(value):
        return ""
    return str(value).strip()


class SpreadsheetSource:
    """Read-only lead source backed by a local spreadsheet export."""

    def __init__(self, path: PathLike, **options: Any) -> None:
        self.path = Path(path)
        self._options = options

    def fetch_leads(self) -> List[Lead]:
        return load_leads(self.path, **self._options)

    def fetch_group_names(self) -> List[str]:
        return unique_ignore_case(
            lead.forwarded_to for lead in self.fetch_leads() if lead.is_forwarded
        )

    def save_lead(self, lead: Lead) -> None:
        raise StoreError(f"Spreadsheet source {self.path} is read-only")

    def delete_lead(self, uid: str) -> None:
        raise StoreError(f"Spreadsheet source {self.path} is read-only")


__all__ = ["SpreadsheetSource", "UnsupportedFileTypeError", "load_leads"]
