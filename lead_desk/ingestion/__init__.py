"""Spreadsheet import and export of lead records."""

from .exporters import export_leads, export_summary, leads_to_dataframe, summary_to_dataframe
from .loaders import SpreadsheetSource, UnsupportedFileTypeError, load_leads

__all__ = [
    "SpreadsheetSource",
    "UnsupportedFileTypeError",
    "export_leads",
    "export_summary",
    "leads_to_dataframe",
    "load_leads",
    "summary_to_dataframe",
]
