"""Export utilities for lead snapshots and dashboard summaries."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..models import DashboardSummary, Lead
from .loaders import UnsupportedFileTypeError

PathLike = Union[str, Path]

# Column headers used by the "All leads" sheet.
SHEET_COLUMNS = (
    ("uid", "UID"),
    ("slNo", "SL No"),
    ("phone", "Lead Mobile Number"),
    ("country", "Country"),
    ("place", "Place"),
    ("name", "Name"),
    ("leadQuality", "Lead Quality"),
    ("businessIndustry", "Business Industry"),
    ("specialNotes", "Special Notes"),
    ("currentStatus", "Current Status"),
    ("forwardedTo", "Forwarded to"),
    ("dateTime", "Date & Time"),
)


def export_leads(
    leads: Sequence[Lead],
    path: PathLike,
    *,
    include_uid: bool = True,
    sheet_name: str = "All leads",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write leads to a CSV or Excel file using the sheet's column headers."""

    dataframe = leads_to_dataframe(leads, include_uid=include_uid)
    output_path = Path(path)
    _write_dataframe(dataframe, output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def leads_to_dataframe(leads: Iterable[Lead], *, include_uid: bool = True) -> pd.DataFrame:
    """Convert leads into a :class:`pandas.DataFrame` with sheet headers."""

    columns = [(field, header) for field, header in SHEET_COLUMNS if include_uid or field != "uid"]
    records = []
    for lead in leads:
        record = lead.to_record()
        records.append({header: record[field] for field, header in columns})
    return pd.DataFrame(records, columns=[header for _, header in columns])


def summary_to_dataframe(summary: DashboardSummary) -> pd.DataFrame:
    """Flatten the dashboard tiles into ``section``/``label``/``value`` rows."""

    rows: List[dict] = []

    def add(section: str, label: str, value: object) -> None:
        rows.append({"section": section, "label": label, "value": value})

    for label in ("total", "pending", "forwarded", "removed", "active_pipeline", "recent", "genuine"):
        add("totals", label, getattr(summary, label))
    for label in ("pending_rate", "forwarded_rate", "removed_rate", "conversion_rate"):
        add("rates", label, getattr(summary, label))
    for status, count in summary.pipeline.items():
        add("pipeline", status, count)

    ranked_sections = (
        ("places", summary.top_places),
        ("countries", summary.top_countries),
        ("qualities", summary.top_qualities),
        ("industries", summary.top_industries),
        ("peak_hours", summary.peak_hours),
    )
    for section, entries in ranked_sections:
        for entry in entries:
            add(section, entry.label, entry.count)
    for day in summary.daily_trend:
        add("daily_trend", day.day.isoformat(), day.total)
        add("daily_forwarded", day.day.isoformat(), day.forwarded)
    for team in summary.teams:
        add("teams", team.team, team.total)
        add("team_won", team.team, team.won)
        add("team_genuine", team.team, team.genuine)
    return pd.DataFrame(rows, columns=["section", "label", "value"])


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()
    path.parent.mkdir(parents=True, exist_ok=True)

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix in {".xls", ".xlsx", ".xlsm", ".xlsb"}:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise UnsupportedFileTypeError(f"Unsupported export file extension: {suffix}")


def export_summary(summary: DashboardSummary, path: PathLike) -> Path:
    output_path = Path(path)
    _write_dataframe(summary_to_dataframe(summary), output_path, sheet_name="Dashboard", exporter_kwargs=None)
    return output_path


__all__ = [
    "SHEET_COLUMNS",
    "export_leads",
    "export_summary",
    "leads_to_dataframe",
    "summary_to_dataframe",
]
