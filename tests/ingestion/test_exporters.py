from datetime import date

import pandas as pd
import pytest

from lead_desk.ingestion.exporters import export_leads, export_summary, leads_to_dataframe, summary_to_dataframe
from lead_desk.ingestion.loaders import UnsupportedFileTypeError, load_leads
from lead_desk.models import Lead, LeadStatus
from lead_desk.stats import summarize


def _build_leads():
    return [
        Lead(
            id="sheet-0",
            uid="u-1",
            date_time="2024-05-01T09:15",
            sl_no="1",
            phone="+971500000001",
            country="UAE",
            place="Dubai",
            name="Ada Lovelace",
            lead_quality="Genuine",
            business_industry="Technology",
            current_status=LeadStatus.WON,
            forwarded_to="Sales Team",
        ),
        Lead(
            id="sheet-1",
            uid="u-2",
            date_time="2024-05-02T18:00",
            sl_no="2",
            phone="+441234567890",
            country="UK",
            place="London",
            name="Grace Hopper",
        ),
    ]


def test_leads_to_dataframe_uses_sheet_headers() -> None:
    dataframe = leads_to_dataframe(_build_leads())

    assert list(dataframe.columns) == [
        "UID",
        "SL No",
        "Lead Mobile Number",
        "Country",
        "Place",
        "Name",
        "Lead Quality",
        "Business Industry",
        "Special Notes",
        "Current Status",
        "Forwarded to",
        "Date & Time",
    ]
    first = dataframe.iloc[0]
    assert first["Lead Quality"] == "HOT"
    assert first["Current Status"] == "WON"
    assert dataframe.iloc[1]["Forwarded to"] == ""


def test_leads_to_dataframe_without_uid() -> None:
    dataframe = leads_to_dataframe(_build_leads(), include_uid=False)
    assert "UID" not in dataframe.columns


def test_export_leads_round_trips_through_loader(tmp_path) -> None:
    output_path = tmp_path / "exports" / "leads.xlsx"

    written = export_leads(_build_leads(), output_path)

    assert written == output_path
    assert output_path.exists()
    reloaded = load_leads(output_path)
    assert [lead.uid for lead in reloaded] == ["u-1", "u-2"]
    assert reloaded[0].forwarded_to == "Sales Team"


def test_export_summary_to_csv(tmp_path) -> None:
    summary = summarize(_build_leads(), trend_days=3, today=date(2024, 5, 2))
    output_path = tmp_path / "summary.csv"

    export_summary(summary, output_path)

    frame = pd.read_csv(output_path, dtype=str)
    totals = frame[frame["section"] == "totals"].set_index("label")["value"]
    assert totals["total"] == "2"
    assert totals["forwarded"] == "1"
    assert totals["genuine"] == "1"
    trend = frame[frame["section"] == "daily_trend"]
    assert list(trend["label"]) == ["2024-04-30", "2024-05-01", "2024-05-02"]


def test_summary_to_dataframe_lists_teams() -> None:
    dataframe = summary_to_dataframe(summarize(_build_leads(), today=date(2024, 5, 2)))

    teams = dataframe[dataframe["section"] == "teams"]
    assert list(teams["label"]) == ["Sales Team"]
    assert list(teams["value"]) == [1]


def test_export_rejects_unknown_extension(tmp_path) -> None:
    with pytest.raises(UnsupportedFileTypeError):
        export_leads(_build_leads(), tmp_path / "leads.json")
