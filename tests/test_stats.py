from datetime import date, datetime

import pytest

from lead_desk.models import LabelCount, Lead, LeadStatus, Vocabulary
from lead_desk.stats import (
    daily_trend,
    forwarded_count,
    peak_hours,
    pending_count,
    percentage,
    pipeline_counts,
    qualities_in_vocabulary_order,
    recent_count,
    removed_count,
    summarize,
    team_rollup,
    top_places,
    top_qualities,
    top_values,
)


def _lead(index: int, **fields) -> Lead:
    return Lead(id=f"sheet-{index}", uid=f"uid-{index}", **fields)


def test_end_to_end_dashboard_tiles() -> None:
    leads = [
        _lead(0, phone="1", current_status=LeadStatus.NEW, forwarded_to=""),
        _lead(1, phone="2", current_status=LeadStatus.WON, forwarded_to="Sales"),
        _lead(2, phone="3", current_status=LeadStatus.LOST, forwarded_to="removed"),
    ]

    summary = summarize(leads, today=date(2024, 5, 1), now=datetime(2024, 5, 1, 12, 0))

    assert summary.total == 3
    assert summary.pending == 1
    assert summary.forwarded == 1
    assert summary.removed == 1
    assert summary.pending_rate == "33.3"
    assert summary.removed_rate == "33.3"
    assert summary.conversion_rate == "33.3"
    assert summary.pipeline["WON"] == 1
    assert summary.pipeline["WAITING LIST"] == 0


def test_pending_forwarded_removed_need_not_partition() -> None:
    lead = _lead(0, current_status=LeadStatus.WON, forwarded_to="")

    assert pending_count([lead]) == 1
    assert removed_count([lead]) == 0
    assert forwarded_count([lead]) == 0


def test_removed_marker_is_case_insensitive() -> None:
    leads = [_lead(0, forwarded_to=" Removed "), _lead(1, current_status=LeadStatus.SPAM)]
    assert removed_count(leads) == 2
    assert forwarded_count(leads) == 0


def test_percentage_handles_empty_totals() -> None:
    assert percentage(0, 0) == "0.0"
    assert percentage(1, 8) == "12.5"


def test_empty_snapshot_summarises_cleanly() -> None:
    summary = summarize([], today=date(2024, 5, 1))

    assert summary.total == 0
    assert summary.pending_rate == "0.0"
    assert summary.top_places == []
    assert summary.peak_hours == []
    assert summary.teams == []
    assert len(summary.daily_trend) == 30
    assert all(day.total == 0 for day in summary.daily_trend)
    assert set(pipeline_counts([]).values()) == {0}


def test_top_values_group_case_insensitively_and_keep_first_seen_on_ties() -> None:
    leads = [
        _lead(0, place="Dubai"),
        _lead(1, place="London"),
        _lead(2, place="DUBAI"),
        _lead(3, place="london"),
        _lead(4, place="Paris"),
        _lead(5, place=""),
        _lead(6, place="Rome"),
        _lead(7, place="Oslo"),
        _lead(8, place="Lima"),
    ]

    ranked = top_places(leads)

    assert ranked == [
        LabelCount("Dubai", 2),
        LabelCount("London", 2),
        LabelCount("Paris", 1),
        LabelCount("Rome", 1),
        LabelCount("Oslo", 1),
    ]
    assert sum(entry.count for entry in top_places(leads, limit=None)) == 8


def test_top_values_rejects_unknown_fields() -> None:
    with pytest.raises(ValueError):
        top_values([], "favourite_colour")


def test_quality_tile_keeps_first_seen_order_on_ties() -> None:
    leads = [_lead(0, lead_quality="COLD"), _lead(1, lead_quality="HOT")]

    assert [entry.label for entry in top_qualities(leads)] == ["COLD", "HOT"]
    summary = summarize(leads, today=date(2024, 5, 1))
    assert [entry.label for entry in summary.top_qualities] == ["COLD", "HOT"]


def test_qualities_in_vocabulary_order_lists_configured_names_first() -> None:
    leads = [_lead(0, lead_quality="cold"), _lead(1, lead_quality="HOT"), _lead(2, lead_quality="Premium")]
    vocabulary = Vocabulary(lead_qualities=("HOT", "WARM", "COLD"))

    assert qualities_in_vocabulary_order(leads, vocabulary) == [
        LabelCount("HOT", 1),
        LabelCount("WARM", 0),
        LabelCount("COLD", 1),
        LabelCount("Premium", 1),
    ]


def test_peak_hours_bucket_and_wrap() -> None:
    late = [_lead(0, date_time="2024-05-01T23:10")]
    midnight = [_lead(1, date_time="2024-05-01T00:05")]

    assert peak_hours(late, width=6) == [LabelCount("6:00 PM - 12:00 AM", 1)]
    assert peak_hours(midnight, width=12) == [LabelCount("12:00 AM - 12:00 PM", 1)]
    assert peak_hours(midnight, width=1) == [LabelCount("12:00 AM - 1:00 AM", 1)]


def test_peak_hours_ranks_top_six_and_skips_bad_dates() -> None:
    leads = [_lead(index, date_time=f"2024-05-01T{hour:02d}:00") for index, hour in enumerate(range(8))]
    leads += [_lead(20, date_time="2024-05-01T07:30"), _lead(21, date_time=""), _lead(22, date_time="n/a")]

    ranked = peak_hours(leads)

    assert len(ranked) == 6
    assert ranked[0] == LabelCount("7:00 AM - 8:00 AM", 2)
    assert ranked[1] == LabelCount("12:00 AM - 1:00 AM", 1)


def test_peak_hours_rejects_unknown_width() -> None:
    with pytest.raises(ValueError):
        peak_hours([], width=4)


def test_daily_trend_covers_trailing_window() -> None:
    leads = [
        _lead(0, date_time="2024-05-01T09:00", forwarded_to="Sales"),
        _lead(1, date_time="2024-05-01T18:00"),
        _lead(2, date_time="2024-04-02T10:00"),
        _lead(3, date_time="2024-04-01T10:00"),
        _lead(4, date_time=""),
    ]

    trend = daily_trend(leads, today=date(2024, 5, 1))

    assert len(trend) == 30
    assert trend[0].day == date(2024, 4, 2)
    assert trend[-1].day == date(2024, 5, 1)
    assert (trend[-1].total, trend[-1].forwarded) == (2, 1)
    assert trend[0].total == 1
    assert sum(day.total for day in trend) == 3


def test_team_rollup_counts_wins_and_genuine_leads() -> None:
    leads = [
        _lead(0, forwarded_to="Sales Team", current_status=LeadStatus.WON, lead_quality="Genuine"),
        _lead(1, forwarded_to="sales team", lead_quality="HOT"),
        _lead(2, forwarded_to="Support Team", lead_quality="GENUINE"),
        _lead(3, forwarded_to="removed", current_status=LeadStatus.WON),
        _lead(4, forwarded_to=""),
    ]

    rollup = team_rollup(leads)

    assert [(team.team, team.total, team.won, team.genuine) for team in rollup] == [
        ("Sales Team", 2, 1, 2),
        ("Support Team", 1, 0, 1),
    ]
    assert rollup[0].win_rate == "50"


def test_recent_count_uses_trailing_week() -> None:
    leads = [
        _lead(0, date_time="2024-05-01T09:00"),
        _lead(1, date_time="2024-04-20T09:00"),
        _lead(2, date_time=""),
    ]
    assert recent_count(leads, now=datetime(2024, 5, 2, 9, 0)) == 1


def test_summary_as_dict_is_serialisable() -> None:
    summary = summarize([_lead(0, date_time="2024-05-01T09:00")], today=date(2024, 5, 1))
    data = summary.as_dict()
    assert data["daily_trend"][-1] == {"day": "2024-05-01", "total": 1, "forwarded": 0}
    assert data["peak_hours"] == [{"label": "9:00 AM - 10:00 AM", "count": 1}]
