"""Dashboard statistics derived from a lead snapshot.

All functions are pure: they read the leads they are given and return new
values, so the same snapshot can be summarised any number of times.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .dates import format_hour_range, lead_date, lead_hour, parse_lead_datetime
from .models import (
    DailyCount,
    DashboardSummary,
    LabelCount,
    Lead,
    LeadStatus,
    TeamStats,
    Vocabulary,
)
from .normalize import count_by_case_insensitive, group_by_case_insensitive, normalize_text

LOGGER = logging.getLogger(__name__)

HOUR_BUCKET_WIDTHS = (1, 3, 6, 12)
TOP_LIMIT = 5
PEAK_HOUR_LIMIT = 6
TREND_DAYS = 30
RECENT_DAYS = 7

ACTIVE_STATUSES = (LeadStatus.NEW, LeadStatus.CONTACTED, LeadStatus.QUALIFIED)

_FIELD_GETTERS: Dict[str, Callable[[Lead], Optional[str]]] = {
    "place": lambda lead: lead.place,
    "country": lambda lead: lead.country,
    "quality": lambda lead: lead.lead_quality,
    "status": lambda lead: lead.current_status.value,
    "team": lambda lead: lead.forwarded_to,
    "industry": lambda lead: lead.business_industry,
}


def percentage(count: int, total: int) -> str:
    """Return ``count / total`` as a percentage with one decimal place."""

    if total <= 0:
        return "0.0"
    return f"{count / total * 100:.1f}"


# --- Counts ---

def pipeline_counts(leads: Iterable[Lead]) -> Dict[str, int]:
    counts = {status.value: 0 for status in LeadStatus}
    for lead in leads:
        counts[lead.current_status.value] += 1
    return counts


def pending_count(leads: Iterable[Lead]) -> int:
    return sum(1 for lead in leads if lead.is_pending)


def forwarded_count(leads: Iterable[Lead]) -> int:
    return sum(1 for lead in leads if lead.is_forwarded)


def removed_count(leads: Iterable[Lead]) -> int:
    """Count leads that are LOST/SPAM or marked removed, each lead once."""

    return sum(1 for lead in leads if lead.is_removed)


def genuine_count(leads: Iterable[Lead]) -> int:
    return sum(1 for lead in leads if lead.is_hot)


def active_pipeline_count(leads: Iterable[Lead]) -> int:
    return sum(1 for lead in leads if lead.current_status in ACTIVE_STATUSES)


def conversion_rate(leads: Sequence[Lead]) -> str:
    won = sum(1 for lead in leads if lead.current_status is LeadStatus.WON)
    return percentage(won, len(leads))


def recent_count(leads: Iterable[Lead], days: int = RECENT_DAYS, now: Optional[datetime] = None) -> int:
    """Count leads created within the trailing ``days`` window."""

    now = now or datetime.now()
    cutoff = now - timedelta(days=days)
    total = 0
    for lead in leads:
        created = parse_lead_datetime(lead.date_time)
        if created is not None and created >= cutoff:
            total += 1
    return total


# --- Rankings ---

def rank_groups(groups: Dict[str, list], limit: Optional[int] = TOP_LIMIT) -> List[LabelCount]:
    """Sort groups by size, largest first; ties keep first-seen order."""

    ranked = sorted(
        (LabelCount(label=label, count=len(members)) for label, members in groups.items()),
        key=lambda entry: entry.count,
        reverse=True,
    )
    return ranked if limit is None else ranked[:limit]


def top_values(leads: Iterable[Lead], field: str, limit: Optional[int] = TOP_LIMIT) -> List[LabelCount]:
    try:
        getter = _FIELD_GETTERS[field]
    except KeyError as exc:
        raise ValueError(f"Unknown lead field '{field}'. Expected one of {sorted(_FIELD_GETTERS)}") from exc
    return rank_groups(group_by_case_insensitive(leads, getter), limit)


def top_places(leads: Iterable[Lead], limit: Optional[int] = TOP_LIMIT) -> List[LabelCount]:
    return top_values(leads, "place", limit)


def top_countries(leads: Iterable[Lead], limit: Optional[int] = TOP_LIMIT) -> List[LabelCount]:
    return top_values(leads, "country", limit)


def top_qualities(leads: Iterable[Lead], limit: Optional[int] = TOP_LIMIT) -> List[LabelCount]:
    return top_values(leads, "quality", limit)


def qualities_in_vocabulary_order(leads: Iterable[Lead], vocabulary: Vocabulary) -> List[LabelCount]:
    """Count every configured quality, in the vocabulary's own order.

    Configured qualities nobody used are listed with a zero count; labels the
    vocabulary does not know follow in first-seen order.
    """

    counts = count_by_case_insensitive(leads, _FIELD_GETTERS["quality"])
    by_key = {normalize_text(label): (label, count) for label, count in counts.items()}
    ordered: List[LabelCount] = []
    for name in vocabulary.lead_qualities:
        _, count = by_key.pop(normalize_text(name), (name, 0))
        ordered.append(LabelCount(label=name, count=count))
    ordered.extend(LabelCount(label=label, count=count) for label, count in by_key.values())
    return ordered


def top_industries(leads: Iterable[Lead], limit: Optional[int] = TOP_LIMIT) -> List[LabelCount]:
    return top_values(leads, "industry", limit)


# --- Time buckets ---

def hour_bucket(hour: int, width: int) -> int:
    return (hour // width) * width


def peak_hours(leads: Iterable[Lead], width: int = 1, limit: Optional[int] = PEAK_HOUR_LIMIT) -> List[LabelCount]:
    """Rank hour-of-day buckets of ``width`` hours by lead count."""

    if width not in HOUR_BUCKET_WIDTHS:
        raise ValueError(f"Hour bucket width must be one of {HOUR_BUCKET_WIDTHS}, got {width}")

    counts: Counter = Counter()
    for lead in leads:
        hour = lead_hour(lead.date_time)
        if hour is None:
            continue
        counts[hour_bucket(hour, width)] += 1

    ranked = [
        LabelCount(label=format_hour_range(start, width), count=count)
        for start, count in counts.most_common()
    ]
    return ranked if limit is None else ranked[:limit]


def daily_trend(leads: Iterable[Lead], days: int = TREND_DAYS, today: Optional[date] = None) -> List[DailyCount]:
    """Per-day totals for the trailing ``days`` calendar days, oldest first."""

    today = today or date.today()
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]
    totals: Counter = Counter()
    forwarded: Counter = Counter()
    for lead in leads:
        day = lead_date(lead.date_time)
        if day is None:
            continue
        totals[day] += 1
        if lead.is_forwarded:
            forwarded[day] += 1
    return [DailyCount(day=day, total=totals[day], forwarded=forwarded[day]) for day in window]


# --- Teams ---

def team_rollup(leads: Iterable[Lead], limit: Optional[int] = TOP_LIMIT) -> List[TeamStats]:
    """Totals, wins, and genuine leads per assigned group."""

    assigned = [lead for lead in leads if lead.is_forwarded]
    groups = group_by_case_insensitive(assigned, lambda lead: lead.forwarded_to.strip())
    rollup = [
        TeamStats(
            team=team,
            total=len(members),
            won=sum(1 for lead in members if lead.current_status is LeadStatus.WON),
            genuine=sum(1 for lead in members if lead.is_hot),
        )
        for team, members in groups.items()
    ]
    rollup.sort(key=lambda entry: entry.total, reverse=True)
    return rollup if limit is None else rollup[:limit]


def summarize(
    leads: Sequence[Lead],
    *,
    hour_width: int = 1,
    trend_days: int = TREND_DAYS,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> DashboardSummary:
    """Compute every dashboard tile for ``leads``."""

    snapshot = tuple(leads)
    total = len(snapshot)
    pending = pending_count(snapshot)
    forwarded = forwarded_count(snapshot)
    removed = removed_count(snapshot)
    LOGGER.debug("Summarising %s leads", total)
    return DashboardSummary(
        total=total,
        pipeline=pipeline_counts(snapshot),
        pending=pending,
        forwarded=forwarded,
        removed=removed,
        pending_rate=percentage(pending, total),
        forwarded_rate=percentage(forwarded, total),
        removed_rate=percentage(removed, total),
        conversion_rate=conversion_rate(snapshot),
        active_pipeline=active_pipeline_count(snapshot),
        recent=recent_count(snapshot, now=now),
        genuine=genuine_count(snapshot),
        top_places=top_places(snapshot),
        top_countries=top_countries(snapshot),
        top_qualities=top_qualities(snapshot),
        top_industries=top_industries(snapshot),
        peak_hours=peak_hours(snapshot, hour_width),
        daily_trend=daily_trend(snapshot, trend_days, today),
        teams=team_rollup(snapshot),
    )


__all__ = [
    "active_pipeline_count",
    "conversion_rate",
    "daily_trend",
    "forwarded_count",
    "genuine_count",
    "hour_bucket",
    "peak_hours",
    "pending_count",
    "percentage",
    "pipeline_counts",
    "qualities_in_vocabulary_order",
    "rank_groups",
    "recent_count",
    "removed_count",
    "summarize",
    "team_rollup",
    "top_countries",
    "top_industries",
    "top_places",
    "top_qualities",
    "top_values",
]
