"""Filter evaluation for lead snapshots.

Every active dimension of a :class:`FilterState` must match for a lead to be
kept. Evaluation never raises: a lead whose fields cannot be evaluated is
simply excluded.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, fields, replace
from typing import Iterable, List, Optional, Sequence, Tuple

from .dates import lead_date, lead_hour
from .models import Lead, LeadStatus
from .normalize import normalize_text

LOGGER = logging.getLogger(__name__)

TEAM_FORWARDED = "forwarded"
TEAM_REMOVED = "removed"

_TWELVE_HOUR = re.compile(
    r"^\s*(\d{1,2})(?::(\d{2}))?\s*([AaPp][Mm])\s*-\s*(\d{1,2})(?::(\d{2}))?\s*([AaPp][Mm])\s*$"
)
_TWENTY_FOUR_HOUR = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?\s*-\s*(\d{1,2})(?::(\d{2}))?\s*$")


@dataclass(frozen=True)
class FilterState:
    """Independently toggled filter dimensions. ``None`` leaves a dimension off."""

    search: Optional[str] = None
    status: Optional[str] = None
    place: Optional[str] = None
    country: Optional[str] = None
    quality: Optional[str] = None
    team: Optional[str] = None
    pending: bool = False
    hour: Optional[str] = None
    date: Optional[str] = None

    def is_active(self) -> bool:
        for item in fields(self):
            value = getattr(self, item.name)
            if item.name == "pending":
                if value:
                    return True
            elif value is not None and str(value).strip():
                return True
        return False

    def cleared(self) -> "FilterState":
        return FilterState()

    def updated_with(self, other: "FilterState") -> "FilterState":
        """Copy of this state with every dimension set on ``other`` replaced by ``other``'s value.

        This is an override, not a conjunction: when both states set the same
        dimension only ``other``'s value is kept.
        """

        changes = {}
        for item in fields(other):
            value = getattr(other, item.name)
            if item.name == "pending":
                if value:
                    changes["pending"] = True
            elif value is not None and str(value).strip():
                changes[item.name] = value
        return replace(self, **changes)


def _clock_hour(hour: int, minute: Optional[str], meridiem: Optional[str]) -> Optional[int]:
    if minute is not None and not 0 <= int(minute) < 60:
        return None
    if meridiem is None:
        return hour if 0 <= hour <= 24 else None
    if not 1 <= hour <= 12:
        return None
    hour %= 12
    if meridiem.upper() == "PM":
        hour += 12
    return hour


def parse_hour_range(label: Optional[str]) -> Optional[Tuple[int, int]]:
    """Parse an hour filter label into a ``(start, end)`` pair of hours.

    ``"6:00 PM - 12:00 AM"`` yields ``(18, 0)``. The older 24-hour form
    ``"18:00 - 19:00"`` is accepted too. Returns ``None`` when the label is not
    recognised.
    """

    if not label:
        return None
    match = _TWELVE_HOUR.match(label)
    if match:
        start = _clock_hour(int(match.group(1)), match.group(2), match.group(3))
        end = _clock_hour(int(match.group(4)), match.group(5), match.group(6))
    else:
        match = _TWENTY_FOUR_HOUR.match(label)
        if not match:
            return None
        start = _clock_hour(int(match.group(1)), match.group(2), None)
        end = _clock_hour(int(match.group(3)), match.group(4), None)
    if start is None or end is None:
        return None
    return start % 24, end % 24


def hour_in_range(hour: int, start: int, end: int) -> bool:
    """Right-open membership test where an ``end`` of midnight means hour 24."""

    if end == 0:
        end = 24
    if start < end:
        return start <= hour < end
    # range wraps past midnight
    return hour >= start or hour < end


def _equals(value: Optional[str], wanted: str) -> bool:
    key = normalize_text(value)
    return key is not None and key == normalize_text(wanted)


def _status_matches(status: LeadStatus, wanted: str) -> bool:
    # Accept the member name too, e.g. WAITING_LIST for "WAITING LIST".
    return _equals(status.value, wanted) or _equals(status.name, wanted)


def _search_fields(lead: Lead) -> Sequence[str]:
    return (
        lead.name,
        lead.phone,
        lead.special_notes,
        lead.country,
        lead.place,
        lead.lead_quality,
        lead.current_status.value,
        lead.forwarded_to,
        lead.sl_no,
    )


def _matches_team(lead: Lead, team: str) -> bool:
    wanted = normalize_text(team)
    if wanted == TEAM_FORWARDED:
        return lead.is_forwarded
    if wanted == TEAM_REMOVED:
        return lead.is_removed
    return _equals(lead.forwarded_to, team)


def _active(value: Optional[str]) -> bool:
    return value is not None and bool(str(value).strip())


def lead_matches(
    lead: Lead, state: FilterState, hour_range: Optional[Tuple[int, int]] = None
) -> bool:
    """Return ``True`` when ``lead`` satisfies every active dimension of ``state``."""

    if _active(state.search):
        term = normalize_text(state.search)
        if not any(term in (normalize_text(value) or "") for value in _search_fields(lead)):
            return False

    if _active(state.status) and not _status_matches(lead.current_status, state.status):
        return False
    if _active(state.place) and not _equals(lead.place, state.place):
        return False
    if _active(state.country) and not _equals(lead.country, state.country):
        return False
    if _active(state.quality) and not _equals(lead.lead_quality, state.quality):
        return False
    if _active(state.team) and not _matches_team(lead, state.team):
        return False
    if state.pending and not lead.is_pending:
        return False

    if _active(state.hour):
        if hour_range is None:
            hour_range = parse_hour_range(state.hour)
        if hour_range is None:
            return False
        hour = lead_hour(lead.date_time)
        if hour is None or not hour_in_range(hour, *hour_range):
            return False

    if _active(state.date):
        day = lead_date(lead.date_time)
        if day is None or day.isoformat() != str(state.date).strip():
            return False

    return True


def filter_leads(leads: Iterable[Lead], state: Optional[FilterState] = None) -> List[Lead]:
    """Return the leads matching ``state`` in their original order."""

    snapshot = list(leads)
    if state is None or not state.is_active():
        return snapshot

    hour_range = None
    if _active(state.hour):
        hour_range = parse_hour_range(state.hour)
        if hour_range is None:
            LOGGER.warning("Ignoring leads for unrecognised hour filter %r", state.hour)
            return []

    selected: List[Lead] = []
    for lead in snapshot:
        try:
            if lead_matches(lead, state, hour_range):
                selected.append(lead)
        except Exception:  # noqa: BLE001 - malformed records never match
            LOGGER.debug("Excluding lead %s after a filter error", getattr(lead, "uid", "?"), exc_info=True)
    return selected


__all__ = [
    "FilterState",
    "TEAM_FORWARDED",
    "TEAM_REMOVED",
    "filter_leads",
    "hour_in_range",
    "lead_matches",
    "parse_hour_range",
]
