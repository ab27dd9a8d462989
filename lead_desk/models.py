"""Data models shared by the lead store client, the engine, and the CLI."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence


class LeadStatus(str, Enum):
    """Workflow position of a lead in the sales pipeline."""

    NEW = "NEW"
    CONTACTED = "CONTACTED"
    QUALIFIED = "QUALIFIED"
    WAITING_LIST = "WAITING LIST"
    LOST = "LOST"
    WON = "WON"
    SPAM = "SPAM"


class LeadCategory(str, Enum):
    """Quality classification of a lead, independent of its status."""

    UNCATEGORIZED = "UNCATEGORIZED"
    HOT = "HOT"
    WARM = "WARM"
    COLD = "COLD"
    FAKE = "FAKE"


# Older sheets recorded hot leads as "Genuine".
HOT_SYNONYMS = frozenset({"hot", "genuine"})

REMOVED_MARKER = "removed"
TERMINAL_STATUSES = frozenset({LeadStatus.LOST, LeadStatus.SPAM})

# --- Core record ---

@dataclass(frozen=True)
class Lead:
    """A contact inquiry tracked through the pipeline.

    ``uid`` is the persistence identity. ``id`` only identifies the record
    within one loaded snapshot and is never sent to the store.
    """

    id: str
    uid: str
    date_time: str = ""
    sl_no: str = ""
    phone: str = ""
    country: str = ""
    place: str = ""
    name: str = ""
    lead_quality: str = LeadCategory.UNCATEGORIZED.value
    business_industry: str = ""
    special_notes: str = ""
    current_status: LeadStatus = LeadStatus.NEW
    forwarded_to: str = ""

    @property
    def is_pending(self) -> bool:
        return not (self.forwarded_to or "").strip()

    @property
    def is_marked_removed(self) -> bool:
        return (self.forwarded_to or "").strip().lower() == REMOVED_MARKER

    @property
    def is_removed(self) -> bool:
        """Removed leads are terminal (LOST/SPAM) or carry the removed marker."""

        return self.current_status in TERMINAL_STATUSES or self.is_marked_removed

    @property
    def is_forwarded(self) -> bool:
        return not self.is_pending and not self.is_marked_removed

    @property
    def is_hot(self) -> bool:
        return is_hot_quality(self.lead_quality)

    def with_changes(self, **changes: Any) -> "Lead":
        return replace(self, **changes)

    def to_record(self) -> Dict[str, str]:
        """Return the camel-case mapping posted to the store."""

        quality = self.lead_quality
        if is_hot_quality(quality):
            quality = LeadCategory.HOT.value
        return {
            "uid": self.uid,
            "dateTime": self.date_time,
            "slNo": self.sl_no,
            "phone": self.phone,
            "country": self.country,
            "place": self.place,
            "name": self.name,
            "leadQuality": quality,
            "businessIndustry": self.business_industry,
            "specialNotes": self.special_notes,
            "currentStatus": self.current_status.value,
            "forwardedTo": self.forwarded_to,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any], index: int) -> "Lead":
        """Build a lead from a loosely typed store row.

        Missing fields become empty strings, status and quality are mapped onto
        the fixed enumerations, and ``id`` is derived from the row position.
        """

        from .normalize import clean_text, map_quality, map_status

        uid = clean_text(record.get("uid")) or f"uid-{index}"
        return cls(
            id=f"sheet-{index}",
            uid=uid,
            date_time=clean_text(record.get("dateTime")),
            sl_no=clean_text(record.get("slNo")),
            phone=clean_text(record.get("phone")),
            country=clean_text(record.get("country")),
            place=clean_text(record.get("place")),
            name=clean_text(record.get("name")),
            lead_quality=map_quality(record.get("leadQuality")),
            business_industry=clean_text(record.get("businessIndustry")),
            special_notes=clean_text(record.get("specialNotes")),
            current_status=map_status(record.get("currentStatus")),
            forwarded_to=clean_text(record.get("forwardedTo")),
        )


def is_hot_quality(value: Optional[str]) -> bool:
    """Return ``True`` for HOT and its legacy "Genuine" spellings."""

    if value is None:
        return False
    text = value.value if isinstance(value, Enum) else str(value)
    return text.strip().lower() in HOT_SYNONYMS


# --- Configuration passed into the engine ---

@dataclass(frozen=True)
class Vocabulary:
    """Lead quality and industry names configured for the workspace."""

    lead_qualities: Sequence[str] = tuple(category.value for category in LeadCategory)
    business_industries: Sequence[str] = (
        "Real Estate",
        "Technology",
        "Healthcare",
        "Finance",
        "Education",
    )

    def canonical_quality(self, quality: str) -> Optional[str]:
        """Return the configured spelling of ``quality``, if it is listed."""

        wanted = quality.strip().lower()
        for option in self.lead_qualities:
            if option.strip().lower() == wanted:
                return option
        return None

    def knows_quality(self, quality: str) -> bool:
        return self.canonical_quality(quality) is not None or (
            is_hot_quality(quality) and any(is_hot_quality(option) for option in self.lead_qualities)
        )

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "Vocabulary":
        data = data or {}
        default = cls()
        qualities = data.get("leadQualities", data.get("lead_qualities")) or default.lead_qualities
        industries = (
            data.get("businessIndustries", data.get("business_industries")) or default.business_industries
        )
        return cls(
            lead_qualities=tuple(str(item) for item in qualities),
            business_industries=tuple(str(item) for item in industries),
        )


# --- Derived views ---

@dataclass(frozen=True)
class LabelCount:
    """A display label with the number of leads grouped under it."""

    label: str
    count: int


@dataclass(frozen=True)
class DailyCount:
    """Lead totals for one calendar day of the trend window."""

    day: date
    total: int
    forwarded: int


@dataclass(frozen=True)
class TeamStats:
    """Per assigned group rollup used by the team distribution tile."""

    team: str
    total: int
    won: int
    genuine: int

    @property
    def win_rate(self) -> str:
        if self.total <= 0:
            return "0"
        return f"{self.won / self.total * 100:.0f}"


@dataclass
class DashboardSummary:
    """Every dashboard tile computed from one lead snapshot."""

    total: int
    pipeline: Dict[str, int]
    pending: int
    forwarded: int
    removed: int
    pending_rate: str
    forwarded_rate: str
    removed_rate: str
    conversion_rate: str
    active_pipeline: int
    recent: int
    genuine: int
    top_places: List[LabelCount] = field(default_factory=list)
    top_countries: List[LabelCount] = field(default_factory=list)
    top_qualities: List[LabelCount] = field(default_factory=list)
    top_industries: List[LabelCount] = field(default_factory=list)
    peak_hours: List[LabelCount] = field(default_factory=list)
    daily_trend: List[DailyCount] = field(default_factory=list)
    teams: List[TeamStats] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["daily_trend"] = [
            {"day": entry.day.isoformat(), "total": entry.total, "forwarded": entry.forwarded}
            for entry in self.daily_trend
        ]
        return data
