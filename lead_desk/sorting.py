"""Chronological ordering of leads and the persisted sort preference."""
from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional

from .dates import lead_timestamp
from .models import Lead

LOGGER = logging.getLogger(__name__)

DEFAULT_PREFERENCES_PATH = Path.home() / ".lead_desk" / "preferences.json"


class SortDirection(str, Enum):
    OLDEST = "oldest"
    NEWEST = "newest"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortDirection":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OLDEST

    def toggled(self) -> "SortDirection":
        return SortDirection.NEWEST if self is SortDirection.OLDEST else SortDirection.OLDEST


def sort_leads(leads: Iterable[Lead], direction: SortDirection = SortDirection.OLDEST) -> List[Lead]:
    """Order leads by timestamp; leads without one sort as the epoch.

    The sort is stable in both directions, so leads sharing a timestamp keep
    their input order.
    """

    return sorted(
        leads,
        key=lambda lead: lead_timestamp(lead.date_time),
        reverse=SortDirection.parse(direction) is SortDirection.NEWEST,
    )


class SortPreferenceStore:
    """Remembers the last chosen sort direction between sessions."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path).expanduser() if path else DEFAULT_PREFERENCES_PATH

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            LOGGER.warning("Ignoring unreadable preferences file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> SortDirection:
        return SortDirection.parse(self._read().get("sortOrder"))

    def save(self, direction: SortDirection) -> None:
        data = self._read()
        data["sortOrder"] = SortDirection.parse(direction).value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        LOGGER.debug("Saved sort preference %s to %s", data["sortOrder"], self.path)


__all__ = ["SortDirection", "SortPreferenceStore", "sort_leads"]
