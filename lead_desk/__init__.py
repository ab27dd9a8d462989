"""Top-level package for the lead desk toolkit."""

from . import ingestion, models  # noqa: F401
from .filters import FilterState, filter_leads
from .manager import LeadManager
from .models import (
    DailyCount,
    DashboardSummary,
    LabelCount,
    Lead,
    LeadCategory,
    LeadStatus,
    TeamStats,
    Vocabulary,
)
from .sorting import SortDirection, sort_leads
from .stats import summarize
from .store import SheetStore, StoreError

__all__ = [
    "DailyCount",
    "DashboardSummary",
    "FilterState",
    "LabelCount",
    "Lead",
    "LeadCategory",
    "LeadManager",
    "LeadStatus",
    "SheetStore",
    "SortDirection",
    "StoreError",
    "TeamStats",
    "Vocabulary",
    "filter_leads",
    "sort_leads",
    "summarize",
    "ingestion",
]
