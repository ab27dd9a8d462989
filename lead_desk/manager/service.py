"""Lead manager that owns the current snapshot and talks to the store."""
from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..dates import now_local_iso
from ..filters import FilterState, filter_leads
from ..models import DashboardSummary, Lead, LeadCategory, LeadStatus, Vocabulary
from ..normalize import (
    clean_text,
    ensure_plus_prefix,
    find_duplicate,
    guess_country_from_phone,
    map_quality,
    map_status,
)
from ..sorting import SortDirection, sort_leads
from ..stats import summarize
from ..store import StoreError

LOGGER = logging.getLogger(__name__)


class MissingPhoneError(ValueError):
    """Raised when a new lead is submitted without a phone number."""


class DuplicateLeadError(ValueError):
    """Raised when a new lead shares the last eight phone digits with another."""

    def __init__(self, phone: str, existing: Lead) -> None:
        super().__init__(f"A lead with the same last 8 digits as {phone!r} already exists ({existing.uid})")
        self.phone = phone
        self.existing = existing


class LeadStoreProtocol(Protocol):
    """Operations the manager needs from a lead store."""

    def fetch_leads(self) -> List[Lead]:  # pragma: no cover - runtime protocol
        ...

    def save_lead(self, lead: Lead) -> None:  # pragma: no cover - runtime protocol
        ...

    def delete_lead(self, uid: str) -> None:  # pragma: no cover - runtime protocol
        ...

    def fetch_group_names(self) -> List[str]:  # pragma: no cover - runtime protocol
        ...


def _millis() -> int:
    return int(time.time() * 1000)


def next_serial_number(leads: Iterable[Lead]) -> str:
    highest = 0
    for lead in leads:
        try:
            highest = max(highest, int(float(lead.sl_no)))
        except (TypeError, ValueError):
            continue
    return str(highest + 1)


class LeadManager:
    """Keeps an immutable lead snapshot in step with the remote store.

    Changes are applied to the snapshot first and then written to the store.
    When a write fails the snapshot is reloaded from the store so the view
    never drifts from what was actually persisted.
    """

    def __init__(
        self,
        store: LeadStoreProtocol,
        *,
        vocabulary: Optional[Vocabulary] = None,
        raise_on_error: bool = False,
        clock: Callable[[], int] = _millis,
    ) -> None:
        self._store = store
        self._vocabulary = vocabulary
        self._raise_on_error = raise_on_error
        self._clock = clock
        self._leads: Tuple[Lead, ...] = ()
        self._group_names: Tuple[str, ...] = ()

    @property
    def leads(self) -> Tuple[Lead, ...]:
        return self._leads

    @property
    def group_names(self) -> Tuple[str, ...]:
        return self._group_names

    def load(self) -> Tuple[Lead, ...]:
        self.reload()
        self._group_names = tuple(self._store.fetch_group_names())
        return self._leads

    def reload(self) -> Tuple[Lead, ...]:
        try:
            self._leads = tuple(self._store.fetch_leads())
        except StoreError:
            LOGGER.exception("Could not load leads from the store")
            if self._raise_on_error:
                raise
            self._leads = ()
        return self._leads

    def replace_snapshot(self, leads: Sequence[Lead]) -> None:
        """Use ``leads`` as the current snapshot without touching the store."""

        self._leads = tuple(leads)

    def find(self, uid: str) -> Optional[Lead]:
        for lead in self._leads:
            if lead.uid == uid:
                return lead
        return None

    # --- Lifecycle ---

    def build_lead(self, fields: Mapping[str, object]) -> Lead:
        """Validate form input and turn it into a new, unsaved lead."""

        phone = clean_text(fields.get("phone"))
        if not phone:
            raise MissingPhoneError("Phone number is required")
        existing = find_duplicate(phone, self._leads)
        if existing is not None:
            raise DuplicateLeadError(phone, existing)

        quality = clean_text(fields.get("leadQuality")) or LeadCategory.UNCATEGORIZED.value
        if self._vocabulary is not None and not self._vocabulary.knows_quality(quality):
            raise ValueError(f"Unknown lead quality {quality!r}; expected one of {list(self._vocabulary.lead_qualities)}")

        stamp = self._clock()
        phone = ensure_plus_prefix(phone)
        return Lead(
            id=f"new-{stamp}",
            uid=f"uid-{stamp}",
            date_time=clean_text(fields.get("dateTime")) or now_local_iso(),
            sl_no=clean_text(fields.get("slNo")) or next_serial_number(self._leads),
            phone=phone,
            country=clean_text(fields.get("country")) or guess_country_from_phone(phone),
            place=clean_text(fields.get("place")),
            name=clean_text(fields.get("name")),
            lead_quality=self._quality_label(quality),
            business_industry=clean_text(fields.get("businessIndustry")),
            special_notes=clean_text(fields.get("specialNotes")),
            current_status=map_status(fields.get("currentStatus") or LeadStatus.NEW),
            forwarded_to=clean_text(fields.get("forwardedTo")),
        )

    def _quality_label(self, quality: str) -> str:
        if self._vocabulary is not None:
            listed = self._vocabulary.canonical_quality(quality)
            if listed is not None:
                return listed
        return map_quality(quality)

    def create_lead(self, fields: Mapping[str, object]) -> Lead:
        lead = self.build_lead(fields)
        self.save_lead(lead)
        return lead

    def save_lead(self, lead: Lead) -> bool:
        """Upsert ``lead`` by uid in the snapshot and the store."""

        updated = list(self._leads)
        for index, current in enumerate(updated):
            if current.uid == lead.uid:
                updated[index] = lead
                break
        else:
            updated.append(lead)
        self._leads = tuple(updated)
        return self._write(lambda: self._store.save_lead(lead), f"save lead {lead.uid}")

    def delete_lead(self, uid: str) -> bool:
        if self.find(uid) is None:
            LOGGER.warning("No lead with uid %s to delete", uid)
            return False
        self._leads = tuple(lead for lead in self._leads if lead.uid != uid)
        return self._write(lambda: self._store.delete_lead(uid), f"delete lead {uid}")

    def _write(self, operation: Callable[[], None], description: str) -> bool:
        try:
            operation()
        except StoreError:
            LOGGER.exception("Failed to %s, reloading from the store", description)
            if self._raise_on_error:
                raise
            self.reload()
            return False
        return True

    # --- Views ---

    def view(
        self,
        state: Optional[FilterState] = None,
        direction: SortDirection = SortDirection.OLDEST,
    ) -> List[Lead]:
        return sort_leads(filter_leads(self._leads, state), direction)

    def summary(self, **options) -> DashboardSummary:
        return summarize(self._leads, **options)
