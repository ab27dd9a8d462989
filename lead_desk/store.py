"""HTTP client for the spreadsheet script endpoint that stores leads.

The endpoint takes form posts with an ``action`` field and answers with JSON.
Every action lives on the same URL; settings may live on a separate script.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from .models import Lead, Vocabulary

LOGGER = logging.getLogger(__name__)

ACTION_GET_LEADS = "getLeads"
ACTION_SAVE_LEAD = "saveToSheets"
ACTION_DELETE_LEAD = "deleteLead"
ACTION_GET_SHEETS = "getSheets"
ACTION_GET_SETTINGS = "getSettings"
ACTION_SAVE_SETTINGS = "saveSettings"

DEFAULT_GROUP_NAMES = ("All leads", "Sales Team", "Marketing Team", "Support Team", "Management")

# Sheets that hold bookkeeping rather than an assignment group.
NON_GROUP_SHEETS = frozenset({"all leads", "settings"})


class StoreError(RuntimeError):
    """Raised when the remote store cannot be reached or answers badly."""


class SheetStore:
    """Thin wrapper over the script endpoint's form-post actions."""

    def __init__(
        self,
        script_url: str,
        *,
        settings_url: Optional[str] = None,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not script_url:
            raise ValueError("A script URL is required to reach the lead store")
        self.script_url = script_url
        self.settings_url = settings_url or script_url
        self.timeout = timeout
        self._session = session or requests.Session()

    def _post(self, action: str, fields: Optional[Mapping[str, str]] = None, *, url: Optional[str] = None) -> requests.Response:
        payload: Dict[str, str] = {"action": action}
        payload.update(fields or {})
        target = url or self.script_url
        LOGGER.debug("POST %s action=%s", target, action)
        try:
            response = self._session.post(target, data=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise StoreError(f"Lead store request '{action}' failed: {exc}") from exc
        if not response.ok:
            raise StoreError(f"Lead store request '{action}' returned HTTP {response.status_code}")
        return response

    def _post_json(self, action: str, fields: Optional[Mapping[str, str]] = None, *, url: Optional[str] = None) -> Any:
        response = self._post(action, fields, url=url)
        try:
            return response.json()
        except ValueError as exc:
            raise StoreError(f"Lead store response to '{action}' was not valid JSON") from exc

    # --- Leads ---

    def fetch_leads(self) -> List[Lead]:
        """Load every lead, assigning fresh snapshot ids by row position."""

        rows = self._post_json(ACTION_GET_LEADS)
        if not isinstance(rows, list):
            raise StoreError("Lead store returned an unexpected payload for 'getLeads'")
        leads = [Lead.from_record(row, index) for index, row in enumerate(rows) if isinstance(row, Mapping)]
        LOGGER.info("Fetched %s leads from the store", len(leads))
        return leads

    def save_lead(self, lead: Lead) -> None:
        """Insert or replace ``lead`` by uid."""

        self._post(ACTION_SAVE_LEAD, lead.to_record())
        LOGGER.info("Saved lead %s (forwarded to %s)", lead.uid, lead.forwarded_to or "nobody")

    def delete_lead(self, uid: str) -> None:
        if not uid:
            raise ValueError("Cannot delete a lead without a uid")
        self._post(ACTION_DELETE_LEAD, {"uid": uid})
        LOGGER.info("Deleted lead %s", uid)

    # --- Groups ---

    def fetch_sheet_names(self) -> List[str]:
        names = self._post_json(ACTION_GET_SHEETS)
        if not isinstance(names, list):
            raise StoreError("Lead store returned an unexpected payload for 'getSheets'")
        return [str(name) for name in names]

    def fetch_group_names(self) -> List[str]:
        """Return assignment group names, falling back to the default set."""

        try:
            names = self.fetch_sheet_names()
        except StoreError as exc:
            LOGGER.warning("Using default group names: %s", exc)
            names = list(DEFAULT_GROUP_NAMES)
        return [name for name in names if name.strip().lower() not in NON_GROUP_SHEETS]

    # --- Settings ---

    def fetch_vocabulary(self) -> Vocabulary:
        data = self._post_json(ACTION_GET_SETTINGS, url=self.settings_url)
        if not isinstance(data, Mapping):
            raise StoreError("Lead store returned an unexpected payload for 'getSettings'")
        return Vocabulary.from_mapping(data)

    def save_vocabulary(self, vocabulary: Vocabulary) -> None:
        self._post(
            ACTION_SAVE_SETTINGS,
            {
                "leadQualities": json.dumps(list(vocabulary.lead_qualities)),
                "businessIndustries": json.dumps(list(vocabulary.business_industries)),
            },
            url=self.settings_url,
        )
        LOGGER.info("Saved workspace vocabulary")


__all__ = ["DEFAULT_GROUP_NAMES", "SheetStore", "StoreError"]
