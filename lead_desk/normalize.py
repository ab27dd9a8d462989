"""Case-insensitive text helpers and field normalisation for lead records."""
from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from .models import Lead, LeadCategory, LeadStatus

T = TypeVar("T")

PHONE_TAIL_LENGTH = 8

_NON_DIGITS = re.compile(r"[^0-9]")
_NON_DIAL = re.compile(r"[^0-9+]")


# --- Text ---

def clean_text(value: Any) -> str:
    """Return ``value`` as trimmed text, mapping ``None`` to an empty string."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def normalize_text(text: Optional[str]) -> Optional[str]:
    """Return the comparison key for ``text``; ``None`` stays ``None``."""

    if text is None:
        return None
    return str(text).lower().strip()


def equals_ignore_case(left: Optional[str], right: Optional[str]) -> bool:
    if left is None or right is None:
        return False
    return normalize_text(left) == normalize_text(right)


def unique_ignore_case(values: Iterable[Optional[str]]) -> List[str]:
    """Drop case-insensitive repeats, keeping the first spelling of each."""

    seen = set()
    unique: List[str] = []
    for value in values:
        key = normalize_text(value)
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(value)  # type: ignore[arg-type]
    return unique


def group_by_case_insensitive(
    items: Iterable[T], key: Callable[[T], Optional[str]]
) -> Dict[str, List[T]]:
    """Group ``items`` by a case-insensitive key.

    The first spelling seen for a key becomes the label of its group. Items
    whose key is missing or blank are left out.
    """

    groups: Dict[str, List[T]] = {}
    labels: Dict[str, str] = {}
    for item in items:
        raw = key(item)
        normalised = normalize_text(raw)
        if not normalised:
            continue
        label = labels.get(normalised)
        if label is None:
            label = labels[normalised] = str(raw)
            groups[label] = []
        groups[label].append(item)
    return groups


def count_by_case_insensitive(
    items: Iterable[T], key: Callable[[T], Optional[str]]
) -> Dict[str, int]:
    return {label: len(members) for label, members in group_by_case_insensitive(items, key).items()}


# --- Enumerations ---

_STATUS_RULES: Sequence[tuple] = (
    (("WIN", "WON"), LeadStatus.WON),
    (("LOST",), LeadStatus.LOST),
    (("QUAL",), LeadStatus.QUALIFIED),
    (("CONT",), LeadStatus.CONTACTED),
    (("SPAM",), LeadStatus.SPAM),
    (("WAIT",), LeadStatus.WAITING_LIST),
)

_CATEGORY_RULES: Sequence[tuple] = (
    (("HOT", "GENUINE"), LeadCategory.HOT),
    (("WARM",), LeadCategory.WARM),
    (("COLD",), LeadCategory.COLD),
    (("FAKE",), LeadCategory.FAKE),
)


def map_status(value: Any) -> LeadStatus:
    """Map free-form status text onto :class:`LeadStatus` (default ``NEW``)."""

    if isinstance(value, LeadStatus):
        return value
    text = clean_text(value).upper()
    for needles, status in _STATUS_RULES:
        if any(needle in text for needle in needles):
            return status
    return LeadStatus.NEW


def map_category(value: Any) -> LeadCategory:
    """Map free-form quality text onto :class:`LeadCategory`."""

    if isinstance(value, LeadCategory):
        return value
    text = clean_text(value).upper()
    for needles, category in _CATEGORY_RULES:
        if any(needle in text for needle in needles):
            return category
    return LeadCategory.UNCATEGORIZED


def map_quality(value: Any) -> str:
    """Category name for ``value``, or its trimmed text when it names no category."""

    text = clean_text(value)
    category = map_category(text)
    if category is LeadCategory.UNCATEGORIZED and text and not equals_ignore_case(text, category.value):
        return text
    return category.value


# --- Phones ---

def phone_digits(phone: Optional[str]) -> str:
    return _NON_DIGITS.sub("", phone or "")


def phone_tail(phone: Optional[str], length: int = PHONE_TAIL_LENGTH) -> str:
    return phone_digits(phone)[-length:]


def is_duplicate_phone(phone: Optional[str], leads: Iterable[Lead]) -> bool:
    """Return ``True`` when another lead shares the last eight digits of ``phone``."""

    if not phone or len(phone) < PHONE_TAIL_LENGTH:
        return False
    tail = phone_tail(phone)
    if not tail:
        return False
    return any(phone_tail(lead.phone) == tail for lead in leads)


def find_duplicate(phone: Optional[str], leads: Iterable[Lead]) -> Optional[Lead]:
    if not phone or len(phone) < PHONE_TAIL_LENGTH:
        return None
    tail = phone_tail(phone)
    for lead in leads:
        if tail and phone_tail(lead.phone) == tail:
            return lead
    return None


def ensure_plus_prefix(phone: str) -> str:
    phone = phone.strip()
    if phone and not phone.startswith("+"):
        return f"+{phone}"
    return phone


_DIALLING_CODES: Dict[str, str] = {
    "+1": "USA/Canada",
    "+7": "Russia/Kazakhstan",
    "+20": "Egypt",
    "+27": "South Africa",
    "+30": "Greece",
    "+31": "Netherlands",
    "+32": "Belgium",
    "+33": "France",
    "+34": "Spain",
    "+36": "Hungary",
    "+39": "Italy",
    "+40": "Romania",
    "+41": "Switzerland",
    "+43": "Austria",
    "+44": "UK",
    "+45": "Denmark",
    "+46": "Sweden",
    "+47": "Norway",
    "+48": "Poland",
    "+49": "Germany",
    "+51": "Peru",
    "+52": "Mexico",
    "+53": "Cuba",
    "+54": "Argentina",
    "+55": "Brazil",
    "+56": "Chile",
    "+57": "Colombia",
    "+58": "Venezuela",
    "+60": "Malaysia",
    "+61": "Australia",
    "+62": "Indonesia",
    "+63": "Philippines",
    "+64": "New Zealand",
    "+65": "Singapore",
    "+66": "Thailand",
    "+81": "Japan",
    "+82": "South Korea",
    "+84": "Vietnam",
    "+86": "China",
    "+90": "Turkey",
    "+91": "India",
    "+92": "Pakistan",
    "+93": "Afghanistan",
    "+94": "Sri Lanka",
    "+95": "Myanmar",
    "+98": "Iran",
    "+212": "Morocco",
    "+213": "Algeria",
    "+216": "Tunisia",
    "+218": "Libya",
    "+220": "Gambia",
    "+221": "Senegal",
    "+233": "Ghana",
    "+234": "Nigeria",
    "+251": "Ethiopia",
    "+254": "Kenya",
    "+255": "Tanzania",
    "+256": "Uganda",
    "+966": "Saudi Arabia",
    "+968": "Oman",
    "+971": "UAE",
    "+973": "Bahrain",
    "+974": "Qatar",
    "+965": "Kuwait",
}


def guess_country_from_phone(phone: Optional[str]) -> str:
    """Return the country for the longest matching dialling code, or ``""``."""

    clean = _NON_DIAL.sub("", phone or "")
    if not clean:
        return ""
    if clean.startswith("91") and not clean.startswith("+"):
        return "India"
    for length in (4, 3, 2):
        country = _DIALLING_CODES.get(clean[:length])
        if country:
            return country
    return ""


__all__ = [
    "clean_text",
    "count_by_case_insensitive",
    "ensure_plus_prefix",
    "equals_ignore_case",
    "find_duplicate",
    "group_by_case_insensitive",
    "guess_country_from_phone",
    "is_duplicate_phone",
    "map_category",
    "map_quality",
    "map_status",
    "normalize_text",
    "phone_digits",
    "phone_tail",
    "unique_ignore_case",
]
