from lead_desk.models import Lead, LeadCategory, LeadStatus
from lead_desk.normalize import (
    count_by_case_insensitive,
    ensure_plus_prefix,
    equals_ignore_case,
    group_by_case_insensitive,
    guess_country_from_phone,
    is_duplicate_phone,
    map_category,
    map_quality,
    map_status,
    normalize_text,
    phone_tail,
    unique_ignore_case,
)


def _lead(index: int, **fields) -> Lead:
    return Lead(id=f"sheet-{index}", uid=f"uid-{index}", **fields)


def test_normalize_text_is_idempotent_and_keeps_none() -> None:
    assert normalize_text("  Dubai ") == "dubai"
    assert normalize_text(normalize_text("  Dubai ")) == normalize_text("  Dubai ")
    assert normalize_text(None) is None


def test_group_by_keeps_first_seen_label() -> None:
    items = [{"q": "Hot"}, {"q": "HOT"}, {"q": "hot"}]

    groups = group_by_case_insensitive(items, lambda item: item["q"])

    assert list(groups) == ["Hot"]
    assert len(groups["Hot"]) == 3


def test_group_by_skips_blank_and_missing_keys() -> None:
    items = [{"q": "Warm"}, {"q": ""}, {"q": "   "}, {"q": None}, {"q": " warm "}]

    counts = count_by_case_insensitive(items, lambda item: item["q"])

    assert counts == {"Warm": 2}
    assert sum(counts.values()) == len([item for item in items if (item["q"] or "").strip()])


def test_group_by_empty_input_returns_empty_mapping() -> None:
    assert group_by_case_insensitive([], lambda item: item) == {}
    assert count_by_case_insensitive([], lambda item: item) == {}


def test_word_helpers() -> None:
    assert equals_ignore_case("Hello", "HELLO")
    assert not equals_ignore_case("Hello", None)
    assert unique_ignore_case(["Test", "TEST", "test", "Example", "EXAMPLE", ""]) == ["Test", "Example"]


def test_map_status_and_category() -> None:
    assert map_status("won deal") is LeadStatus.WON
    assert map_status("Waiting List") is LeadStatus.WAITING_LIST
    assert map_status("contacted") is LeadStatus.CONTACTED
    assert map_status(None) is LeadStatus.NEW
    assert map_category("Genuine") is LeadCategory.HOT
    assert map_category("warm lead") is LeadCategory.WARM
    assert map_category("") is LeadCategory.UNCATEGORIZED


def test_map_quality_keeps_text_that_names_no_category() -> None:
    assert map_quality(" genuine ") == "HOT"
    assert map_quality("Premium ") == "Premium"
    assert map_quality("uncategorized") == "UNCATEGORIZED"
    assert map_quality(None) == "UNCATEGORIZED"


def test_duplicate_detection_uses_last_eight_digits() -> None:
    leads = [_lead(0, phone="+91-9876543210")]

    assert phone_tail("09876543210") == "76543210"
    assert is_duplicate_phone("09876543210", leads)
    assert not is_duplicate_phone("+91-9876543219", leads)
    assert not is_duplicate_phone("1234567", leads)
    assert not is_duplicate_phone("", leads)


def test_phone_prefix_and_country_guess() -> None:
    assert ensure_plus_prefix("971501234567") == "+971501234567"
    assert ensure_plus_prefix("+44 20 7946 0018") == "+44 20 7946 0018"
    assert guess_country_from_phone("+971 50 123 4567") == "UAE"
    assert guess_country_from_phone("+44 20 7946 0018") == "UK"
    assert guess_country_from_phone("919876543210") == "India"
    assert guess_country_from_phone("12345") == ""
