from lead_desk.models import Lead
from lead_desk.sorting import SortDirection, SortPreferenceStore, sort_leads


def _lead(uid: str, date_time: str) -> Lead:
    return Lead(id=uid, uid=uid, date_time=date_time)


def test_sort_orders_by_timestamp_with_missing_dates_as_epoch() -> None:
    leads = [
        _lead("b", "2024-05-02T10:00"),
        _lead("missing", ""),
        _lead("a", "2024-05-01T10:00"),
        _lead("broken", "yesterday"),
    ]

    oldest = [lead.uid for lead in sort_leads(leads, SortDirection.OLDEST)]
    newest = [lead.uid for lead in sort_leads(leads, SortDirection.NEWEST)]

    assert oldest == ["missing", "broken", "a", "b"]
    assert newest == ["b", "a", "missing", "broken"]


def test_sort_is_stable_for_equal_timestamps() -> None:
    leads = [_lead("first", "2024-05-01T10:00"), _lead("second", "2024-05-01T10:00")]

    assert [lead.uid for lead in sort_leads(leads, "newest")] == ["first", "second"]
    assert [lead.uid for lead in sort_leads(leads, "oldest")] == ["first", "second"]


def test_sort_does_not_mutate_input() -> None:
    leads = [_lead("b", "2024-05-02"), _lead("a", "2024-05-01")]
    sort_leads(leads)
    assert [lead.uid for lead in leads] == ["b", "a"]


def test_sort_preference_round_trip(tmp_path) -> None:
    store = SortPreferenceStore(tmp_path / "prefs" / "preferences.json")

    assert store.load() is SortDirection.OLDEST
    store.save(SortDirection.NEWEST)
    assert store.load() is SortDirection.NEWEST
    assert SortPreferenceStore(store.path).load() is SortDirection.NEWEST


def test_sort_preference_ignores_corrupt_file(tmp_path) -> None:
    path = tmp_path / "preferences.json"
    path.write_text("{not json", encoding="utf-8")

    assert SortPreferenceStore(path).load() is SortDirection.OLDEST


def test_direction_helpers() -> None:
    assert SortDirection.parse("NEWEST") is SortDirection.NEWEST
    assert SortDirection.parse("sideways") is SortDirection.OLDEST
    assert SortDirection.OLDEST.toggled() is SortDirection.NEWEST
