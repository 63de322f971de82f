from datetime import datetime, timedelta, timezone

from consistency.self_write_guard import (
    exclude_path,
    fields_to_write,
    to_datetime,
    within_quiescence_window,
)
from fakes import FakeFirestore
from firebase_admin import firestore

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_write_two_minutes_later_is_suppressed() -> None:
    assert within_quiescence_window(NOW, NOW + timedelta(minutes=2))
    assert within_quiescence_window(NOW + timedelta(minutes=2), NOW)


def test_write_outside_window_goes_through() -> None:
    assert not within_quiescence_window(NOW, NOW + timedelta(minutes=5))
    assert not within_quiescence_window(NOW, NOW + timedelta(hours=1))


def test_missing_previous_never_suppresses() -> None:
    assert not within_quiescence_window(None, NOW)


def test_custom_window() -> None:
    window = timedelta(seconds=30)
    assert not within_quiescence_window(NOW, NOW + timedelta(minutes=2), window)


def test_epoch_millis_and_naive_datetimes() -> None:
    millis = int(NOW.timestamp() * 1000)
    assert to_datetime(millis) == NOW
    assert to_datetime(NOW.replace(tzinfo=None)) == NOW
    assert to_datetime(True) is None
    assert within_quiescence_window(millis, NOW + timedelta(minutes=1))


def test_exclude_path_drops_triggering_document() -> None:
    db = FakeFirestore()
    db.seed("resources/a", {"isFeatured": True})
    db.seed("resources/b", {"isFeatured": True})

    remaining = exclude_path(db.collection("resources").stream(), "resources/a")

    assert [snapshot.id for snapshot in remaining] == ["b"]


def test_exclude_path_compares_full_paths() -> None:
    db = FakeFirestore()
    db.seed("resources/a", {})
    db.seed("resources/other/cards/a", {})

    remaining = exclude_path(
        db.collection("resources/other/cards").stream(), "resources/a"
    )

    assert [snapshot.reference.path for snapshot in remaining] == [
        "resources/other/cards/a"
    ]


def test_fields_to_write_keeps_only_differences() -> None:
    current = {"count": 2, "flag": True}
    assert fields_to_write(current, {"count": 2, "flag": True}) == {}
    assert fields_to_write(current, {"count": 3, "flag": True}) == {"count": 3}
    assert fields_to_write(current, {"other": None}) == {"other": None}
    assert fields_to_write(None, {"count": 1}) == {"count": 1}


def test_fields_to_write_deletes_only_present_fields() -> None:
    proposed = {"a": firestore.DELETE_FIELD, "b": firestore.DELETE_FIELD}
    assert fields_to_write({"a": "x"}, proposed) == {"a": firestore.DELETE_FIELD}
    assert fields_to_write({}, proposed) == {}
