from datetime import datetime, timezone

from consistency.change_classifier import classify
from fakes import FakeFirestore, lesson_data
from harness import TriggerHarness
from models.data_models import UpdateDocument
from resources.featured_lesson import enforce_single_featured, promote_successor


def test_lone_published_lesson_becomes_featured(db: FakeFirestore) -> None:
    a = lesson_data(featured=False)
    db.seed("resources/a", a)

    writes = enforce_single_featured(db, classify(None, a), {"resourceId": "a"})

    assert writes == [UpdateDocument("resources/a", {"isFeatured": True})]


def test_featuring_a_lesson_unfeatures_its_siblings(db: FakeFirestore) -> None:
    db.seed("resources/a", lesson_data(featured=True))
    db.seed("resources/c", lesson_data(subtopic="s2", featured=True))
    b = lesson_data(featured=True)
    db.seed("resources/b", b)

    writes = enforce_single_featured(
        db, classify(lesson_data(featured=False), b), {"resourceId": "b"}
    )

    assert writes == [UpdateDocument("resources/a", {"isFeatured": False})]


def test_unfeatured_lesson_with_featured_sibling_is_left_alone(db: FakeFirestore) -> None:
    db.seed("resources/a", lesson_data(featured=True))
    b = lesson_data(featured=False)
    db.seed("resources/b", b)

    assert enforce_single_featured(db, classify(None, b), {"resourceId": "b"}) == []


def test_only_published_lessons_take_part(db: FakeFirestore) -> None:
    draft = lesson_data(status="draft")
    other = lesson_data(resourceType="other")
    no_subtopic = lesson_data(subtopic=None)
    for data in (draft, other, no_subtopic):
        db.seed("resources/x", data)
        assert enforce_single_featured(db, classify(None, data), {"resourceId": "x"}) == []


def test_invalid_document_is_skipped(db: FakeFirestore) -> None:
    broken = {"status": "published", "isFeatured": "sometimes"}
    assert enforce_single_featured(db, classify(None, broken), {"resourceId": "x"}) == []


def test_deleted_featured_lesson_promotes_most_recent_sibling(db: FakeFirestore) -> None:
    older = datetime(2024, 1, 1, tzinfo=timezone.utc)
    newer = datetime(2024, 3, 1, tzinfo=timezone.utc)
    db.seed("resources/b", lesson_data(dateEdited=older))
    db.seed("resources/c", lesson_data(dateEdited=newer))
    db.seed("resources/d", lesson_data(status="draft", dateEdited=newer))

    writes = promote_successor(
        db, classify(lesson_data(featured=True), None), {"resourceId": "a"}
    )

    assert writes == [UpdateDocument("resources/c", {"isFeatured": True})]


def test_unpublished_featured_lesson_promotes_successor(db: FakeFirestore) -> None:
    db.seed("resources/a", lesson_data(status="draft", featured=True))
    db.seed("resources/b", lesson_data())

    writes = promote_successor(
        db,
        classify(lesson_data(featured=True), lesson_data(status="draft", featured=True)),
        {"resourceId": "a"},
    )

    assert writes == [UpdateDocument("resources/b", {"isFeatured": True})]


def test_no_promotion_when_another_lesson_is_featured(db: FakeFirestore) -> None:
    db.seed("resources/b", lesson_data(featured=True))
    db.seed("resources/c", lesson_data())

    writes = promote_successor(
        db, classify(lesson_data(featured=True), None), {"resourceId": "a"}
    )

    assert writes == []


def test_no_promotion_while_lesson_stays_in_subtopic(db: FakeFirestore) -> None:
    db.seed("resources/b", lesson_data())

    writes = promote_successor(
        db,
        classify(lesson_data(featured=True), lesson_data(featured=False)),
        {"resourceId": "a"},
    )

    assert writes == []


def test_featured_lesson_moving_away_hands_over_its_subtopic(
    db: FakeFirestore, harness: TriggerHarness
) -> None:
    db.seed("resources/a", lesson_data(featured=True))
    db.seed("resources/b", lesson_data())

    db.document("resources/a").update({"subtopic": "s2"})
    harness.run()

    assert db.data("resources/a")["isFeatured"] is True
    assert db.data("resources/b")["isFeatured"] is True


def test_newly_featured_lesson_wins(db: FakeFirestore, harness: TriggerHarness) -> None:
    db.seed("resources/a", lesson_data(featured=True))
    db.seed("resources/b", lesson_data())

    db.document("resources/b").update({"isFeatured": True})
    harness.run()

    assert db.data("resources/a")["isFeatured"] is False
    assert db.data("resources/b")["isFeatured"] is True


def test_concurrent_featuring_converges_to_one(
    db: FakeFirestore, harness: TriggerHarness
) -> None:
    db.seed("resources/a", lesson_data())
    db.seed("resources/b", lesson_data())

    # Both writes land before either trigger runs
    db.document("resources/a").update({"isFeatured": True})
    db.document("resources/b").update({"isFeatured": True})
    harness.run()

    featured = [
        path for path in ("resources/a", "resources/b") if db.data(path)["isFeatured"]
    ]
    assert len(featured) == 1
