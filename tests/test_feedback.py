from datetime import datetime, timedelta, timezone

from consistency.change_classifier import classify
from fakes import FakeFirestore, lesson_data
from feedback.on_write import select_feedback_preview, touch_feedback
from firebase_admin import firestore
from harness import TriggerHarness
from models.data_models import UpdateDocument

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
CARD = "resources/r1/cards/c1"
PARAMS = {"resourceId": "r1", "cardId": "c1", "feedbackId": "f1"}


def _feedback(minutes, reviewer=True, locked=False, text=""):
    return {
        "reviewerComment": reviewer,
        "locked": locked,
        "dateUpdated": NOW + timedelta(minutes=minutes),
        "commentText": text,
    }


def test_preview_shows_latest_open_reviewer_comment(db: FakeFirestore) -> None:
    db.seed(CARD, {})
    db.seed(f"{CARD}/feedback/f1", _feedback(1, text="first"))
    db.seed(f"{CARD}/feedback/f2", _feedback(2, text="second"))
    db.seed(f"{CARD}/feedback/f3", _feedback(3, locked=True, text="locked"))
    db.seed(f"{CARD}/feedback/f4", _feedback(4, reviewer=False, text="author reply"))

    writes = select_feedback_preview(db, classify(None, {}), PARAMS)

    assert writes == [
        UpdateDocument(
            CARD,
            {
                "feedbackPreviewComment": "second",
                "feedbackPreviewCommentPath": f"{CARD}/feedback/f2",
            },
        )
    ]


def test_preview_is_cleared_without_open_comments(db: FakeFirestore) -> None:
    db.seed(CARD, {"feedbackPreviewComment": "old", "feedbackPreviewCommentPath": "p"})
    db.seed(f"{CARD}/feedback/f1", _feedback(1, locked=True))

    writes = select_feedback_preview(db, classify({}, None), PARAMS)

    assert writes == [
        UpdateDocument(
            CARD,
            {
                "feedbackPreviewComment": firestore.DELETE_FIELD,
                "feedbackPreviewCommentPath": firestore.DELETE_FIELD,
            },
        )
    ]


def test_unchanged_preview_is_not_rewritten(db: FakeFirestore) -> None:
    db.seed(CARD, {})
    assert select_feedback_preview(db, classify(None, {}), PARAMS) == []

    db.seed(
        CARD,
        {
            "feedbackPreviewComment": "only",
            "feedbackPreviewCommentPath": f"{CARD}/feedback/f1",
        },
    )
    db.seed(f"{CARD}/feedback/f1", _feedback(1, text="only"))
    assert select_feedback_preview(db, classify(None, {}), PARAMS) == []


def test_feedback_of_deleted_card_is_skipped(db: FakeFirestore) -> None:
    assert select_feedback_preview(db, classify({}, None), PARAMS) == []


def test_rewrite_within_quiescence_window_is_suppressed() -> None:
    stamped = {"commentText": "edited", "locked": False, "dateUpdated": NOW}
    change = classify({"commentText": "draft", "locked": False}, stamped)

    assert touch_feedback(change, PARAMS, now=NOW + timedelta(minutes=2)) == []
    assert touch_feedback(change, PARAMS, now=NOW + timedelta(minutes=6)) == [
        UpdateDocument(f"{CARD}/feedback/f1", {"dateUpdated": NOW + timedelta(minutes=6)})
    ]


def test_new_feedback_is_stamped() -> None:
    created = {"commentText": "hi", "locked": False}
    assert touch_feedback(classify(None, created), PARAMS, now=NOW) == [
        UpdateDocument(f"{CARD}/feedback/f1", {"dateUpdated": NOW})
    ]


def test_feedback_without_locked_is_opened() -> None:
    assert touch_feedback(classify(None, {"commentText": "hi"}), PARAMS, now=NOW) == [
        UpdateDocument(f"{CARD}/feedback/f1", {"locked": False, "dateUpdated": NOW})
    ]


def test_only_text_edits_are_stamped() -> None:
    change = classify({"locked": False}, {"locked": True})
    assert touch_feedback(change, PARAMS, now=NOW) == []
    assert touch_feedback(classify({"a": 1}, None), PARAMS, now=NOW) == []


def test_new_reviewer_comment_reaches_the_card(
    db: FakeFirestore, harness: TriggerHarness
) -> None:
    db.seed("resources/r1", lesson_data(status="awaiting_review"))
    db.seed(CARD, {})

    db.document(f"{CARD}/feedback/f1").set(
        {"reviewerComment": True, "locked": False, "commentText": "Shorten this"}
    )
    harness.run()

    assert db.data(f"{CARD}/feedback/f1")["dateUpdated"] is not None
    assert db.data(CARD)["feedbackPreviewComment"] == "Shorten this"
    assert db.data(CARD)["feedbackPreviewCommentPath"] == f"{CARD}/feedback/f1"

    db.document("resources/r1").update({"status": "changes_requested"})
    harness.run()

    assert db.data(f"{CARD}/feedback/f1")["locked"] is True
    assert "feedbackPreviewComment" not in db.data(CARD)


def test_unreadable_latest_comment_keeps_the_preview(db: FakeFirestore) -> None:
    preview = {
        "feedbackPreviewComment": "older",
        "feedbackPreviewCommentPath": f"{CARD}/feedback/f1",
    }
    db.seed(CARD, preview)
    db.seed(f"{CARD}/feedback/f1", _feedback(1, text="older"))
    db.seed(f"{CARD}/feedback/f2", _feedback(2, text=42))

    assert select_feedback_preview(db, classify(None, {}), PARAMS) == []


def test_comment_without_locked_reaches_the_card(
    db: FakeFirestore, harness: TriggerHarness
) -> None:
    db.seed("resources/r1", lesson_data(status="awaiting_review"))
    db.seed(CARD, {})

    db.document(f"{CARD}/feedback/f1").set(
        {"reviewerComment": True, "commentText": "Add an example"}
    )
    harness.run()

    assert db.data(f"{CARD}/feedback/f1")["locked"] is False
    assert db.data(CARD)["feedbackPreviewComment"] == "Add an example"
